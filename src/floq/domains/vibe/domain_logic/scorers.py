"""Component scorers: one evidence source each -> (score, vector nudges).

Each scorer takes the full EngineInputs and returns a ScorerResult whose
score is meant to lie in [0, 1]; the engine clamps again at its boundary.
Scorers are independent of each other and deterministic. Out-of-range
inputs (hour outside 0-23, negative speed) are a caller contract
violation and produce a best-effort result rather than an exception.

Daylight polarity: daylight feeds open/social and drains down/chill;
darkness feeds chill/romantic.
"""

from __future__ import annotations

from floq.domains.vibe.domain_logic.engine_models import EngineInputs
from floq.domains.vibe.domain_logic.personal_patterns import active_patterns, chronotype_boost
from floq.domains.vibe.domain_logic.tuning import DEFAULT_TUNING, VibeTuning
from floq.domains.vibe.domain_logic.vibe_models import (
    VENUE_ENERGY_BASELINE,
    VENUE_MAX_ENHANCEMENT,
    ScorerResult,
    Vibe,
    clamp,
    wrap_hour,
)


def time_of_day_slot(hour: int) -> str:
    """Map an hour to morning / afternoon / evening / night."""
    hour = wrap_hour(hour)
    if 5 <= hour <= 11:
        return "morning"
    if 12 <= hour <= 16:
        return "afternoon"
    if 17 <= hour <= 21:
        return "evening"
    return "night"


# ---------------------------------------------------------------------------
# Circadian
# ---------------------------------------------------------------------------

def circadian_baseline(hour: int, is_weekend: bool, tuning: VibeTuning = DEFAULT_TUNING) -> float:
    """Time-of-day energy from the tuning curve, with a weekend evening lift."""
    hour = wrap_hour(hour)
    value = float(tuning.circadian_curve[hour])
    if is_weekend and (hour >= 18 or hour <= 1):
        value += tuning.weekend_evening_bonus
    return clamp(value)


def score_circadian(inputs: EngineInputs, tuning: VibeTuning = DEFAULT_TUNING) -> ScorerResult:
    """Circadian score, lifted when a learned chronotype matches the hour.

    With patterns disabled the result depends only on hour and weekend flag.
    """
    score = circadian_baseline(inputs.hour, inputs.is_weekend, tuning)
    boost = chronotype_boost(active_patterns(inputs), inputs.hour, tuning)
    if boost:
        score = min(1.0, score + boost)

    step = tuning.circadian_nudge * (0.5 + score)
    slot = time_of_day_slot(inputs.hour)
    nudges: dict[Vibe, float] = {}
    if slot == "morning":
        nudges = {Vibe.FLOWING: step, Vibe.CURIOUS: step * 0.5}
    elif slot == "afternoon":
        nudges = {Vibe.SOCIAL: step, Vibe.CURIOUS: step * 0.5}
    elif slot == "evening":
        hype = step if inputs.is_weekend else step * 0.5
        nudges = {Vibe.SOCIAL: step, Vibe.HYPE: hype}
    else:
        nudges = {Vibe.CHILL: step, Vibe.WEIRD: step * 0.5}

    return ScorerResult(score=score, nudges=nudges)


# ---------------------------------------------------------------------------
# Motion & screen
# ---------------------------------------------------------------------------

def score_motion(inputs: EngineInputs, tuning: VibeTuning = DEFAULT_TUNING) -> ScorerResult:
    """Activity from movement speed (75%) and screen-on ratio (25%)."""
    speed = max(0.0, float(inputs.speed_mps or 0.0))
    screen = clamp(float(inputs.screen_on_ratio or 0.0))
    speed_norm = clamp(speed / tuning.motion_speed_ceiling_mps)
    score = clamp(0.75 * speed_norm + 0.25 * screen)

    step = tuning.motion_nudge
    if speed < 0.5:
        nudges = {Vibe.CHILL: step}
        if screen <= 0.3:
            nudges[Vibe.SOLO] = step * 0.5
    elif speed < 2.0:
        # walking pace
        nudges = {Vibe.CURIOUS: step * 0.5, Vibe.OPEN: step * 0.5}
    else:
        nudges = {Vibe.FLOWING: step * max(speed_norm, 0.5)}

    return ScorerResult(score=score, nudges=nudges)


def score_screen_activity(inputs: EngineInputs, tuning: VibeTuning = DEFAULT_TUNING) -> ScorerResult:
    screen = clamp(float(inputs.screen_on_ratio or 0.0))
    nudges: dict[Vibe, float] = {}
    if screen >= 0.6:
        nudges = {Vibe.SOLO: tuning.screen_nudge * screen}
    elif screen <= 0.15:
        nudges = {Vibe.SOCIAL: tuning.screen_nudge * 0.5}
    return ScorerResult(score=screen, nudges=nudges)


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

def score_daylight(inputs: EngineInputs, tuning: VibeTuning = DEFAULT_TUNING) -> ScorerResult:
    step = tuning.daylight_nudge
    if inputs.is_daylight:
        return ScorerResult(
            score=0.7,
            nudges={
                Vibe.OPEN: step,
                Vibe.SOCIAL: step * 0.75,
                Vibe.DOWN: -step * 0.5,
                Vibe.CHILL: -step * 0.5,
            },
        )
    return ScorerResult(
        score=0.3,
        nudges={Vibe.CHILL: step * 0.75, Vibe.ROMANTIC: step * 0.5},
    )


def score_weather(inputs: EngineInputs, tuning: VibeTuning = DEFAULT_TUNING) -> ScorerResult:
    """Neutral 0.5 shifted by the weather service's energy offset."""
    offset = inputs.weather_energy_offset
    if offset is None:
        return ScorerResult(score=0.5)

    offset = float(offset)
    score = clamp(0.5 + offset)
    magnitude = abs(offset) * tuning.weather_nudge_gain
    if offset > 0:
        nudges = {Vibe.SOCIAL: magnitude, Vibe.HYPE: magnitude * 0.5}
    elif offset < 0:
        nudges = {Vibe.CHILL: magnitude, Vibe.DOWN: magnitude * 0.5}
    else:
        nudges = {}
    return ScorerResult(score=score, nudges=nudges)


def score_venue(inputs: EngineInputs, tuning: VibeTuning = DEFAULT_TUNING) -> ScorerResult:
    """Venue energy: 0.5 baseline plus at most 0.35 from occupancy, energy and dwell.

    Nudges toward the venue's primary vibe, weighted by the venue's own
    classification confidence.
    """
    dwell = max(0.0, float(inputs.dwell_minutes or 0.0))
    dwell_factor = min(dwell / 60.0, 1.0) if inputs.venue_arrived else 0.0

    intel = inputs.venue_intelligence
    if intel is None:
        enhancement = min(0.1 * dwell_factor, VENUE_MAX_ENHANCEMENT)
        return ScorerResult(score=clamp(VENUE_ENERGY_BASELINE + enhancement))

    profile = intel.vibe_profile
    occupancy = clamp(intel.real_time_metrics.current_occupancy)
    energy = clamp(profile.energy_level)
    slot = time_of_day_slot(inputs.hour)
    tod_pref = clamp(profile.time_of_day_preferences.get(slot, 0.5))

    raw = (0.15 * occupancy + 0.10 * energy + 0.10 * dwell_factor) * (0.5 + 0.5 * tod_pref)
    if not intel.place_data.is_open:
        raw *= 0.5
    enhancement = min(raw, VENUE_MAX_ENHANCEMENT)
    score = clamp(VENUE_ENERGY_BASELINE + enhancement)

    weight = clamp(profile.confidence) * tuning.venue_nudge_gain
    if not inputs.venue_arrived:
        weight *= 0.5
    if intel.place_data.total_ratings < 10:
        weight *= 0.75

    nudges = {profile.primary_vibe: weight} if weight > 0 else {}
    return ScorerResult(score=score, nudges=nudges)


# Channel name -> scorer, in application order.
SCORERS = {
    "circadian": score_circadian,
    "motion": score_motion,
    "screen_activity": score_screen_activity,
    "daylight": score_daylight,
    "weather": score_weather,
    "venue_energy": score_venue,
}

