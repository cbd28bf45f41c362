"""Personal pattern enrichment: read-only lookups over a PersonalPatterns snapshot.

Every function here is a no-op (0.0 / empty nudges) unless the caller has
enabled pattern usage and the snapshot reports enough data.
"""

from __future__ import annotations

from collections import defaultdict

from floq.domains.vibe.domain_logic.engine_models import EngineInputs, PersonalPatterns
from floq.domains.vibe.domain_logic.tuning import DEFAULT_TUNING, VibeTuning
from floq.domains.vibe.domain_logic.vibe_models import Vibe, wrap_hour


def active_patterns(inputs: EngineInputs) -> PersonalPatterns | None:
    """Return the snapshot the scorers may use, or None."""
    if not inputs.patterns_enabled:
        return None
    patterns = inputs.patterns
    if patterns is None or not patterns.has_enough_data:
        return None
    return patterns


def in_window(hour: int, window: tuple[int, int]) -> bool:
    """Inclusive hour window; wraps past midnight when start > end."""
    start, end = int(window[0]), int(window[1])
    hour = wrap_hour(hour)
    if start <= end:
        return start <= hour <= end
    return hour >= start or hour <= end


def chronotype_boost(
    patterns: PersonalPatterns | None,
    hour: int,
    tuning: VibeTuning = DEFAULT_TUNING,
) -> float:
    """Circadian boost when the chronotype matches the current window."""
    if patterns is None:
        return 0.0
    matched = (
        (patterns.chronotype == "lark" and in_window(hour, tuning.lark_window))
        or (patterns.chronotype == "owl" and in_window(hour, tuning.owl_window))
    )
    if not matched:
        return 0.0
    # Consistency can only strengthen a matched chronotype, never weaken it.
    multiplier = max(1.0, tuning.consistency_multipliers.get(patterns.consistency, 1.0))
    return max(0.0, tuning.chronotype_boost * multiplier)


def pattern_nudges(
    patterns: PersonalPatterns | None,
    hour: int,
    tuning: VibeTuning = DEFAULT_TUNING,
) -> dict[Vibe, float]:
    """Vector nudges from energy/social type and the hour's learned preferences."""
    if patterns is None:
        return {}

    nudges: dict[Vibe, float] = defaultdict(float)
    step = tuning.pattern_nudge

    if patterns.energy_type == "high-energy":
        nudges[Vibe.HYPE] += step
        nudges[Vibe.FLOWING] += step * 0.5
    elif patterns.energy_type == "low-energy":
        nudges[Vibe.CHILL] += step
        nudges[Vibe.DOWN] += step * 0.3

    if patterns.social_type == "social":
        nudges[Vibe.SOCIAL] += step
    elif patterns.social_type == "solo":
        nudges[Vibe.SOLO] += step

    hour_prefs = (patterns.temporal_prefs or {}).get(wrap_hour(hour)) or {}
    total = sum(w for w in hour_prefs.values() if w > 0)
    if total > 0:
        for vibe, weight in hour_prefs.items():
            if weight > 0:
                nudges[vibe] += tuning.temporal_pref_gain * weight / total

    return dict(nudges)


def pattern_confidence_boost(
    patterns: PersonalPatterns | None,
    tuning: VibeTuning = DEFAULT_TUNING,
) -> float:
    if patterns is None:
        return 0.0
    return max(0.0, tuning.pattern_confidence_boosts.get(patterns.consistency, 0.0))
