"""Forecast likely vibes for the next few hours from a learned profile.

Predictions come from the per-hour temporal preferences in
``LearningInsights.patterns``, weighted toward the hours the user's
chronotype favours, then adjusted for weekday/weekend, the expected venue
type and energy profile. Nothing is predicted until the profile has enough
data, and a slot whose top vibe scores below 0.3 is skipped.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from floq.domains.vibe.domain_logic.vibe_models import VIBE_ENERGY, Vibe, clamp, wrap_hour
from floq.domains.vibe.learning.pattern_learner import LearningInsights

MAX_PREDICTIONS = 3
MIN_PREDICTION_CONFIDENCE = 0.3
PREDICTION_CONFIDENCE_CAP = 0.95

WEEKEND_BOOSTS: dict[Vibe, float] = {Vibe.SOCIAL: 1.1, Vibe.CHILL: 1.1, Vibe.FLOWING: 1.05}
WEEKDAY_BOOSTS: dict[Vibe, float] = {Vibe.SOLO: 1.1, Vibe.HYPE: 1.05}

VENUE_BOOSTS: dict[str, dict[Vibe, float]] = {
    "gym": {Vibe.HYPE: 1.3, Vibe.SOLO: 1.2},
    "coffee": {Vibe.SOLO: 1.2, Vibe.CURIOUS: 1.1, Vibe.SOCIAL: 1.1},
    "bar": {Vibe.SOCIAL: 1.3, Vibe.FLOWING: 1.2, Vibe.OPEN: 1.1},
    "restaurant": {Vibe.SOCIAL: 1.2, Vibe.ROMANTIC: 1.1, Vibe.FLOWING: 1.1},
    "park": {Vibe.CHILL: 1.2, Vibe.FLOWING: 1.1, Vibe.OPEN: 1.1},
    "office": {Vibe.SOLO: 1.3, Vibe.HYPE: 1.1},
}
VENUE_BOOSTS["cafe"] = VENUE_BOOSTS["coffee"]

SOCIAL_LEANING_VIBES = (Vibe.SOCIAL, Vibe.OPEN, Vibe.FLOWING)


@dataclass
class PredictiveContext:
    hour: int
    is_weekend: bool = False
    expected_venue_type: str | None = None


@dataclass
class VibePrediction:
    vibe: Vibe
    confidence: float
    time_slot: str  # soon / later / evening / tonight
    reasoning: list[str] = field(default_factory=list)
    contextual_factors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["vibe"] = self.vibe.value
        payload["confidence"] = round(self.confidence, 4)
        return payload


def _time_slots(hour: int) -> list[tuple[str, list[int]]]:
    return [
        ("soon", [hour + 1, hour + 2]),
        ("later", [hour + 3, hour + 4]),
        ("evening", [18, 19, 20]),
        ("tonight", [21, 22, 23]),
    ]


def predict_upcoming_vibes(
    insights: LearningInsights, context: PredictiveContext
) -> list[VibePrediction]:
    """Up to three predictions, in slot order (soon, later, evening, tonight)."""
    if not insights.patterns.has_enough_data:
        return []

    hour = wrap_hour(context.hour)
    predictions = []
    for name, hours in _time_slots(hour):
        prediction = _predict_for_slot(insights, context, name, hours)
        if prediction is not None:
            predictions.append(prediction)
    return predictions[:MAX_PREDICTIONS]


def prediction_confidence(insights: LearningInsights) -> float:
    """How far forecasts can be trusted, from insight confidence and data volume."""
    if insights.correction_count >= 20:
        quality = 1.0
    elif insights.correction_count >= 10:
        quality = 0.8
    else:
        quality = 0.6
    return min(PREDICTION_CONFIDENCE_CAP, insights.confidence * quality)


def hour_weight(hour: int, chronotype: str) -> float:
    hour = wrap_hour(hour)
    if chronotype == "lark":
        if 6 <= hour <= 11:
            return 1.2
        if hour >= 22:
            return 0.7
    elif chronotype == "owl":
        if 18 <= hour <= 23:
            return 1.2
        if 6 <= hour <= 9:
            return 0.7
    return 1.0


def _predict_for_slot(
    insights: LearningInsights,
    context: PredictiveContext,
    slot: str,
    hours: list[int],
) -> VibePrediction | None:
    patterns = insights.patterns
    if not patterns.temporal_prefs:
        return None

    slot_prefs: dict[Vibe, float] = {}
    total_weight = 0.0
    for hour in hours:
        hour_prefs = patterns.temporal_prefs.get(wrap_hour(hour))
        if not hour_prefs:
            continue
        weight = hour_weight(hour, patterns.chronotype)
        total_weight += weight
        for vibe, pref in hour_prefs.items():
            if pref > 0:
                slot_prefs[vibe] = slot_prefs.get(vibe, 0.0) + pref * weight

    if total_weight == 0:
        return None

    slot_prefs = {vibe: pref / total_weight for vibe, pref in slot_prefs.items()}
    adjusted = _apply_context(slot_prefs, insights, context, slot)
    if not adjusted:
        return None

    # ties resolve in slot_prefs insertion order
    vibe = max(adjusted, key=adjusted.get)
    confidence = clamp(adjusted[vibe])
    if confidence < MIN_PREDICTION_CONFIDENCE:
        return None

    return VibePrediction(
        vibe=vibe,
        confidence=confidence,
        time_slot=slot,
        reasoning=_reasoning(insights, vibe, slot, context),
        contextual_factors=_contextual_factors(context, slot),
    )


def _apply_context(
    prefs: dict[Vibe, float],
    insights: LearningInsights,
    context: PredictiveContext,
    slot: str,
) -> dict[Vibe, float]:
    adjusted = dict(prefs)

    boosts = WEEKEND_BOOSTS if context.is_weekend else WEEKDAY_BOOSTS
    for vibe, boost in boosts.items():
        if vibe in adjusted:
            adjusted[vibe] *= boost

    venue = (context.expected_venue_type or "").strip().lower()
    for vibe, boost in VENUE_BOOSTS.get(venue, {}).items():
        if vibe in adjusted:
            adjusted[vibe] *= boost

    if insights.patterns.energy_type == "high-energy" and slot == "soon":
        for vibe in adjusted:
            if VIBE_ENERGY[vibe] > 0.7:
                adjusted[vibe] *= 1.1

    return adjusted


def _reasoning(
    insights: LearningInsights, vibe: Vibe, slot: str, context: PredictiveContext
) -> list[str]:
    patterns = insights.patterns
    hour = wrap_hour(context.hour)
    reasoning = []
    if patterns.chronotype == "lark" and slot == "soon" and hour < 12:
        reasoning.append(f"Your morning chronotype suggests {vibe.value} energy")
    elif patterns.chronotype == "owl" and slot == "evening" and hour > 17:
        reasoning.append(f"Your evening chronotype aligns with {vibe.value} vibes")

    reasoning.append(f"Based on {insights.correction_count} past patterns")

    if patterns.energy_type == "high-energy" and VIBE_ENERGY[vibe] > 0.7:
        reasoning.append("Matches your high-energy profile")
    if patterns.social_type == "social" and vibe in SOCIAL_LEANING_VIBES:
        reasoning.append("Aligns with your social tendencies")
    return reasoning[:2]


def _contextual_factors(context: PredictiveContext, slot: str) -> list[str]:
    factors = ["Weekend flexibility" if context.is_weekend else "Weekday structure"]
    if context.expected_venue_type:
        factors.append(f"Expected {context.expected_venue_type} context")
    if slot == "evening":
        factors.append("Evening wind-down time")
    elif slot == "soon":
        factors.append("Immediate context")
    return factors
