"""Derive a PersonalPatterns profile from a user's correction history.

Deterministic and stateless: the same history always yields the same
profile. Thresholds:

    has_enough_data   >= 10 corrections
    chronotype        needs enough data and >= 6 distinct hours;
                      lark when >= 50% of corrections fall in 05-11h and the
                      morning count is at least twice the evening (17-23h)
                      count, owl symmetrically, else balanced
    energy type       mean VIBE_ENERGY >= 0.35 high-energy, <= -0.2 low-energy
    social type       mean VIBE_SOCIAL_LEAN >= 0.35 social, <= -0.35 solo
    consistency       per-hour dominant-vibe share >= 0.75 very-consistent,
                      >= 0.5 consistent, else variable
"""

from __future__ import annotations

import statistics
from collections import Counter, defaultdict
from dataclasses import dataclass, field

from floq.domains.vibe.domain_logic.engine_models import PersonalPatterns
from floq.domains.vibe.domain_logic.vibe_models import (
    VIBE_ENERGY,
    VIBE_SOCIAL_LEAN,
    ComponentScores,
    Vibe,
    wrap_hour,
)

MIN_CORRECTIONS = 10
MIN_DISTINCT_HOURS = 6
MORNING_HOURS = range(5, 12)
EVENING_HOURS = range(17, 24)


@dataclass
class CorrectionRecord:
    """One user correction, as kept by the pattern store."""

    timestamp: float
    predicted: Vibe
    corrected: Vibe
    hour: int
    is_weekend: bool = False
    components: ComponentScores = field(default_factory=ComponentScores)
    venue_type: str | None = None


@dataclass
class LearningInsights:
    """Profile summary shared with the feedback service and the engine."""

    patterns: PersonalPatterns
    correction_count: int = 0
    confidence: float = 0.0
    top_venue_type: str | None = None

    def as_dict(self) -> dict:
        return {
            "patterns": self.patterns.as_dict(),
            "correction_count": self.correction_count,
            "confidence": round(self.confidence, 4),
            "top_venue_type": self.top_venue_type,
        }


def analyze_corrections(records: list[CorrectionRecord]) -> LearningInsights:
    """Build LearningInsights from a correction history (any order)."""
    count = len(records)
    if count == 0:
        return LearningInsights(patterns=PersonalPatterns())

    enough = count >= MIN_CORRECTIONS
    hours = [wrap_hour(r.hour) for r in records]
    vibes = [r.corrected for r in records]

    consistency_share = _consistency_share(hours, vibes)
    patterns = PersonalPatterns(
        has_enough_data=enough,
        chronotype=detect_chronotype(hours) if enough else "balanced",
        energy_type=_energy_type(vibes) if enough else "balanced",
        social_type=_social_type(vibes) if enough else "balanced",
        consistency=_consistency_label(consistency_share),
        temporal_prefs=_temporal_prefs(hours, vibes),
    )

    venues = Counter(r.venue_type for r in records if r.venue_type)
    top_venue = venues.most_common(1)[0][0] if venues else None

    confidence = min(1.0, count / 20) * (0.5 + 0.5 * consistency_share)

    return LearningInsights(
        patterns=patterns,
        correction_count=count,
        confidence=confidence,
        top_venue_type=top_venue,
    )


def detect_chronotype(hours: list[int]) -> str:
    if len(set(hours)) < MIN_DISTINCT_HOURS:
        return "balanced"

    total = len(hours)
    morning = sum(1 for h in hours if h in MORNING_HOURS)
    evening = sum(1 for h in hours if h in EVENING_HOURS)

    if morning / total >= 0.5 and morning >= 2 * evening:
        return "lark"
    if evening / total >= 0.5 and evening >= 2 * morning:
        return "owl"
    return "balanced"


def _energy_type(vibes: list[Vibe]) -> str:
    mean_energy = statistics.mean(VIBE_ENERGY[v] for v in vibes)
    if mean_energy >= 0.35:
        return "high-energy"
    if mean_energy <= -0.2:
        return "low-energy"
    return "balanced"


def _social_type(vibes: list[Vibe]) -> str:
    mean_lean = statistics.mean(VIBE_SOCIAL_LEAN[v] for v in vibes)
    if mean_lean >= 0.35:
        return "social"
    if mean_lean <= -0.35:
        return "solo"
    return "balanced"


def _consistency_share(hours: list[int], vibes: list[Vibe]) -> float:
    """Share of corrections that match the dominant vibe of their hour."""
    by_hour: dict[int, Counter] = defaultdict(Counter)
    for hour, vibe in zip(hours, vibes):
        by_hour[hour][vibe] += 1
    dominant = sum(counter.most_common(1)[0][1] for counter in by_hour.values())
    return dominant / len(vibes)


def _consistency_label(share: float) -> str:
    if share >= 0.75:
        return "very-consistent"
    if share >= 0.5:
        return "consistent"
    return "variable"


def _temporal_prefs(hours: list[int], vibes: list[Vibe]) -> dict[int, dict[Vibe, float]]:
    by_hour: dict[int, Counter] = defaultdict(Counter)
    for hour, vibe in zip(hours, vibes):
        by_hour[hour][vibe] += 1
    prefs: dict[int, dict[Vibe, float]] = {}
    for hour, counter in sorted(by_hour.items()):
        total = sum(counter.values())
        prefs[hour] = {vibe: n / total for vibe, n in counter.items()}
    return prefs
