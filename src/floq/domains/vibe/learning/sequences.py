"""Recurring vibe sequences and contextual triggers in a correction history.

A sequence is a run of 2-4 consecutive corrected vibes followed by another
correction within eight hours; it is kept once it has been seen three times.
A trigger is a context (weekend, venue type) under which one vibe shows up
markedly more often than elsewhere.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any

from floq.domains.vibe.domain_logic.vibe_models import Vibe
from floq.domains.vibe.learning.pattern_learner import CorrectionRecord

logger = logging.getLogger(__name__)

MIN_RECORDS = 6
MIN_SEQUENCE_LENGTH = 2
MAX_SEQUENCE_LENGTH = 4
MIN_SEQUENCE_SAMPLES = 3
MAX_SEQUENCE_SPAN_SECONDS = 8 * 3600

MIN_TRIGGER_SAMPLES = 3
MIN_TRIGGER_CONFIDENCE = 0.3
MAX_TRIGGERS = 10

MIN_SEQUENCE_CONFIDENCE_FOR_PREDICTION = 0.4
MIN_NEXT_PROBABILITY = 0.1
MAX_NEXT_PREDICTIONS = 3


@dataclass
class BehaviorSequence:
    sequence: tuple[Vibe, ...]
    next_vibe_probs: dict[Vibe, float]
    confidence: float
    sample_size: int
    avg_duration_minutes: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "sequence": [v.value for v in self.sequence],
            "next_vibe_probs": {v.value: round(p, 4) for v, p in self.next_vibe_probs.items()},
            "confidence": round(self.confidence, 4),
            "sample_size": self.sample_size,
            "avg_duration_minutes": round(self.avg_duration_minutes, 1),
        }


@dataclass
class TriggerPattern:
    trigger_type: str  # temporal / location
    condition: str
    resulting_vibe: Vibe
    probability: float
    confidence: float
    strength: str  # strong / moderate

    def as_dict(self) -> dict[str, Any]:
        return {
            "trigger_type": self.trigger_type,
            "condition": self.condition,
            "resulting_vibe": self.resulting_vibe.value,
            "probability": round(self.probability, 4),
            "confidence": round(self.confidence, 4),
            "strength": self.strength,
        }


@dataclass
class NextVibePrediction:
    next_vibe: Vibe
    probability: float
    reasoning: str
    confidence: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "next_vibe": self.next_vibe.value,
            "probability": round(self.probability, 4),
            "reasoning": self.reasoning,
            "confidence": round(self.confidence, 4),
        }


@dataclass
class NextVibeInsight:
    current_state: Vibe
    predictions: list[NextVibePrediction] = field(default_factory=list)
    context_factors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "current_state": self.current_state.value,
            "predictions": [p.as_dict() for p in self.predictions],
            "context_factors": list(self.context_factors),
        }


# ---------------------------------------------------------------------------
# Sequences
# ---------------------------------------------------------------------------

def detect_sequences(records: list[CorrectionRecord]) -> list[BehaviorSequence]:
    """Sequences seen at least three times, most confident first."""
    if len(records) < MIN_RECORDS:
        return []

    ordered = sorted(records, key=lambda r: r.timestamp)
    next_counts: dict[tuple[Vibe, ...], Counter] = defaultdict(Counter)
    durations: dict[tuple[Vibe, ...], list[float]] = defaultdict(list)

    for length in range(MIN_SEQUENCE_LENGTH, MAX_SEQUENCE_LENGTH + 1):
        for start in range(len(ordered) - length):
            window = ordered[start:start + length]
            following = ordered[start + length]
            span = following.timestamp - window[0].timestamp
            if span > MAX_SEQUENCE_SPAN_SECONDS:
                continue
            key = tuple(r.corrected for r in window)
            next_counts[key][following.corrected] += 1
            durations[key].append(span / 60)

    sequences = []
    for key, counter in next_counts.items():
        total = sum(counter.values())
        if total < MIN_SEQUENCE_SAMPLES:
            continue
        sequences.append(
            BehaviorSequence(
                sequence=key,
                next_vibe_probs={vibe: n / total for vibe, n in counter.most_common()},
                confidence=min(1.0, total / 8),
                sample_size=total,
                avg_duration_minutes=sum(durations[key]) / len(durations[key]),
            )
        )

    sequences.sort(key=lambda s: s.confidence, reverse=True)
    logger.debug("Detected %d vibe sequences from %d corrections", len(sequences), len(records))
    return sequences


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------

def detect_triggers(records: list[CorrectionRecord]) -> list[TriggerPattern]:
    """Weekend and venue triggers with confidence above 0.3, strongest first."""
    triggers = _weekend_triggers(records) + _venue_triggers(records)
    triggers = [t for t in triggers if t.confidence > MIN_TRIGGER_CONFIDENCE]
    triggers.sort(key=lambda t: t.confidence, reverse=True)
    return triggers[:MAX_TRIGGERS]


def _weekend_triggers(records: list[CorrectionRecord]) -> list[TriggerPattern]:
    weekend = [r.corrected for r in records if r.is_weekend]
    weekday = [r.corrected for r in records if not r.is_weekend]
    if len(weekend) < MIN_TRIGGER_SAMPLES or len(weekday) < MIN_TRIGGER_SAMPLES:
        return []

    weekend_counts = Counter(weekend)
    weekday_counts = Counter(weekday)
    triggers = []
    for vibe in Vibe:
        weekend_freq = weekend_counts[vibe] / len(weekend)
        weekday_freq = weekday_counts[vibe] / len(weekday)
        if weekend_freq > weekday_freq + 0.2:
            triggers.append(
                TriggerPattern(
                    trigger_type="temporal",
                    condition="weekend",
                    resulting_vibe=vibe,
                    probability=weekend_freq,
                    confidence=min(1.0, len(weekend) / 10),
                    strength="strong" if weekend_freq > weekday_freq + 0.4 else "moderate",
                )
            )
    return triggers


def _venue_triggers(records: list[CorrectionRecord]) -> list[TriggerPattern]:
    by_venue: dict[str, Counter] = defaultdict(Counter)
    for record in records:
        if record.venue_type:
            by_venue[record.venue_type.strip().lower()][record.corrected] += 1

    triggers = []
    for venue, counter in sorted(by_venue.items()):
        total = sum(counter.values())
        for vibe, count in counter.most_common():
            probability = count / total
            if count < MIN_TRIGGER_SAMPLES or probability <= 0.4:
                continue
            triggers.append(
                TriggerPattern(
                    trigger_type="location",
                    condition=f"at {venue}",
                    resulting_vibe=vibe,
                    probability=probability,
                    confidence=min(1.0, total / 8),
                    strength="strong" if probability > 0.6 else "moderate",
                )
            )
    return triggers


# ---------------------------------------------------------------------------
# Next-vibe prediction
# ---------------------------------------------------------------------------

def predict_next_vibe(
    current: Vibe,
    sequences: list[BehaviorSequence],
    hour: int,
    is_weekend: bool = False,
    venue_type: str | None = None,
) -> NextVibeInsight:
    """Likely next vibes from sequences that end in ``current``."""
    insight = NextVibeInsight(current_state=current)

    scores: dict[Vibe, float] = defaultdict(float)
    for seq in sequences:
        if seq.sequence[-1] != current or seq.confidence <= MIN_SEQUENCE_CONFIDENCE_FOR_PREDICTION:
            continue
        for vibe, probability in seq.next_vibe_probs.items():
            if probability < MIN_NEXT_PROBABILITY:
                continue
            scores[vibe] += probability * seq.confidence

    if not scores:
        insight.context_factors.append("Insufficient pattern data for predictions")
        return insight

    total = sum(scores.values())
    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    for vibe, score in ranked[:MAX_NEXT_PREDICTIONS]:
        insight.predictions.append(
            NextVibePrediction(
                next_vibe=vibe,
                probability=score / total,
                reasoning=f"You often move from {current.value} to {vibe.value}",
                confidence=min(1.0, score),
            )
        )

    insight.context_factors.append("Weekend" if is_weekend else "Weekday")
    insight.context_factors.append(_time_of_day(hour))
    if venue_type:
        insight.context_factors.append(f"At {venue_type}")
    return insight


def _time_of_day(hour: int) -> str:
    hour %= 24
    if 5 <= hour < 12:
        return "Morning"
    if 12 <= hour < 17:
        return "Afternoon"
    if 17 <= hour < 22:
        return "Evening"
    return "Late night"
