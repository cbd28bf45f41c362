"""Real-time learning feedback: a bounded, newest-first log of learning events.

Records user corrections, detected patterns and confidence boosts, derives
a small read-only summary for display, and notifies registered observers
synchronously on every recorded event. State is in-process only; nothing
survives a restart.

One instance is created by the composition root and handed to whoever
needs it. Buffer mutations are serialized with a lock so the 50-event bound
holds under concurrent callers.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Literal

from floq.domains.vibe.domain_logic.vibe_models import ComponentScores, Vibe
from floq.domains.vibe.learning.pattern_learner import LearningInsights

logger = logging.getLogger(__name__)

LearningEventType = Literal["correction", "pattern_detected", "confidence_boost", "insight_generated"]

MAX_EVENTS = 50
RECENT_EVENT_COUNT = 10
DAY_SECONDS = 24 * 60 * 60
DEFAULT_MAX_AGE_SECONDS = 7 * DAY_SECONDS

# Temporal pattern: corrections within this many hours of the current hour.
TEMPORAL_WINDOW_HOURS = 2
PATTERN_LOOKBACK = 5
VENUE_ENERGY_THRESHOLD = 0.6


@dataclass
class LearningEvent:
    id: str
    timestamp: float
    type: LearningEventType
    description: str
    impact: str
    confidence: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LearningState:
    is_actively_learning: bool
    recent_corrections: int
    pattern_strength: float
    next_milestone: str


@dataclass
class InsightSummary:
    strongest_patterns: list[str]
    recent_discoveries: list[str]
    confidence_growth: float  # mean % improvement over recent boosts


@dataclass
class LearningFeedback:
    recent_events: list[LearningEvent]
    current_learning_state: LearningState
    insights: InsightSummary

    def as_dict(self) -> dict[str, Any]:
        return {
            "recent_events": [e.as_dict() for e in self.recent_events],
            "current_learning_state": asdict(self.current_learning_state),
            "insights": asdict(self.insights),
        }


Observer = Callable[[LearningEvent], None]


def _hour_distance(a: int, b: int) -> int:
    diff = abs(a - b) % 24
    return min(diff, 24 - diff)


class RealTimeLearningFeedback:
    """Bounded learning-event log with observer notifications.

    Usage::

        feedback = RealTimeLearningFeedback()
        feedback.subscribe(lambda event: print(event.description))
        feedback.record_correction(Vibe.CHILL, Vibe.SOCIAL, components, 0.08)
        snapshot = feedback.get_current_feedback()
    """

    def __init__(
        self,
        insights: LearningInsights | None = None,
        *,
        max_events: int = MAX_EVENTS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._insights = insights
        self._max_events = max(1, min(max_events, MAX_EVENTS))
        self._clock = clock
        self._events: list[LearningEvent] = []
        self._observers: list[Observer] = []
        self._correction_total = 0
        self._lock = threading.RLock()

    # ---------------------------------------------------------------
    # Observers
    # ---------------------------------------------------------------

    def subscribe(self, observer: Observer) -> None:
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def _notify(self, event: LearningEvent) -> None:
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(event)
            except Exception:
                logger.exception("Learning observer %r failed for event %s", observer, event.id)

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def record_event(
        self,
        type: LearningEventType,
        description: str,
        impact: str,
        confidence: float,
        metadata: dict[str, Any] | None = None,
    ) -> LearningEvent:
        """Prepend an event, evict beyond capacity, then notify observers."""
        event = self._new_event(type, description, impact, confidence, metadata)
        with self._lock:
            self._append(event)
        self._notify(event)
        return event

    def record_correction(
        self,
        predicted: Vibe,
        corrected: Vibe,
        components: ComponentScores,
        learning_strength: float,
    ) -> LearningEvent:
        """Record a correction, then run temporal and venue pattern checks.

        The correction and any detected patterns are stored under one lock
        acquisition; observers hear about them after it is released.
        """
        predicted = Vibe(predicted)
        corrected = Vibe(corrected)
        dominant = components.dominant()
        event = self._new_event(
            "correction",
            f"Learned from {predicted.value} -> {corrected.value} correction",
            self._describe_correction_impact(corrected, dominant, learning_strength),
            learning_strength,
            {
                "predicted": predicted.value,
                "corrected": corrected.value,
                "components": components.as_dict(),
                "learning_strength": learning_strength,
                "dominant_component": dominant,
            },
        )

        with self._lock:
            self._append(event)
            emitted = [event]
            for detected in self._detect_patterns(corrected, components, dominant):
                self._append(detected)
                emitted.append(detected)

        for recorded in emitted:
            self._notify(recorded)
        return event

    def record_pattern_detection(
        self, pattern_type: str, description: str, confidence: float
    ) -> LearningEvent:
        event = self._pattern_event(pattern_type, description, confidence)
        with self._lock:
            self._append(event)
        self._notify(event)
        return event

    def record_confidence_boost(
        self, source: str, old_confidence: float, new_confidence: float
    ) -> LearningEvent:
        if old_confidence > 0:
            improvement = round((new_confidence - old_confidence) / old_confidence * 100, 1)
        else:
            improvement = 0.0
        return self.record_event(
            "confidence_boost",
            f"{source} improved prediction confidence",
            f"{improvement}% confidence boost from pattern learning",
            new_confidence,
            {
                "source": source,
                "old_confidence": old_confidence,
                "new_confidence": new_confidence,
                "improvement": improvement,
            },
        )

    def update_insights(self, insights: LearningInsights | None) -> None:
        with self._lock:
            self._insights = insights

    def cleanup_old_events(self, max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS) -> int:
        """Drop events older than ``max_age_seconds``; returns how many were removed."""
        cutoff = self._clock() - max_age_seconds
        with self._lock:
            before = len(self._events)
            self._events = [e for e in self._events if e.timestamp > cutoff]
            removed = before - len(self._events)
        if removed:
            logger.info("Pruned %d learning events older than %.0fs", removed, max_age_seconds)
        return removed

    def reset(self) -> None:
        with self._lock:
            self._events = []
            self._correction_total = 0

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    @property
    def events(self) -> list[LearningEvent]:
        """Copy of the buffer, newest first."""
        with self._lock:
            return list(self._events)

    def get_events_in_period(self, start: float, end: float) -> list[LearningEvent]:
        with self._lock:
            return [e for e in self._events if start <= e.timestamp <= end]

    def get_current_feedback(self) -> LearningFeedback:
        with self._lock:
            recent_corrections = self._count_recent_corrections()
            return LearningFeedback(
                recent_events=self._events[:RECENT_EVENT_COUNT],
                current_learning_state=LearningState(
                    is_actively_learning=recent_corrections > 0,
                    recent_corrections=recent_corrections,
                    pattern_strength=self._insights.confidence if self._insights else 0.0,
                    next_milestone=self._next_milestone(),
                ),
                insights=InsightSummary(
                    strongest_patterns=self._strongest_patterns(),
                    recent_discoveries=self._recent_discoveries(),
                    confidence_growth=self._confidence_growth(),
                ),
            )

    # ---------------------------------------------------------------
    # Internals (caller holds the lock)
    # ---------------------------------------------------------------

    def _new_event(
        self,
        type: LearningEventType,
        description: str,
        impact: str,
        confidence: float,
        metadata: dict[str, Any] | None = None,
    ) -> LearningEvent:
        return LearningEvent(
            id=f"{type}-{uuid.uuid4().hex[:12]}",
            timestamp=self._clock(),
            type=type,
            description=description,
            impact=impact,
            confidence=confidence,
            metadata=dict(metadata or {}),
        )

    def _append(self, event: LearningEvent) -> None:
        self._events.insert(0, event)
        if len(self._events) > self._max_events:
            del self._events[self._max_events:]
        if event.type == "correction":
            self._correction_total += 1
        logger.debug("Learning event %s: %s", event.type, event.description)

    def _pattern_event(self, pattern_type: str, description: str, confidence: float) -> LearningEvent:
        return self._new_event(
            "pattern_detected",
            description,
            f"New {pattern_type} pattern detected - predictions will be more accurate",
            confidence,
            {"pattern_type": pattern_type},
        )

    def _describe_correction_impact(self, corrected: Vibe, dominant: str, strength: float) -> str:
        impact = f"Adjusted {dominant} patterns; future {corrected.value} predictions improved"
        if strength > 0.05:
            impact += " (strong learning signal captured)"
        return impact

    def _detect_patterns(
        self, corrected: Vibe, components: ComponentScores, dominant: str
    ) -> list[LearningEvent]:
        """Temporal and venue pattern events implied by the buffer; not yet stored."""
        now = self._clock()
        recent = [
            e for e in self._events
            if e.type == "correction" and e.timestamp > now - DAY_SECONDS
        ][:PATTERN_LOOKBACK]
        detected: list[LearningEvent] = []

        hour_now = datetime.fromtimestamp(now).hour
        same_time = [
            e for e in recent
            if _hour_distance(datetime.fromtimestamp(e.timestamp).hour, hour_now) < TEMPORAL_WINDOW_HOURS
            and e.metadata.get("corrected") == corrected.value
        ]
        if len(same_time) >= 2:
            detected.append(self._pattern_event(
                "temporal",
                f"You tend to prefer {corrected.value} around {hour_now}:00",
                0.7,
            ))

        if dominant == "venue_energy" and components.venue_energy > VENUE_ENERGY_THRESHOLD:
            venue_corrections = [
                e for e in recent
                if e.metadata.get("components", {}).get("venue_energy", 0.0) > VENUE_ENERGY_THRESHOLD
                and e.metadata.get("corrected") == corrected.value
            ]
            if len(venue_corrections) >= 2:
                detected.append(self._pattern_event(
                    "venue",
                    f"Strong {corrected.value} preference in certain venues",
                    0.8,
                ))
        return detected

    def _count_recent_corrections(self) -> int:
        cutoff = self._clock() - DAY_SECONDS
        return sum(1 for e in self._events if e.type == "correction" and e.timestamp > cutoff)

    def _next_milestone(self) -> str:
        corrections = (
            self._insights.correction_count if self._insights else self._correction_total
        )
        if corrections <= 0:
            return "Make your first correction to start learning"
        if corrections < 5:
            return f"{5 - corrections} more corrections for basic patterns"
        if corrections < 10:
            return f"{10 - corrections} more for advanced pattern detection"
        if corrections < 20:
            return f"{20 - corrections} more for high-confidence predictions"
        return "Pattern learning at maximum effectiveness"

    def _strongest_patterns(self) -> list[str]:
        if not self._insights:
            return []
        profile = self._insights.patterns
        patterns: list[str] = []
        if profile.chronotype != "balanced":
            patterns.append(f"{profile.chronotype} chronotype")
        if profile.energy_type != "balanced":
            patterns.append(f"{profile.energy_type} energy")
        if profile.social_type != "balanced":
            patterns.append(f"{profile.social_type} preference")
        if self._insights.top_venue_type:
            patterns.append(f"{self._insights.top_venue_type} venue preference")
        return patterns[:3]

    def _recent_discoveries(self) -> list[str]:
        cutoff = self._clock() - DEFAULT_MAX_AGE_SECONDS
        return [
            e.description for e in self._events
            if e.type == "pattern_detected" and e.timestamp > cutoff
        ][:3]

    def _confidence_growth(self) -> float:
        boosts = [
            e for e in self._events
            if e.type == "confidence_boost" and e.metadata.get("improvement")
        ][:5]
        if not boosts:
            return 0.0
        return round(sum(e.metadata["improvement"] for e in boosts) / len(boosts), 1)
