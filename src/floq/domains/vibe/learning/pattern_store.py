"""In-memory correction history with cached pattern insights."""

from __future__ import annotations

import logging
import threading

from floq.domains.vibe.domain_logic.engine_models import PersonalPatterns
from floq.domains.vibe.learning.pattern_learner import (
    CorrectionRecord,
    LearningInsights,
    analyze_corrections,
)

logger = logging.getLogger(__name__)


class PatternStore:
    """Bounded correction history; insights are recomputed lazily after each add.

    Usage::

        store = PatternStore(max_corrections=200)
        store.add(record)
        patterns = store.patterns()
    """

    def __init__(self, max_corrections: int = 200) -> None:
        self._max = max(1, max_corrections)
        self._records: list[CorrectionRecord] = []
        self._cached: LearningInsights | None = None
        self._lock = threading.Lock()

    def add(self, record: CorrectionRecord) -> None:
        with self._lock:
            self._records.append(record)
            if len(self._records) > self._max:
                # keep the newest
                self._records = self._records[-self._max:]
            self._cached = None

    def corrections(self) -> list[CorrectionRecord]:
        with self._lock:
            return list(self._records)

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def insights(self) -> LearningInsights:
        with self._lock:
            if self._cached is None:
                self._cached = analyze_corrections(self._records)
                logger.debug(
                    "Recomputed pattern insights from %d corrections (chronotype=%s)",
                    len(self._records),
                    self._cached.patterns.chronotype,
                )
            return self._cached

    def patterns(self) -> PersonalPatterns | None:
        """Current snapshot for EngineInputs.patterns, or None when empty."""
        if self.count() == 0:
            return None
        return self.insights().patterns

    def clear(self) -> None:
        with self._lock:
            self._records = []
            self._cached = None
