"""Correction -> feedback log -> pattern store -> refreshed insights."""

from __future__ import annotations

import logging

from floq.domains.vibe.learning.feedback import RealTimeLearningFeedback
from floq.domains.vibe.learning.pattern_learner import CorrectionRecord, LearningInsights
from floq.domains.vibe.learning.pattern_store import PatternStore

logger = logging.getLogger(__name__)


def learn_from_correction(
    feedback: RealTimeLearningFeedback,
    store: PatternStore,
    record: CorrectionRecord,
    learning_strength: float,
) -> LearningInsights:
    """Feed one correction through the learning loop and return the new insights.

    Records a confidence_boost event when insight confidence rises above a
    previously non-zero value.
    """
    previous = store.insights().confidence if store.count() else 0.0

    feedback.record_correction(
        record.predicted, record.corrected, record.components, learning_strength
    )
    store.add(record)

    insights = store.insights()
    feedback.update_insights(insights)

    if previous > 0 and insights.confidence > previous:
        feedback.record_confidence_boost("Pattern learning", previous, insights.confidence)

    logger.debug(
        "Learned %s -> %s (corrections=%d, confidence=%.3f)",
        record.predicted.value,
        record.corrected.value,
        insights.correction_count,
        insights.confidence,
    )
    return insights
