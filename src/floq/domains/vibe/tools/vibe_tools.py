"""MCP tools exposing the vibe engine and the learning loop."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP

if TYPE_CHECKING:
    from floq.domains.vibe.domain_logic.tuning import VibeTuning
    from floq.domains.vibe.learning.feedback import RealTimeLearningFeedback
    from floq.domains.vibe.learning.pattern_store import PatternStore

from floq.domains.vibe.domain_logic.engine_models import EngineInputs, VenueIntelligence
from floq.domains.vibe.domain_logic.vibe_engine import evaluate
from floq.domains.vibe.domain_logic.vibe_models import ComponentScores, Vibe
from floq.domains.vibe.learning.loop import learn_from_correction
from floq.domains.vibe.learning.pattern_learner import CorrectionRecord
from floq.domains.vibe.learning.predictor import (
    PredictiveContext,
    predict_upcoming_vibes,
    prediction_confidence,
)
from floq.domains.vibe.learning.sequences import (
    detect_sequences,
    detect_triggers,
    predict_next_vibe,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _parse_vibe(value: str, field_name: str) -> Vibe:
    vibe = Vibe.coerce(value)
    if vibe is None:
        allowed = " | ".join(v.value for v in Vibe)
        raise ValueError(f"{field_name} must be one of: {allowed}")
    return vibe


def _validate_strength(value: float) -> float:
    if not 0.0 <= value <= 1.0:
        raise ValueError("learning_strength must be within [0, 1]")
    return value


def register_vibe_tools(
    mcp: FastMCP,
    feedback: RealTimeLearningFeedback,
    pattern_store: PatternStore,
    *,
    patterns_enabled: bool,
    tuning: VibeTuning,
    event_max_age_days: float = 7.0,
) -> None:
    """Register vibe evaluation and learning tools on the MCP server."""

    @mcp.tool
    def evaluate_vibe(
        hour: int,
        is_weekend: bool = False,
        speed_mps: float = 0.0,
        screen_on_ratio: float = 0.0,
        is_daylight: bool = True,
        weather_energy_offset: float | None = None,
        weather_confidence_boost: float | None = None,
        venue_arrived: bool = False,
        dwell_minutes: float | None = None,
        venue_intelligence: dict[str, Any] | None = None,
    ) -> str:
        """Infer the current vibe distribution from sensor and context evidence.

        Learned personal patterns are applied when pattern usage is enabled
        on the server and enough corrections have been recorded.

        Args:
            hour: Local hour of day (0-23).
            is_weekend: Whether today is a weekend day.
            speed_mps: Current movement speed in metres per second.
            screen_on_ratio: Share of recent time the screen was on (0-1).
            is_daylight: Whether the sun is up.
            weather_energy_offset: Optional signed energy offset from weather.
            weather_confidence_boost: Optional confidence boost from weather.
            venue_arrived: Whether the user has arrived at a detected venue.
            dwell_minutes: Minutes spent at the current venue.
            venue_intelligence: Optional venue snapshot with vibe_profile,
                real_time_metrics and place_data sections.
        """
        inputs = EngineInputs(
            hour=hour,
            is_weekend=is_weekend,
            speed_mps=speed_mps,
            screen_on_ratio=screen_on_ratio,
            is_daylight=is_daylight,
            weather_energy_offset=weather_energy_offset,
            weather_confidence_boost=weather_confidence_boost,
            venue_arrived=venue_arrived,
            dwell_minutes=dwell_minutes,
            venue_intelligence=VenueIntelligence.from_dict(venue_intelligence),
            patterns=pattern_store.patterns() if patterns_enabled else None,
            patterns_enabled=patterns_enabled,
        )
        result = evaluate(inputs, tuning)

        payload = result.as_dict()
        payload["status"] = "ok"
        payload["patterns_applied"] = bool(
            inputs.patterns is not None and inputs.patterns.has_enough_data
        )
        return json.dumps(payload, indent=2)

    @mcp.tool
    def record_vibe_correction(
        predicted: str,
        corrected: str,
        components: dict[str, float] | None = None,
        learning_strength: float = 0.05,
        hour: int | None = None,
        is_weekend: bool = False,
        venue_type: str | None = None,
    ) -> str:
        """Record that the user corrected a predicted vibe.

        Args:
            predicted: The vibe the engine predicted.
            corrected: The vibe the user chose instead.
            components: Component scores active at prediction time.
            learning_strength: How strongly to weigh this correction (0-1).
            hour: Local hour of the correction (defaults to now).
            is_weekend: Whether the correction happened on a weekend.
            venue_type: Optional venue category (e.g. 'cafe', 'bar').
        """
        predicted_vibe = _parse_vibe(predicted, "predicted")
        corrected_vibe = _parse_vibe(corrected, "corrected")
        strength = _validate_strength(learning_strength)

        record = CorrectionRecord(
            timestamp=time.time(),
            predicted=predicted_vibe,
            corrected=corrected_vibe,
            hour=datetime.now().hour if hour is None else hour,
            is_weekend=is_weekend,
            components=ComponentScores.from_dict(components or {}),
            venue_type=venue_type or None,
        )
        insights = learn_from_correction(feedback, pattern_store, record, strength)

        return json.dumps({
            "status": "ok",
            "insights": insights.as_dict(),
            "events_recorded": len(feedback.events),
        }, indent=2)

    @mcp.tool
    def learning_feedback() -> str:
        """Show recent learning events, learning state and discovered patterns."""
        return json.dumps({
            "status": "ok",
            **feedback.get_current_feedback().as_dict(),
        }, indent=2)

    @mcp.tool
    def cleanup_learning_events(max_age_days: float | None = None) -> str:
        """Prune learning events older than the given age.

        Args:
            max_age_days: Age threshold in days (default: server setting).
        """
        days = event_max_age_days if max_age_days is None else max_age_days
        if days < 0:
            raise ValueError("max_age_days must be non-negative")
        removed = feedback.cleanup_old_events(max_age_seconds=days * 24 * 60 * 60)
        return json.dumps({
            "status": "ok",
            "removed": removed,
            "remaining": len(feedback.events),
        }, indent=2)

    @mcp.tool
    def forecast_vibes(
        hour: int | None = None,
        is_weekend: bool = False,
        expected_venue_type: str | None = None,
    ) -> str:
        """Forecast likely vibes for the coming hours from learned patterns.

        Returns no predictions until enough corrections have been recorded.

        Args:
            hour: Local hour to forecast from (defaults to now).
            is_weekend: Whether today is a weekend day.
            expected_venue_type: Venue category the user is heading to.
        """
        insights = pattern_store.insights()
        context = PredictiveContext(
            hour=datetime.now().hour if hour is None else hour,
            is_weekend=is_weekend,
            expected_venue_type=expected_venue_type or None,
        )
        predictions = predict_upcoming_vibes(insights, context)
        return json.dumps({
            "status": "ok",
            "predictions": [p.as_dict() for p in predictions],
            "prediction_confidence": round(prediction_confidence(insights), 4),
            "correction_count": insights.correction_count,
        }, indent=2)

    @mcp.tool
    def vibe_behavior_patterns(
        current_vibe: str | None = None,
        hour: int | None = None,
        is_weekend: bool = False,
        venue_type: str | None = None,
    ) -> str:
        """Show recurring vibe sequences and contextual triggers.

        With ``current_vibe`` set, also predicts the likely next vibe from the
        sequences that end in it.

        Args:
            current_vibe: The user's current vibe.
            hour: Local hour (defaults to now).
            is_weekend: Whether today is a weekend day.
            venue_type: Current venue category.
        """
        current = _parse_vibe(current_vibe, "current_vibe") if current_vibe else None
        records = pattern_store.corrections()
        sequences = detect_sequences(records)

        payload: dict[str, Any] = {
            "status": "ok",
            "sequences": [s.as_dict() for s in sequences],
            "triggers": [t.as_dict() for t in detect_triggers(records)],
        }
        if current is not None:
            payload["next_vibe"] = predict_next_vibe(
                current,
                sequences,
                hour=datetime.now().hour if hour is None else hour,
                is_weekend=is_weekend,
                venue_type=venue_type or None,
            ).as_dict()
        return json.dumps(payload, indent=2)
