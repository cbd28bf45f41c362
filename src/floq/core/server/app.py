"""Floq vibe MCP server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from floq.core.config.settings import Settings, get_settings
from floq.domains.vibe.domain_logic.tuning import (
    DEFAULT_TUNING,
    TuningError,
    VibeTuning,
    load_tuning,
)
from floq.domains.vibe.learning.feedback import RealTimeLearningFeedback
from floq.domains.vibe.learning.pattern_store import PatternStore
from floq.domains.vibe.tools.vibe_tools import register_vibe_tools

logger = logging.getLogger(__name__)


def _resolve_tuning(settings: Settings) -> tuple[VibeTuning, str]:
    if not settings.vibe_tuning_path:
        return DEFAULT_TUNING, "default"
    try:
        return load_tuning(settings.vibe_tuning_path), settings.vibe_tuning_path
    except (OSError, TuningError) as exc:
        logger.error("Failed to load vibe tuning from %s: %s", settings.vibe_tuning_path, exc)
        logger.warning("Continuing with default vibe tuning")
        return DEFAULT_TUNING, "default"


def create_app(
    *,
    settings_override: Settings | None = None,
    feedback_override: RealTimeLearningFeedback | None = None,
    pattern_store_override: PatternStore | None = None,
) -> FastMCP:
    """Create and configure the Floq vibe MCP server.

    This is the composition root. It:
    1. Creates the FastMCP server instance
    2. Resolves the pattern-usage flag and the tuning table from settings
    3. Creates the learning feedback service and the pattern store
    4. Registers all tools
    """
    settings = settings_override or get_settings()

    # --- Server instance ---
    server = FastMCP(
        "Floq Vibe Engine",
        instructions=(
            "Real-time vibe inference for Floq. Fuses time of day, motion, "
            "screen activity, daylight, weather and venue intelligence into a "
            "vibe distribution, and learns from user corrections."
        ),
    )

    # --- Engine configuration ---
    tuning, tuning_source = _resolve_tuning(settings)
    patterns_enabled = settings.vibe_patterns
    logger.info(
        "Vibe engine configured (patterns=%s, tuning=%s)",
        "on" if patterns_enabled else "off",
        tuning_source,
    )

    # --- Learning services ---
    feedback = feedback_override or RealTimeLearningFeedback()
    pattern_store = pattern_store_override or PatternStore(
        max_corrections=settings.pattern_history_limit
    )

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "Floq Vibe Engine",
            "version": "0.1.0",
            "patterns_enabled": patterns_enabled,
            "tuning_source": tuning_source,
            "corrections_stored": pattern_store.count(),
            "learning_events": len(feedback.events),
        }

    register_vibe_tools(
        server,
        feedback,
        pattern_store,
        patterns_enabled=patterns_enabled,
        tuning=tuning,
        event_max_age_days=settings.learning_event_max_age_days,
    )
    logger.info("Vibe tools registered")

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
