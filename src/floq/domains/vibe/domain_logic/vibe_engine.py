"""Vibe engine: fuse component scorers into a vibe distribution.

``evaluate`` is synchronous and side-effect free apart from logging. It is
meant to run on every sensor tick, so it never raises for missing or
out-of-range evidence and reports its own wall-clock cost in ``calc_ms``.

Steps:
    1. Run every scorer in SCORERS order.
    2. Start from a uniform vector and apply each scorer's nudges through
       ``adjust_vector``, then the personal-pattern nudges.
    3. Renormalize.
    4. Clamp each component score to [0, 1].
    5. Confidence = base + concentration gain * (how far the top vibe sits
       above uniform) + venue, weather and pattern boosts, capped at 0.95.
    6. Pass venue intelligence through for display.
"""

from __future__ import annotations

import logging
import math
import time

from floq.domains.vibe.domain_logic.engine_models import EngineInputs, EngineResult
from floq.domains.vibe.domain_logic.personal_patterns import (
    active_patterns,
    pattern_confidence_boost,
    pattern_nudges,
)
from floq.domains.vibe.domain_logic.scorers import SCORERS
from floq.domains.vibe.domain_logic.tuning import DEFAULT_TUNING, VibeTuning
from floq.domains.vibe.domain_logic.vector_utils import adjust_vector, renormalize_vector
from floq.domains.vibe.domain_logic.vibe_models import (
    CONFIDENCE_CAP,
    VIBES,
    ComponentScores,
    VibeVector,
    clamp,
)

logger = logging.getLogger(__name__)


def concentration(vector: VibeVector) -> float:
    """0 for a uniform (or all-zero) vector, 1 when one vibe holds all mass."""
    total = vector.total()
    if total <= 0:
        return 0.0
    uniform = 1.0 / len(VIBES)
    top = max(weight for _, weight in vector.items()) / total
    return clamp((top - uniform) / (1.0 - uniform))


def evaluate(inputs: EngineInputs, tuning: VibeTuning = DEFAULT_TUNING) -> EngineResult:
    """Evaluate one evidence snapshot into a vibe distribution with diagnostics."""
    started = time.perf_counter()

    # --- 1-2. Score and nudge ---
    vector = VibeVector.uniform()
    raw_scores: dict[str, float] = {}
    for name, scorer in SCORERS.items():
        result = scorer(inputs, tuning)
        raw_scores[name] = result.score
        for vibe, delta in result.nudges.items():
            if math.isfinite(delta):
                adjust_vector(vector, vibe, delta)

    patterns = active_patterns(inputs)
    for vibe, delta in pattern_nudges(patterns, inputs.hour, tuning).items():
        if math.isfinite(delta):
            adjust_vector(vector, vibe, delta)

    # --- 3. Renormalize ---
    renormalize_vector(vector)
    if vector.total() <= 0:
        vector = VibeVector.uniform()

    # --- 4. Bounded components ---
    components = ComponentScores(
        **{name: clamp(float(score)) for name, score in raw_scores.items()}
    )

    # --- 5. Confidence ---
    confidence = tuning.confidence_base + tuning.confidence_concentration_gain * concentration(vector)

    intel = inputs.venue_intelligence
    if intel is not None:
        confidence += tuning.venue_confidence_gain * clamp(intel.vibe_profile.confidence)

    if inputs.weather_confidence_boost is not None:
        confidence += clamp(
            float(inputs.weather_confidence_boost), 0.0, tuning.max_weather_confidence_boost
        )

    confidence += pattern_confidence_boost(patterns, tuning)
    confidence = clamp(confidence, 0.0, CONFIDENCE_CAP)

    # --- 6-7. Assemble ---
    calc_ms = (time.perf_counter() - started) * 1000.0
    if calc_ms > tuning.performance_budget_ms:
        logger.warning(
            "Vibe evaluation took %.1fms (budget %.0fms)",
            calc_ms,
            tuning.performance_budget_ms,
        )

    result = EngineResult(
        vector=vector,
        components=components,
        confidence01=confidence,
        calc_ms=calc_ms,
        venue_intelligence=intel,
    )
    logger.debug(
        "Evaluated vibe=%s confidence=%.3f patterns=%s in %.2fms",
        result.primary_vibe.value,
        confidence,
        patterns is not None,
        calc_ms,
    )
    return result
