"""Named tuning table for the scorers and the confidence model.

The circadian curve, nudge gains and confidence weights are product
decisions, not correctness requirements, so they live here rather than
inline in the scorers. ``load_tuning`` overrides any subset of them from
a YAML file::

    circadian_curve: [0.35, 0.25, ...]   # exactly 24 entries
    chronotype_boost: 0.12
    lark_window: [5, 11]

Hard invariants (confidence cap, venue energy cap, learning buffer size)
are not tunable; see ``vibe_models``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class TuningError(ValueError):
    """Raised when a tuning file is malformed."""


# Hour 0..23. Trough before dawn, rising through the day, peak early evening.
DEFAULT_CIRCADIAN_CURVE: tuple[float, ...] = (
    0.35, 0.25, 0.18, 0.12, 0.10, 0.15,  # 00-05
    0.28, 0.40, 0.50, 0.58, 0.64, 0.68,  # 06-11
    0.70, 0.70, 0.72, 0.75, 0.78, 0.82,  # 12-17
    0.86, 0.88, 0.85, 0.76, 0.62, 0.48,  # 18-23
)


@dataclass(frozen=True)
class VibeTuning:
    # Circadian
    circadian_curve: tuple[float, ...] = DEFAULT_CIRCADIAN_CURVE
    weekend_evening_bonus: float = 0.05
    circadian_nudge: float = 0.04

    # Chronotype (pattern enrichment)
    chronotype_boost: float = 0.15
    lark_window: tuple[int, int] = (5, 11)
    owl_window: tuple[int, int] = (18, 23)
    consistency_multipliers: dict[str, float] = field(
        default_factory=lambda: {"very-consistent": 1.2, "consistent": 1.0, "variable": 1.0}
    )
    pattern_nudge: float = 0.03
    temporal_pref_gain: float = 0.1

    # Motion / screen
    motion_speed_ceiling_mps: float = 3.0
    motion_nudge: float = 0.06
    screen_nudge: float = 0.04

    # Daylight / weather / venue
    daylight_nudge: float = 0.04
    weather_nudge_gain: float = 0.3
    venue_nudge_gain: float = 0.15

    # Confidence
    confidence_base: float = 0.3
    confidence_concentration_gain: float = 1.2
    venue_confidence_gain: float = 0.1
    max_weather_confidence_boost: float = 0.1
    pattern_confidence_boosts: dict[str, float] = field(
        default_factory=lambda: {"very-consistent": 0.05, "consistent": 0.03, "variable": 0.0}
    )

    performance_budget_ms: float = 80.0


DEFAULT_TUNING = VibeTuning()

_TUPLE_FIELDS = {"circadian_curve", "lark_window", "owl_window"}
_MAPPING_FIELDS = {"consistency_multipliers", "pattern_confidence_boosts"}


def load_tuning(path: str | Path, base: VibeTuning = DEFAULT_TUNING) -> VibeTuning:
    """Read a YAML tuning file and return ``base`` with its keys overridden."""
    path = Path(path)
    with open(path) as f:
        try:
            data: Any = yaml.safe_load(f)
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            raise TuningError(f"{path}: invalid YAML: {exc}") from exc

    if data is None:
        return base
    if not isinstance(data, dict):
        raise TuningError(f"{path}: expected a mapping at the top level")

    tuning = tuning_from_dict(data, base)
    logger.info("Loaded vibe tuning from %s (%d overrides)", path, len(data))
    return tuning


def tuning_from_dict(data: dict[str, Any], base: VibeTuning = DEFAULT_TUNING) -> VibeTuning:
    known = {f.name for f in fields(VibeTuning)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise TuningError(f"Unknown tuning keys: {', '.join(unknown)}")

    overrides: dict[str, Any] = {}
    for key, value in data.items():
        if key in _TUPLE_FIELDS:
            if not isinstance(value, (list, tuple)):
                raise TuningError(f"{key} must be a list")
            overrides[key] = _numeric_tuple(key, value, int if key.endswith("_window") else float)
        elif key in _MAPPING_FIELDS:
            if not isinstance(value, dict):
                raise TuningError(f"{key} must be a mapping")
            try:
                merged = {str(k): float(v) for k, v in value.items()}
            except (TypeError, ValueError) as exc:
                raise TuningError(f"{key} values must be numeric") from exc
            overrides[key] = {**getattr(base, key), **merged}
        else:
            try:
                overrides[key] = float(value)
            except (TypeError, ValueError) as exc:
                raise TuningError(f"{key} must be numeric, got {value!r}") from exc

    tuning = replace(base, **overrides)
    _validate(tuning)
    return tuning


def _numeric_tuple(key: str, values: list | tuple, kind: type) -> tuple:
    try:
        return tuple(kind(v) for v in values)
    except (TypeError, ValueError) as exc:
        raise TuningError(f"{key} entries must be numeric, got {list(values)!r}") from exc


def _validate(tuning: VibeTuning) -> None:
    curve = tuning.circadian_curve
    if len(curve) != 24:
        raise TuningError(f"circadian_curve needs 24 entries, got {len(curve)}")
    if any(not 0.0 <= v <= 1.0 for v in curve):
        raise TuningError("circadian_curve entries must lie in [0, 1]")
    for name in ("lark_window", "owl_window"):
        window = getattr(tuning, name)
        if len(window) != 2 or not all(0 <= h <= 23 for h in window):
            raise TuningError(f"{name} must be two hours in 0-23")
    if tuning.performance_budget_ms <= 0:
        raise TuningError("performance_budget_ms must be positive")
