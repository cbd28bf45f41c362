"""Vibe categories, probability vectors, component scores and domain constants."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any


class Vibe(str, Enum):
    """Closed set of vibe categories shared by every component."""

    HYPE = "hype"
    SOCIAL = "social"
    CHILL = "chill"
    FLOWING = "flowing"
    OPEN = "open"
    CURIOUS = "curious"
    SOLO = "solo"
    ROMANTIC = "romantic"
    WEIRD = "weird"
    DOWN = "down"

    @classmethod
    def coerce(cls, label: Any) -> Vibe | None:
        """Lenient parse: accepts members, labels and legacy aliases.

        Returns None for anything unrecognised.
        """
        if isinstance(label, Vibe):
            return label
        if not isinstance(label, str):
            return None
        key = label.strip().lower()
        try:
            return cls(key)
        except ValueError:
            return VIBE_ALIASES.get(key)


VIBES: tuple[Vibe, ...] = tuple(Vibe)

# Labels still stored by older clients, folded onto the current set.
VIBE_ALIASES: dict[str, Vibe] = {
    "energetic": Vibe.HYPE,
    "excited": Vibe.HYPE,
    "focused": Vibe.SOLO,
}


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp a value to [lo, hi]; NaN reads as lo."""
    if math.isnan(value):
        return lo
    return max(lo, min(hi, value))


def wrap_hour(hour: Any) -> int:
    """Best-effort hour of day in 0-23; non-numeric input reads as midnight."""
    try:
        return int(hour) % 24
    except (TypeError, ValueError, OverflowError):
        return 0


# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

# Hard ceiling on reported confidence; 1.0 would read as certainty.
CONFIDENCE_CAP = 0.95
VENUE_ENERGY_BASELINE = 0.5
VENUE_MAX_ENHANCEMENT = 0.35

# Energy weight per vibe (-1 = drained, +1 = peak energy)
VIBE_ENERGY: dict[Vibe, float] = {
    Vibe.HYPE: 1.0,
    Vibe.FLOWING: 0.7,
    Vibe.SOCIAL: 0.6,
    Vibe.OPEN: 0.5,
    Vibe.CURIOUS: 0.3,
    Vibe.WEIRD: 0.2,
    Vibe.ROMANTIC: 0.0,
    Vibe.CHILL: -0.3,
    Vibe.SOLO: -0.5,
    Vibe.DOWN: -1.0,
}

# Social lean per vibe (-1 = alone, +1 = with people)
VIBE_SOCIAL_LEAN: dict[Vibe, float] = {
    Vibe.SOCIAL: 1.0,
    Vibe.OPEN: 0.6,
    Vibe.ROMANTIC: 0.5,
    Vibe.HYPE: 0.4,
    Vibe.FLOWING: 0.1,
    Vibe.CURIOUS: 0.0,
    Vibe.CHILL: -0.2,
    Vibe.WEIRD: -0.5,
    Vibe.DOWN: -0.6,
    Vibe.SOLO: -1.0,
}


# ---------------------------------------------------------------------------
# Vectors and scores
# ---------------------------------------------------------------------------

@dataclass
class VibeVector:
    """Weight per vibe. Valid vectors sum to 1; provisional ones may not."""

    hype: float = 0.0
    social: float = 0.0
    chill: float = 0.0
    flowing: float = 0.0
    open: float = 0.0
    curious: float = 0.0
    solo: float = 0.0
    romantic: float = 0.0
    weird: float = 0.0
    down: float = 0.0

    @classmethod
    def uniform(cls) -> VibeVector:
        share = 1.0 / len(VIBES)
        return cls(**{v.value: share for v in VIBES})

    @classmethod
    def from_dict(cls, data: dict[Any, Any]) -> VibeVector:
        """Build from a partial mapping; unknown labels are dropped, missing ones are 0."""
        vector = cls()
        for label, weight in (data or {}).items():
            vibe = Vibe.coerce(label)
            if vibe is None:
                continue
            try:
                vector[vibe] = max(0.0, float(weight))
            except (TypeError, ValueError):
                continue
        return vector

    def __getitem__(self, vibe: Vibe) -> float:
        return getattr(self, Vibe(vibe).value)

    def __setitem__(self, vibe: Vibe, weight: float) -> None:
        setattr(self, Vibe(vibe).value, weight)

    def items(self) -> list[tuple[Vibe, float]]:
        return [(v, getattr(self, v.value)) for v in VIBES]

    def total(self) -> float:
        return sum(getattr(self, v.value) for v in VIBES)

    def top(self) -> Vibe:
        """Highest-weighted vibe; ties resolve in VIBES order."""
        return max(VIBES, key=lambda v: getattr(self, v.value))

    def copy(self) -> VibeVector:
        return VibeVector(**asdict(self))

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


COMPONENT_NAMES = [
    "circadian",
    "motion",
    "screen_activity",
    "daylight",
    "weather",
    "venue_energy",
]


@dataclass
class ComponentScores:
    """Per-evidence-channel scores, each in [0, 1] in engine output."""

    circadian: float = 0.0
    motion: float = 0.0
    screen_activity: float = 0.0
    daylight: float = 0.0
    weather: float = 0.0
    venue_energy: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComponentScores:
        known = {f.name for f in fields(cls)}
        values: dict[str, float] = {}
        for name, value in (data or {}).items():
            if name not in known:
                continue
            try:
                values[name] = float(value)
            except (TypeError, ValueError):
                continue
        return cls(**values)

    def dominant(self) -> str:
        """Name of the strongest channel; ties resolve in COMPONENT_NAMES order."""
        return max(COMPONENT_NAMES, key=lambda name: getattr(self, name))

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class ScorerResult:
    """Output of one component scorer.

    ``nudges`` holds signed deltas per vibe, already scaled by the scorer's
    evidence strength; the engine applies them through ``adjust_vector``.
    """

    score: float
    nudges: dict[Vibe, float] = field(default_factory=dict)
