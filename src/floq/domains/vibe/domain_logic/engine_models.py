"""Engine input/output value types and the external snapshots they carry.

``VenueIntelligence`` and ``PersonalPatterns`` are produced by collaborators
outside the engine (venue data service, pattern store). The engine only
reads them; ``from_dict`` constructors accept the loose JSON shapes those
collaborators emit and never raise on missing or malformed fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from floq.domains.vibe.domain_logic.vibe_models import ComponentScores, Vibe, VibeVector

Chronotype = Literal["lark", "owl", "balanced"]
EnergyType = Literal["high-energy", "low-energy", "balanced"]
SocialType = Literal["social", "solo", "balanced"]
Consistency = Literal["very-consistent", "consistent", "variable"]

_CHRONOTYPES = ("lark", "owl", "balanced")
_ENERGY_TYPES = ("high-energy", "low-energy", "balanced")
_SOCIAL_TYPES = ("social", "solo", "balanced")
_CONSISTENCY = ("very-consistent", "consistent", "variable")


def _num(val: Any, default: float = 0.0) -> float:
    """Safely convert to float, returning default for None or non-numeric."""
    if val is None:
        return default
    try:
        return float(val)
    except (TypeError, ValueError):
        return default


def _choice(val: Any, allowed: tuple[str, ...], default: str) -> str:
    return val if val in allowed else default


# ---------------------------------------------------------------------------
# Venue intelligence snapshot
# ---------------------------------------------------------------------------

@dataclass
class VenueVibeProfile:
    primary_vibe: Vibe
    confidence: float = 0.5
    energy_level: float = 0.5
    # morning / afternoon / evening / night -> 0-1 preference
    time_of_day_preferences: dict[str, float] = field(default_factory=dict)


@dataclass
class VenueMetrics:
    current_occupancy: float = 0.0    # 0-1 share of capacity
    peak_occupancy: float = 0.0
    average_occupancy: float = 0.0


@dataclass
class PlaceData:
    is_open: bool = True
    rating: float | None = None
    total_ratings: int = 0


@dataclass
class VenueIntelligence:
    """Venue classification and live crowd metrics for the current venue."""

    vibe_profile: VenueVibeProfile
    real_time_metrics: VenueMetrics = field(default_factory=VenueMetrics)
    place_data: PlaceData = field(default_factory=PlaceData)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> VenueIntelligence | None:
        """Parse a venue-intelligence payload; None when no usable vibe profile."""
        if not data:
            return None
        profile = data.get("vibe_profile") or {}
        primary = Vibe.coerce(profile.get("primary_vibe"))
        if primary is None:
            return None

        prefs = {}
        for slot, value in (profile.get("time_of_day_preferences") or {}).items():
            prefs[str(slot)] = _num(value)

        metrics = data.get("real_time_metrics") or {}
        place = data.get("place_data") or {}
        rating = place.get("rating")

        return cls(
            vibe_profile=VenueVibeProfile(
                primary_vibe=primary,
                confidence=_num(profile.get("confidence"), default=0.5),
                energy_level=_num(profile.get("energy_level"), default=0.5),
                time_of_day_preferences=prefs,
            ),
            real_time_metrics=VenueMetrics(
                current_occupancy=_num(metrics.get("current_occupancy")),
                peak_occupancy=_num(metrics.get("peak_occupancy")),
                average_occupancy=_num(metrics.get("average_occupancy")),
            ),
            place_data=PlaceData(
                is_open=bool(place.get("is_open", True)),
                rating=None if rating is None else _num(rating),
                total_ratings=int(_num(place.get("total_ratings"))),
            ),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "vibe_profile": {
                "primary_vibe": self.vibe_profile.primary_vibe.value,
                "confidence": self.vibe_profile.confidence,
                "energy_level": self.vibe_profile.energy_level,
                "time_of_day_preferences": dict(self.vibe_profile.time_of_day_preferences),
            },
            "real_time_metrics": {
                "current_occupancy": self.real_time_metrics.current_occupancy,
                "peak_occupancy": self.real_time_metrics.peak_occupancy,
                "average_occupancy": self.real_time_metrics.average_occupancy,
            },
            "place_data": {
                "is_open": self.place_data.is_open,
                "rating": self.place_data.rating,
                "total_ratings": self.place_data.total_ratings,
            },
        }


# ---------------------------------------------------------------------------
# Personal patterns snapshot
# ---------------------------------------------------------------------------

@dataclass
class PersonalPatterns:
    """Learned personal profile, read-only to the engine."""

    has_enough_data: bool = False
    chronotype: Chronotype = "balanced"
    energy_type: EnergyType = "balanced"
    social_type: SocialType = "balanced"
    consistency: Consistency = "variable"
    # hour (0-23) -> vibe -> preference weight
    temporal_prefs: dict[int, dict[Vibe, float]] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PersonalPatterns | None:
        if not data:
            return None

        temporal: dict[int, dict[Vibe, float]] | None = None
        raw_prefs = data.get("temporal_prefs")
        if isinstance(raw_prefs, dict):
            temporal = {}
            for hour, prefs in raw_prefs.items():
                try:
                    hour_key = int(hour)
                except (TypeError, ValueError):
                    continue
                if not isinstance(prefs, dict):
                    continue
                parsed = {}
                for label, weight in prefs.items():
                    vibe = Vibe.coerce(label)
                    if vibe is not None:
                        parsed[vibe] = _num(weight)
                temporal[hour_key] = parsed

        return cls(
            has_enough_data=bool(data.get("has_enough_data", False)),
            chronotype=_choice(data.get("chronotype"), _CHRONOTYPES, "balanced"),
            energy_type=_choice(data.get("energy_type"), _ENERGY_TYPES, "balanced"),
            social_type=_choice(data.get("social_type"), _SOCIAL_TYPES, "balanced"),
            consistency=_choice(data.get("consistency"), _CONSISTENCY, "variable"),
            temporal_prefs=temporal,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "has_enough_data": self.has_enough_data,
            "chronotype": self.chronotype,
            "energy_type": self.energy_type,
            "social_type": self.social_type,
            "consistency": self.consistency,
            "temporal_prefs": (
                None
                if self.temporal_prefs is None
                else {
                    str(hour): {v.value: w for v, w in prefs.items()}
                    for hour, prefs in sorted(self.temporal_prefs.items())
                }
            ),
        }


# ---------------------------------------------------------------------------
# Engine inputs / result
# ---------------------------------------------------------------------------

@dataclass
class EngineInputs:
    """Evidence snapshot for one evaluation.

    ``hour`` is expected in 0-23 and ratios in 0-1; out-of-range values are
    a caller contract violation and yield a best-effort result, not an error.
    """

    hour: int
    is_weekend: bool = False
    speed_mps: float = 0.0
    screen_on_ratio: float = 0.0
    is_daylight: bool = True
    weather_energy_offset: float | None = None
    weather_confidence_boost: float | None = None
    venue_arrived: bool = False
    dwell_minutes: float | None = None
    venue_intelligence: VenueIntelligence | None = None
    patterns: PersonalPatterns | None = None
    # Resolved from configuration by the caller.
    patterns_enabled: bool = False


@dataclass
class EngineResult:
    vector: VibeVector
    components: ComponentScores
    confidence01: float
    calc_ms: float
    venue_intelligence: VenueIntelligence | None = None

    @property
    def primary_vibe(self) -> Vibe:
        return self.vector.top()

    def as_dict(self) -> dict[str, Any]:
        return {
            "primary_vibe": self.primary_vibe.value,
            "vector": {k: round(v, 4) for k, v in self.vector.as_dict().items()},
            "components": {k: round(v, 4) for k, v in self.components.as_dict().items()},
            "confidence01": round(self.confidence01, 4),
            "calc_ms": round(self.calc_ms, 3),
            "venue_intelligence": (
                self.venue_intelligence.as_dict() if self.venue_intelligence else None
            ),
        }
