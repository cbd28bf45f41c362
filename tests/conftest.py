"""Shared test fixtures for Floq vibe engine tests."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VIBE_PATTERNS", "off")
    monkeypatch.setenv("VIBE_TUNING_PATH", "")
    monkeypatch.delenv("FLOQ_HOST", raising=False)
    monkeypatch.delenv("PATTERN_HISTORY_LIMIT", raising=False)

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from floq.domains.vibe.domain_logic.engine_models import (  # noqa: E402
    EngineInputs,
    PersonalPatterns,
    VenueIntelligence,
)
from floq.domains.vibe.domain_logic.vibe_models import Vibe  # noqa: E402


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_inputs(**overrides) -> EngineInputs:
    """Mid-afternoon weekday, standing still, screen mostly off, daylight."""
    values = {
        "hour": 14,
        "is_weekend": False,
        "speed_mps": 0.0,
        "screen_on_ratio": 0.3,
        "is_daylight": True,
    }
    values.update(overrides)
    return EngineInputs(**values)


def make_patterns(**overrides) -> PersonalPatterns:
    values = {
        "has_enough_data": True,
        "chronotype": "balanced",
        "energy_type": "balanced",
        "social_type": "balanced",
        "consistency": "consistent",
    }
    values.update(overrides)
    return PersonalPatterns(**values)


def make_venue(
    primary_vibe: str = "social",
    confidence: float = 0.8,
    energy_level: float = 0.7,
    current_occupancy: float = 0.6,
    is_open: bool = True,
    total_ratings: int = 150,
) -> VenueIntelligence:
    venue = VenueIntelligence.from_dict({
        "vibe_profile": {
            "primary_vibe": primary_vibe,
            "confidence": confidence,
            "energy_level": energy_level,
            "time_of_day_preferences": {
                "morning": 0.3,
                "afternoon": 0.8,
                "evening": 0.6,
                "night": 0.2,
            },
        },
        "real_time_metrics": {
            "current_occupancy": current_occupancy,
            "peak_occupancy": 0.9,
            "average_occupancy": 0.5,
        },
        "place_data": {"is_open": is_open, "rating": 4.5, "total_ratings": total_ratings},
    })
    assert venue is not None
    return venue


class FakeClock:
    """Deterministic replacement for time.time()."""

    def __init__(self, start: float) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def base_inputs() -> EngineInputs:
    return make_inputs()


@pytest.fixture
def rich_patterns() -> PersonalPatterns:
    return make_patterns(
        chronotype="lark",
        energy_type="high-energy",
        social_type="social",
        temporal_prefs={14: {Vibe.HYPE: 0.5, Vibe.SOCIAL: 0.3}},
    )


@pytest.fixture
def venue_intelligence() -> VenueIntelligence:
    return make_venue()


@pytest.fixture
def clock() -> FakeClock:
    # Local 15:00 so hour-of-day checks are timezone independent.
    return FakeClock(datetime(2026, 3, 14, 15, 0, 0).timestamp())
