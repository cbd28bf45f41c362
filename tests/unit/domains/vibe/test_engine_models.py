"""Unit tests for vibe value types and the external snapshot parsers."""

from __future__ import annotations

import pytest

from floq.domains.vibe.domain_logic.engine_models import (
    EngineInputs,
    EngineResult,
    PersonalPatterns,
    VenueIntelligence,
)
from floq.domains.vibe.domain_logic.vibe_models import (
    ComponentScores,
    Vibe,
    VibeVector,
    clamp,
    wrap_hour,
)


class TestVibe:
    def test_ten_categories(self):
        assert len(Vibe) == 10

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("social", Vibe.SOCIAL),
            (" Chill ", Vibe.CHILL),
            ("energetic", Vibe.HYPE),
            ("excited", Vibe.HYPE),
            ("focused", Vibe.SOLO),
            (Vibe.WEIRD, Vibe.WEIRD),
        ],
    )
    def test_coerce(self, label, expected):
        assert Vibe.coerce(label) is expected

    @pytest.mark.parametrize("label", ["", "sleepy", None, 3])
    def test_coerce_unknown(self, label):
        assert Vibe.coerce(label) is None

    @pytest.mark.parametrize(
        "value,expected", [(float("nan"), 0.0), (-0.5, 0.0), (1.5, 1.0), (0.25, 0.25)]
    )
    def test_clamp(self, value, expected):
        assert clamp(value) == expected

    @pytest.mark.parametrize("hour,expected", [(0, 0), (23, 23), (24, 0), (-1, 23), ("x", 0)])
    def test_wrap_hour(self, hour, expected):
        assert wrap_hour(hour) == expected


class TestVibeVector:
    def test_uniform_sums_to_one(self):
        vector = VibeVector.uniform()
        assert vector.total() == pytest.approx(1.0)
        assert vector[Vibe.DOWN] == pytest.approx(0.1)

    def test_from_dict_skips_unknown_and_bad_values(self):
        vector = VibeVector.from_dict({"social": 0.4, "energetic": 0.2, "nope": 1, "chill": "x"})
        assert vector.social == pytest.approx(0.4)
        assert vector.hype == pytest.approx(0.2)
        assert vector.chill == 0.0

    def test_top_prefers_first_on_tie(self):
        assert VibeVector().top() is Vibe.HYPE
        assert VibeVector(chill=0.5, down=0.5).top() is Vibe.CHILL

    def test_copy_is_independent(self):
        vector = VibeVector.uniform()
        clone = vector.copy()
        clone[Vibe.HYPE] = 0.9
        assert vector.hype == pytest.approx(0.1)


class TestComponentScores:
    def test_from_dict_ignores_unknown_channels(self):
        scores = ComponentScores.from_dict({"motion": "0.4", "bogus": 1.0, "weather": None})
        assert scores.motion == pytest.approx(0.4)
        assert scores.weather == 0.0

    def test_dominant(self):
        assert ComponentScores(venue_energy=0.8, motion=0.2).dominant() == "venue_energy"

    def test_dominant_tie_uses_channel_order(self):
        assert ComponentScores().dominant() == "circadian"


class TestVenueIntelligence:
    def test_none_and_empty(self):
        assert VenueIntelligence.from_dict(None) is None
        assert VenueIntelligence.from_dict({}) is None

    def test_invalid_primary_vibe(self):
        assert VenueIntelligence.from_dict({"vibe_profile": {"primary_vibe": "sleepy"}}) is None

    def test_defaults_for_missing_sections(self):
        venue = VenueIntelligence.from_dict({"vibe_profile": {"primary_vibe": "excited"}})
        assert venue is not None
        assert venue.vibe_profile.primary_vibe is Vibe.HYPE
        assert venue.vibe_profile.confidence == 0.5
        assert venue.place_data.is_open is True
        assert venue.place_data.total_ratings == 0
        assert venue.real_time_metrics.current_occupancy == 0.0

    def test_malformed_numbers_fall_back(self):
        venue = VenueIntelligence.from_dict({
            "vibe_profile": {"primary_vibe": "romantic", "confidence": "high"},
            "place_data": {"rating": "n/a", "total_ratings": None},
        })
        assert venue.vibe_profile.confidence == 0.5
        assert venue.place_data.rating == 0.0
        assert venue.place_data.total_ratings == 0

    def test_as_dict_uses_labels(self, venue_intelligence):
        payload = venue_intelligence.as_dict()
        assert payload["vibe_profile"]["primary_vibe"] == "social"
        assert payload["place_data"]["total_ratings"] == 150


class TestPersonalPatterns:
    def test_from_dict(self):
        patterns = PersonalPatterns.from_dict({
            "has_enough_data": True,
            "chronotype": "owl",
            "energy_type": "turbo",
            "consistency": "very-consistent",
            "temporal_prefs": {"21": {"social": 0.7, "focused": 0.3, "nope": 1}, "x": {}},
        })
        assert patterns.chronotype == "owl"
        assert patterns.energy_type == "balanced"
        assert patterns.temporal_prefs == {21: {Vibe.SOCIAL: 0.7, Vibe.SOLO: 0.3}}

    def test_empty(self):
        assert PersonalPatterns.from_dict(None) is None

    def test_as_dict_keys_are_strings(self, rich_patterns):
        payload = rich_patterns.as_dict()
        assert payload["temporal_prefs"] == {"14": {"hype": 0.5, "social": 0.3}}


class TestEngineResult:
    def test_as_dict(self):
        result = EngineResult(
            vector=VibeVector(social=0.6, chill=0.4),
            components=ComponentScores(circadian=0.123456),
            confidence01=0.5,
            calc_ms=1.23456,
        )
        payload = result.as_dict()
        assert payload["primary_vibe"] == "social"
        assert payload["components"]["circadian"] == 0.1235
        assert payload["calc_ms"] == 1.235
        assert payload["venue_intelligence"] is None

    def test_inputs_defaults(self):
        inputs = EngineInputs(hour=10)
        assert inputs.patterns_enabled is False
        assert inputs.venue_intelligence is None
