"""Unit tests for the vibe engine orchestrator."""

from __future__ import annotations

import random

import pytest

from floq.domains.vibe.domain_logic import scorers
from floq.domains.vibe.domain_logic.engine_models import EngineInputs, PersonalPatterns
from floq.domains.vibe.domain_logic.tuning import DEFAULT_TUNING
from floq.domains.vibe.domain_logic.vibe_engine import concentration, evaluate
from floq.domains.vibe.domain_logic.vibe_models import (
    CONFIDENCE_CAP,
    ScorerResult,
    Vibe,
    VibeVector,
)


def _inputs(**overrides) -> EngineInputs:
    values = {"hour": 14, "is_weekend": False, "speed_mps": 0.0,
              "screen_on_ratio": 0.3, "is_daylight": True}
    values.update(overrides)
    return EngineInputs(**values)


def _random_inputs(rng: random.Random, venue, patterns) -> EngineInputs:
    return EngineInputs(
        hour=rng.randint(0, 23),
        is_weekend=rng.random() < 0.3,
        speed_mps=rng.uniform(0, 8),
        screen_on_ratio=rng.random(),
        is_daylight=rng.random() < 0.5,
        weather_energy_offset=rng.choice([None, rng.uniform(-0.6, 0.6)]),
        weather_confidence_boost=rng.choice([None, rng.uniform(0, 0.5)]),
        venue_arrived=rng.random() < 0.5,
        dwell_minutes=rng.choice([None, rng.uniform(0, 240)]),
        venue_intelligence=rng.choice([None, venue]),
        patterns=rng.choice([None, patterns]),
        patterns_enabled=rng.random() < 0.5,
    )


# ===========================================================================
# Test: Invariants
# ===========================================================================

class TestInvariants:
    def test_vector_sums_to_one(self, base_inputs):
        result = evaluate(base_inputs)
        assert abs(result.vector.total() - 1.0) < 1e-5

    def test_random_inputs_hold_all_bounds(self, venue_intelligence, rich_patterns):
        rng = random.Random(7)
        for _ in range(200):
            result = evaluate(_random_inputs(rng, venue_intelligence, rich_patterns))
            assert abs(result.vector.total() - 1.0) < 1e-5
            assert all(0.0 <= w <= 1.0 for _, w in result.vector.items())
            assert all(0.0 <= s <= 1.0 for s in result.components.as_dict().values())
            assert 0.0 <= result.confidence01 <= CONFIDENCE_CAP
            assert result.components.venue_energy <= 0.85

    def test_deterministic(self, venue_intelligence, rich_patterns):
        inputs = _inputs(
            venue_intelligence=venue_intelligence,
            patterns=rich_patterns,
            patterns_enabled=True,
            weather_energy_offset=0.1,
        )
        first, second = evaluate(inputs), evaluate(inputs)
        assert first.vector == second.vector
        assert first.components == second.components
        assert first.confidence01 == second.confidence01

    def test_returns_fresh_vector_each_call(self, base_inputs):
        first = evaluate(base_inputs)
        second = evaluate(base_inputs)
        assert first.vector is not second.vector

    def test_malformed_inputs_do_not_raise(self):
        result = evaluate(_inputs(hour=-5, speed_mps=-10.0, screen_on_ratio=4.0))
        assert abs(result.vector.total() - 1.0) < 1e-5

    def test_nan_venue_fields_stay_bounded(self, venue_intelligence):
        venue_intelligence.vibe_profile.confidence = float("nan")
        venue_intelligence.real_time_metrics.current_occupancy = float("nan")
        result = evaluate(_inputs(venue_arrived=True, venue_intelligence=venue_intelligence))
        assert 0.0 <= result.confidence01 <= CONFIDENCE_CAP
        assert 0.5 <= result.components.venue_energy <= 0.85
        assert abs(result.vector.total() - 1.0) < 1e-5

    def test_component_clamped_at_boundary(self, base_inputs, monkeypatch):
        monkeypatch.setitem(
            scorers.SCORERS, "weather", lambda inputs, tuning: ScorerResult(score=1.7)
        )
        result = evaluate(base_inputs)
        assert result.components.weather == 1.0


# ===========================================================================
# Test: Personal patterns
# ===========================================================================

class TestPatterns:
    def test_flag_off_matches_no_patterns(self, base_inputs, rich_patterns):
        plain = evaluate(base_inputs)
        flagged_off = evaluate(_inputs(patterns=rich_patterns, patterns_enabled=False))
        assert flagged_off.components == plain.components
        assert flagged_off.vector == plain.vector
        assert flagged_off.confidence01 == plain.confidence01

    def test_lark_morning_boosts_circadian(self, rich_patterns):
        result = evaluate(_inputs(hour=8, patterns=rich_patterns, patterns_enabled=True))
        assert result.components.circadian > 0.6

    def test_bare_lark_snapshot_boosts_circadian(self):
        patterns = PersonalPatterns.from_dict({"has_enough_data": True, "chronotype": "lark"})
        assert patterns.consistency == "variable"
        result = evaluate(_inputs(hour=8, patterns=patterns, patterns_enabled=True))
        assert result.components.circadian > 0.6

    @pytest.mark.parametrize("hour", [5, 11])
    def test_bare_lark_snapshot_covers_morning_window(self, hour):
        patterns = PersonalPatterns.from_dict({"has_enough_data": True, "chronotype": "lark"})
        boosted = evaluate(_inputs(hour=hour, patterns=patterns, patterns_enabled=True))
        plain = evaluate(_inputs(hour=hour))
        assert boosted.components.circadian == pytest.approx(plain.components.circadian + 0.15)

    def test_bare_owl_snapshot_boosts_evening(self):
        patterns = PersonalPatterns.from_dict({"has_enough_data": True, "chronotype": "owl"})
        result = evaluate(_inputs(hour=19, patterns=patterns, patterns_enabled=True))
        assert result.components.circadian > 0.8

    def test_owl_evening_boosts_circadian(self, rich_patterns):
        rich_patterns.chronotype = "owl"
        result = evaluate(_inputs(hour=19, patterns=rich_patterns, patterns_enabled=True))
        assert result.components.circadian > 0.8

    def test_temporal_preferences_shift_vector(self, rich_patterns):
        plain = evaluate(_inputs())
        enriched = evaluate(_inputs(patterns=rich_patterns, patterns_enabled=True))
        assert enriched.vector.hype > plain.vector.hype
        assert abs(enriched.vector.total() - 1.0) < 1e-5

    def test_consistent_patterns_raise_confidence(self, rich_patterns):
        rich_patterns.temporal_prefs = None
        rich_patterns.energy_type = "balanced"
        rich_patterns.social_type = "balanced"
        rich_patterns.consistency = "very-consistent"
        plain = evaluate(_inputs())
        enriched = evaluate(_inputs(patterns=rich_patterns, patterns_enabled=True))
        assert enriched.confidence01 > plain.confidence01


# ===========================================================================
# Test: Weather, venue, confidence
# ===========================================================================

class TestEvidence:
    def test_weather_raises_component_and_confidence(self, base_inputs):
        base = evaluate(base_inputs)
        weather = evaluate(_inputs(weather_energy_offset=0.15, weather_confidence_boost=0.03))
        assert weather.components.weather > base.components.weather
        assert weather.confidence01 > base.confidence01

    def test_extreme_weather_boost_still_capped(self):
        result = evaluate(_inputs(weather_confidence_boost=0.5))
        assert result.confidence01 <= CONFIDENCE_CAP

    def test_confidence_never_exceeds_cap_when_concentrated(self, venue_intelligence, rich_patterns):
        rich_patterns.consistency = "very-consistent"
        rich_patterns.temporal_prefs = {14: {Vibe.SOCIAL: 1.0}}
        result = evaluate(
            _inputs(
                speed_mps=0.0,
                screen_on_ratio=0.05,
                weather_energy_offset=0.9,
                weather_confidence_boost=5.0,
                venue_arrived=True,
                dwell_minutes=120,
                venue_intelligence=venue_intelligence,
                patterns=rich_patterns,
                patterns_enabled=True,
            ),
        )
        assert result.confidence01 <= CONFIDENCE_CAP

    def test_venue_passthrough_and_cap(self, venue_intelligence):
        result = evaluate(
            _inputs(venue_arrived=True, dwell_minutes=25, venue_intelligence=venue_intelligence)
        )
        assert result.components.venue_energy <= 0.85
        assert result.venue_intelligence is not None
        assert result.venue_intelligence.vibe_profile.primary_vibe == Vibe.SOCIAL

    def test_no_venue_means_no_passthrough(self, base_inputs):
        assert evaluate(base_inputs).venue_intelligence is None

    def test_venue_pulls_toward_primary_vibe(self, venue_intelligence):
        venue_intelligence.vibe_profile.primary_vibe = Vibe.ROMANTIC
        plain = evaluate(_inputs())
        at_venue = evaluate(_inputs(venue_arrived=True, venue_intelligence=venue_intelligence))
        assert at_venue.vector.romantic > plain.vector.romantic


# ===========================================================================
# Test: Performance
# ===========================================================================

class TestPerformance:
    def test_fully_populated_evaluation_within_budget(self, venue_intelligence, rich_patterns):
        inputs = _inputs(
            venue_arrived=True,
            dwell_minutes=30,
            weather_energy_offset=0.1,
            weather_confidence_boost=0.02,
            venue_intelligence=venue_intelligence,
            patterns=rich_patterns,
            patterns_enabled=True,
        )
        result = evaluate(inputs)
        assert result.calc_ms < DEFAULT_TUNING.performance_budget_ms
        assert result.calc_ms < 80


class TestConcentration:
    def test_uniform_is_zero(self):
        assert concentration(VibeVector.uniform()) == pytest.approx(0.0)

    def test_point_mass_is_one(self):
        assert concentration(VibeVector(hype=1.0)) == pytest.approx(1.0)

    def test_zero_vector_is_zero(self):
        assert concentration(VibeVector()) == 0.0
