"""Unit tests for personal-pattern enrichment lookups."""

from __future__ import annotations

import pytest

from floq.domains.vibe.domain_logic.engine_models import EngineInputs, PersonalPatterns
from floq.domains.vibe.domain_logic.personal_patterns import (
    active_patterns,
    chronotype_boost,
    in_window,
    pattern_confidence_boost,
    pattern_nudges,
)
from floq.domains.vibe.domain_logic.tuning import tuning_from_dict
from floq.domains.vibe.domain_logic.vibe_models import Vibe


def _patterns(**overrides) -> PersonalPatterns:
    values = {"has_enough_data": True, "consistency": "consistent"}
    values.update(overrides)
    return PersonalPatterns(**values)


class TestActivePatterns:
    def test_flag_off_hides_patterns(self):
        inputs = EngineInputs(hour=9, patterns=_patterns(), patterns_enabled=False)
        assert active_patterns(inputs) is None

    def test_not_enough_data_hides_patterns(self):
        inputs = EngineInputs(
            hour=9, patterns=_patterns(has_enough_data=False), patterns_enabled=True
        )
        assert active_patterns(inputs) is None

    def test_missing_patterns(self):
        assert active_patterns(EngineInputs(hour=9, patterns_enabled=True)) is None

    def test_enabled_with_data(self):
        patterns = _patterns()
        inputs = EngineInputs(hour=9, patterns=patterns, patterns_enabled=True)
        assert active_patterns(inputs) is patterns


class TestWindows:
    @pytest.mark.parametrize("hour,expected", [(5, True), (11, True), (12, False), (4, False)])
    def test_plain_window(self, hour, expected):
        assert in_window(hour, (5, 11)) is expected

    @pytest.mark.parametrize("hour,expected", [(22, True), (0, True), (2, True), (3, False)])
    def test_window_wrapping_midnight(self, hour, expected):
        assert in_window(hour, (22, 2)) is expected


class TestChronotypeBoost:
    def test_lark_in_morning(self):
        assert chronotype_boost(_patterns(chronotype="lark"), 8) == pytest.approx(0.15)

    def test_lark_in_evening(self):
        assert chronotype_boost(_patterns(chronotype="lark"), 20) == 0.0

    def test_owl_scaled_by_consistency(self):
        very = chronotype_boost(_patterns(chronotype="owl", consistency="very-consistent"), 20)
        variable = chronotype_boost(_patterns(chronotype="owl", consistency="variable"), 20)
        assert very == pytest.approx(0.18)
        assert variable == pytest.approx(0.15)

    def test_weak_multiplier_never_shrinks_boost(self):
        tuning = tuning_from_dict({"consistency_multipliers": {"variable": 0.4}})
        patterns = _patterns(chronotype="lark", consistency="variable")
        assert chronotype_boost(patterns, 8, tuning) == pytest.approx(0.15)

    def test_balanced_never_boosted(self):
        assert chronotype_boost(_patterns(), 8) == 0.0

    def test_none_patterns(self):
        assert chronotype_boost(None, 8) == 0.0


class TestPatternNudges:
    def test_none_is_empty(self):
        assert pattern_nudges(None, 12) == {}

    def test_balanced_without_prefs_is_empty(self):
        assert pattern_nudges(_patterns(), 12) == {}

    def test_energy_and_social_types(self):
        nudges = pattern_nudges(_patterns(energy_type="low-energy", social_type="solo"), 12)
        assert nudges[Vibe.CHILL] > 0
        assert nudges[Vibe.SOLO] > 0
        assert Vibe.HYPE not in nudges

    def test_temporal_prefs_normalized_for_hour(self):
        patterns = _patterns(temporal_prefs={12: {Vibe.CURIOUS: 3.0, Vibe.OPEN: 1.0}})
        nudges = pattern_nudges(patterns, 12)
        assert nudges[Vibe.CURIOUS] == pytest.approx(0.075)
        assert nudges[Vibe.OPEN] == pytest.approx(0.025)

    def test_temporal_prefs_other_hour_ignored(self):
        patterns = _patterns(temporal_prefs={12: {Vibe.CURIOUS: 1.0}})
        assert pattern_nudges(patterns, 13) == {}


class TestConfidenceBoost:
    @pytest.mark.parametrize(
        "consistency,expected",
        [("very-consistent", 0.05), ("consistent", 0.03), ("variable", 0.0)],
    )
    def test_by_consistency(self, consistency, expected):
        boost = pattern_confidence_boost(_patterns(consistency=consistency))
        assert boost == pytest.approx(expected)

    def test_none(self):
        assert pattern_confidence_boost(None) == 0.0
