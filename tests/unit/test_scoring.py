"""Unit tests for the scoring calculator."""

import itertools
import logging
import math

import pytest

from form_engine.schemas.scores import Recommendation, ScoringInputs
from form_engine.scoring.calculator import (
    DEFAULT_SCORING_FIELDS,
    SCORING_CRITERIA,
    calculate_all_scores,
    calculate_impact_score,
    calculate_market_score,
    calculate_overall_score,
    calculate_recommendation,
    calculate_scores_from_answers,
    calculate_value_score,
    extract_scoring_inputs,
    matrix_position,
    round_score,
)

from form_test_helpers import scoring_answers


class TestRounding:
    """Round half away from zero at two decimals."""

    @pytest.mark.parametrize("value,expected", [
        (2.675, 2.67),  # scaled value is just below 267.5
        (0.835, 0.84),
        (0.5, 0.5),
        (0.125, 0.13),
        (1.005, 1.0),
        (2.0 / 3, 0.67),
        (8.0 / 3, 2.67),
        (7.0 / 3, 2.33),
        (-0.125, -0.13),
    ])
    def test_round_score(self, value, expected):
        assert round_score(value) == expected

    def test_zero(self):
        assert round_score(0.0) == 0.0


class TestStages:
    """Tests for the individual formulas."""

    def test_market_score_stability(self):
        assert calculate_market_score(3, 3, 3) == 3.0
        assert calculate_market_score(0, 1, 2) == 1.0

    def test_market_score_rounds(self):
        assert calculate_market_score(3, 3, 2) == 2.67
        assert calculate_market_score(1, 0, 0) == 0.33

    def test_impact_score(self):
        assert calculate_impact_score(3, 2) == 2.5

    def test_value_score_scaled_below_half_cent(self):
        # 1 + 1.335 scales to just below 233.5
        assert calculate_value_score(2, 2.67) == 2.33

    def test_overall_score(self):
        assert calculate_overall_score(3.0, 2.33) == 2.67


def cents_reference(value):
    """Independent half-up rounding at the cent for non-negative scores."""
    return math.floor(value * 100 + 0.5) / 100


class TestRoundingAcrossScoreDomain:
    """Every integer answer combination rounds like a cent-scaled half-up."""

    def test_half_cent_value_score_rounds_up(self):
        scores = calculate_scores_from_answers({"F4.4.b": 2, "F4.4.c": 3})
        assert scores.market_score == 1.67
        assert scores.value_score == 0.84
        assert scores.overall_score == 0.42

    @pytest.mark.parametrize("market_inputs", list(itertools.product(range(4), repeat=3)))
    def test_matches_reference(self, market_inputs):
        market_size, population, competitors = market_inputs
        market = cents_reference((market_size + population + competitors) / 3)
        for mission, unmet, ip in itertools.product(range(4), repeat=3):
            impact = cents_reference(mission * 0.5 + unmet * 0.5)
            value = cents_reference(ip * 0.5 + market * 0.5)
            overall = cents_reference((impact + value) / 2)

            scores = calculate_all_scores(
                ScoringInputs(mission, unmet, ip, market_size, population, competitors)
            )
            assert (
                scores.market_score,
                scores.impact_score,
                scores.value_score,
                scores.overall_score,
            ) == (market, impact, value, overall)


class TestRecommendation:
    """Tests for the quadrant table."""

    def test_boundary_examples(self):
        assert calculate_recommendation(3, 3) == Recommendation.PROCEED
        assert calculate_recommendation(1.5, 1.5) == Recommendation.CONSIDER_ALTERNATIVE
        assert calculate_recommendation(0, 0) == Recommendation.CLOSE

    def test_high_impact_mid_value_proceeds(self):
        assert calculate_recommendation(2.5, 1.5) == Recommendation.PROCEED

    def test_mid_impact_high_value_proceeds(self):
        assert calculate_recommendation(1.5, 2.5) == Recommendation.PROCEED

    def test_low_band_between_twenty_and_thirty_three(self):
        # 0.75 / 3 = 25%
        assert calculate_recommendation(0.75, 2.5) == Recommendation.CONSIDER_ALTERNATIVE

    def test_below_twenty_closes(self):
        # 0.5 / 3 = 16.7%
        assert calculate_recommendation(3, 0.5) == Recommendation.CLOSE

    def test_just_above_sixty_seven_is_high(self):
        assert calculate_recommendation(2.02, 1.5) == Recommendation.PROCEED


class TestCalculateAllScores:
    """Tests for the full pipeline."""

    def test_end_to_end(self):
        scores = calculate_scores_from_answers(scoring_answers())
        assert scores.market_score == 2.67
        assert scores.impact_score == 3.0
        assert scores.value_score == 2.33
        assert scores.overall_score == 2.67
        assert scores.recommendation == Recommendation.PROCEED
        assert scores.recommendation_text == "Based on Impact Score: 3 and Value Score: 2.33"

    def test_all_zero_closes(self):
        scores = calculate_all_scores(ScoringInputs())
        assert scores.overall_score == 0.0
        assert scores.recommendation == Recommendation.CLOSE

    def test_idempotent_over_every_sextuple(self):
        """Identical inputs give identical serialized output, with no hidden state."""
        for combo in itertools.product(range(4), repeat=6):
            inputs = ScoringInputs(*combo)
            first = calculate_all_scores(inputs).model_dump_json()
            second = calculate_all_scores(inputs).model_dump_json()
            assert first == second


class TestExtractScoringInputs:
    """Tests for pulling criterion scores out of answers."""

    def test_default_field_codes(self):
        inputs = extract_scoring_inputs(scoring_answers())
        assert inputs.mission_alignment_score == 3
        assert inputs.ip_strength_score == 2
        assert inputs.competitors_score == 2

    def test_missing_and_blank_default_to_zero(self, caplog):
        with caplog.at_level(logging.WARNING, logger="form_engine.scoring.calculator"):
            inputs = extract_scoring_inputs({"F2.1.score": "", "F2.2.score": None})
        assert inputs == ScoringInputs()
        assert caplog.text == ""

    def test_numeric_strings_coerced(self):
        inputs = extract_scoring_inputs({"F2.1.score": "2", "F4.4.a": " 1.5 "})
        assert inputs.mission_alignment_score == 2.0
        assert inputs.market_size_score == 1.5

    def test_non_numeric_warns_and_uses_zero(self, caplog):
        with caplog.at_level(logging.WARNING, logger="form_engine.scoring.calculator"):
            inputs = extract_scoring_inputs({"F2.1.score": "high", "F2.2.score": ["2"]})
        assert inputs.mission_alignment_score == 0.0
        assert inputs.unmet_need_score == 0.0
        assert "Non-numeric score for F2.1.score" in caplog.text

    def test_infinity_uses_zero(self):
        assert extract_scoring_inputs({"F2.1.score": "Infinity"}).mission_alignment_score == 0.0

    def test_custom_field_map(self):
        inputs = extract_scoring_inputs({"impact.mission": 2}, {"mission_alignment_score": "impact.mission"})
        assert inputs.mission_alignment_score == 2
        assert inputs.unmet_need_score == 0


class TestScoringExtras:
    """Tests for criteria descriptions and matrix positions."""

    def test_criteria_cover_each_input(self):
        names = {name.removesuffix("_score") for name in DEFAULT_SCORING_FIELDS}
        assert set(SCORING_CRITERIA) == names
        for levels in SCORING_CRITERIA.values():
            assert sorted(levels) == [0, 1, 2, 3]

    def test_matrix_position_clamps(self):
        assert matrix_position(3.5, -1) == (3.0, 0.0)
        assert matrix_position(1.25, 2.0) == (1.25, 2.0)
