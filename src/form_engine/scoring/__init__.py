"""Derived scoring for evaluation questionnaires."""

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

__all__ = [
    "DEFAULT_SCORING_FIELDS",
    "SCORING_CRITERIA",
    "calculate_all_scores",
    "calculate_impact_score",
    "calculate_market_score",
    "calculate_overall_score",
    "calculate_recommendation",
    "calculate_scores_from_answers",
    "calculate_value_score",
    "extract_scoring_inputs",
    "matrix_position",
    "round_score",
]
