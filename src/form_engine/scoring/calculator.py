"""Scoring calculator.

Reduces six 0-3 criterion scores to four derived scores and a
recommendation:

    market  = mean(market size, patient population, competitors)
    impact  = 50% mission alignment + 50% unmet need
    value   = 50% IP strength + 50% market
    overall = mean(impact, value)

Every intermediate score is rounded half away from zero at two decimals
before it feeds the next stage. The recommendation comes from the impact and
value percentages of the 0-3 range against a fixed quadrant table.
"""

import logging
import math
from typing import Any, Dict, Mapping, Optional, Tuple

from form_engine.engine.coercion import MISSING, is_blank, to_number
from form_engine.schemas.scores import DerivedScores, Recommendation, ScoringInputs

logger = logging.getLogger(__name__)

SCORE_MIN = 0.0
SCORE_MAX = 3.0

# Scoring input name -> answer field code
DEFAULT_SCORING_FIELDS: Dict[str, str] = {
    "mission_alignment_score": "F2.1.score",
    "unmet_need_score": "F2.2.score",
    "ip_strength_score": "F3.2.score",
    "market_size_score": "F4.4.a",
    "patient_population_score": "F4.4.b",
    "competitors_score": "F4.4.c",
}

SCORING_CRITERIA: Dict[str, Dict[int, str]] = {
    "mission_alignment": {
        0: "Not aligned with institutional mission",
        1: "Aligns with one dimension of mission",
        2: "Aligns with two dimensions of mission",
        3: "Aligns with all dimensions of mission",
    },
    "unmet_need": {
        0: "No significant unmet need or many solutions exist",
        1: "Some unmet need with several competing solutions",
        2: "Clear unmet need with few competing solutions",
        3: "Significant unmet need with minimal competition",
    },
    "ip_strength": {
        0: "Weak or no IP protection possible",
        1: "Some IP protection with limitations",
        2: "Good IP protection with moderate strength",
        3: "Strong IP protection with broad claims",
    },
    "market_size": {
        0: "Very small market (<$100M TAM)",
        1: "Small market ($100M-$500M TAM)",
        2: "Medium market ($500M-$2B TAM)",
        3: "Large market (>$2B TAM)",
    },
    "patient_population": {
        0: "Very small population (<200k patients)",
        1: "Small population (200k-1M patients)",
        2: "Medium population (1M-2.5M patients)",
        3: "Large population (>2.5M patients)",
    },
    "competitors": {
        0: "Many competitors (>15)",
        1: "Several competitors (11-15)",
        2: "Few competitors (5-10)",
        3: "Minimal competition (<5)",
    },
}


def round_score(value: float) -> float:
    """Round half away from zero at the second decimal.

    The value is scaled to cents before rounding, so 0.835 gives 0.84 while
    1 + 1.335 (scaled to 233.4999...) gives 2.33.
    """
    cents = math.floor(abs(value) * 100 + 0.5)
    return math.copysign(cents / 100, value)


# ── Stages ───────────────────────────────────────────────────────────


def calculate_market_score(market_size: float, patient_population: float, competitors: float) -> float:
    return round_score((market_size + patient_population + competitors) / 3)


def calculate_impact_score(mission_alignment: float, unmet_need: float) -> float:
    return round_score(mission_alignment * 0.5 + unmet_need * 0.5)


def calculate_value_score(ip_strength: float, market_score: float) -> float:
    return round_score(ip_strength * 0.5 + market_score * 0.5)


def calculate_overall_score(impact_score: float, value_score: float) -> float:
    return round_score((impact_score + value_score) / 2)


def calculate_recommendation(impact_score: float, value_score: float) -> Recommendation:
    """Map impact/value onto the recommendation quadrant table.

    Branch order matters at the 33/67 percent boundaries and must not be
    rearranged.
    """
    impact_pct = impact_score / SCORE_MAX * 100
    value_pct = value_score / SCORE_MAX * 100

    def is_high(pct: float) -> bool:
        return pct > 67

    def is_mid(pct: float) -> bool:
        return 33 <= pct <= 67

    if is_high(impact_pct) and is_high(value_pct):
        return Recommendation.PROCEED
    if is_high(impact_pct) and is_mid(value_pct):
        return Recommendation.PROCEED
    if is_mid(impact_pct) and is_high(value_pct):
        return Recommendation.PROCEED
    if is_mid(impact_pct) and is_mid(value_pct):
        return Recommendation.CONSIDER_ALTERNATIVE
    if impact_pct < 33 or value_pct < 33:
        if impact_pct < 20 or value_pct < 20:
            return Recommendation.CLOSE
        return Recommendation.CONSIDER_ALTERNATIVE
    return Recommendation.CONSIDER_ALTERNATIVE


def calculate_all_scores(inputs: ScoringInputs) -> DerivedScores:
    """Run every stage and assemble the derived scores."""
    market_score = calculate_market_score(
        inputs.market_size_score, inputs.patient_population_score, inputs.competitors_score
    )
    impact_score = calculate_impact_score(inputs.mission_alignment_score, inputs.unmet_need_score)
    value_score = calculate_value_score(inputs.ip_strength_score, market_score)
    overall_score = calculate_overall_score(impact_score, value_score)
    recommendation = calculate_recommendation(impact_score, value_score)

    return DerivedScores(
        impact_score=impact_score,
        value_score=value_score,
        market_score=market_score,
        overall_score=overall_score,
        recommendation=recommendation,
        recommendation_text=(
            f"Based on Impact Score: {impact_score:g} and Value Score: {value_score:g}"
        ),
    )


# ── Answer extraction ────────────────────────────────────────────────


def extract_scoring_inputs(
    answers: Mapping[str, Any],
    field_map: Optional[Mapping[str, str]] = None,
) -> ScoringInputs:
    """Pull the six criterion scores out of an answer set.

    Missing, blank and non-numeric answers count as 0; a non-numeric answer
    that is not blank is logged as a warning.
    """
    field_map = field_map or DEFAULT_SCORING_FIELDS
    values = {}
    for name in DEFAULT_SCORING_FIELDS:
        code = field_map.get(name, DEFAULT_SCORING_FIELDS[name])
        raw = answers.get(code, MISSING)
        number = to_number(raw)
        if math.isnan(number) or math.isinf(number):
            if not is_blank(raw):
                logger.warning(f"Non-numeric score for {code}: {raw!r}; using 0")
            number = 0.0
        values[name] = number
    return ScoringInputs(**values)


def calculate_scores_from_answers(
    answers: Mapping[str, Any],
    field_map: Optional[Mapping[str, str]] = None,
) -> DerivedScores:
    return calculate_all_scores(extract_scoring_inputs(answers, field_map))


def matrix_position(impact_score: float, value_score: float) -> Tuple[float, float]:
    """Chart coordinates for the impact/value matrix, clamped to 0-3."""
    x = max(SCORE_MIN, min(SCORE_MAX, impact_score))
    y = max(SCORE_MIN, min(SCORE_MAX, value_score))
    return x, y
