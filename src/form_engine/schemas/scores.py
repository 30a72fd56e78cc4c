"""Schemas for derived scoring results."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


class Recommendation(str, Enum):
    """Outcome labels of the impact/value quadrant table."""

    PROCEED = "Proceed"
    CONSIDER_ALTERNATIVE = "Consider Alternative Pathway"
    CLOSE = "Close"


@dataclass(frozen=True)
class ScoringInputs:
    """The six 0-3 criterion scores feeding the calculator."""

    mission_alignment_score: float = 0.0
    unmet_need_score: float = 0.0
    ip_strength_score: float = 0.0
    market_size_score: float = 0.0
    patient_population_score: float = 0.0
    competitors_score: float = 0.0


class DerivedScores(BaseModel):
    """Scores computed from raw answers; a cache, never ground truth."""

    impact_score: float = Field(..., description="Mission alignment 50% + unmet need 50%")
    value_score: float = Field(..., description="IP strength 50% + market score 50%")
    market_score: float = Field(..., description="Mean of market size, population, competitors")
    overall_score: float = Field(..., description="Mean of impact and value")
    recommendation: Recommendation
    recommendation_text: str
