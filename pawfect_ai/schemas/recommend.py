"""
Recommendation Schemas

Ranked sitter recommendations, optional timing and sitter profile analysis.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from pawfect_ai.schemas.pet import Pet
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.slots import OwnerPreferences, SlotSuggestionResult
from pawfect_ai.schemas.trust import TrustScoreResult


class SitterRecommendation(BaseModel):
    """One ranked sitter."""
    rank: int = Field(..., ge=1)
    sitter: SitterRecord
    trust_score: TrustScoreResult
    compatibility_score: float = Field(..., ge=0.0, le=1.0, description="Pet/sitter compatibility signal")
    combined_score: float = Field(..., ge=0.0, le=1.0, description="Ranking score")
    match_reasons: List[str] = Field(default_factory=list)
    match_confidence: Literal["high", "medium", "low"]


class TimedRecommendations(BaseModel):
    """Recommendations plus slot suggestions for the top sitters."""
    recommendations: List[SitterRecommendation] = Field(default_factory=list)
    time_suggestions: Dict[str, SlotSuggestionResult] = Field(
        default_factory=dict, description="Keyed by sitter id"
    )
    insights: List[str] = Field(default_factory=list)


class SitterProfileAnalysis(BaseModel):
    sitter_id: str
    trust_score: TrustScoreResult
    insights: List[str] = Field(default_factory=list)


class RecommendRequest(BaseModel):
    """POST /api/recommendations body."""
    pet: Pet
    preferences: OwnerPreferences = Field(default_factory=OwnerPreferences)
    candidate_sitters: List[SitterRecord] = Field(default_factory=list)
    limit: int = Field(10, ge=1, le=50)
    with_timing: bool = False
    date_range_days: int = Field(7, ge=1, le=31)

    model_config = ConfigDict(extra="allow")


class RecommendResponse(BaseModel):
    recommendations: List[SitterRecommendation] = Field(default_factory=list)
    time_suggestions: Optional[Dict[str, SlotSuggestionResult]] = None
    insights: List[str] = Field(default_factory=list)
