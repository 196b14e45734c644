"""
Trust Schemas

FeatureVector and the trust score returned for a sitter.

FeatureVector is a fixed-arity NamedTuple: every one of the 15 features has a
named accessor and the positional order is the order the trust model expects.
"""

from datetime import datetime, timezone
from typing import List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class FeatureVector(NamedTuple):
    """Normalized sitter track record, every element in [0, 1]."""
    sentiment: float
    response_time: float
    completion: float
    rating: float
    reliability: float
    verification: float
    experience: float
    booking_volume: float
    communication: float
    emergency_contacts: float
    certifications: float
    background_check: float
    insurance: float
    verified: float
    consistency: float

    def with_sentiment(self, sentiment: float) -> "FeatureVector":
        return self._replace(sentiment=sentiment)

    def mean(self) -> float:
        return sum(self) / len(self)


FEATURE_NAMES = FeatureVector._fields
FEATURE_COUNT = len(FEATURE_NAMES)


class TrustInsight(BaseModel):
    """External judgement of a sitter's narrative trustworthiness."""
    score: float = Field(..., ge=0.0, le=1.0)
    strengths: List[str] = Field(default_factory=list)
    risk_factors: List[str] = Field(default_factory=list)


class TrustScoreResult(BaseModel):
    """
    Trust score for one sitter.

    score and confidence are clamped to [0, 1]; factors keeps feature labels
    first and external strengths after them.
    """
    sitter_id: str = Field(..., description="Scored sitter")
    score: float = Field(..., ge=0.0, le=1.0, description="Trust score")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence in the score")
    factors: List[str] = Field(default_factory=list, description="Explanatory factors")
    risk_factors: List[str] = Field(default_factory=list, description="Externally reported risks")
    features: Optional[List[float]] = Field(None, description="Blended feature vector")
    external_signal_used: bool = Field(False, description="Whether the external trust estimate was available")
    computed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(extra="allow")
