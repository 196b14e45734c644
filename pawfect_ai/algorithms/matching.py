"""
Sitter Matching Helpers

Combined ranking score, match reasons and insight texts used by the
recommendation orchestrator.
"""

from typing import List, Sequence

from pawfect_ai.algorithms.features import clamp
from pawfect_ai.constants.thresholds import (
    COMPATIBILITY_WEIGHT,
    EXCELLENT_MATCH_SCORE,
    HIGH_RATING,
    HIGH_TRUST_SCORE,
    LIMITED_MATCH_SCORE,
    LOW_TRUST_SCORE,
    TRUST_WEIGHT,
)
from pawfect_ai.schemas.sitter import SitterRecord
from pawfect_ai.schemas.trust import TrustScoreResult

POSITIVE_SENTIMENT = 0.7
NEGATIVE_SENTIMENT = 0.3


def combined_score(compatibility: float, trust: float) -> float:
    """0.6 * compatibility + 0.4 * trust, clamped to [0, 1]."""
    return clamp(COMPATIBILITY_WEIGHT * clamp(compatibility) + TRUST_WEIGHT * clamp(trust))


def match_reasons(sitter: SitterRecord) -> List[str]:
    """
    Short reasons a sitter was recommended.

    Example:
        >>> match_reasons(SitterRecord(id="s1", avg_rating=4.8, insurance=True))
        ['High ratings', 'Insured']
    """
    reasons = []
    if sitter.average_rating >= HIGH_RATING:
        reasons.append("High ratings")
    if sitter.experience_years > 0:
        reasons.append("Experienced")
    if sitter.certifications:
        reasons.append("Certified")
    if sitter.insurance:
        reasons.append("Insured")
    if sitter.background_check:
        reasons.append("Background checked")
    if sitter.verification_status:
        reasons.append("Verified identity")
    return reasons


def recommendation_insights(combined_scores: Sequence[float], timing_computed: bool) -> List[str]:
    insights = []
    if combined_scores:
        average = sum(combined_scores) / len(combined_scores)
        if average >= EXCELLENT_MATCH_SCORE:
            insights.append("Excellent match quality found")
        elif average <= LIMITED_MATCH_SCORE:
            insights.append("Limited high-quality matches available")
    if timing_computed:
        insights.append("Optimal booking times identified")
    return insights


def profile_insights(trust: TrustScoreResult) -> List[str]:
    """Trust factors followed by overall score and sentiment bands."""
    insights = list(trust.factors)

    if trust.score >= HIGH_TRUST_SCORE:
        insights.append("High trustworthiness score")
    elif trust.score <= LOW_TRUST_SCORE:
        insights.append("Low trustworthiness score - requires attention")

    if trust.features:
        sentiment = trust.features[0]
        if sentiment >= POSITIVE_SENTIMENT:
            insights.append("Very positive review sentiment")
        elif sentiment <= NEGATIVE_SENTIMENT:
            insights.append("Concerning review sentiment")

    return insights
