"""
Algorithms Package

Provides deterministic scoring and recommendation algorithms:
- features: Sitter record -> 15-element FeatureVector
- sentiment: Keyword review sentiment (local fallback)
- trust_scoring: Base score, ordered business-rule adjustments, confidence, factors
- availability: Half-open interval overlap and free-interval arithmetic
- slot_recommender: Hourly scores, pattern windows, owner filters and ranking
- matching: Combined ranking score, match reasons and insights

All algorithms are pure functions (no I/O, no randomness).
"""

from pawfect_ai.algorithms.availability import free_intervals, overlaps
from pawfect_ai.algorithms.features import build_feature_vector, clamp, consistency_score
from pawfect_ai.algorithms.matching import combined_score, match_reasons
from pawfect_ai.algorithms.sentiment import keyword_sentiment
from pawfect_ai.algorithms.slot_recommender import best_windows, rank_candidates
from pawfect_ai.algorithms.trust_scoring import (
    ADJUSTMENTS,
    apply_adjustments,
    blend_sentiment,
    load_trust_model,
    trust_confidence,
    trust_factors
)

__all__ = [
    "free_intervals",
    "overlaps",
    "build_feature_vector",
    "clamp",
    "consistency_score",
    "combined_score",
    "match_reasons",
    "keyword_sentiment",
    "best_windows",
    "rank_candidates",
    "ADJUSTMENTS",
    "apply_adjustments",
    "blend_sentiment",
    "load_trust_model",
    "trust_confidence",
    "trust_factors",
]
