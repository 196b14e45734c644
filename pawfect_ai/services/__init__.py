"""
Services Package

Async services composing algorithms with the collaborator clients:
- trust_scorer: FeatureExtractor and TrustScorer
- availability: AvailabilityIndex and its TTL cache
- time_slot_recommender: ranked booking windows per pet/sitter pair
- booking_lifecycle: booking creation, status transitions, cancel, reschedule
- recommendation_orchestrator: ranked sitters with optional timing
- signals: concurrent signal gathering with per-signal fallbacks
"""

from pawfect_ai.services.availability import AvailabilityCache, AvailabilityIndex
from pawfect_ai.services.booking_lifecycle import TRANSITIONS, BookingLifecycle, SitterLockRegistry
from pawfect_ai.services.recommendation_orchestrator import CompatibilityScorer, RecommendationOrchestrator
from pawfect_ai.services.time_slot_recommender import TimeSlotRecommender
from pawfect_ai.services.trust_scorer import FeatureExtractor, TrustScorer

__all__ = [
    "AvailabilityCache",
    "AvailabilityIndex",
    "TRANSITIONS",
    "BookingLifecycle",
    "SitterLockRegistry",
    "CompatibilityScorer",
    "RecommendationOrchestrator",
    "TimeSlotRecommender",
    "FeatureExtractor",
    "TrustScorer",
]
