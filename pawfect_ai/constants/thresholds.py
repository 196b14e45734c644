"""
Threshold Constants

Centralized threshold values used by the trust scorer, the time-slot
recommender and the recommendation orchestrator.

Algorithms import these values directly; change them here only.
"""

# ============================================================================
# Trust Scoring
# USED BY: pawfect_ai/algorithms/trust_scoring.py
# ============================================================================

# Blend of local review sentiment with the external trust estimate
LOCAL_SENTIMENT_WEIGHT = 0.7
EXTERNAL_TRUST_WEIGHT = 0.3

# Neutral prior for any missing external or sentiment signal
NEUTRAL_SIGNAL = 0.5

# Business-rule adjustments (applied in this order)
VERIFIED_BONUS = 0.10
EXPERIENCE_BONUS = 0.05
EXPERIENCE_BONUS_MIN_YEARS = 3
HIGH_CANCELLATION_PENALTY = 0.15
HIGH_CANCELLATION_RATE = 0.2
SLOW_RESPONSE_PENALTY = 0.10
SLOW_RESPONSE_HOURS = 48

# Trust confidence ladder
TRUST_BASE_CONFIDENCE = 0.5
BOOKINGS_FOR_CONFIDENCE = 10       # +0.2
BOOKINGS_FOR_HIGH_CONFIDENCE = 50  # +0.1 more
REVIEWS_FOR_CONFIDENCE = 5         # +0.1
REVIEWS_FOR_HIGH_CONFIDENCE = 20   # +0.1 more

# Score bands for sitter profile insights
HIGH_TRUST_SCORE = 0.8
LOW_TRUST_SCORE = 0.4


# ============================================================================
# Feature Normalization
# USED BY: pawfect_ai/algorithms/features.py
# ============================================================================

MAX_RESPONSE_HOURS = 24.0
MAX_RATING = 5.0
MAX_COMMUNICATION_SCORE = 5.0
EXPERIENCE_YEARS_SCALE = 10.0
BOOKING_VOLUME_SCALE = 100.0
EMERGENCY_CONTACTS_SCALE = 3.0
CERTIFICATIONS_SCALE = 5.0

# Weights of the composite verification feature
VERIFICATION_WEIGHT_IDENTITY = 0.30
VERIFICATION_WEIGHT_BACKGROUND = 0.25
VERIFICATION_WEIGHT_INSURANCE = 0.25
VERIFICATION_WEIGHT_CERTIFICATION = 0.20


# ============================================================================
# Time Slot Recommendation
# USED BY: pawfect_ai/algorithms/slot_recommender.py
# ============================================================================

PEAK_HOURS = frozenset({8, 9, 10, 14, 15, 16, 17})
PEAK_HOUR_SCORE = 0.8
OFF_PEAK_HOUR_SCORE = 0.4

PATTERN_DAYS = 7
WINDOW_FIRST_START_HOUR = 6
WINDOW_LAST_START_HOUR = 18
MIN_WINDOW_HOURS = 4
MAX_WINDOW_HOURS = 12
MIN_WINDOW_SCORE = 0.6             # windows must score strictly above this
WINDOWS_PER_DAY = 3

BAND_BONUS_WEIGHT = 0.2
FEEDING_BONUS_WEIGHT = 0.1

# Fallback for external suggestions
STANDARD_START = "09:00"
STANDARD_END = "17:00"
STANDARD_CONFIDENCE = 0.7

# Owner preference filtering
DURATION_TOLERANCE_HOURS = 2
MORNING_LATEST_START = 12
AFTERNOON_EARLIEST_START = 12
AFTERNOON_LATEST_START = 16
EVENING_EARLIEST_START = 16

# Candidate confidence labels
HIGH_CONFIDENCE_SCORE = 0.8
MEDIUM_CONFIDENCE_SCORE = 0.6

# Response confidence
SLOT_BASE_CONFIDENCE = 0.5
HISTORY_FOR_CONFIDENCE = 5         # +0.2
HISTORY_FOR_HIGH_CONFIDENCE = 10   # +0.1 more
PATTERN_CONFIDENCE_WEIGHT = 0.2

EXTENDED_CARE_HOURS = 6


# ============================================================================
# Sitter Recommendation
# USED BY: pawfect_ai/services/recommendation_orchestrator.py
# ============================================================================

COMPATIBILITY_WEIGHT = 0.6
TRUST_WEIGHT = 0.4
FALLBACK_COMPATIBILITY = 0.7
TIMED_SITTERS = 3
HIGH_RATING = 4.5
EXCELLENT_MATCH_SCORE = 0.8
LIMITED_MATCH_SCORE = 0.5


# ============================================================================
# Helper Functions
# ============================================================================

def confidence_label(score: float) -> str:
    """
    Map a candidate score to a confidence label.

    Example:
        >>> confidence_label(0.85)
        'high'
        >>> confidence_label(0.6)
        'medium'
        >>> confidence_label(0.2)
        'low'
    """
    if score >= HIGH_CONFIDENCE_SCORE:
        return "high"
    elif score >= MEDIUM_CONFIDENCE_SCORE:
        return "medium"
    else:
        return "low"
