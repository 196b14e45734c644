"""
Sitter Feature Extraction

Closed-form encoding of a sitter record into the 15-element FeatureVector.

Review sentiment is an input here: the async extractor in services/ obtains it
from the insight provider or the keyword fallback and passes the number in,
so this module stays pure and deterministic.
"""

import statistics
from typing import List

from pawfect_ai.constants.thresholds import (
    BOOKING_VOLUME_SCALE,
    CERTIFICATIONS_SCALE,
    EMERGENCY_CONTACTS_SCALE,
    EXPERIENCE_YEARS_SCALE,
    MAX_COMMUNICATION_SCORE,
    MAX_RATING,
    MAX_RESPONSE_HOURS,
    NEUTRAL_SIGNAL,
    VERIFICATION_WEIGHT_BACKGROUND,
    VERIFICATION_WEIGHT_CERTIFICATION,
    VERIFICATION_WEIGHT_IDENTITY,
    VERIFICATION_WEIGHT_INSURANCE,
)
from pawfect_ai.schemas.sitter import SitterBooking, SitterRecord
from pawfect_ai.schemas.trust import FeatureVector


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


# ============================================================================
# Feature Functions
# ============================================================================

def build_feature_vector(sitter: SitterRecord, sentiment: float = NEUTRAL_SIGNAL) -> FeatureVector:
    """
    Encode a sitter as a FeatureVector, every element clamped to [0, 1].

    Args:
        sitter: Parsed sitter record (missing fields already defaulted).
        sentiment: Review sentiment in [0, 1].

    Returns:
        FeatureVector in the fixed trust-model order.
    """
    return FeatureVector(
        sentiment=clamp(sentiment),
        response_time=clamp(1 - sitter.response_time_hours / MAX_RESPONSE_HOURS),
        completion=clamp(sitter.completion_rate / 100),
        rating=clamp(sitter.average_rating / MAX_RATING),
        reliability=clamp((sitter.on_time_rate + (1 - sitter.cancellation_rate)) / 2),
        verification=clamp(verification_score(sitter)),
        experience=clamp(sitter.experience_years / EXPERIENCE_YEARS_SCALE),
        booking_volume=clamp(sitter.booking_count / BOOKING_VOLUME_SCALE),
        communication=clamp(sitter.communication_score / MAX_COMMUNICATION_SCORE),
        emergency_contacts=clamp(len(sitter.emergency_contacts) / EMERGENCY_CONTACTS_SCALE),
        certifications=clamp(len(sitter.certifications) / CERTIFICATIONS_SCALE),
        background_check=1.0 if sitter.background_check else 0.0,
        insurance=1.0 if sitter.insurance else 0.0,
        verified=1.0 if sitter.verification_status else 0.0,
        consistency=consistency_score(sitter.bookings),
    )


def verification_score(sitter: SitterRecord) -> float:
    """Weighted sum of identity, background check, insurance and certification."""
    score = 0.0
    if sitter.verification_status:
        score += VERIFICATION_WEIGHT_IDENTITY
    if sitter.background_check:
        score += VERIFICATION_WEIGHT_BACKGROUND
    if sitter.insurance:
        score += VERIFICATION_WEIGHT_INSURANCE
    if sitter.certifications:
        score += VERIFICATION_WEIGHT_CERTIFICATION
    return score


def consistency_score(bookings: List[SitterBooking]) -> float:
    """
    Regularity of the gaps between completed bookings.

    consistency = clamp(1 - cv / 2) where cv is the coefficient of variation
    of the gaps between consecutive completed-booking starts. Fewer than two
    completed bookings give the neutral 0.5.

    Example:
        Completed bookings exactly one week apart -> 1.0
    """
    starts = sorted(b.start_time for b in bookings if b.is_completed)
    if len(starts) < 2:
        return NEUTRAL_SIGNAL

    gaps = [
        (later - earlier).total_seconds()
        for earlier, later in zip(starts, starts[1:])
    ]
    mean_gap = statistics.fmean(gaps)
    if mean_gap <= 0:
        return NEUTRAL_SIGNAL

    cv = statistics.pstdev(gaps) / mean_gap
    return clamp(1 - cv / 2)


def review_texts(sitter: SitterRecord) -> List[str]:
    return [review.text for review in sitter.reviews if review.text]
