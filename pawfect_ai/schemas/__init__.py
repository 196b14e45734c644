"""
Pydantic Schemas Package

Typed records and request/response models for the sitter trust and booking
service.

Export Groups:
- Base: ErrorDetail, ErrorResponse
- Sitter: SitterRecord, Review, SitterBooking, WorkingHours
- Pet: Pet, PetCarePatterns, TimeBand
- Trust: FeatureVector, TrustInsight, TrustScoreResult
- Booking: Booking, BookingDraft, BookingStatus, TimeRange
- Slots: OwnerPreferences, TimeSlotCandidate, RankedTimeSlot, AvailabilityWindow
- Recommend: SitterRecommendation, TimedRecommendations, SitterProfileAnalysis
"""

# Base schemas
from pawfect_ai.schemas.base import ErrorDetail, ErrorResponse, ERROR_RESPONSES

# Sitter schemas
from pawfect_ai.schemas.sitter import Review, SitterBooking, SitterRecord, WorkingHours

# Pet schemas
from pawfect_ai.schemas.pet import Pet, PetCarePatterns, TimeBand

# Trust schemas
from pawfect_ai.schemas.trust import (
    FEATURE_COUNT,
    FEATURE_NAMES,
    FeatureVector,
    TrustInsight,
    TrustScoreResult
)

# Booking schemas
from pawfect_ai.schemas.booking import (
    BLOCKING_STATUSES,
    Booking,
    BookingDraft,
    BookingStatus,
    CancelBookingRequest,
    CreateBookingRequest,
    RescheduleRequest,
    TimeRange,
    UpdateStatusRequest,
    booking_event_payload
)

# Slot schemas
from pawfect_ai.schemas.slots import (
    AvailabilityWindow,
    ExternalSlotSuggestion,
    HistoricalBooking,
    OwnerPreferences,
    RankedTimeSlot,
    SlotSource,
    SlotSuggestionResult,
    SlotSuggestRequest,
    TimeSlotCandidate
)

# Recommendation schemas
from pawfect_ai.schemas.recommend import (
    RecommendRequest,
    RecommendResponse,
    SitterProfileAnalysis,
    SitterRecommendation,
    TimedRecommendations
)

__all__ = [
    # Base
    "ErrorDetail",
    "ErrorResponse",
    "ERROR_RESPONSES",

    # Sitter
    "Review",
    "SitterBooking",
    "SitterRecord",
    "WorkingHours",

    # Pet
    "Pet",
    "PetCarePatterns",
    "TimeBand",

    # Trust
    "FEATURE_COUNT",
    "FEATURE_NAMES",
    "FeatureVector",
    "TrustInsight",
    "TrustScoreResult",

    # Booking
    "BLOCKING_STATUSES",
    "Booking",
    "BookingDraft",
    "BookingStatus",
    "CancelBookingRequest",
    "CreateBookingRequest",
    "RescheduleRequest",
    "TimeRange",
    "UpdateStatusRequest",
    "booking_event_payload",

    # Slots
    "AvailabilityWindow",
    "ExternalSlotSuggestion",
    "HistoricalBooking",
    "OwnerPreferences",
    "RankedTimeSlot",
    "SlotSource",
    "SlotSuggestionResult",
    "SlotSuggestRequest",
    "TimeSlotCandidate",

    # Recommend
    "RecommendRequest",
    "RecommendResponse",
    "SitterProfileAnalysis",
    "SitterRecommendation",
    "TimedRecommendations",
]
