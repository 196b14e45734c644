"""
API Dependencies

Service wiring and request helpers shared by the routers.

The services are built once per process from settings and handed to
endpoints through `Depends(get_services)`; tests replace them with
`app.dependency_overrides[get_services]`.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import Request

from pawfect_ai.algorithms.trust_scoring import load_trust_model
from pawfect_ai.constants.roles import normalize_role
from pawfect_ai.core.config import settings
from pawfect_ai.core.logging import set_trace_id
from pawfect_ai.services.availability import AvailabilityCache, AvailabilityIndex
from pawfect_ai.services.booking_lifecycle import BookingLifecycle, SitterLockRegistry
from pawfect_ai.services.recommendation_orchestrator import RecommendationOrchestrator, TraitCompatibilityScorer
from pawfect_ai.services.time_slot_recommender import TimeSlotRecommender
from pawfect_ai.services.trust_scorer import TrustScorer
from pawfect_ai.tools.backend_store import BackendDataStore
from pawfect_ai.tools.data_store import DataStore
from pawfect_ai.tools.insight_provider import ExternalInsightProvider, LLMInsightProvider
from pawfect_ai.tools.memory_store import InMemoryDataStore
from pawfect_ai.tools.notifier import HttpNotifier, Notifier

logger = logging.getLogger(__name__)


# ============================================================================
# Service Container
# ============================================================================

class Services:
    """
    One set of collaborators and the services built on them.

    The availability cache and sitter locks are shared by every service that
    reads or writes a sitter's calendar.
    """

    def __init__(
        self,
        store: DataStore,
        provider: Optional[ExternalInsightProvider] = None,
        notifier: Optional[Notifier] = None,
        cache: Optional[AvailabilityCache] = None,
        locks: Optional[SitterLockRegistry] = None
    ):
        self.store = store
        self.provider = provider
        self.notifier = notifier
        self.cache = cache if cache is not None else AvailabilityCache()
        self.locks = locks or SitterLockRegistry()

        self.availability = AvailabilityIndex(store, self.cache)
        self.trust_scorer = TrustScorer(store, provider, model=load_trust_model(settings.TRUST_MODEL_PATH))
        self.slot_recommender = TimeSlotRecommender(store, self.availability, provider)
        self.bookings = BookingLifecycle(store, self.availability, notifier, self.locks)
        self.orchestrator = RecommendationOrchestrator(
            self.trust_scorer, self.slot_recommender, TraitCompatibilityScorer()
        )


def build_services() -> Services:
    """Services wired from environment settings."""
    if settings.DATA_STORE == "memory":
        store = InMemoryDataStore()
    else:
        store = BackendDataStore()

    provider = LLMInsightProvider() if settings.INSIGHT_API_KEY else None
    if provider is None:
        logger.info("No insight API key configured, external signals disabled")

    logger.info(f"Services built with {type(store).__name__}")
    return Services(store, provider, HttpNotifier())


_services: Optional[Services] = None


def get_services() -> Services:
    global _services

    if _services is None:
        _services = build_services()

    return _services


def reset_services() -> None:
    global _services
    _services = None


# ============================================================================
# Request Helpers
# ============================================================================

def get_trace_id(request: Request) -> str:
    """Extract or generate trace ID from request, and bind it to the log context."""
    trace_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    set_trace_id(trace_id)
    return trace_id


def get_actor(request: Request) -> Dict[str, str]:
    """Actor id and normalized role from the x-user-id / x-user-role headers."""
    return {
        "id": request.headers.get("x-user-id", "").strip(),
        "role": normalize_role(request.headers.get("x-user-role")),
    }


def standard_response(
    message: str,
    data: Optional[Any] = None,
    trace_id: Optional[str] = None
) -> Dict[str, Any]:
    """Build standard response format."""
    return {
        "message": message,
        "data": data if data is not None else {},
        "proofs": {"trace_id": trace_id},
    }
