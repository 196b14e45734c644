"""
Slots API Endpoints

Endpoints:
- POST /slots/suggest - Ranked time-slot suggestions for a pet/sitter pair
"""

import logging

from fastapi import APIRouter, Depends, Request

from pawfect_ai.api.deps import Services, get_services, get_trace_id, standard_response
from pawfect_ai.core.errors import AppError, to_http_exception
from pawfect_ai.schemas.base import ERROR_RESPONSES
from pawfect_ai.schemas.slots import SlotSuggestRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/slots", tags=["slots"], responses=ERROR_RESPONSES)


@router.post("/suggest")
async def suggest_slots(
    body: SlotSuggestRequest,
    request: Request,
    services: Services = Depends(get_services)
):
    """
    Suggest booking windows.

    Combines booking history, the pet's care patterns and external
    suggestions (or the standard 09:00-17:00 fallback), drops windows that
    collide with the sitter's confirmed bookings and filters by the owner's
    duration and preferred time.
    """
    trace_id = get_trace_id(request)

    try:
        result = await services.slot_recommender.suggest(
            body.pet_id,
            body.sitter_id,
            body.preferences,
            body.date_range_days
        )
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Found {len(result.suggestions)} time suggestions",
        data=result.model_dump(mode="json"),
        trace_id=trace_id
    )
