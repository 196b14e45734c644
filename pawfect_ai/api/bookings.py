"""
Bookings API Endpoints

Endpoints:
- POST /bookings - Create a PENDING booking after the availability check
- GET /bookings/{booking_id} - Booking details (parties and admins)
- POST /bookings/{booking_id}/status - Move along the status transition table
- POST /bookings/{booking_id}/cancel - Cancel with an optional reason
- POST /bookings/{booking_id}/reschedule - Move to a new time range

The actor is taken from the x-user-id / x-user-role headers.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from pawfect_ai.api.deps import Services, get_actor, get_services, get_trace_id, standard_response
from pawfect_ai.constants.roles import ADMIN
from pawfect_ai.core.errors import AppError, ForbiddenError, to_http_exception
from pawfect_ai.schemas.base import ERROR_RESPONSES
from pawfect_ai.schemas.booking import (
    CancelBookingRequest,
    CreateBookingRequest,
    RescheduleRequest,
    UpdateStatusRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"], responses=ERROR_RESPONSES)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: CreateBookingRequest,
    request: Request,
    services: Services = Depends(get_services)
):
    """
    Create a booking.

    Owners book for themselves; admins may book on behalf of any owner.
    Returns 409 when the sitter already has a confirmed or in-progress booking
    overlapping the requested range.
    """
    trace_id = get_trace_id(request)
    actor = get_actor(request)

    try:
        if actor["role"] != ADMIN and actor["id"] != body.owner_id:
            raise ForbiddenError("Bookings can only be created by the owner")

        booking = await services.bookings.create(
            owner_id=body.owner_id,
            sitter_id=body.sitter_id,
            pet_ids=body.pet_ids,
            start=body.start_time,
            end=body.end_time,
            hourly_rate=body.hourly_rate,
            special_instructions=body.special_instructions,
            ai_optimized=body.ai_optimized
        )
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Booking {booking.id} created",
        data=booking.model_dump(mode="json"),
        trace_id=trace_id
    )


@router.get("/{booking_id}")
async def get_booking(
    booking_id: str,
    request: Request,
    services: Services = Depends(get_services)
):
    trace_id = get_trace_id(request)
    actor = get_actor(request)

    try:
        booking = await services.bookings.get(booking_id, actor["id"], actor["role"])
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Booking {booking_id}",
        data=booking.model_dump(mode="json"),
        trace_id=trace_id
    )


@router.post("/{booking_id}/status")
async def update_booking_status(
    booking_id: str,
    body: UpdateStatusRequest,
    request: Request,
    services: Services = Depends(get_services)
):
    """Returns 409 with code invalid_transition when the change is not allowed."""
    trace_id = get_trace_id(request)
    actor = get_actor(request)

    try:
        booking = await services.bookings.update_status(
            booking_id, actor["id"], actor["role"], body.status
        )
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Booking {booking_id} is now {booking.status.value}",
        data=booking.model_dump(mode="json"),
        trace_id=trace_id
    )


@router.post("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    request: Request,
    body: Optional[CancelBookingRequest] = None,
    services: Services = Depends(get_services)
):
    trace_id = get_trace_id(request)
    actor = get_actor(request)

    try:
        booking = await services.bookings.cancel(
            booking_id, actor["id"], actor["role"], body.reason if body else None
        )
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Booking {booking_id} cancelled",
        data=booking.model_dump(mode="json"),
        trace_id=trace_id
    )


@router.post("/{booking_id}/reschedule")
async def reschedule_booking(
    booking_id: str,
    body: RescheduleRequest,
    request: Request,
    services: Services = Depends(get_services)
):
    trace_id = get_trace_id(request)
    actor = get_actor(request)

    try:
        booking = await services.bookings.reschedule(
            booking_id, actor["id"], actor["role"], body.start_time, body.end_time
        )
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Booking {booking_id} rescheduled",
        data=booking.model_dump(mode="json"),
        trace_id=trace_id
    )
