"""
Sitters API Endpoints

Endpoints:
- GET /sitters/{sitter_id}/trust-score - Trust score, confidence and factors
- GET /sitters/{sitter_id}/analysis - Trust score plus profile insights
- GET /sitters/{sitter_id}/availability - Free windows per day
"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from pawfect_ai.api.deps import Services, get_services, get_trace_id, standard_response
from pawfect_ai.core.errors import AppError, ValidationError, to_http_exception
from pawfect_ai.schemas.base import ERROR_RESPONSES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sitters", tags=["sitters"], responses=ERROR_RESPONSES)

MAX_AVAILABILITY_DAYS = 31


@router.get("/{sitter_id}/trust-score")
async def get_trust_score(
    sitter_id: str,
    request: Request,
    services: Services = Depends(get_services)
):
    """Score one sitter. External insight failures degrade the result, never fail it."""
    trace_id = get_trace_id(request)

    try:
        result = await services.trust_scorer.score(sitter_id)
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Trust score for sitter {sitter_id}: {result.score:.2f}",
        data=result.model_dump(mode="json"),
        trace_id=trace_id
    )


@router.get("/{sitter_id}/analysis")
async def analyze_sitter(
    sitter_id: str,
    request: Request,
    services: Services = Depends(get_services)
):
    trace_id = get_trace_id(request)

    try:
        analysis = await services.orchestrator.analyze(sitter_id)
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Profile analysis for sitter {sitter_id}",
        data=analysis.model_dump(mode="json"),
        trace_id=trace_id
    )


@router.get("/{sitter_id}/availability")
async def get_availability(
    sitter_id: str,
    request: Request,
    start_date: Optional[date] = Query(None, description="First day (YYYY-MM-DD), default today"),
    end_date: Optional[date] = Query(None, description="Last day, inclusive; default start + 6 days"),
    services: Services = Depends(get_services)
):
    """Free windows within the sitter's working hours, one entry per day."""
    trace_id = get_trace_id(request)
    start_date = start_date or date.today()
    end_date = end_date or start_date + timedelta(days=6)

    try:
        if (end_date - start_date).days >= MAX_AVAILABILITY_DAYS:
            raise ValidationError(
                f"Availability range is limited to {MAX_AVAILABILITY_DAYS} days",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()}
            )
        windows = await services.availability.free_windows(sitter_id, start_date, end_date)
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Availability for sitter {sitter_id} from {start_date} to {end_date}",
        data={
            "sitter_id": sitter_id,
            "windows": [w.model_dump(mode="json") for w in windows],
        },
        trace_id=trace_id
    )
