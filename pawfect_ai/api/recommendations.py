"""
Recommendations API Endpoints

Endpoints:
- POST /recommendations - Rank candidate sitters for a pet, optionally with timing
"""

import logging

from fastapi import APIRouter, Depends, Request

from pawfect_ai.algorithms.matching import recommendation_insights
from pawfect_ai.api.deps import Services, get_services, get_trace_id, standard_response
from pawfect_ai.core.errors import AppError, to_http_exception
from pawfect_ai.schemas.base import ERROR_RESPONSES
from pawfect_ai.schemas.recommend import RecommendRequest, RecommendResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"], responses=ERROR_RESPONSES)


@router.post("")
async def recommend_sitters(
    body: RecommendRequest,
    request: Request,
    services: Services = Depends(get_services)
):
    """
    Rank the candidate sitters.

    With `with_timing`, slot suggestions are attached for the top three.
    An empty candidate list returns an empty ranking.
    """
    trace_id = get_trace_id(request)

    try:
        if body.with_timing:
            timed = await services.orchestrator.recommend_with_timing(
                body.pet,
                body.preferences,
                body.candidate_sitters,
                body.limit,
                body.date_range_days
            )
            response = RecommendResponse(
                recommendations=timed.recommendations,
                time_suggestions=timed.time_suggestions,
                insights=timed.insights
            )
        else:
            recommendations = await services.orchestrator.recommend(
                body.pet,
                body.preferences,
                body.candidate_sitters,
                body.limit
            )
            response = RecommendResponse(
                recommendations=recommendations,
                insights=recommendation_insights([r.combined_score for r in recommendations], False)
            )
    except AppError as e:
        raise to_http_exception(e)

    return standard_response(
        message=f"Ranked {len(response.recommendations)} sitters for pet {body.pet.id}",
        data=response.model_dump(mode="json"),
        trace_id=trace_id
    )
