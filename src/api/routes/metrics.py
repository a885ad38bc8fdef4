"""
Metrics API Routes

Endpoints for readiness, load ratio, training recommendations and
readiness projection. Every endpoint computes from the session history in
the request body; nothing is stored between calls.
"""

import logging
import time
from typing import Tuple

from fastapi import APIRouter, HTTPException, status

from src.api.models.requests import MetricsRequest, ProjectionRequest
from src.api.models.responses import (
    LoadRatioResponse,
    ProjectionResponse,
    ReadinessResponse,
    RecommendationResponse,
)
from src.config import get_settings
from src.engine import MetricsEngine, build_context
from src.projection import ReadinessProjector
from src.schemas import MetricsBundle, ReadinessZone, SessionContext

logger = logging.getLogger(__name__)

router = APIRouter()


def _engine_for(request: MetricsRequest) -> MetricsEngine:
    return MetricsEngine(load_metric=request.load_metric or get_settings().DEFAULT_LOAD_METRIC)


def _context_for(request: MetricsRequest) -> Tuple[SessionContext, int]:
    now = request.now if request.now is not None else int(time.time() * 1000)
    return build_context(request.sessions, now, user_id=request.user_id, counts=request.counts)


def _compute(request: MetricsRequest) -> MetricsBundle:
    """Run the metrics engine for a request, mapping failures to HTTP 500."""
    try:
        context, skipped = _context_for(request)
        return _engine_for(request).compute(context, skipped_records=skipped)
    except Exception as e:
        logger.exception("Metrics computation failed for user %s", request.user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Metrics computation failed: {str(e)}",
        )


@router.post("/metrics", response_model=MetricsBundle)
async def compute_metrics(request: MetricsRequest) -> MetricsBundle:
    """
    Compute the full metrics bundle for a session history.

    Returns readiness, load ratio, recommendation, metric availability flags
    and the personal baseline from one consistent snapshot.
    """
    return _compute(request)


@router.post("/readiness", response_model=ReadinessResponse)
async def calculate_readiness(request: MetricsRequest) -> ReadinessResponse:
    """
    Calculate the readiness score (0-100) and zone.

    With fewer than 3 valid sessions the score and zone are null and the
    status is "building".
    """
    bundle = _compute(request)
    return ReadinessResponse(readiness=bundle.readiness, skipped_records=bundle.skipped_records)


@router.post("/load-ratio", response_model=LoadRatioResponse)
async def calculate_load_ratio(request: MetricsRequest) -> LoadRatioResponse:
    """Calculate the 7-day vs 28-day load ratio and its risk zone."""
    bundle = _compute(request)
    return LoadRatioResponse(load_ratio=bundle.load_ratio, skipped_records=bundle.skipped_records)


@router.post("/recommendation", response_model=RecommendationResponse)
async def get_recommendation(request: MetricsRequest) -> RecommendationResponse:
    """Get the next-session training recommendation."""
    bundle = _compute(request)
    return RecommendationResponse(
        recommendation=bundle.recommendation,
        readiness_score=bundle.readiness.score,
        load_ratio=bundle.load_ratio.ratio if bundle.load_ratio.available else None,
        availability=bundle.availability,
    )


@router.post("/projection", response_model=ProjectionResponse)
async def project_readiness(request: ProjectionRequest) -> ProjectionResponse:
    """
    Project readiness over additional rest (what-if scenario).

    Raises:
        HTTPException: 400 if a rest duration is negative
    """
    context, _ = _context_for(request)
    projector = ReadinessProjector(context, engine=_engine_for(request))

    try:
        points = projector.project_rest(request.rest_hours)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    hours = projector.hours_until_zone(ReadinessZone.OPTIMAL)
    if projector.baseline.readiness.score is None:
        summary = "Readiness is still building; log more sessions to project it"
    elif hours is None:
        summary = "Optimal readiness is not reached within 96 hours of rest"
    elif hours == 0:
        summary = "Already in the optimal readiness zone"
    else:
        summary = f"Optimal readiness after about {hours} hours of rest"

    return ProjectionResponse(points=points, hours_until_optimal=hours, summary=summary)
