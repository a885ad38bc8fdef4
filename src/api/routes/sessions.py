"""
Session API Routes

Endpoints for single-session statistics.
"""

from fastapi import APIRouter, HTTPException, status

from src.aggregator import parse_climbs
from src.api.models.requests import SessionStatsRequest
from src.api.models.responses import SessionStatsResponse
from src.session_stats import calculate_session_stats

router = APIRouter()


@router.post("/sessions/stats", response_model=SessionStatsResponse)
async def session_stats(request: SessionStatsRequest) -> SessionStatsResponse:
    """
    Calculate statistics for one session's climbs.

    Malformed climbs are skipped and counted rather than rejected.

    Raises:
        HTTPException: 422 if no climb in the request is valid
    """
    climbs, skipped = parse_climbs(request.climbs)
    if request.climbs and not climbs:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No valid climbs in request",
        )

    return SessionStatsResponse(stats=calculate_session_stats(climbs), skipped_climbs=skipped)
