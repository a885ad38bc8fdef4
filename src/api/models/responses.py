"""
API Response Models

Pydantic models for API responses.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from src.projection import ProjectionPoint
from src.schemas import (
    LoadRatioResult,
    MetricAvailability,
    ReadinessResult,
    RecommendationResult,
)
from src.session_stats import SessionStats


class ReadinessResponse(BaseModel):
    """Response for POST /api/readiness."""

    readiness: ReadinessResult = Field(..., description="Readiness score, zone and status")
    skipped_records: int = Field(default=0, description="Malformed records ignored")


class LoadRatioResponse(BaseModel):
    """Response for POST /api/load-ratio."""

    load_ratio: LoadRatioResult = Field(..., description="Load ratio and zone")
    skipped_records: int = Field(default=0, description="Malformed records ignored")


class RecommendationResponse(BaseModel):
    """Response for POST /api/recommendation."""

    recommendation: RecommendationResult = Field(..., description="Training directive")
    readiness_score: Optional[int] = Field(None, description="Score behind the directive")
    load_ratio: Optional[float] = Field(None, description="Load ratio behind the directive")
    availability: MetricAvailability = Field(..., description="Metric disclosure flags")


class SessionStatsResponse(BaseModel):
    """Response for POST /api/sessions/stats."""

    stats: SessionStats = Field(..., description="Session statistics")
    skipped_climbs: int = Field(default=0, description="Malformed climbs ignored")


class ProjectionResponse(BaseModel):
    """Response for POST /api/projection."""

    points: List[ProjectionPoint] = Field(..., description="Readiness per rest duration")
    hours_until_optimal: Optional[int] = Field(
        None, description="Rest needed to reach the optimal zone, if within 96 hours"
    )
    summary: str = Field(..., description="Human-readable summary")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
