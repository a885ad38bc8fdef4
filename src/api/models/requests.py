"""
API Request Models

Pydantic models for API request validation.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.projection import DEFAULT_REST_HOURS
from src.schemas import LoadMetric, UserAggregateCounts


class MetricsRequest(BaseModel):
    """Request model for readiness, load ratio and recommendation endpoints."""

    user_id: Optional[str] = Field(None, description="Climber identifier")
    sessions: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Raw session records; malformed records are skipped and counted",
    )
    counts: Optional[UserAggregateCounts] = Field(
        None, description="Lifetime counts from the session store"
    )
    now: Optional[int] = Field(
        None, gt=0, description="Reference instant (ms since epoch); defaults to server time"
    )
    load_metric: Optional[LoadMetric] = Field(
        None, description="Load scalar for the load ratio; defaults to the configured metric"
    )


class ProjectionRequest(MetricsRequest):
    """Request model for readiness projection over additional rest."""

    rest_hours: List[float] = Field(
        default_factory=lambda: list(DEFAULT_REST_HOURS),
        description="Additional rest durations (hours) to evaluate",
    )


class SessionStatsRequest(BaseModel):
    """Request model for single-session statistics."""

    climbs: List[Dict[str, Any]] = Field(..., description="Raw climb records of one session")
