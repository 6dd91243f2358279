"""
FastAPI router module for coaching trend endpoints.

This module implements endpoints for:
- AI trend analysis for a single rep (cached by live call count)
- AI trend analysis for a team or the whole organization (cached by TTL)
- Statistical coaching summary for a rep (no synthesis)
- Stored trend analysis history for a rep

Error mapping (TrendAnalysisError -> HTTP):
- NoDataError, NoRepsFoundError: 404
- SynthesisRateLimitedError: 429 with a Retry-After header
- SynthesisQuotaExceededError: 402
- SynthesisUnavailableError: 503
- SynthesisGenericError, ChunkFailureError: 502
- ValueError (bad scope/team/date combination): 400

Error bodies carry the taxonomy so clients can decide whether to retry:
    {"detail": {"error": "...", "errorType": "rate_limited", "retryable": true}}
"""

import logging
from datetime import date
from typing import List, NoReturn, Optional

from fastapi import APIRouter, HTTPException, Query

from coaching_trends.core.dependencies import TrendServiceDep
from coaching_trends.core.errors import (
    ChunkFailureError,
    NoDataError,
    NoRepsFoundError,
    SynthesisGenericError,
    SynthesisQuotaExceededError,
    SynthesisRateLimitedError,
    SynthesisUnavailableError,
    TrendAnalysisError,
)
from coaching_trends.models.schemas import (
    AggregateTrendRequest,
    AggregateTrendResult,
    CoachingSummary,
    DateRange,
    TrendHistoryItem,
    TrendRequest,
    TrendResult,
)

# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coaching-trends", tags=["coaching-trends"])


# =============================================================================
# Error Mapping
# =============================================================================

_STATUS_BY_ERROR = (
    (NoDataError, 404),
    (NoRepsFoundError, 404),
    (SynthesisRateLimitedError, 429),
    (SynthesisQuotaExceededError, 402),
    (SynthesisUnavailableError, 503),
    (SynthesisGenericError, 502),
    (ChunkFailureError, 502),
)


def _raise_http(error: TrendAnalysisError) -> NoReturn:
    """
    Translate a trend analysis error into an HTTPException.

    Raises:
        HTTPException: Always.
    """
    status_code = 500
    for error_class, code in _STATUS_BY_ERROR:
        if isinstance(error, error_class):
            status_code = code
            break

    headers = None
    if isinstance(error, SynthesisRateLimitedError):
        headers = {"Retry-After": str(error.retry_after_seconds)}

    raise HTTPException(
        status_code=status_code,
        detail={
            "error": error.message,
            "errorType": error.error_type,
            "retryable": error.retryable,
        },
        headers=headers,
    ) from error


def _bad_request(error: ValueError) -> NoReturn:
    raise HTTPException(status_code=400, detail=str(error)) from error


# =============================================================================
# Trend Analysis Endpoints
# =============================================================================


@router.post("/reps/{rep_id}", response_model=TrendResult)
async def generate_rep_trends(
    rep_id: str,
    body: TrendRequest,
    service: TrendServiceDep,
) -> TrendResult:
    """
    Generate the coaching trend analysis for one rep.

    Served from cache when the rep's call count in range is unchanged since
    the last analysis, unless forceRefresh is set.

    Raises:
        HTTPException 400: from is after to
        HTTPException 404: No analyzed calls in range
        HTTPException 402/429/502/503: Synthesis failures
    """
    try:
        date_range = body.date_range()
    except ValueError as e:
        _bad_request(e)

    try:
        return await service.generate_trend(rep_id, date_range, force_refresh=body.forceRefresh)
    except TrendAnalysisError as e:
        logger.warning("Trend generation failed for rep %s: %s", rep_id, e.message)
        _raise_http(e)


@router.post("/aggregate", response_model=AggregateTrendResult)
async def generate_aggregate_trends(
    body: AggregateTrendRequest,
    service: TrendServiceDep,
) -> AggregateTrendResult:
    """
    Generate a coaching trend analysis for a team, the organization, or one rep.

    Team and organization results include per-rep contributions and are
    cached for a few minutes; metadata.cached marks a cache hit.

    Raises:
        HTTPException 400: Missing teamId/repId for the scope, or from after to
        HTTPException 404: No reps in scope, or no analyzed calls in range
        HTTPException 402/429/502/503: Synthesis failures
    """
    try:
        date_range = body.date_range()
        return await service.generate_aggregate_trend(
            body.scope,
            date_range,
            team_id=body.teamId,
            rep_id=body.repId,
            force_refresh=body.forceRefresh,
        )
    except TrendAnalysisError as e:
        logger.warning("Aggregate %s trend generation failed: %s", body.scope.value, e.message)
        _raise_http(e)
    except ValueError as e:
        _bad_request(e)


# =============================================================================
# Summary and History Endpoints
# =============================================================================


@router.get("/reps/{rep_id}/summary", response_model=CoachingSummary)
async def get_rep_summary(
    rep_id: str,
    service: TrendServiceDep,
    date_from: date = Query(..., alias="from", description="First day of the range"),
    date_to: date = Query(..., alias="to", description="Last day of the range"),
) -> CoachingSummary:
    """Counts, averages and heat trend over the rep's calls, without synthesis."""
    try:
        date_range = DateRange(start=date_from, end=date_to)
    except ValueError as e:
        _bad_request(e)
    return await service.get_coaching_summary(rep_id, date_range)


@router.get("/reps/{rep_id}/history", response_model=List[TrendHistoryItem])
async def get_rep_history(
    rep_id: str,
    service: TrendServiceDep,
    limit: Optional[int] = Query(None, ge=1, le=100, description="Maximum number of analyses"),
    snapshots_only: bool = Query(False, alias="snapshotsOnly"),
) -> List[TrendHistoryItem]:
    """Stored analyses for the rep, newest first."""
    return await service.list_history(rep_id, limit=limit, snapshots_only=snapshots_only)
