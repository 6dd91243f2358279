"""
Storage collaborators for trend generation.

The trend service depends only on the three Protocols below. The Postgres*
classes implement them over the asyncpg pool from core/database.py and the
queries in coaching_trends/sql; tests substitute in-memory fakes.

    EvaluationStore   count / fetch graded calls for one or many reps
    SubjectDirectory  resolve the reps a scope covers, and team names
    CacheStore        per-rep and aggregate analysis caches, plus history

Date ranges are whole days in UTC: a range covers from 00:00:00 on its first
day through 23:59:59.999999 on its last.
"""

import json
import logging
from datetime import date, datetime, time, timezone
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from asyncpg import Pool

from coaching_trends.core.database import get_db_pool
from coaching_trends.models.enums import AnalysisScope
from coaching_trends.models.schemas import (
    AggregateAnalysisMetadata,
    CacheEntry,
    CallEvaluation,
    DateRange,
    RepProfile,
    Team,
    TrendAnalysis,
    TrendHistoryItem,
)
from coaching_trends.sql import (
    get_active_reps_query,
    get_aggregate_cache_query,
    get_aggregate_cache_upsert_query,
    get_count_evaluations_query,
    get_fetch_evaluations_query,
    get_rep_analysis_query,
    get_rep_analysis_upsert_query,
    get_rep_history_query,
    get_team_reps_query,
    get_teams_query,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Protocols
# =============================================================================


class EvaluationStore(Protocol):
    async def count(self, rep_ids: Sequence[str], date_range: DateRange) -> int: ...

    async def fetch(self, rep_ids: Sequence[str], date_range: DateRange) -> List[CallEvaluation]:
        """Live evaluations in range, ascending by created_at."""
        ...


class SubjectDirectory(Protocol):
    async def list_reps(
        self, scope: AnalysisScope, team_id: Optional[str] = None
    ) -> List[RepProfile]: ...

    async def list_teams(self) -> List[Team]: ...


class CacheStore(Protocol):
    async def get_rep_entry(self, rep_id: str, date_range: DateRange) -> Optional[CacheEntry]: ...

    async def upsert_rep_entry(self, entry: CacheEntry) -> None: ...

    async def get_aggregate_entry(self, cache_key: str) -> Optional[CacheEntry]: ...

    async def upsert_aggregate_entry(self, entry: CacheEntry) -> None: ...

    async def list_rep_entries(
        self, rep_id: str, limit: int, snapshots_only: bool = False
    ) -> List[TrendHistoryItem]: ...


# =============================================================================
# Helpers
# =============================================================================


def day_bounds(date_range: DateRange) -> Tuple[datetime, datetime]:
    """Inclusive UTC timestamps covering every day of the range."""
    start = datetime.combine(date_range.start, time.min, tzinfo=timezone.utc)
    end = datetime.combine(date_range.end, time.max, tzinfo=timezone.utc)
    return start, end


def _json(value: Any) -> Any:
    # asyncpg hands back json/jsonb columns as text unless a codec is set
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value


# =============================================================================
# Postgres Implementations
# =============================================================================


class PostgresEvaluationStore:
    """EvaluationStore over ai_call_analysis."""

    def __init__(self, pool: Optional[Pool] = None):
        self._pool = pool

    async def _get_pool(self) -> Pool:
        return self._pool if self._pool is not None else await get_db_pool()

    async def count(self, rep_ids: Sequence[str], date_range: DateRange) -> int:
        if not rep_ids:
            return 0
        start, end = day_bounds(date_range)
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            value = await conn.fetchval(get_count_evaluations_query(), list(rep_ids), start, end)
        return int(value or 0)

    async def fetch(self, rep_ids: Sequence[str], date_range: DateRange) -> List[CallEvaluation]:
        if not rep_ids:
            return []
        start, end = day_bounds(date_range)
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            rows = await conn.fetch(get_fetch_evaluations_query(), list(rep_ids), start, end)

        evaluations = []
        for row in rows:
            evaluations.append(CallEvaluation.model_validate({
                "id": row["id"],
                "rep_id": row["rep_id"],
                "created_at": row["created_at"],
                "framework_scores": _json(row["framework_scores"]),
                "analysis_behavior": _json(row["analysis_behavior"]),
                "analysis_strategy": _json(row["analysis_strategy"]),
                "heat_score": row["heat_score"],
                "meddpicc_improvements": _json(row["meddpicc_improvements"]),
                "bant_improvements": _json(row["bant_improvements"]),
                "gap_selling_improvements": _json(row["gap_selling_improvements"]),
                "active_listening_improvements": _json(row["active_listening_improvements"]),
                "critical_info_missing": _json(row["critical_info_missing"]),
                "follow_up_questions": _json(row["follow_up_questions"]),
                "skill_tags": row["skill_tags"],
                "deal_tags": row["deal_tags"],
            }))
        return evaluations


class PostgresSubjectDirectory:
    """SubjectDirectory over profiles, user_with_role and teams."""

    def __init__(self, pool: Optional[Pool] = None):
        self._pool = pool

    async def _get_pool(self) -> Pool:
        return self._pool if self._pool is not None else await get_db_pool()

    async def list_reps(
        self, scope: AnalysisScope, team_id: Optional[str] = None
    ) -> List[RepProfile]:
        """
        Reps covered by a team or organization scope.

        Raises:
            ValueError: Team scope without a team id, or rep scope (a single
                rep is not resolved through the directory).
        """
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            if scope == AnalysisScope.TEAM:
                if not team_id:
                    raise ValueError("team scope requires a team id")
                rows = await conn.fetch(get_team_reps_query(), team_id)
            elif scope == AnalysisScope.ORGANIZATION:
                rows = await conn.fetch(get_active_reps_query())
            else:
                raise ValueError(f"list_reps does not resolve scope '{scope.value}'")

        return [RepProfile(id=r["id"], name=r["name"], team_id=r["team_id"]) for r in rows]

    async def list_teams(self) -> List[Team]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            rows = await conn.fetch(get_teams_query())
        return [Team(id=r["id"], name=r["name"]) for r in rows]


class PostgresCacheStore:
    """CacheStore over coaching_trend_analyses and dashboard_cache."""

    def __init__(self, pool: Optional[Pool] = None):
        self._pool = pool

    async def _get_pool(self) -> Pool:
        return self._pool if self._pool is not None else await get_db_pool()

    async def get_rep_entry(self, rep_id: str, date_range: DateRange) -> Optional[CacheEntry]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                get_rep_analysis_query(), rep_id, date_range.start, date_range.end
            )
        if row is None:
            return None

        return CacheEntry(
            subject_id=row["rep_id"],
            date_from=row["date_range_from"],
            date_to=row["date_range_to"],
            analysis=TrendAnalysis.model_validate(_json(row["analysis_data"])),
            call_count=row["call_count"],
            computed_at=row["computed_at"],
        )

    async def upsert_rep_entry(self, entry: CacheEntry) -> None:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            await conn.execute(
                get_rep_analysis_upsert_query(),
                entry.subject_id,
                entry.date_from,
                entry.date_to,
                entry.call_count,
                entry.analysis.model_dump_json(),
            )

    async def get_aggregate_entry(self, cache_key: str) -> Optional[CacheEntry]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(get_aggregate_cache_query(), cache_key)
        if row is None:
            return None

        data = _json(row["cache_data"])
        return CacheEntry(
            subject_id=row["cache_key"],
            date_from=_as_date(data["dateRange"]["from"]),
            date_to=_as_date(data["dateRange"]["to"]),
            analysis=TrendAnalysis.model_validate(data["analysis"]),
            call_count=data.get("callCount", 0),
            computed_at=row["updated_at"],
            expires_at=row["expires_at"],
            metadata=AggregateAnalysisMetadata.model_validate(data["metadata"]),
        )

    async def upsert_aggregate_entry(self, entry: CacheEntry) -> None:
        payload = {
            "dateRange": {"from": entry.date_from.isoformat(), "to": entry.date_to.isoformat()},
            "callCount": entry.call_count,
            "analysis": entry.analysis.model_dump(mode="json"),
            "metadata": entry.metadata.model_dump(mode="json") if entry.metadata else None,
        }
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            await conn.execute(
                get_aggregate_cache_upsert_query(),
                entry.subject_id,
                json.dumps(payload),
                entry.expires_at,
            )

    async def list_rep_entries(
        self, rep_id: str, limit: int, snapshots_only: bool = False
    ) -> List[TrendHistoryItem]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            rows = await conn.fetch(get_rep_history_query(snapshots_only), rep_id, limit)

        return [
            TrendHistoryItem(
                id=r["id"],
                repId=r["rep_id"],
                dateRangeFrom=r["date_range_from"],
                dateRangeTo=r["date_range_to"],
                callCount=r["call_count"],
                createdAt=r["created_at"],
                updatedAt=r["updated_at"],
                title=r["title"],
                isSnapshot=r["is_snapshot"],
                analysis=TrendAnalysis.model_validate(_json(r["analysis_data"])),
            )
            for r in rows
        ]
