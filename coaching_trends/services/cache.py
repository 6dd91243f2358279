"""
Trend analysis cache layer.

Two validity rules, one per scope:

Per rep: an entry keyed by (rep_id, from, to) is fresh while the live call
count for that range equals the count stored with it. Evaluations are
append-only in practice, so a new graded call changes the count and forces a
recompute. This is a freshness proxy, not a version: an evaluation edited in
place, or one deleted while another is added, leaves the count unchanged and
the stale entry is served.

Team / organization: counting across many reps on every read is too costly,
so entries carry expires_at = computed_at + TTL (5 minutes by default) and
are fresh until then.

Writes are best effort. By the time a write happens the analysis has already
been computed and will be returned, so a failed write is logged at WARNING
and swallowed.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from coaching_trends.models.enums import AnalysisScope
from coaching_trends.models.schemas import (
    AggregateAnalysisMetadata,
    CacheEntry,
    DateRange,
    TrendAnalysis,
    TrendHistoryItem,
)
from coaching_trends.services.stores import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_AGGREGATE_TTL = timedelta(minutes=5)


def aggregate_cache_key(scope: AnalysisScope, team_id: Optional[str], date_range: DateRange) -> str:
    """
    Cache key for a team or organization analysis.

    Example:
        >>> aggregate_cache_key(AnalysisScope.TEAM, "t1", DateRange(start=date(2025, 1, 1), end=date(2025, 1, 31)))
        'aggregate_coaching_team_t1_2025-01-01_2025-01-31'
    """
    return (
        f"aggregate_coaching_{scope.value}_{team_id or 'all'}_"
        f"{date_range.start.isoformat()}_{date_range.end.isoformat()}"
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrendCache:
    """
    Read/validate/write access to stored trend analyses.

    Args:
        store: Backing CacheStore.
        aggregate_ttl: Lifetime of team/organization entries.
    """

    def __init__(self, store: CacheStore, aggregate_ttl: timedelta = DEFAULT_AGGREGATE_TTL):
        self.store = store
        self.aggregate_ttl = aggregate_ttl

    # -------------------------------------------------------------------------
    # Per rep
    # -------------------------------------------------------------------------

    async def get_rep_analysis(
        self, rep_id: str, date_range: DateRange, live_count: int
    ) -> Optional[CacheEntry]:
        """Stored entry if its call count matches live_count, else None."""
        entry = await self.store.get_rep_entry(rep_id, date_range)
        if entry is None:
            logger.debug("Cache miss for rep %s (no entry)", rep_id)
            return None
        if entry.call_count != live_count:
            logger.debug(
                "Cache stale for rep %s: stored %d calls, live %d",
                rep_id, entry.call_count, live_count,
            )
            return None
        logger.debug("Cache hit for rep %s (%d calls)", rep_id, live_count)
        return entry

    async def save_rep_analysis(
        self,
        rep_id: str,
        date_range: DateRange,
        analysis: TrendAnalysis,
        call_count: int,
        now: Optional[datetime] = None,
    ) -> bool:
        """Upsert a per-rep entry. Returns False (after logging) on failure."""
        entry = CacheEntry(
            subject_id=rep_id,
            date_from=date_range.start,
            date_to=date_range.end,
            analysis=analysis,
            call_count=call_count,
            computed_at=now or _utcnow(),
        )
        try:
            await self.store.upsert_rep_entry(entry)
        except Exception as e:
            logger.warning("Failed to cache trend analysis for rep %s: %s", rep_id, e)
            return False
        return True

    # -------------------------------------------------------------------------
    # Team / organization
    # -------------------------------------------------------------------------

    async def get_aggregate(
        self,
        scope: AnalysisScope,
        team_id: Optional[str],
        date_range: DateRange,
        now: Optional[datetime] = None,
    ) -> Optional[CacheEntry]:
        """Stored aggregate entry if it has not expired, else None."""
        key = aggregate_cache_key(scope, team_id, date_range)
        entry = await self.store.get_aggregate_entry(key)
        if entry is None or entry.metadata is None:
            logger.debug("Aggregate cache miss for %s", key)
            return None
        if entry.is_expired(now or _utcnow()):
            logger.debug("Aggregate cache expired for %s", key)
            return None
        logger.debug("Aggregate cache hit for %s", key)
        return entry

    async def save_aggregate(
        self,
        scope: AnalysisScope,
        team_id: Optional[str],
        date_range: DateRange,
        analysis: TrendAnalysis,
        metadata: AggregateAnalysisMetadata,
        now: Optional[datetime] = None,
    ) -> bool:
        """Upsert an aggregate entry expiring after the TTL. Best effort."""
        computed_at = now or _utcnow()
        key = aggregate_cache_key(scope, team_id, date_range)
        entry = CacheEntry(
            subject_id=key,
            date_from=date_range.start,
            date_to=date_range.end,
            analysis=analysis,
            call_count=metadata.totalCalls,
            computed_at=computed_at,
            expires_at=computed_at + self.aggregate_ttl,
            metadata=metadata,
        )
        try:
            await self.store.upsert_aggregate_entry(entry)
        except Exception as e:
            logger.warning("Failed to cache aggregate analysis %s: %s", key, e)
            return False
        return True

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    async def list_rep_history(
        self, rep_id: str, limit: int, snapshots_only: bool = False
    ) -> List[TrendHistoryItem]:
        """Stored per-rep analyses, newest first."""
        return await self.store.list_rep_entries(rep_id, limit, snapshots_only)
