"""
SQL Query Module for the Coaching Trends backend.

Provides parameterized PostgreSQL queries for:
- Graded call evaluations (evaluation_queries)
- Rep and team directory lookups (directory_queries)
- Per-rep and aggregate analysis caches (cache_queries)

All query functions are re-exported here so stores can import them from
coaching_trends.sql directly.

Example usage:
    from coaching_trends.sql import get_count_evaluations_query

    count = await conn.fetchval(get_count_evaluations_query(), [rep_id], start, end)
"""

from coaching_trends.sql.evaluation_queries import (
    get_count_evaluations_query,
    get_fetch_evaluations_query,
)
from coaching_trends.sql.directory_queries import (
    get_team_reps_query,
    get_active_reps_query,
    get_teams_query,
)
from coaching_trends.sql.cache_queries import (
    get_rep_analysis_query,
    get_rep_analysis_upsert_query,
    get_rep_history_query,
    get_aggregate_cache_query,
    get_aggregate_cache_upsert_query,
)

__all__ = [
    # evaluation_queries
    "get_count_evaluations_query",
    "get_fetch_evaluations_query",
    # directory_queries
    "get_team_reps_query",
    "get_active_reps_query",
    "get_teams_query",
    # cache_queries
    "get_rep_analysis_query",
    "get_rep_analysis_upsert_query",
    "get_rep_history_query",
    "get_aggregate_cache_query",
    "get_aggregate_cache_upsert_query",
]
