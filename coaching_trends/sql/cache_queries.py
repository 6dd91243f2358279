"""
Cache Queries Module for the Coaching Trends backend.

Two tables hold computed analyses:

coaching_trend_analyses (per rep, validated by call count)
    - id: UUID PRIMARY KEY DEFAULT gen_random_uuid()
    - rep_id: UUID NOT NULL
    - date_range_from / date_range_to: DATE NOT NULL
    - call_count: INTEGER NOT NULL
    - analysis_data: JSONB NOT NULL
    - title: TEXT NULL
    - is_snapshot: BOOLEAN DEFAULT FALSE
    - created_at / updated_at: TIMESTAMPTZ DEFAULT NOW()
    - UNIQUE(rep_id, date_range_from, date_range_to)

dashboard_cache (team / organization, validated by TTL)
    - cache_key: TEXT PRIMARY KEY
    - cache_data: JSONB NOT NULL
    - expires_at: TIMESTAMPTZ NOT NULL
    - updated_at: TIMESTAMPTZ DEFAULT NOW()

Both upserts are last-write-wins.
"""


# =============================================================================
# PER-REP ANALYSES
# =============================================================================

def get_rep_analysis_query() -> str:
    """
    Generate SQL fetching the stored analysis for (rep, from, to).

    Parameters:
        $1: rep id
        $2: date_range_from (date)
        $3: date_range_to (date)
    """
    return """
    SELECT
        rep_id::text AS rep_id,
        date_range_from,
        date_range_to,
        call_count,
        analysis_data,
        COALESCE(updated_at, created_at) AS computed_at
    FROM coaching_trend_analyses
    WHERE rep_id = $1
      AND date_range_from = $2
      AND date_range_to = $3
    ORDER BY updated_at DESC NULLS LAST
    LIMIT 1
    """


def get_rep_analysis_upsert_query() -> str:
    """
    Generate SQL upserting a per-rep analysis keyed by (rep, from, to).

    Parameters:
        $1: rep id
        $2: date_range_from (date)
        $3: date_range_to (date)
        $4: call_count
        $5: analysis_data (JSON text)
    """
    return """
    INSERT INTO coaching_trend_analyses (
        rep_id,
        date_range_from,
        date_range_to,
        call_count,
        analysis_data,
        created_at,
        updated_at
    ) VALUES ($1, $2, $3, $4, $5::jsonb, NOW(), NOW())
    ON CONFLICT (rep_id, date_range_from, date_range_to)
    DO UPDATE SET
        call_count = EXCLUDED.call_count,
        analysis_data = EXCLUDED.analysis_data,
        updated_at = NOW()
    """


def get_rep_history_query(snapshots_only: bool = False) -> str:
    """
    Generate SQL listing a rep's stored analyses, newest first.

    Parameters:
        $1: rep id
        $2: limit

    Args:
        snapshots_only: Restrict to analyses the user saved as snapshots.
    """
    snapshot_filter = "AND is_snapshot = TRUE" if snapshots_only else ""
    return f"""
    SELECT
        id::text AS id,
        rep_id::text AS rep_id,
        date_range_from,
        date_range_to,
        call_count,
        analysis_data,
        title,
        COALESCE(is_snapshot, FALSE) AS is_snapshot,
        created_at,
        updated_at
    FROM coaching_trend_analyses
    WHERE rep_id = $1
      {snapshot_filter}
    ORDER BY created_at DESC
    LIMIT $2
    """


# =============================================================================
# AGGREGATE (TEAM / ORGANIZATION) ANALYSES
# =============================================================================

def get_aggregate_cache_query() -> str:
    """
    Generate SQL fetching an aggregate cache row by key.

    Expiry is checked by the caller against its own clock, so expired rows
    are returned too.

    Parameters:
        $1: cache_key
    """
    return """
    SELECT cache_key, cache_data, expires_at, updated_at
    FROM dashboard_cache
    WHERE cache_key = $1
    """


def get_aggregate_cache_upsert_query() -> str:
    """
    Generate SQL upserting an aggregate cache row.

    Parameters:
        $1: cache_key
        $2: cache_data (JSON text)
        $3: expires_at (timestamptz)
    """
    return """
    INSERT INTO dashboard_cache (cache_key, cache_data, expires_at, updated_at)
    VALUES ($1, $2::jsonb, $3, NOW())
    ON CONFLICT (cache_key)
    DO UPDATE SET
        cache_data = EXCLUDED.cache_data,
        expires_at = EXCLUDED.expires_at,
        updated_at = NOW()
    """
