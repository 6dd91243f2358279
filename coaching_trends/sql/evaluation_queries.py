"""
Evaluation Queries Module for the Coaching Trends backend.

Parameterized PostgreSQL queries over ai_call_analysis, the table the
upstream grading process writes one row per graded call into. This service
only reads it.

Conventions:
- $1 is always an array of rep ids, so one query serves a single rep and a
  whole team or organization
- $2 / $3 are inclusive timestamptz bounds (start of the first day, end of
  the last day)
- Soft-deleted rows (deleted_at IS NOT NULL) never count
"""


# =============================================================================
# COUNT QUERY
# =============================================================================

def get_count_evaluations_query() -> str:
    """
    Generate SQL counting live evaluations for a set of reps in a time range.

    Parameters:
        $1: rep ids (array)
        $2: range start (timestamptz, inclusive)
        $3: range end (timestamptz, inclusive)

    Returns:
        str: Parameterized query returning a single count column.
    """
    return """
    SELECT COUNT(*) AS call_count
    FROM ai_call_analysis
    WHERE rep_id = ANY($1)
      AND created_at >= $2
      AND created_at <= $3
      AND deleted_at IS NULL
    """


# =============================================================================
# FETCH QUERY
# =============================================================================

def get_fetch_evaluations_query() -> str:
    """
    Generate SQL fetching live evaluations, oldest first.

    The grading output lives in JSONB columns; heat comes from the deal heat
    analysis when present and from the coach output's heat signature
    otherwise. analysis_behavior and analysis_strategy hold the Analysis 2.0
    audits and are NULL on calls graded before them.

    Parameters:
        $1: rep ids (array)
        $2: range start (timestamptz, inclusive)
        $3: range end (timestamptz, inclusive)

    Returns:
        str: Parameterized query ordered by created_at ASC, id ASC.
    """
    return """
    SELECT
        id::text AS id,
        rep_id::text AS rep_id,
        created_at,
        coach_output -> 'framework_scores' AS framework_scores,
        analysis_behavior,
        analysis_strategy,
        COALESCE(
            (deal_heat_analysis ->> 'heat_score')::numeric,
            (coach_output -> 'heat_signature' ->> 'score')::numeric
        ) AS heat_score,
        coach_output -> 'meddpicc_improvements' AS meddpicc_improvements,
        coach_output -> 'bant_improvements' AS bant_improvements,
        coach_output -> 'gap_selling_improvements' AS gap_selling_improvements,
        coach_output -> 'active_listening_improvements' AS active_listening_improvements,
        coach_output -> 'critical_info_missing' AS critical_info_missing,
        coach_output -> 'recommended_follow_up_questions' AS follow_up_questions,
        skill_tags,
        deal_tags
    FROM ai_call_analysis
    WHERE rep_id = ANY($1)
      AND created_at >= $2
      AND created_at <= $3
      AND deleted_at IS NULL
    ORDER BY created_at ASC, id ASC
    """
