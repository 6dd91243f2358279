"""
Directory Queries Module for the Coaching Trends backend.

Read-only queries resolving which reps a team or organization analysis
covers, and the team names shown next to each rep's contribution.
"""


def get_team_reps_query() -> str:
    """
    Generate SQL listing the reps on one team.

    Parameters:
        $1: team id

    Returns:
        str: Parameterized query returning id, name, team_id.
    """
    return """
    SELECT
        id::text AS id,
        COALESCE(name, 'Unknown') AS name,
        team_id::text AS team_id
    FROM profiles
    WHERE team_id = $1
    ORDER BY name ASC
    """


def get_active_reps_query() -> str:
    """
    Generate SQL listing every active rep in the organization.

    Returns:
        str: Query returning id, name, team_id.
    """
    return """
    SELECT
        id::text AS id,
        COALESCE(name, 'Unknown') AS name,
        team_id::text AS team_id
    FROM user_with_role
    WHERE role = 'rep'
      AND is_active = TRUE
    ORDER BY name ASC
    """


def get_teams_query() -> str:
    """
    Generate SQL listing all teams.

    Returns:
        str: Query returning id, name.
    """
    return """
    SELECT id::text AS id, name
    FROM teams
    ORDER BY name ASC
    """
