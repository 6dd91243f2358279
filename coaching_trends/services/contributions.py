"""
Per-rep contribution breakdown for team and organization analyses.

Answers "who drove this trend": for each rep with at least one call in the
batch, the rep's share of calls plus their average heat and framework
scores. Reps with no calls in the batch are left out rather than reported as
zero rows.

Dependencies:
    - numpy: means over the non-missing scores of each rep
"""

from typing import Dict, List, Optional, Sequence

import numpy as np

from coaching_trends.models.schemas import (
    CallEvaluation,
    RepContribution,
    RepFrameworkScores,
    RepProfile,
)


def _mean(values: List[float]) -> Optional[float]:
    """Arithmetic mean, or None when there is nothing to average."""
    if not values:
        return None
    return float(np.mean(np.array(values, dtype=np.float64)))


def _framework_mean(evaluations: List[CallEvaluation], framework: str) -> Optional[float]:
    scores = [s for s in (e.score_for(framework) for e in evaluations) if s is not None]
    return _mean(scores)


def calculate_rep_contributions(
    evaluations: Sequence[CallEvaluation],
    reps: Sequence[RepProfile],
    team_names: Dict[str, str],
    total_calls: int,
) -> List[RepContribution]:
    """
    Compute each rep's contribution to a multi-rep batch.

    Args:
        evaluations: Every evaluation in the batch.
        reps: Reps the batch was drawn for. Evaluations belonging to reps not
            in this list are ignored.
        team_names: team_id -> team name, used to label each rep.
        total_calls: Denominator for percentageOfTotal; normally
            len(evaluations).

    Returns:
        RepContribution per rep with >= 1 call, sorted by callCount
        descending. Ties keep the order of ``reps``.

    Raises:
        ValueError: If total_calls is not positive while evaluations exist.

    Example:
        >>> contributions = calculate_rep_contributions(evals, reps, {"t1": "West"}, len(evals))
        >>> round(sum(c.percentageOfTotal for c in contributions))
        100
    """
    by_rep: Dict[str, List[CallEvaluation]] = {}
    for evaluation in evaluations:
        by_rep.setdefault(evaluation.rep_id, []).append(evaluation)

    if by_rep and total_calls <= 0:
        raise ValueError(f"total_calls must be positive, got {total_calls}")

    contributions: List[RepContribution] = []
    for rep in reps:
        rep_calls = by_rep.get(rep.id, [])
        if not rep_calls:
            continue

        heat_scores = [e.heat_score for e in rep_calls if e.heat_score is not None]
        contributions.append(RepContribution(
            repId=rep.id,
            repName=rep.name,
            teamName=team_names.get(rep.team_id) if rep.team_id else None,
            callCount=len(rep_calls),
            percentageOfTotal=len(rep_calls) / total_calls * 100,
            averageHeatScore=_mean(heat_scores),
            frameworkScores=RepFrameworkScores(
                meddpicc=_framework_mean(rep_calls, "meddpicc"),
                bant=_framework_mean(rep_calls, "bant"),
                gapSelling=_framework_mean(rep_calls, "gap_selling"),
                activeListening=_framework_mean(rep_calls, "active_listening"),
            ),
        ))

    # sorted() is stable, so equal counts keep directory order
    return sorted(contributions, key=lambda c: c.callCount, reverse=True)
