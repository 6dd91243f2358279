"""
Statistical coaching summary for a single rep.

A cheap companion to the AI trend analysis: counts and averages over the
rep's evaluations in a range, computed locally without calling the synthesis
service. Shown while a trend analysis is loading and for ranges too small to
be worth synthesizing.

Heat trend rule: with at least 3 heat scores, compare the mean of the second
half against the first half (the first half gets the smaller share on odd
counts). A difference above 0.5 either way is improving / declining;
anything else is stable.
"""

from collections import Counter
from typing import Iterable, List, Sequence

import numpy as np

from coaching_trends.models.enums import TrendDirection
from coaching_trends.models.schemas import (
    AggregatedTags,
    CallEvaluation,
    CoachingSummary,
    DateRange,
    FrameworkTrendPoint,
    HeatScorePoint,
    HeatScoreStats,
    ItemCount,
    RecurringPatterns,
    TagCount,
)

TOP_N: int = 10
RECENT_HEAT_POINTS: int = 10
HEAT_TREND_THRESHOLD: float = 0.5
MIN_HEAT_SCORES_FOR_TREND: int = 3


def count_occurrences(items: Iterable[str], limit: int = TOP_N) -> List[ItemCount]:
    """Top items by frequency, case-folded and trimmed; blanks ignored."""
    counts = Counter(item.strip().lower() for item in items if item and item.strip())
    return [ItemCount(item=item, count=count) for item, count in counts.most_common(limit)]


def count_tags(tags: Iterable[str], limit: int = TOP_N) -> List[TagCount]:
    """Top tags by frequency; tags are compared exactly."""
    counts = Counter(tag for tag in tags if tag)
    return [TagCount(tag=tag, count=count) for tag, count in counts.most_common(limit)]


def heat_trend(scores: Sequence[float]) -> TrendDirection:
    """First-half vs second-half heat comparison."""
    if len(scores) < MIN_HEAT_SCORES_FOR_TREND:
        return TrendDirection.STABLE

    middle = len(scores) // 2
    first_avg = float(np.mean(scores[:middle]))
    second_avg = float(np.mean(scores[middle:]))

    if second_avg - first_avg > HEAT_TREND_THRESHOLD:
        return TrendDirection.IMPROVING
    if first_avg - second_avg > HEAT_TREND_THRESHOLD:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def _trend_point(evaluation: CallEvaluation) -> FrameworkTrendPoint:
    primary = evaluation.primary_framework()
    return FrameworkTrendPoint(
        date=evaluation.created_at.date(),
        primaryFramework=primary.framework if primary else None,
        primaryScore=primary.score if primary else None,
        gapSelling=evaluation.score_for("gap_selling"),
        activeListening=evaluation.score_for("active_listening"),
    )


def build_coaching_summary(
    evaluations: Sequence[CallEvaluation],
    date_range: DateRange,
) -> CoachingSummary:
    """
    Summarize a rep's evaluations without synthesis.

    Args:
        evaluations: The rep's evaluations in range, ascending by time.
        date_range: The requested range, echoed back.

    Returns:
        CoachingSummary. An empty batch yields zero counts, no average and a
        stable heat trend.
    """
    def flat(attr: str) -> List[str]:
        return [text for e in evaluations for text in getattr(e, attr)]

    heat_points = [
        HeatScorePoint(date=e.created_at.date(), score=e.heat_score)
        for e in evaluations
        if e.heat_score is not None
    ]
    heat_values = [p.score for p in heat_points]

    return CoachingSummary(
        totalCalls=len(evaluations),
        dateRange=date_range,
        frameworkTrends=[_trend_point(e) for e in evaluations],
        recurringPatterns=RecurringPatterns(
            criticalInfoMissing=count_occurrences(
                item.info for e in evaluations for item in e.critical_info_missing
            ),
            followUpQuestions=count_occurrences(
                item.question for e in evaluations for item in e.follow_up_questions
            ),
            meddpiccImprovements=count_occurrences(flat("meddpicc_improvements")),
            bantImprovements=count_occurrences(flat("bant_improvements")),
            gapSellingImprovements=count_occurrences(flat("gap_selling_improvements")),
            activeListeningImprovements=count_occurrences(flat("active_listening_improvements")),
        ),
        aggregatedTags=AggregatedTags(
            skillTags=count_tags(flat("skill_tags")),
            dealTags=count_tags(flat("deal_tags")),
        ),
        heatScoreStats=HeatScoreStats(
            average=float(np.mean(heat_values)) if heat_values else None,
            trend=heat_trend(heat_values),
            recentScores=heat_points[-RECENT_HEAT_POINTS:],
        ),
    )
