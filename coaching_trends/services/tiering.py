"""
Analysis tier classification and weekly bucketing.

The tier decides how a batch of evaluations reaches the synthesis service:

    count <= DIRECT_ANALYSIS_MAX                  -> direct
    DIRECT_ANALYSIS_MAX < count <= SAMPLING_MAX   -> sampled
    count > SAMPLING_MAX                          -> hierarchical

The weekly helpers here are shared by the stratified sampler and the chunk
partitioner so both agree on what "a week" is. Weeks start on Sunday: the
week key of a day is that day minus its days-since-Sunday offset.

Usage:
    from coaching_trends.services.tiering import determine_analysis_tier

    tier = determine_analysis_tier(75)   # AnalysisTier.SAMPLED
"""

from datetime import date, timedelta
from typing import Dict, List, Protocol, Sequence, TypeVar

from coaching_trends.models.enums import AnalysisTier


# =============================================================================
# Constants
# =============================================================================

# Largest batch sent to the synthesis service in a single pass
DIRECT_ANALYSIS_MAX: int = 50

# Largest batch handled by sampling down to DIRECT_ANALYSIS_MAX
SAMPLING_MAX: int = 100


class DatedRecord(Protocol):
    """Anything with a calendar date; FormattedRecord satisfies this."""

    @property
    def date(self) -> date: ...


RecordT = TypeVar("RecordT", bound=DatedRecord)


# =============================================================================
# Tier Classification
# =============================================================================


def determine_analysis_tier(
    call_count: int,
    direct_max: int = DIRECT_ANALYSIS_MAX,
    sampling_max: int = SAMPLING_MAX,
) -> AnalysisTier:
    """
    Map a call count to an analysis tier.

    Args:
        call_count: Number of evaluations in range. Must be non-negative.
        direct_max: Upper bound (inclusive) of the direct tier.
        sampling_max: Upper bound (inclusive) of the sampled tier.

    Returns:
        AnalysisTier for the count.

    Raises:
        ValueError: If call_count is negative.

    Example:
        >>> determine_analysis_tier(50)
        <AnalysisTier.DIRECT: 'direct'>
        >>> determine_analysis_tier(101)
        <AnalysisTier.HIERARCHICAL: 'hierarchical'>
    """
    if call_count < 0:
        raise ValueError(f"call_count must be non-negative, got {call_count}")

    if call_count <= direct_max:
        return AnalysisTier.DIRECT
    if call_count <= sampling_max:
        return AnalysisTier.SAMPLED
    return AnalysisTier.HIERARCHICAL


# =============================================================================
# Weekly Bucketing
# =============================================================================


def week_start(day: date) -> date:
    """Sunday on or before the given day."""
    # date.weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (day.weekday() + 1) % 7
    return day - timedelta(days=days_since_sunday)


def group_by_week(records: Sequence[RecordT]) -> List[List[RecordT]]:
    """
    Bucket records by week, in chronological week order.

    Records inside a week are sorted ascending by date; records sharing a
    date keep their input order.

    Args:
        records: Records exposing a ``date`` attribute.

    Returns:
        One list per non-empty week, earliest week first.
    """
    buckets: Dict[date, List[RecordT]] = {}
    for record in records:
        buckets.setdefault(week_start(record.date), []).append(record)

    return [
        sorted(buckets[key], key=lambda r: r.date)
        for key in sorted(buckets)
    ]
