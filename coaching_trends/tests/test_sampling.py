"""
Tests for weekly-stratified sampling.

The scenario used throughout is 75 calls, one per day from Wednesday
2025-01-01: a 4-call partial week, ten full weeks and a trailing 1-call week.
Per-week quotas round to 3 + 10 * 5 + 1 = 54, which overshoots the target of
50 and is trimmed.
"""

from datetime import date, timedelta
from typing import List

import pytest

from coaching_trends.models.schemas import FormattedRecord
from coaching_trends.services.sampling import stratified_sample
from coaching_trends.services.tiering import week_start
from coaching_trends.tests.conftest import make_record


def daily_records(count: int, start: date = date(2025, 1, 1)) -> List[FormattedRecord]:
    return [make_record(start + timedelta(days=i), heat_score=float(i % 10)) for i in range(count)]


class TestStratifiedSample:

    def test_within_target_is_identity(self) -> None:
        records = daily_records(40)
        result = stratified_sample(records, target_size=50)

        assert result.sampled == records
        assert result.original_count == 40

    def test_exactly_target_is_identity(self) -> None:
        records = daily_records(50)
        assert stratified_sample(records, target_size=50).sampled == records

    def test_empty_input(self) -> None:
        result = stratified_sample([], target_size=50)
        assert result.sampled == []
        assert result.original_count == 0

    def test_target_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            stratified_sample(daily_records(3), target_size=0)

    def test_overshoot_is_trimmed_to_exact_target(self) -> None:
        records = daily_records(75)
        result = stratified_sample(records, target_size=50)

        assert len(result.sampled) == 50
        assert result.original_count == 75

    def test_every_sampled_record_comes_from_input(self) -> None:
        records = daily_records(75)
        result = stratified_sample(records, target_size=50)
        assert all(r in records for r in result.sampled)

    def test_sample_is_date_ordered(self) -> None:
        result = stratified_sample(daily_records(75), target_size=50)
        dates = [r.date for r in result.sampled]
        assert dates == sorted(dates)

    def test_endpoints_of_range_are_kept(self) -> None:
        records = daily_records(75)
        result = stratified_sample(records, target_size=50)

        assert result.sampled[0].date == records[0].date
        assert result.sampled[-1].date == records[-1].date

    def test_every_week_represented_without_overshoot(self) -> None:
        # 8 weeks of 10 calls: 10/80*50 = 6.25 rounds to 6 per week, 48 in total
        start = date(2025, 1, 5)
        records = [
            make_record(start + timedelta(weeks=w, days=d % 7))
            for w in range(8) for d in range(10)
        ]
        result = stratified_sample(records, target_size=50)

        assert len(result.sampled) == 48
        weeks = {week_start(r.date) for r in result.sampled}
        assert len(weeks) == 8

    def test_sparse_weeks_trim_keeps_both_ends(self) -> None:
        # One call per week for 60 weeks: every week keeps its call, 60 > 50
        start = date(2024, 1, 7)
        records = [make_record(start + timedelta(weeks=i)) for i in range(60)]
        result = stratified_sample(records, target_size=50)

        assert len(result.sampled) == 50
        # earliest 30% and latest 40% of the target survive verbatim
        assert result.sampled[:15] == records[:15]
        assert result.sampled[-20:] == records[-20:]

    def test_small_target_draws_from_every_month(self) -> None:
        """100 calls over January and February sampled down to 10."""
        start = date(2025, 1, 1)
        records = [make_record(start + timedelta(days=i * 59 // 100)) for i in range(100)]

        result = stratified_sample(records, target_size=10)

        # nine weeks at a quota of one each
        assert len(result.sampled) == 9
        assert {r.date.month for r in result.sampled} == {1, 2}
