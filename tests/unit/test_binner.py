"""
Unit tests for binner module.
"""

from datetime import datetime, timedelta

import pytest

from workload_analyzer.binner import (
    analysis_window,
    assign_buckets,
    floor_to_width,
    generate_buckets,
    overlapping_buckets,
    overlaps,
)
from workload_analyzer.errors import ValidationError
from workload_analyzer.schemas import TimeBucket, WorkloadCategory

MINUTE = timedelta(minutes=1)


def _bucket(hour: int, minute: int) -> TimeBucket:
    start = datetime(2024, 1, 15, hour, minute)
    return TimeBucket(start=start, end=start + MINUTE)


class TestGenerateBuckets:
    """Test generate_buckets function."""

    def test_one_bucket_per_minute(self):
        """Test a W-minute window yields exactly W buckets."""
        start = datetime(2024, 1, 15, 10, 0)
        buckets = generate_buckets(start, start + timedelta(minutes=60))
        assert len(buckets) == 60

    def test_contiguous_without_gaps(self):
        """Test buckets are contiguous, non-overlapping and cover the window."""
        start = datetime(2024, 1, 15, 10, 0)
        end = start + timedelta(minutes=90)
        buckets = generate_buckets(start, end)
        assert buckets[0].start == start
        assert buckets[-1].end == end
        for previous, current in zip(buckets, buckets[1:]):
            assert previous.end == current.start
            assert current.end - current.start == MINUTE

    def test_seven_day_window(self):
        """Test a full week at 1-minute width."""
        start = datetime(2024, 1, 8, 0, 0)
        buckets = generate_buckets(start, start + timedelta(days=7))
        assert len(buckets) == 7 * 1440

    def test_partial_final_bucket(self):
        """Test a window not divisible by the width is still fully covered."""
        start = datetime(2024, 1, 15, 10, 0)
        buckets = generate_buckets(start, start + timedelta(minutes=2, seconds=30))
        assert len(buckets) == 3
        assert buckets[-1].end == datetime(2024, 1, 15, 10, 3)

    def test_wider_buckets(self):
        """Test a 5-minute width."""
        start = datetime(2024, 1, 15, 10, 0)
        buckets = generate_buckets(start, start + timedelta(hours=1), timedelta(minutes=5))
        assert len(buckets) == 12

    def test_empty_window(self):
        """Test a zero-length window has no buckets."""
        start = datetime(2024, 1, 15, 10, 0)
        assert generate_buckets(start, start) == []

    def test_restartable(self):
        """Test repeated calls yield identical buckets."""
        start = datetime(2024, 1, 15, 10, 0)
        end = start + timedelta(hours=2)
        assert generate_buckets(start, end) == generate_buckets(start, end)

    def test_invalid_width(self):
        """Test non-positive widths are rejected."""
        start = datetime(2024, 1, 15, 10, 0)
        with pytest.raises(ValidationError, match="bucket_width must be positive"):
            generate_buckets(start, start + MINUTE, timedelta(0))

    def test_inverted_window(self):
        """Test an end before the start is rejected."""
        start = datetime(2024, 1, 15, 10, 0)
        with pytest.raises(ValidationError, match="window_end must not be before window_start"):
            generate_buckets(start, start - MINUTE)


class TestAnalysisWindow:
    """Test analysis_window and floor_to_width functions."""

    def test_trailing_week(self):
        """Test the window ends with the bucket containing now."""
        start, end = analysis_window(datetime(2024, 1, 15, 10, 30, 45), lookback_days=7)
        assert end == datetime(2024, 1, 15, 10, 31)
        assert start == datetime(2024, 1, 8, 10, 31)

    def test_invalid_lookback(self):
        """Test lookback_days must be positive."""
        with pytest.raises(ValidationError, match="lookback_days must be positive"):
            analysis_window(datetime(2024, 1, 15), lookback_days=0)

    def test_floor_to_minute(self):
        """Test truncation to the minute."""
        assert floor_to_width(datetime(2024, 1, 15, 10, 30, 59, 999), MINUTE) == datetime(2024, 1, 15, 10, 30)

    def test_floor_to_five_minutes(self):
        """Test truncation to a wider bucket."""
        assert floor_to_width(datetime(2024, 1, 15, 10, 33, 10), timedelta(minutes=5)) == datetime(2024, 1, 15, 10, 30)


class TestOverlaps:
    """Test the overlap predicate, including its boundary asymmetry."""

    def test_record_inside_bucket(self, make_record):
        """Test a record starting at the bucket start overlaps."""
        record = make_record(start=datetime(2024, 1, 15, 10, 0), end=datetime(2024, 1, 15, 10, 1))
        assert overlaps(record, _bucket(10, 0))

    def test_record_starting_at_bucket_end_excluded(self, make_record):
        """Test a record starting exactly at the bucket's end does not overlap it."""
        record = make_record(start=datetime(2024, 1, 15, 10, 1), end=datetime(2024, 1, 15, 10, 2))
        assert not overlaps(record, _bucket(10, 0))

    def test_record_ending_at_bucket_start_included(self, make_record):
        """Test a record ending exactly at the bucket's start overlaps it."""
        record = make_record(start=datetime(2024, 1, 15, 9, 59, 30), end=datetime(2024, 1, 15, 10, 0))
        assert overlaps(record, _bucket(10, 0))

    def test_record_ending_inside(self, make_record):
        """Test a record that started earlier and ends inside the bucket."""
        record = make_record(start=datetime(2024, 1, 15, 9, 58), end=datetime(2024, 1, 15, 10, 0, 30))
        assert overlaps(record, _bucket(10, 0))

    def test_record_spanning_bucket(self, make_record):
        """Test a record strictly spanning the bucket."""
        record = make_record(start=datetime(2024, 1, 15, 9, 59), end=datetime(2024, 1, 15, 10, 2))
        assert overlaps(record, _bucket(10, 0))

    def test_span_requires_strict_containment(self, make_record):
        """Test a record from before the bucket to exactly its end is not counted in it."""
        record = make_record(start=datetime(2024, 1, 15, 9, 59, 30), end=datetime(2024, 1, 15, 10, 1))
        assert not overlaps(record, _bucket(10, 0))

    def test_record_entirely_before(self, make_record):
        """Test a record that finished before the bucket."""
        record = make_record(start=datetime(2024, 1, 15, 9, 0), end=datetime(2024, 1, 15, 9, 30))
        assert not overlaps(record, _bucket(10, 0))


class TestOverlappingBuckets:
    """Test overlapping_buckets and assign_buckets functions."""

    def test_overlapping_buckets(self, make_record):
        """Test a record spanning several buckets."""
        buckets = [_bucket(10, m) for m in range(5)]
        record = make_record(start=datetime(2024, 1, 15, 10, 0, 30), end=datetime(2024, 1, 15, 10, 2, 15))
        assert overlapping_buckets(record, buckets) == {_bucket(10, 0), _bucket(10, 1), _bucket(10, 2)}

    def test_assign_matches_linear_scan(self, make_record):
        """Test the bisection search agrees with the exhaustive predicate."""
        start = datetime(2024, 1, 15, 9, 0)
        buckets = generate_buckets(start, start + timedelta(hours=3))
        records = [
            make_record("inside", start=datetime(2024, 1, 15, 10, 0, 10), end=datetime(2024, 1, 15, 10, 0, 50)),
            make_record("boundary", start=datetime(2024, 1, 15, 10, 1), end=datetime(2024, 1, 15, 10, 2)),
            make_record("long", start=datetime(2024, 1, 15, 9, 30, 30), end=datetime(2024, 1, 15, 11, 15)),
            make_record("exact", start=datetime(2024, 1, 15, 9, 59, 30), end=datetime(2024, 1, 15, 10, 1)),
            make_record("before", start=datetime(2024, 1, 15, 8, 0), end=datetime(2024, 1, 15, 8, 30)),
            make_record("straddle", start=datetime(2024, 1, 15, 8, 59), end=datetime(2024, 1, 15, 9, 1, 30)),
        ]
        assignments = assign_buckets(records, buckets)
        assert [a.query_id for a in assignments] == [r.query_id for r in records]
        for record, assignment in zip(records, assignments):
            assert set(assignment.buckets) == overlapping_buckets(record, buckets)

    def test_assign_outside_window(self, make_record):
        """Test a record outside the window has no buckets."""
        start = datetime(2024, 1, 15, 10, 0)
        buckets = generate_buckets(start, start + timedelta(minutes=10))
        record = make_record(start=datetime(2024, 1, 15, 12, 0))
        assert assign_buckets([record], buckets)[0].buckets == ()

    def test_assign_sets_category(self, make_record):
        """Test each assignment carries the record's category."""
        start = datetime(2024, 1, 15, 10, 0)
        buckets = generate_buckets(start, start + timedelta(minutes=10))
        records = [make_record("s", scan_bytes=1), make_record("l", scan_bytes=600_000_000_000)]
        categories = [a.category for a in assign_buckets(records, buckets)]
        assert categories == [WorkloadCategory.SMALL, WorkloadCategory.LARGE]
