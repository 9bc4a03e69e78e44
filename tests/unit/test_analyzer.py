"""
Unit tests for analyzer module.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from workload_analyzer.analyzer import WorkloadAnalyzer, match_awareness
from workload_analyzer.config import AnalyzerConfig
from workload_analyzer.errors import MalformedRecordError
from workload_analyzer.schemas import WorkloadCategory

NOW = datetime(2024, 1, 15, 23, 59, 30)


class TestWorkloadAnalyzerInit:
    """Test WorkloadAnalyzer initialization."""

    def test_default_config(self):
        """Test the default 7-day, 1-minute configuration."""
        analyzer = WorkloadAnalyzer()
        assert analyzer.cfg.lookback_days == 7
        assert analyzer.bucket_width == timedelta(minutes=1)

    def test_custom_config(self):
        """Test a custom configuration."""
        analyzer = WorkloadAnalyzer(AnalyzerConfig(lookback_days=2, bucket_width_minutes=5))
        assert analyzer.bucket_width == timedelta(minutes=5)


class TestAnalyze:
    """Test analyze method."""

    def test_week_of_full_days(self, make_record):
        """Test a window ending at midnight covers seven whole days."""
        record = make_record(start=datetime(2024, 1, 15, 10, 0), end=datetime(2024, 1, 15, 10, 9, 30))
        report = WorkloadAnalyzer().analyze([record], now=NOW)

        assert len(report.daily) == 7
        assert all(day.bucket_count == 1440 for day in report.daily)
        assert report.daily[-1].activity_pct[WorkloadCategory.SMALL] == Decimal("0.7")
        assert report.per_day_avg_active_minutes[WorkloadCategory.SMALL] == Decimal("1.4")
        assert report.total_query_count == 1

    def test_window_not_aligned_to_midnight(self, make_record):
        """Test partial edge days are measured against a full 1440-minute day."""
        start = datetime(2024, 1, 15, 0, 0, 10)
        record = make_record(start=start, end=start + timedelta(seconds=10))
        report = WorkloadAnalyzer().analyze([record], now=datetime(2024, 1, 15, 0, 0, 30))

        assert report.daily[0].day == date(2024, 1, 8)
        assert len(report.daily) == 8
        assert report.daily[0].bucket_count == 1439
        assert report.daily[-1].bucket_count == 1
        assert report.daily[-1].active_minutes[WorkloadCategory.SMALL] == 1
        assert report.daily[-1].activity_pct[WorkloadCategory.SMALL] == Decimal("0.1")
        assert report.per_day_avg_activity_pct[WorkloadCategory.SMALL] == Decimal("0.0")

    def test_busy_partial_day_stays_below_full_day_share(self, make_record):
        """Test an hour of activity on a partial day reports an hour of a full day."""
        start = datetime(2024, 1, 15, 9, 0)
        record = make_record(start=start, end=start + timedelta(minutes=59, seconds=30))
        report = WorkloadAnalyzer().analyze([record], now=datetime(2024, 1, 15, 9, 59, 30))

        assert report.daily[-1].bucket_count == 600
        assert report.daily[-1].active_minutes[WorkloadCategory.SMALL] == 60
        assert report.daily[-1].activity_pct[WorkloadCategory.SMALL] == Decimal("4.2")

    def test_naive_records_with_default_now(self, make_record):
        """Test naive record timestamps are analyzed against the current UTC time."""
        start = datetime.now(timezone.utc).replace(tzinfo=None, second=0, microsecond=0) - timedelta(minutes=5)
        report = WorkloadAnalyzer().analyze([make_record(start=start, end=start)])

        assert report.total_query_count == 1
        assert sum(d.all_active_minutes for d in report.daily) == 1

    def test_aware_records_with_naive_now(self, make_record):
        """Test a naive analysis time is read as UTC for aware records."""
        start = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
        report = WorkloadAnalyzer().analyze([make_record(start=start)], now=NOW)

        assert report.daily[-1].active_minutes[WorkloadCategory.SMALL] == 1
        assert report.daily[-1].all_activity_pct == Decimal("0.1")

    def test_empty(self):
        """Test analyzing no records."""
        report = WorkloadAnalyzer().analyze([], now=NOW)
        assert report.total_query_count == 0
        assert all(s.count == 0 for s in report.per_category.values())

    def test_malformed(self, make_record):
        """Test malformed records propagate."""
        start = datetime(2024, 1, 15, 10, 0)
        with pytest.raises(MalformedRecordError):
            WorkloadAnalyzer().analyze([make_record(start=start, end=start - timedelta(seconds=1))], now=NOW)


class TestAnalyzeSource:
    """Test analyze_source method."""

    def test_fetches_with_configured_lookback(self, make_record):
        """Test the source is read for the configured window."""
        source = MagicMock()
        source.fetch_records.return_value = [make_record()]
        analyzer = WorkloadAnalyzer(AnalyzerConfig(lookback_days=3))

        report = analyzer.analyze_source(source, now=NOW)

        source.fetch_records.assert_called_once_with(lookback_days=3, now=NOW)
        assert report.total_query_count == 1
        assert len(report.daily) == 3


class TestMatchAwareness:
    """Test match_awareness function."""

    def test_aware_now_for_naive_records(self, make_record):
        """Test an aware time is converted to naive UTC."""
        now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert match_awareness(now, [make_record()]) == datetime(2024, 1, 15, 10, 0)

    def test_naive_now_for_aware_records(self, make_record):
        """Test a naive time is read as UTC."""
        record = make_record(start=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc))
        assert match_awareness(datetime(2024, 1, 15, 12, 0), [record]) == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def test_no_records(self):
        """Test the time is unchanged without records."""
        now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        assert match_awareness(now, []) is now
