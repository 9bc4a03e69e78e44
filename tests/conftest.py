"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta

import pytest

from workload_analyzer.schemas import QueryRecord


@pytest.fixture
def make_record():
    """Factory for QueryRecord objects with sensible defaults."""

    def _make(
        query_id: str = "q1",
        start: datetime = datetime(2024, 1, 15, 10, 0, 0),
        duration: timedelta = timedelta(seconds=30),
        exec_micros: int = 1_000_000,
        scan_bytes: int = 50_000_000,
        end: datetime | None = None,
    ) -> QueryRecord:
        return QueryRecord(
            query_id=query_id,
            start_time=start,
            end_time=end if end is not None else start + duration,
            total_exec_time_micros=exec_micros,
            max_scan_bytes=scan_bytes,
        )

    return _make
