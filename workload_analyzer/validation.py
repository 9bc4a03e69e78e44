"""
Record validation performed before any record enters the analysis pipeline.
"""

import logging
from typing import Iterable, List

from .errors import MalformedRecordError
from .schemas import QueryRecord

logger = logging.getLogger(__name__)


def is_naive(record: QueryRecord) -> bool:
    """Whether the record's timestamps carry no timezone."""
    return record.start_time.tzinfo is None


def record_problems(record: QueryRecord) -> List[str]:
    """Return a description of every invariant the record violates."""
    problems = []
    if (record.start_time.tzinfo is None) != (record.end_time.tzinfo is None):
        problems.append("start_time and end_time mix naive and timezone-aware values")
    elif record.end_time < record.start_time:
        problems.append("end_time is before start_time")
    if record.max_scan_bytes < 0:
        problems.append("max_scan_bytes is negative")
    if record.total_exec_time_micros < 0:
        problems.append("total_exec_time_micros is negative")
    return problems


def validate_records(records: Iterable[QueryRecord]) -> List[QueryRecord]:
    """
    Check every record and fail if any of them is malformed.

    All records are inspected before failing so the caller learns about every
    rejected record at once. Timestamps must be either all naive or all
    timezone-aware across the record set; the first record decides which.

    Args:
        records: Query records to validate.

    Returns:
        The records as a list, unchanged, when all of them are valid.

    Raises:
        MalformedRecordError: If at least one record is malformed. Its
            ``rejected`` attribute lists (query_id, reason) for each one.
    """
    checked = list(records)
    naive = is_naive(checked[0]) if checked else None
    rejected = []
    for record in checked:
        problems = record_problems(record)
        if is_naive(record) != naive:
            problems.append("timezone awareness differs from the other records")
        if problems:
            rejected.append((record.query_id, "; ".join(problems)))

    if rejected:
        logger.error(f"Rejected {len(rejected)} of {len(checked)} query records")
        raise MalformedRecordError(rejected)

    logger.debug(f"Validated {len(checked)} query records")
    return checked
