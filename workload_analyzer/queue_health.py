"""
Queue health report over workload-manager query facts.

This module classifies each query by service class, queue, concurrency
scaling status and statement type, resolves its completion state, and counts
queries per hour for every combination.
"""

import logging
import re
from collections import Counter
from typing import Dict, Iterable, List, Tuple

from .schemas import CompletionState, QueueHealthEntry, QueueQueryRecord

logger = logging.getLogger(__name__)

RESULT_CACHE_QUEUE = "result_cache"

# Ordered: the first matching pattern decides the statement type.
QUERY_TYPE_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"(padb_|pg_internal)"), "OTHER"),
    (re.compile(r"undoing ", re.IGNORECASE), "SYSTEM"),
    (re.compile(r"automv", re.IGNORECASE), "AUTOMV"),
    (re.compile(r"unload", re.IGNORECASE), "UNLOAD"),
    (re.compile(r"cursor ", re.IGNORECASE), "CURSOR"),
    (re.compile(r"fetch ", re.IGNORECASE), "CURSOR"),
    (re.compile(r"create ", re.IGNORECASE), "CTAS"),
    (re.compile(r"delete ", re.IGNORECASE), "DELETE"),
    (re.compile(r"update ", re.IGNORECASE), "UPDATE"),
    (re.compile(r"insert ", re.IGNORECASE), "INSERT"),
    (re.compile(r"vacuum[ :]", re.IGNORECASE), "VACUUM"),
    (re.compile(r"analyze ", re.IGNORECASE), "ANALYZE"),
    (re.compile(r"select ", re.IGNORECASE), "SELECT"),
    (re.compile(r"copy ", re.IGNORECASE), "COPY"),
]


def service_class_category(service_class: int | None) -> str | None:
    """Name the group a WLM service class belongs to, or None if unrecognized."""
    if service_class is None:
        return None
    if 1 <= service_class <= 4:
        return "System"
    if service_class == 5:
        return "Superuser"
    if 6 <= service_class <= 13:
        return "Manual WLM queues"
    if service_class == 14:
        return "SQA"
    if service_class == 15:
        return "Redshift Maintenance"
    if 100 <= service_class <= 107:
        return "Auto WLM"
    return None


def classify_query_type(query_text: str) -> str:
    """Derive the statement type from the SQL text."""
    for pattern, query_type in QUERY_TYPE_PATTERNS:
        if pattern.search(query_text or ""):
            return query_type
    return "OTHER"


def completion_state(final_state: str | None, rule_action: str | None, aborted: int) -> CompletionState:
    """
    Resolve a query's completion state from its WLM outcome.

    Decision table:
        final_state  rule_action  aborted  -> state
        Completed    abort        any      -> EVICTED_ABORTED
        Completed    other        0        -> COMPLETED
        Completed    other        1        -> USER_ABORTED
        Evicted      any          any      -> EVICTED_ABORTED
        None         any          0        -> COMPLETED
        None         any          1        -> USER_ABORTED
        otherwise                          -> UNKNOWN

    A query monitoring rule abort takes precedence over the user abort flag.
    UNKNOWN states are not counted by the queue health report.
    """
    if final_state == "Evicted":
        return CompletionState.EVICTED_ABORTED
    if final_state == "Completed" and rule_action == "abort":
        return CompletionState.EVICTED_ABORTED
    if final_state in ("Completed", None):
        if aborted == 0:
            return CompletionState.COMPLETED
        if aborted == 1:
            return CompletionState.USER_ABORTED
    return CompletionState.UNKNOWN


def queue_health(records: Iterable[QueueQueryRecord]) -> List[QueueHealthEntry]:
    """
    Count queries per hour for each queue, database and statement type.

    Args:
        records: Workload-manager facts for the queries to report on.

    Returns:
        QueueHealthEntry objects ordered by hour, then by the remaining keys.

    Examples:
        >>> entries = queue_health(records)
        >>> for entry in entries:
        ...     print(f"{entry.workload_exec_hour} {entry.queue_name}: {entry.completed_query_count}/{entry.total_query_count}")
    """
    counts: Dict[tuple, Counter] = {}
    for record in records:
        key = (
            record.start_time.replace(minute=0, second=0, microsecond=0),
            service_class_category(record.service_class),
            record.service_class,
            RESULT_CACHE_QUEUE if record.from_result_cache else (record.queue_name or "").rstrip() or None,
            "burst" if record.concurrency_scaling_status == 1 else "main",
            record.dbname.strip(),
            classify_query_type(record.query_text),
        )
        counts.setdefault(key, Counter())[completion_state(record.final_state, record.rule_action, record.aborted)] += 1

    entries = []
    # None sorts ahead of any value in the same position.
    for key in sorted(counts, key=lambda k: tuple((part is not None, part) for part in k)):
        hour, category, service_class, queue_name, scaling, dbname, query_type = key
        states = counts[key]
        entries.append(
            QueueHealthEntry(
                workload_exec_hour=hour,
                service_class_category=category,
                service_class=service_class,
                queue_name=queue_name,
                concurrency_scaling_status=scaling,
                dbname=dbname,
                query_type=query_type,
                total_query_count=(
                    states[CompletionState.COMPLETED]
                    + states[CompletionState.USER_ABORTED]
                    + states[CompletionState.EVICTED_ABORTED]
                ),
                completed_query_count=states[CompletionState.COMPLETED],
                user_aborted_count=states[CompletionState.USER_ABORTED],
            )
        )

    logger.info(f"Built {len(entries)} queue health entries")
    return entries
