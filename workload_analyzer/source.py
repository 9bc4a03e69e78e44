"""
Query record source backed by a SQL warehouse's query history system table.

The analysis core never depends on this module; it is one way of producing the
QueryRecord values the core consumes.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, List, Sequence

from .config import SourceConfig, get_workspace_client
from .errors import APIError, ValidationError
from .schemas import QueryRecord
from .validation import validate_records

logger = logging.getLogger(__name__)


def _parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace('Z', '+00:00'))


def rows_to_records(rows: Sequence[Sequence[Any]]) -> List[QueryRecord]:
    """
    Convert statement result rows into validated query records.

    Each row is (query_id, start_time, end_time, execution_duration_ms,
    read_bytes). Rows without both timestamps are skipped as unfinished.

    Raises:
        MalformedRecordError: If any converted record violates its invariants.
    """
    records = []
    for row in rows:
        start_time = _parse_time(row[1])
        end_time = _parse_time(row[2])
        if start_time is None or end_time is None:
            logger.debug(f"Skipping unfinished query {row[0]}")
            continue

        records.append(
            QueryRecord(
                query_id=str(row[0]) if row[0] is not None else "unknown",
                start_time=start_time,
                end_time=end_time,
                total_exec_time_micros=int(float(row[3]) * 1000) if row[3] is not None else 0,
                max_scan_bytes=int(row[4]) if row[4] is not None else 0,
            )
        )

    return validate_records(records)


class QueryHistorySource:
    """
    Read-only source of finished queries from the warehouse query history.

    Attributes:
        ws: WorkspaceClient instance for API access
        warehouse_id: SQL warehouse used to run the history query
        history_table: Fully qualified name of the query history table
    """

    def __init__(
        self,
        cfg: SourceConfig | None = None,
        warehouse_id: str | None = None,
        history_table: str = "system.query.history",
    ):
        """
        Initialize QueryHistorySource with optional configuration.

        Args:
            cfg: SourceConfig instance. If None, uses default credentials.
            warehouse_id: SQL warehouse ID. If None, the first available
                warehouse is used.
            history_table: Fully qualified name of the query history table.

        Examples:
            >>> source = QueryHistorySource(SourceConfig(profile="DEFAULT"), warehouse_id="abc123")
            >>> records = source.fetch_records(lookback_days=7)
        """
        self.ws = get_workspace_client(cfg)
        self.warehouse_id = warehouse_id
        self.history_table = history_table
        logger.info(
            f"QueryHistorySource initialized (warehouse_id={warehouse_id}, "
            f"history_table={history_table})"
        )

    def _get_default_warehouse_id(self) -> str:
        """
        Get the default SQL warehouse ID.

        Raises:
            APIError: If no warehouse is available.
        """
        try:
            warehouses = list(self.ws.warehouses.list())
        except Exception as e:
            logger.error(f"Error getting default warehouse: {e}")
            raise APIError(f"Failed to get default warehouse: {e}")
        if not warehouses:
            raise APIError("No SQL warehouses available")
        return warehouses[0].id

    def fetch_records(self, lookback_days: int = 7, now: datetime | None = None) -> List[QueryRecord]:
        """
        Fetch finished user queries that started within the trailing window.

        Args:
            lookback_days: How many days back to read. Must be positive.
            now: End of the window. Defaults to the current UTC time.

        Returns:
            Validated QueryRecord objects.

        Raises:
            ValidationError: If lookback_days is not positive.
            APIError: If the statement fails.
            MalformedRecordError: If the warehouse returns inconsistent rows.
        """
        if lookback_days <= 0:
            raise ValidationError("lookback_days must be positive")

        now = now or datetime.now(timezone.utc)
        start_time_str = (now - timedelta(days=lookback_days)).strftime("%Y-%m-%d %H:%M:%S")
        warehouse_id = self.warehouse_id or self._get_default_warehouse_id()

        sql = f"""
        SELECT
            statement_id,
            start_time,
            end_time,
            execution_duration_ms,
            read_bytes
        FROM {self.history_table}
        WHERE start_time >= '{start_time_str}'
          AND execution_status = 'FINISHED'
          AND executed_by IS NOT NULL
        """

        try:
            logger.debug(f"Executing SQL query: {sql}")
            statement = self.ws.statement_execution.execute_statement(
                warehouse_id=warehouse_id,
                statement=sql,
                wait_timeout="50s",
            )
        except Exception as e:
            logger.error(f"Error executing SQL query: {e}")
            raise APIError(f"Failed to read query history: {e}")

        rows = []
        if statement.result and statement.result.data_array:
            rows = statement.result.data_array

        records = rows_to_records(rows)
        logger.info(f"Fetched {len(records)} query records from {self.history_table}")
        return records
