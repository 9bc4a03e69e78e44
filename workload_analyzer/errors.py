"""
Custom exception classes for the Workload Analyzer.
"""


class WorkloadAnalyzerError(Exception):
    """Base exception for all Workload Analyzer errors."""
    pass


class ConfigurationError(WorkloadAnalyzerError):
    """Raised when there is a configuration issue."""
    pass


class ValidationError(WorkloadAnalyzerError):
    """Raised when input validation fails."""
    pass


class MalformedRecordError(WorkloadAnalyzerError):
    """
    Raised when one or more query records violate their invariants.

    Attributes:
        rejected: List of (query_id, reason) tuples, one per rejected record
    """

    def __init__(self, rejected: list[tuple[str, str]]):
        self.rejected = list(rejected)
        ids = ", ".join(query_id for query_id, _ in self.rejected)
        super().__init__(f"Rejected {len(self.rejected)} malformed record(s): {ids}")


class DivisionUndefinedError(WorkloadAnalyzerError):
    """Raised internally when a ratio has a zero denominator."""
    pass


class IncompleteDataError(WorkloadAnalyzerError):
    """Raised when report inputs do not cover the same workload categories."""
    pass


class APIError(WorkloadAnalyzerError):
    """Raised when the warehouse API returns an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
