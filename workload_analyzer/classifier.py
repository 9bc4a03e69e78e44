"""
Workload size classification by peak scan volume.
"""

from .errors import ValidationError
from .schemas import WorkloadCategory

SMALL_SCAN_LIMIT_BYTES = 100_000_000
LARGE_SCAN_LIMIT_BYTES = 500_000_000_000


def classify(max_scan_bytes: int) -> WorkloadCategory:
    """
    Map a query's peak scan volume to its workload category.

    The medium range is inclusive on both ends, so exactly 100,000,000 bytes
    is medium and exactly 500,000,000,000 bytes is still medium.

    Args:
        max_scan_bytes: Peak scanned bytes of the query. Must be non-negative.

    Returns:
        The WorkloadCategory for the scan volume.

    Raises:
        ValidationError: If max_scan_bytes is negative.

    Examples:
        >>> classify(50_000_000)
        <WorkloadCategory.SMALL: 'small'>
        >>> classify(100_000_000)
        <WorkloadCategory.MEDIUM: 'medium'>
    """
    if max_scan_bytes < 0:
        raise ValidationError("max_scan_bytes must be non-negative")
    if max_scan_bytes < SMALL_SCAN_LIMIT_BYTES:
        return WorkloadCategory.SMALL
    if max_scan_bytes <= LARGE_SCAN_LIMIT_BYTES:
        return WorkloadCategory.MEDIUM
    return WorkloadCategory.LARGE
