"""
Numeric helpers shared by the report builders.

Ratios with a zero denominator are undefined; the helpers here raise
DivisionUndefinedError internally and resolve it to zero so that reports never
carry NaN or fail on idle categories.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence

import pandas as pd

from .errors import DivisionUndefinedError, ValidationError
from .schemas import PERCENT_PRECISION

logger = logging.getLogger(__name__)


def ratio(numerator, denominator) -> Decimal:
    """Divide exactly, raising DivisionUndefinedError for a zero denominator."""
    if denominator == 0:
        raise DivisionUndefinedError(f"Ratio {numerator}/{denominator} is undefined")
    return Decimal(numerator) / Decimal(denominator)


def ratio_or_zero(numerator, denominator) -> Decimal:
    """Divide exactly, returning zero when the ratio is undefined."""
    try:
        return ratio(numerator, denominator)
    except DivisionUndefinedError as e:
        logger.debug(f"{e}; reporting 0")
        return Decimal(0)


def percentage(numerator, denominator) -> Decimal:
    """Express numerator/denominator as a percentage rounded to 1 decimal place."""
    return (ratio_or_zero(numerator, denominator) * 100).quantize(PERCENT_PRECISION, rounding=ROUND_HALF_UP)


def mean(values: Iterable[Decimal], precision: Decimal = PERCENT_PRECISION) -> Decimal:
    """Arithmetic mean rounded to the given precision; zero for no values."""
    values = list(values)
    return ratio_or_zero(sum(values, Decimal(0)), len(values)).quantize(precision, rounding=ROUND_HALF_UP)


def percentile_cont(values: Sequence[float], fraction: float) -> float | None:
    """
    Continuous percentile using linear interpolation between order statistics.

    The rank ``fraction * (n - 1)`` of the sorted values is located and the
    result interpolates linearly between the values at its floor and ceiling,
    which is pandas' ``linear`` quantile and PERCENTILE_CONT in SQL.

    Args:
        values: Sample values, in any order.
        fraction: Percentile as a fraction in [0, 1] (0.9 for p90).

    Returns:
        The interpolated percentile, or None for an empty sample.

    Raises:
        ValidationError: If fraction is outside [0, 1].

    Examples:
        >>> percentile_cont([1.0, 2.0, 3.0, 4.0], 0.5)
        2.5
        >>> percentile_cont([10.0, 20.0], 0.9)
        19.0
    """
    if not 0.0 <= fraction <= 1.0:
        raise ValidationError("fraction must be between 0 and 1")
    if len(values) == 0:
        return None
    return float(pd.Series(values, dtype=float).quantile(fraction, interpolation="linear"))
