# app/utils/numbers.py
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional


def round_to(value: Optional[float], digits: int = 2) -> Optional[float]:
    """Round half away from zero on the value's decimal representation."""
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def non_null(values: Iterable[Optional[float]]) -> List[float]:
    return [v for v in values if v is not None]


def mean(values: Iterable[Optional[float]]) -> Optional[float]:
    """Mean of the non-null values, None for an empty series."""
    present = non_null(values)
    if not present:
        return None
    return sum(present) / len(present)


def population_std(values: Iterable[Optional[float]]) -> float:
    present = non_null(values)
    if not present:
        return 0.0
    avg = sum(present) / len(present)
    variance = sum((v - avg) ** 2 for v in present) / len(present)
    return math.sqrt(variance)


def percentage_change(first: float, last: float) -> float:
    """(last - first) / first * 100, 0 when ``first`` is zero."""
    if not first:
        return 0.0
    return (last - first) / first * 100
