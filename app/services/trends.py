"""
Trend classification and consistency scoring over score series.

Both are heuristics: the trend compares only the first and last points and
the consistency index is a bounded linear penalty on the population standard
deviation, not a calibrated statistic.
"""

from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel

from app.utils.numbers import non_null, percentage_change, population_std, round_to

# Changes strictly beyond +/- this percentage leave the "stable" band.
TREND_THRESHOLD_PERCENT = 5.0

# Float noise tolerated when a change lands exactly on the threshold.
TREND_THRESHOLD_EPSILON = 1e-9

# Points of consistency lost per unit of standard deviation.
CONSISTENCY_PENALTY_PER_STD = 50


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class TrendResult(BaseModel):
    trend: Trend
    percentage_change: float
    consecutive_cycles: int = 0


def classify_change(change_percent: float) -> Trend:
    if change_percent > TREND_THRESHOLD_PERCENT + TREND_THRESHOLD_EPSILON:
        return Trend.IMPROVING
    if change_percent < -TREND_THRESHOLD_PERCENT - TREND_THRESHOLD_EPSILON:
        return Trend.DECLINING
    return Trend.STABLE


def count_consecutive_cycles(scores: Sequence[float], trend: Trend) -> int:
    """Trailing steps of the series that move in ``trend``'s direction."""
    if trend == Trend.STABLE:
        return 0
    count = 0
    for previous, current in zip(reversed(scores[:-1]), reversed(scores[1:])):
        moving_up = current > previous
        moving_down = current < previous
        if (trend == Trend.IMPROVING and moving_up) or (trend == Trend.DECLINING and moving_down):
            count += 1
        else:
            break
    return count


def classify_trend(scores: Sequence[Optional[float]]) -> TrendResult:
    """
    Classify a chronologically ordered (oldest first) series.

    Nulls are dropped. Fewer than two points is stable with no change. The
    trend is decided on the unrounded change; only the reported percentage
    is rounded to 2 decimals.
    """
    present = non_null(scores)
    if len(present) < 2:
        return TrendResult(trend=Trend.STABLE, percentage_change=0.0, consecutive_cycles=0)

    change = percentage_change(present[0], present[-1])
    trend = classify_change(change)
    return TrendResult(
        trend=trend,
        percentage_change=round_to(change, 2),
        consecutive_cycles=count_consecutive_cycles(present, trend),
    )


def calculate_consistency_score(scores: Sequence[Optional[float]]) -> int:
    """0-100 stability index: ``max(0, 100 - std * 50)``, 100 below two points."""
    present = non_null(scores)
    if len(present) < 2:
        return 100
    consistency = max(0.0, 100 - population_std(present) * CONSISTENCY_PENALTY_PER_STD)
    return int(round_to(consistency, 0))


def growth_rate(scores: Sequence[Optional[float]]) -> float:
    """First-to-last percentage growth of the non-null series, 2 decimals."""
    present = non_null(scores)
    if len(present) < 2:
        return 0.0
    return round_to(percentage_change(present[0], present[-1]), 2)
