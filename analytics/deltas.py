# kpi_summary_root/analytics/deltas.py
# KPI SUMMARY ENGINE - DELTA & GOAL ARITHMETIC

import logging
import math
from dataclasses import dataclass
from typing import Optional

from data_processing.models import PeriodBucket, ResolvedEncoding

logger = logging.getLogger(__name__)


def round_half_up(x: float) -> int:
    """Rounds to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(x + 0.5))


def _finite_or_none(x: float) -> Optional[float]:
    return x if math.isfinite(x) else None


def percent_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    """(current - previous) / |previous| * 100, or None when either is missing or previous is 0."""
    if current is None or previous is None or previous == 0 or math.isnan(previous):
        return None
    return _finite_or_none((current - previous) / abs(previous) * 100)


def goal_attainment(value: Optional[float], goal: Optional[float]) -> Optional[int]:
    """Whole-number percentage of goal reached, or None for a missing or zero goal."""
    if value is None or goal is None or goal == 0 or math.isnan(goal):
        return None
    ratio = _finite_or_none(value / goal * 100)
    return round_half_up(ratio) if ratio is not None else None


def period_to_date_delta(current: PeriodBucket, previous: Optional[PeriodBucket],
                         resolved: ResolvedEncoding) -> Optional[float]:
    """
    Pace comparison against the previous period.

    With a comparison column, the current full value is compared to the
    previous period's comparison total. Otherwise both periods' inferred
    period-to-date values are compared.
    """
    if previous is None:
        return None
    if resolved.ptd_col and previous.ptd_value:
        return percent_change(current.value, previous.ptd_value)
    if current.ptd_value is not None and previous.ptd_value is not None:
        return percent_change(current.ptd_value, previous.ptd_value)
    return None


@dataclass(frozen=True)
class DeltaSummary:
    delta: Optional[float] = None
    ptd_delta: Optional[float] = None
    goal_value: Optional[float] = None
    goal_pct: Optional[int] = None
    goal2_value: Optional[float] = None
    goal2_pct: Optional[int] = None


def compute_deltas(current: PeriodBucket, previous: Optional[PeriodBucket],
                   resolved: ResolvedEncoding) -> DeltaSummary:
    goal_value = current.goal if resolved.goal_col else None
    goal2_value = current.goal2 if resolved.goal2_col else None
    summary = DeltaSummary(
        delta=percent_change(current.value, previous.value) if previous is not None else None,
        ptd_delta=period_to_date_delta(current, previous, resolved),
        goal_value=goal_value,
        goal_pct=goal_attainment(current.value, goal_value),
        goal2_value=goal2_value,
        goal2_pct=goal_attainment(current.value, goal2_value),
    )
    logger.debug(f"Deltas for '{current.label}': {summary}")
    return summary
