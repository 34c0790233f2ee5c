# kpi_summary_root/analytics/period_to_date.py
# KPI SUMMARY ENGINE - PERIOD-TO-DATE (PACE) VALUES

"""
Period-to-date values let an in-progress period be compared against earlier
periods over the same number of elapsed days.

With an explicit comparison column the per-bucket sum from aggregation is
already the PTD value. Without one, the elapsed-day count of the current
period is inferred from its label and each retained period is summed over its
own first ``elapsed`` days.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional

import pandas as pd

from data_processing.models import PeriodBucket, ResolvedEncoding
from data_processing.periods import period_bounds, period_start_date

logger = logging.getLogger(__name__)


def elapsed_days_in_period(label: str, today: date) -> Optional[int]:
    """
    Days elapsed in the period named by ``label`` up to and including
    ``today``. None when the label is unrecognized or the period has ended.
    """
    bounds = period_bounds(label)
    if bounds is None:
        return None
    start, end = bounds
    if today > end:
        return None
    return (today - start).days + 1


def sum_within_elapsed_window(bucket: PeriodBucket, elapsed_days: int) -> Optional[float]:
    """Sum of row values whose 1-based day offset into the bucket's period is within [1, elapsed_days]."""
    start = period_start_date(bucket.label)
    if start is None or bucket.rows is None or bucket.rows.empty:
        return None
    dates = pd.to_datetime(bucket.rows["date"], errors='coerce')
    if dates.isna().all():
        return 0.0
    try:
        day_of_period = (dates - pd.Timestamp(start)).dt.days + 1
    except (OverflowError, pd.errors.OutOfBoundsDatetime, pd.errors.OutOfBoundsTimedelta) as e:
        logger.warning(f"Cannot place rows of '{bucket.label}' on a timeline: {e}")
        return None
    in_window = day_of_period.between(1, elapsed_days)
    return float(bucket.rows.loc[in_window, "value"].sum())


def apply_period_to_date(buckets: List[PeriodBucket], resolved: ResolvedEncoding,
                         today: Optional[date] = None) -> List[PeriodBucket]:
    """Returns the buckets annotated with ``ptd_value`` (possibly None)."""
    if not buckets or resolved.ptd_col:
        return buckets

    today = today or date.today()
    current = buckets[-1]
    elapsed = elapsed_days_in_period(current.label, today)
    if elapsed is None:
        logger.debug(f"Period-to-date pace unavailable for '{current.label}' as of {today}.")
        return [replace(b, ptd_value=None) for b in buckets]

    logger.debug(f"Period-to-date window: first {elapsed} day(s) of each period.")
    return [replace(b, ptd_value=sum_within_elapsed_window(b, elapsed)) for b in buckets]
