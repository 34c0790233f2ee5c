# kpi_summary_root/analytics/time_series.py
# KPI SUMMARY ENGINE - TREND SERIES ASSEMBLY

import logging
from typing import List, Optional, Sequence, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict

from data_processing.models import PeriodBucket
from data_processing.periods import previous_period_label

logger = logging.getLogger(__name__)


class SparkPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: float


def _with_synthetic_predecessor(points: List[SparkPoint]) -> List[SparkPoint]:
    """A lone point gets a zero-valued point for the period before it so a line can be drawn."""
    if len(points) != 1:
        return points
    only = points[0]
    return [SparkPoint(label=previous_period_label(only.label), value=0), only]


def build_spark_data(buckets: Sequence[PeriodBucket]) -> List[SparkPoint]:
    points = [SparkPoint(label=b.label, value=b.value) for b in buckets]
    return _with_synthetic_predecessor(points)


def build_ptd_spark_data(buckets: Sequence[PeriodBucket]) -> Optional[List[SparkPoint]]:
    """Period-to-date series, only when every retained bucket has a PTD value."""
    if not buckets or any(b.ptd_value is None for b in buckets):
        return None
    points = [SparkPoint(label=b.label, value=b.ptd_value) for b in buckets]
    return _with_synthetic_predecessor(points)


def build_trend_series(buckets: Sequence[PeriodBucket]) -> Tuple[List[SparkPoint], Optional[List[SparkPoint]]]:
    spark = build_spark_data(buckets)
    ptd_spark = build_ptd_spark_data(buckets)
    logger.debug(f"Built trend series with {len(spark)} points (PTD series: {ptd_spark is not None}).")
    return spark, ptd_spark


def spark_series(points: Optional[Sequence[SparkPoint]]) -> pd.Series:
    """The trend points as a float Series indexed by period label, for chart layers."""
    if not points:
        return pd.Series(dtype=float)
    return pd.Series([p.value for p in points], index=[p.label for p in points], dtype=float)
