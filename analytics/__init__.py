# kpi_summary_root/analytics/__init__.py
# KPI SUMMARY ENGINE - PACKAGE API

"""
Initializes the analytics package, making the KPI pipeline and its
calculators available at the top level for easier importing.
"""

# From kpi_engine.py
from .kpi_engine import KpiEngine, KpiResult, compute_kpi

# From period_to_date.py
from .period_to_date import apply_period_to_date, elapsed_days_in_period

# From deltas.py
from .deltas import compute_deltas, goal_attainment, percent_change, round_half_up

# From time_series.py
from .time_series import SparkPoint, build_trend_series, spark_series

# --- Define the public API for the analytics package ---
__all__ = [
    # Pipeline
    "KpiEngine",
    "KpiResult",
    "compute_kpi",

    # Period-to-date
    "apply_period_to_date",
    "elapsed_days_in_period",

    # Deltas and goals
    "compute_deltas",
    "goal_attainment",
    "percent_change",
    "round_half_up",

    # Trend series
    "SparkPoint",
    "build_trend_series",
    "spark_series",
]
