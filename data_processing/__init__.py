# kpi_summary_root/data_processing/__init__.py
# KPI SUMMARY ENGINE - PACKAGE API

"""
Initializes the data_processing package, defining its public API.

This file explicitly exports the input models, field resolution, period-label
rules and period aggregation, providing a single import point for the
analytics layer.
"""

# --- Input & Intermediate Models from models.py ---
from .models import (
    ColumnInfo,
    DataTable,
    FieldRef,
    FieldRole,
    PeriodBucket,
    ResolvedEncoding,
    coerce_data_table,
    coerce_encoding_map,
)

# --- Row & Cell Utilities from helpers.py ---
from .helpers import (
    coerce_to_date,
    concat_table_pages,
    convert_to_numeric,
    rows_from_table_page,
)

# --- Role Resolution from field_resolution.py ---
from .field_resolution import find_column, resolve_encodings

# --- Period Labels from periods.py ---
from .periods import (
    normalize_period_label,
    period_bounds,
    previous_period_label,
)

# --- Aggregation from aggregation.py ---
from .aggregation import aggregate_periods, aggregate_totals, period_sort_key


# --- Define the canonical public API for the package ---
__all__ = [
    # models.py
    "ColumnInfo",
    "DataTable",
    "FieldRef",
    "FieldRole",
    "PeriodBucket",
    "ResolvedEncoding",
    "coerce_data_table",
    "coerce_encoding_map",

    # helpers.py
    "coerce_to_date",
    "concat_table_pages",
    "convert_to_numeric",
    "rows_from_table_page",

    # field_resolution.py
    "find_column",
    "resolve_encodings",

    # periods.py
    "normalize_period_label",
    "period_bounds",
    "previous_period_label",

    # aggregation.py
    "aggregate_periods",
    "aggregate_totals",
    "period_sort_key",
]
