# kpi_summary_root/data_processing/helpers.py
# KPI SUMMARY ENGINE - ROW & CELL UTILITIES

"""
Small, forgiving utilities for the loosely-typed rows hosts deliver: cell
access, numeric and date coercion, and flattening of paged data tables.
"""
import logging
import numbers
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

import numpy as np
import pandas as pd

from .models import ColumnInfo, DataTable, coerce_columns

logger = logging.getLogger(__name__)

# --- Standalone Utility Functions ---

NA_REGEX_PATTERN = re.compile(
    r'(?i)^\s*(nan|none|n/a|#n/a|np\.nan|nat|<na>|null|nil|na|undefined|unknown|-|)\s*$'
)

def convert_to_numeric(data_input: Any, default_value: Any = np.nan, target_type: Optional[Type] = None) -> Any:
    """
    Robustly converts various inputs to a numeric pandas Series or scalar,
    handling common "Not Available" string representations.
    """
    is_series = isinstance(data_input, pd.Series)
    series = data_input if is_series else pd.Series([data_input], dtype=object)

    if pd.api.types.is_object_dtype(series.dtype):
        series = series.replace(NA_REGEX_PATTERN, np.nan, regex=True)

    numeric_series = pd.to_numeric(series, errors='coerce')
    if not pd.isna(default_value):
        numeric_series = numeric_series.fillna(default_value)

    if target_type is int and pd.api.types.is_numeric_dtype(numeric_series.dtype):
        numeric_series = numeric_series.astype(pd.Int64Dtype() if numeric_series.isnull().any() else int)
    elif target_type is float:
        numeric_series = numeric_series.astype(float)

    return numeric_series if is_series else (numeric_series.iloc[0] if not numeric_series.empty else default_value)


def is_missing_token(raw: Any) -> bool:
    """True for None, NaN/NaT, the empty string and the literal 'null' in any case."""
    if raw is None:
        return True
    if pd.api.types.is_scalar(raw) and not isinstance(raw, str) and pd.isna(raw):
        return True
    text = str(raw)
    return text == '' or text.lower() == 'null'


# --- Cell Access ---

def get_cell(row: Any, column: Optional[str]) -> Any:
    if column is None or not isinstance(row, Mapping):
        return None
    return row.get(column)


def cell_value(cell: Any) -> Any:
    """The raw value of a ``{value, formattedValue}`` cell; bare scalars are their own value."""
    if isinstance(cell, Mapping):
        return cell.get('value')
    return cell


def _label_from_value(value: Any) -> Any:
    # 2026.0 displays as 2026
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def cell_label(cell: Any) -> Any:
    """The display string of a cell, falling back to its raw value."""
    if isinstance(cell, Mapping):
        formatted = cell.get('formattedValue', cell.get('formatted_value'))
        return formatted if formatted is not None else _label_from_value(cell.get('value'))
    return _label_from_value(cell)


def coerce_to_date(raw: Any) -> pd.Timestamp:
    """
    Interprets a raw date cell as a day-granularity timestamp.

    Native dates and datetimes are used as-is, numbers are epoch milliseconds,
    strings go through pandas' parser. Anything else, or anything that fails
    to parse, becomes NaT.
    """
    try:
        if isinstance(raw, bool):
            return pd.NaT
        if isinstance(raw, (pd.Timestamp, datetime, date, np.datetime64)):
            ts = pd.Timestamp(raw)
        elif isinstance(raw, numbers.Real):
            ts = pd.to_datetime(raw, unit='ms', errors='coerce')
        elif isinstance(raw, str) and raw.strip():
            ts = pd.to_datetime(raw.strip(), errors='coerce')
        else:
            return pd.NaT
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Unparseable date value {raw!r}: {e}")
        return pd.NaT
    if pd.isna(ts):
        return pd.NaT
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    # Row frames hold nanosecond timestamps; far-future sentinels cannot be placed on them.
    if not pd.Timestamp.min <= ts <= pd.Timestamp.max:
        logger.debug(f"Date value {raw!r} is outside the supported timestamp range.")
        return pd.NaT
    return ts.normalize()


# --- Data Table Assembly ---

def rows_from_table_page(columns: Sequence[Any], data: Iterable[Sequence[Any]]) -> List[Dict[str, Any]]:
    """
    Converts one page of a host data table into named rows.

    Each column carries a field name and the position of its cell within a
    data row; columns without an explicit index use their own position.
    """
    column_infos = coerce_columns(columns)
    rows: List[Dict[str, Any]] = []
    for record in data:
        row: Dict[str, Any] = {}
        for position, col in enumerate(column_infos):
            idx = col.index if col.index is not None else position
            row[col.field_name] = record[idx] if idx < len(record) else None
        rows.append(row)
    return rows


def concat_table_pages(pages: Iterable[Mapping[str, Any]]) -> DataTable:
    """Joins paged results into one DataTable; column metadata comes from the first page."""
    all_rows: List[Dict[str, Any]] = []
    all_columns: List[ColumnInfo] = []
    for page_number, page in enumerate(pages):
        page_columns = page.get('columns') or []
        all_rows.extend(rows_from_table_page(page_columns, page.get('data') or []))
        if page_number == 0:
            all_columns = coerce_columns(page_columns)
    logger.debug(f"Assembled {len(all_rows)} rows from paged data table.")
    return DataTable(rows=all_rows, columns=all_columns)
