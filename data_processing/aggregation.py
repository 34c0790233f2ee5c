# kpi_summary_root/data_processing/aggregation.py
# KPI SUMMARY ENGINE - PERIOD BUCKET AGGREGATION

import logging
import numbers
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from config import settings
from .helpers import cell_label, cell_value, coerce_to_date, convert_to_numeric, get_cell, is_missing_token
from .models import BUCKET_ROW_COLUMNS, PeriodBucket, ResolvedEncoding
from .periods import normalize_period_label

logger = logging.getLogger(__name__)

MEASURE_COLUMNS = ["value", "goal", "goal2", "ptd"]


def _epoch_millis(raw: Any) -> Optional[float]:
    """Milliseconds since the epoch for any native date, including ones outside pandas' nanosecond range."""
    if pd.isna(raw):
        return None
    if isinstance(raw, np.datetime64):
        raw = pd.Timestamp(raw)
    if isinstance(raw, pd.Timestamp):
        raw = raw.to_pydatetime(warn=False)
    if not isinstance(raw, datetime):
        raw = datetime(raw.year, raw.month, raw.day)
    if raw.tzinfo is None:
        raw = raw.replace(tzinfo=timezone.utc)
    return raw.timestamp() * 1000


def period_sort_key(raw: Any) -> Tuple[int, Any]:
    """
    Total ordering over raw date values of mixed type.

    Dates and numbers share one timeline (numbers are epoch milliseconds,
    naive dates are taken as UTC); strings sort after them lexicographically;
    anything else sorts last by its string form.
    """
    if isinstance(raw, bool):
        return (2, str(raw))
    if isinstance(raw, (pd.Timestamp, datetime, date, np.datetime64)):
        try:
            millis = _epoch_millis(raw)
        except (OverflowError, ValueError, pd.errors.OutOfBoundsDatetime) as e:
            logger.debug(f"Date {raw!r} has no epoch position; ordering it by text: {e}")
            millis = None
        return (0, millis) if millis is not None else (2, str(raw))
    if isinstance(raw, numbers.Real) and not pd.isna(raw):
        return (0, float(raw))
    if isinstance(raw, str):
        return (1, raw)
    return (2, str(raw))


def _measure_or_none(row: Mapping[str, Any], column: Optional[str]) -> Any:
    return cell_value(get_cell(row, column)) if column else None


def _collect_period_records(rows: Sequence[Mapping[str, Any]], resolved: ResolvedEncoding) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    records: List[Dict[str, Any]] = []
    sort_keys: Dict[str, Any] = {}
    skipped = 0

    for position, row in enumerate(rows):
        try:
            date_cell = get_cell(row, resolved.date_col)
            if date_cell is None:
                continue
            raw_date = cell_value(date_cell)
            if is_missing_token(raw_date):
                continue
            raw_label = cell_label(date_cell)
            if is_missing_token(raw_label):
                continue
            period_key = str(raw_label)
            record = {
                "period_key": period_key,
                "date": coerce_to_date(raw_date),
                "value": _measure_or_none(row, resolved.value_col),
                "goal": _measure_or_none(row, resolved.goal_col),
                "goal2": _measure_or_none(row, resolved.goal2_col),
                "ptd": _measure_or_none(row, resolved.ptd_col),
            }
            records.append(record)
            sort_keys.setdefault(period_key, raw_date)
        except Exception as e:
            skipped += 1
            logger.warning(f"Skipping malformed row {position} during period aggregation: {e}")

    if skipped:
        logger.warning(f"Skipped {skipped} malformed rows out of {len(rows)}.")
    return records, sort_keys


def _records_to_frame(records: List[Dict[str, Any]]) -> pd.DataFrame:
    frame = pd.DataFrame.from_records(records, columns=["period_key", "date"] + MEASURE_COLUMNS)
    frame["date"] = pd.to_datetime(frame["date"], errors='coerce')
    for col in MEASURE_COLUMNS:
        frame[col] = convert_to_numeric(frame[col].astype(object), default_value=0.0, target_type=float)
    return frame


def aggregate_periods(rows: Sequence[Mapping[str, Any]], resolved: ResolvedEncoding,
                      max_periods: Optional[int] = None) -> Optional[List[PeriodBucket]]:
    """
    Groups rows into one bucket per formatted date label and keeps the most
    recent ``max_periods`` buckets, oldest first.

    Rows with a missing, empty or 'null' date are skipped. Returns None when
    no bucket survives, which callers treat as "no data".
    """
    if not resolved.date_col:
        return None
    max_periods = settings.ENGINE.max_periods if max_periods is None else max_periods

    records, sort_keys = _collect_period_records(rows, resolved)
    if not records:
        logger.info(f"No rows with a usable '{resolved.date_col}' value; nothing to aggregate.")
        return None

    frame = _records_to_frame(records)
    totals = frame.groupby("period_key", sort=False)[MEASURE_COLUMNS].sum()

    buckets: List[PeriodBucket] = []
    for period_key, sums in totals.iterrows():
        bucket_rows = frame.loc[frame["period_key"] == period_key, BUCKET_ROW_COLUMNS].reset_index(drop=True)
        buckets.append(PeriodBucket(
            period_key=period_key,
            label=normalize_period_label(period_key, resolved.date_field_name),
            sort_key=sort_keys[period_key],
            value=float(sums["value"]),
            goal=float(sums["goal"]),
            goal2=float(sums["goal2"]),
            ptd_value=float(sums["ptd"]) if resolved.ptd_col else None,
            rows=bucket_rows,
        ))

    # sorted() is stable, so equal sort keys keep first-seen order.
    buckets = sorted(buckets, key=lambda b: period_sort_key(b.sort_key))
    retained = buckets[-max_periods:] if max_periods > 0 else []
    logger.debug(f"Aggregated {len(frame)} rows into {len(buckets)} periods; retained {len(retained)}.")
    return retained or None


def aggregate_totals(rows: Sequence[Mapping[str, Any]], resolved: ResolvedEncoding) -> Dict[str, float]:
    """Sums value, goal and goal2 over every row, for KPIs without a date column."""
    records = [
        {
            "value": _measure_or_none(row, resolved.value_col),
            "goal": _measure_or_none(row, resolved.goal_col),
            "goal2": _measure_or_none(row, resolved.goal2_col),
        }
        for row in rows
    ]
    frame = pd.DataFrame.from_records(records, columns=["value", "goal", "goal2"])
    totals = {
        col: float(convert_to_numeric(frame[col].astype(object), default_value=0.0, target_type=float).sum())
        for col in ["value", "goal", "goal2"]
    }
    logger.debug(f"Aggregated {len(frame)} rows without a date column.")
    return totals
