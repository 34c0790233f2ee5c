# kpi_summary_root/data_processing/periods.py
# KPI SUMMARY ENGINE - PERIOD LABEL RULES

"""
Recognition of the fixed set of period-label shapes the engine understands:
quarters (``2026 Q1``, ``Q1 2026``, ``2026-Q1``), bare years (``2026``) and
months (``2026-03``, ``March 2026``).

Labels are normalized for display, mapped onto calendar spans for
period-to-date work, and stepped back one period for trend synthesis.
Anything outside these shapes is passed through untouched.
"""

import calendar
import logging
import re
from datetime import date
from typing import Optional, Tuple

import pandas as pd

from config import settings

logger = logging.getLogger(__name__)

# --- Label Patterns ---
QUARTER_FIRST_PATTERN = re.compile(r'^Q(\d)\s+(\d{4})$', re.IGNORECASE)
YEAR_FIRST_PATTERN = re.compile(r'^(\d{4})\s+Q(\d)$', re.IGNORECASE)
YEAR_DASH_QUARTER_PATTERN = re.compile(r'^(\d{4})-Q(\d)$', re.IGNORECASE)
COMPACT_QUARTER_PATTERN = re.compile(r'^(\d{4})\s*Q(\d)$', re.IGNORECASE)
BARE_QUARTER_PATTERN = re.compile(r'^[1-4]$')
YEAR_PATTERN = re.compile(r'^(\d{4})$')
YEAR_MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{2})$')
MONTH_NAME_PATTERN = re.compile(r'^(\w+)\s+(\d{4})$')

_MONTH_NAMES = {name.lower(): num for num, name in enumerate(calendar.month_name) if name}
_MONTH_NAMES.update({name.lower(): num for num, name in enumerate(calendar.month_abbr) if name})


def is_quarter_date_field(date_field_name: Optional[str]) -> bool:
    upper = (date_field_name or '').upper()
    return any(marker in upper for marker in settings.ENGINE.quarter_field_markers)


def normalize_period_label(raw_label: object, date_field_name: Optional[str] = None) -> str:
    """
    Rewrites a raw period label into its display form.

    ``Q1 2026`` and ``2026-Q1`` become ``2026 Q1``; a bare 1-4 becomes ``Q<n>``
    when the date field is a quarter field. First matching rule wins.
    """
    text = str(raw_label).strip()

    match = QUARTER_FIRST_PATTERN.match(text)
    if match:
        return f"{match.group(2)} Q{match.group(1)}"
    if YEAR_FIRST_PATTERN.match(text):
        return text
    match = YEAR_DASH_QUARTER_PATTERN.match(text)
    if match:
        return f"{match.group(1)} Q{match.group(2)}"
    if BARE_QUARTER_PATTERN.match(text) and is_quarter_date_field(date_field_name):
        return f"Q{text}"
    return text


def _quarter_parts(label: str) -> Optional[Tuple[int, int]]:
    for pattern, year_group, quarter_group in (
        (COMPACT_QUARTER_PATTERN, 1, 2),
        (QUARTER_FIRST_PATTERN, 2, 1),
        (YEAR_DASH_QUARTER_PATTERN, 1, 2),
    ):
        match = pattern.match(label)
        if match:
            return int(match.group(year_group)), int(match.group(quarter_group))
    return None


def _month_number(name: str) -> Optional[int]:
    return _MONTH_NAMES.get(name.lower())


def parse_period(label: object) -> Optional[pd.Period]:
    """Maps a recognized label onto a calendar quarter, year or month."""
    text = str(label).strip()

    quarter = _quarter_parts(text)
    if quarter:
        year, q = quarter
        if year and 1 <= q <= 4:
            return pd.Period(year=year, quarter=q, freq='Q')

    match = YEAR_PATTERN.match(text)
    if match and int(match.group(1)):
        return pd.Period(year=int(match.group(1)), freq='Y')

    match = YEAR_MONTH_PATTERN.match(text)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        return pd.Period(year=year, month=month, freq='M') if year and 1 <= month <= 12 else None

    match = MONTH_NAME_PATTERN.match(text)
    if match:
        month = _month_number(match.group(1))
        year = int(match.group(2))
        if month and year:
            return pd.Period(year=year, month=month, freq='M')
    return None


def period_bounds(label: object) -> Optional[Tuple[date, date]]:
    """First and last calendar day covered by a period label, or None when unrecognized."""
    period = parse_period(label)
    if period is None:
        return None
    # Day-frequency periods stay valid beyond the nanosecond Timestamp range.
    first, last = period.asfreq('D', how='start'), period.asfreq('D', how='end')
    return date(first.year, first.month, first.day), date(last.year, last.month, last.day)


def period_start_date(label: object) -> Optional[date]:
    bounds = period_bounds(label)
    return bounds[0] if bounds else None


def period_end_date(label: object) -> Optional[date]:
    bounds = period_bounds(label)
    return bounds[1] if bounds else None


def previous_period_label(label: object) -> str:
    """
    The label one step before ``label``: quarters roll back a quarter (and a
    year from Q1), bare years drop by one, ``yyyy-mm`` rolls back a month.
    Any other shape yields the configured fallback label.
    """
    text = str(label).strip()

    match = COMPACT_QUARTER_PATTERN.match(text) or YEAR_DASH_QUARTER_PATTERN.match(text)
    if match:
        year, quarter = int(match.group(1)), int(match.group(2))
        if quarter == 1:
            return f"{year - 1} Q4"
        return f"{year} Q{quarter - 1}"

    match = YEAR_PATTERN.match(text)
    if match:
        return str(int(match.group(1)) - 1)

    match = YEAR_MONTH_PATTERN.match(text)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        if month == 1:
            return f"{year - 1}-12"
        return f"{year}-{month - 1:02d}"

    return settings.ENGINE.previous_period_fallback_label
