# kpi_summary_root/data_processing/field_resolution.py
# KPI SUMMARY ENGINE - ROLE -> COLUMN RESOLUTION

"""
Maps the abstract KPI roles (value, goal, secondary goal, date, comparison)
onto concrete column names of the query result.

Host field names and result column names rarely agree exactly (aggregations
wrap them, e.g. ``SUM(Sales)``), so matching is exact-then-substring. The
rules below are applied in a fixed order and an unresolvable role simply
stays None.
"""

import logging
from typing import Iterable, List, Optional, Set

from config import KpiConfig
from .models import EncodingMap, FieldRef, FieldRole, ResolvedEncoding

logger = logging.getLogger(__name__)


def find_column(name: Optional[str], column_names: Iterable[str], case_sensitive: bool = True) -> Optional[str]:
    """
    Finds the column for a field name: an exact match first, otherwise the
    first column whose name contains the field name or is contained in it.
    """
    if not name:
        return None
    names = list(column_names)
    if name in names:
        return name
    needle = name if case_sensitive else name.lower()
    for column in names:
        candidate = column if case_sensitive else column.lower()
        if needle in candidate or candidate in needle:
            return column
    return None


def _find_field_column(ref: Optional[FieldRef], column_names: List[str]) -> Optional[str]:
    return find_column(ref.name, column_names) if ref is not None else None


def _fallback_dimension(encodings: EncodingMap, column_names: List[str]) -> Optional[str]:
    for role_id, ref in encodings.items():
        if ref is None or role_id in ("value", "goal", "goal2"):
            continue
        if ref.role == FieldRole.DIMENSION:
            column = _find_field_column(ref, column_names)
            if column:
                return column
    return None


def _fallback_measure(encodings: EncodingMap, column_names: List[str],
                      skip_role_ids: Set[str], used: Set[str]) -> Optional[str]:
    for role_id, ref in encodings.items():
        if ref is None or role_id in skip_role_ids:
            continue
        if ref.role == FieldRole.MEASURE:
            column = _find_field_column(ref, column_names)
            if column and column not in used:
                return column
    return None


def _date_field_name(encodings: EncodingMap) -> str:
    date_ref = encodings.get("date")
    if date_ref is not None:
        return date_ref.name or ""
    for ref in encodings.values():
        if ref is not None and ref.role == FieldRole.DIMENSION:
            return ref.name or ""
    return ""


def resolve_encodings(encodings: EncodingMap, column_names: Iterable[str],
                      config: Optional[KpiConfig] = None) -> ResolvedEncoding:
    """
    Resolves every role to a column name (or None).

    Order of rules:
      1. the role's own encoding field (exact, then substring match);
      2. date only: the configured date field name, matched case-insensitively,
         replaces the encoding match when it resolves;
      3. date only, still unresolved: the first dimension field not placed on a
         measure role;
      4. goal/goal2 only, still unresolved and a value column exists: the first
         measure field whose column is not already taken;
      5. comparison column: only from the configured comparison field name.
    """
    config = config or KpiConfig()
    names = list(column_names)

    value_col = _find_field_column(encodings.get("value"), names)
    goal_col = _find_field_column(encodings.get("goal"), names)
    goal2_col = _find_field_column(encodings.get("goal2"), names)
    date_col = _find_field_column(encodings.get("date"), names)

    if config.date_field_name:
        override = find_column(config.date_field_name, names, case_sensitive=False)
        if override:
            date_col = override

    if not date_col:
        date_col = _fallback_dimension(encodings, names)

    used = {c for c in (value_col, goal_col, goal2_col) if c}
    if not goal_col and value_col:
        goal_col = _fallback_measure(encodings, names, {"value"}, used)
        if goal_col:
            used.add(goal_col)
    if not goal2_col and value_col:
        goal2_col = _fallback_measure(encodings, names, {"value", "goal"}, used)
        if goal2_col:
            used.add(goal2_col)

    ptd_col = find_column(config.ptd_field_name, names, case_sensitive=False) if config.ptd_field_name else None

    resolved = ResolvedEncoding(
        value_col=value_col,
        goal_col=goal_col,
        goal2_col=goal2_col,
        date_col=date_col,
        ptd_col=ptd_col,
        date_field_name=_date_field_name(encodings),
        value_field=encodings.get("value"),
        goal2_field=encodings.get("goal2"),
    )
    logger.debug(
        f"Resolved encodings: value={value_col}, goal={goal_col}, goal2={goal2_col}, "
        f"date={date_col}, ptd={ptd_col}"
    )
    return resolved
