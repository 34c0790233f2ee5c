# kpi_summary_root/analytics/kpi_engine.py
# KPI SUMMARY ENGINE - KPI COMPUTATION PIPELINE

"""
Turns one query result (rows, columns, encoding map, widget configuration)
into a single KPI summary.

The pipeline is resolve -> aggregate -> period-to-date -> compose. Every
step is a pure function of its inputs; the engine never raises to its
caller. A None result means either that no value column could be resolved
or that no row carried a usable date.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from config import KpiConfig, load_kpi_config, settings
from data_processing.aggregation import aggregate_periods, aggregate_totals
from data_processing.field_resolution import resolve_encodings
from data_processing.models import (DataTable, PeriodBucket, ResolvedEncoding,
                                    coerce_data_table, coerce_encoding_map)
from visualization.formatting import NumberFormatter, build_global_formatter
from .deltas import compute_deltas, goal_attainment
from .period_to_date import apply_period_to_date
from .time_series import SparkPoint, build_trend_series

logger = logging.getLogger(__name__)


class KpiResult(BaseModel):
    """The composed KPI handed to renderers. Numeric None means 'not applicable', never zero."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    label: str
    current_value: float
    formatted_value: str
    previous_value: Optional[float] = None
    delta: Optional[float] = None
    ptd_delta: Optional[float] = None
    goal_value: Optional[float] = None
    goal_pct: Optional[int] = None
    formatted_goal: Optional[str] = None
    goal2_value: Optional[float] = None
    goal2_pct: Optional[int] = None
    formatted_goal2: Optional[str] = None
    goal2_label: str
    spark_data: Optional[List[SparkPoint]] = None
    ptd_spark_data: Optional[List[SparkPoint]] = None
    period_label: Optional[str] = None
    formatter: Callable[[Optional[float]], str] = Field(exclude=True, repr=False)

    def __eq__(self, other: Any) -> bool:
        # The embedded formatter is a fresh closure per computation; compare data only.
        if not isinstance(other, KpiResult):
            return NotImplemented
        return self.model_dump() == other.model_dump()

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping with the renderer-facing camelCase keys; the formatter is left out."""
        data = self.model_dump()
        return {_to_camel(key): value for key, value in data.items()}


def _to_camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part[:1].upper() + part[1:] for part in rest)


class KpiEngine:
    """
    A pipeline class that applies field resolution, period aggregation,
    period-to-date inference and delta composition to one query result.
    Step failures are logged and recorded in ``errors``; they never escape.
    """
    def __init__(self, data_table: Union[DataTable, Mapping[str, Any], None],
                 encodings: Optional[Mapping[str, Any]],
                 config: Union[None, KpiConfig, Mapping[str, Any]] = None,
                 today: Optional[date] = None, source_context: str = "default"):
        self.data_table = data_table
        self.encodings = encodings
        self.config = config
        self.today = today
        self.source_context = source_context
        self.errors: List[str] = []

    def _resolve(self, table: DataTable, config: KpiConfig) -> ResolvedEncoding:
        return resolve_encodings(coerce_encoding_map(self.encodings), table.column_names, config)

    def _compose_without_dates(self, table: DataTable, resolved: ResolvedEncoding,
                               fmt: NumberFormatter) -> KpiResult:
        totals = aggregate_totals(table.rows, resolved)
        goal_value = totals["goal"] if resolved.goal_col else None
        goal2_value = totals["goal2"] if resolved.goal2_col else None
        return KpiResult(
            label=_value_label(resolved),
            current_value=totals["value"],
            formatted_value=fmt(totals["value"]),
            goal_value=goal_value,
            goal_pct=goal_attainment(totals["value"], goal_value),
            formatted_goal=fmt(goal_value) if goal_value is not None else None,
            goal2_value=goal2_value,
            goal2_pct=goal_attainment(totals["value"], goal2_value),
            formatted_goal2=fmt(goal2_value) if goal2_value is not None else None,
            goal2_label=_goal2_label(resolved),
            formatter=fmt,
        )

    def _compose(self, periods: List[PeriodBucket], resolved: ResolvedEncoding,
                 fmt: NumberFormatter) -> KpiResult:
        current = periods[-1]
        previous = periods[-2] if len(periods) > 1 else None
        deltas = compute_deltas(current, previous, resolved)
        spark_data, ptd_spark_data = build_trend_series(periods)

        period_label = current.label
        if previous is not None:
            period_label = f"{periods[0].label}{settings.ENGINE.period_range_separator}{current.label}"

        return KpiResult(
            label=_value_label(resolved),
            current_value=current.value,
            formatted_value=fmt(current.value),
            previous_value=previous.value if previous is not None else None,
            delta=deltas.delta,
            ptd_delta=deltas.ptd_delta,
            goal_value=deltas.goal_value,
            goal_pct=deltas.goal_pct,
            formatted_goal=fmt(deltas.goal_value) if deltas.goal_value is not None else None,
            goal2_value=deltas.goal2_value,
            goal2_pct=deltas.goal2_pct,
            formatted_goal2=fmt(deltas.goal2_value) if deltas.goal2_value is not None else None,
            goal2_label=_goal2_label(resolved),
            spark_data=spark_data,
            ptd_spark_data=ptd_spark_data,
            period_label=period_label,
            formatter=fmt,
        )

    def run(self) -> Optional[KpiResult]:
        """Executes the full pipeline and returns the KPI, or None when none can be produced."""
        try:
            table = coerce_data_table(self.data_table)
            config = load_kpi_config(self.config)
            resolved = self._resolve(table, config)
            if not resolved.has_value:
                logger.info(f"({self.source_context}) No value column could be resolved; no KPI produced.")
                return None

            fmt = build_global_formatter(config)
            if not resolved.date_col:
                return self._compose_without_dates(table, resolved, fmt)

            periods = aggregate_periods(table.rows, resolved)
            if periods is None:
                logger.info(f"({self.source_context}) No usable periods in '{resolved.date_col}'; no KPI produced.")
                return None

            periods = apply_period_to_date(periods, resolved, self.today)
            return self._compose(periods, resolved, fmt)
        except Exception as e:
            msg = "KPI computation failed."
            self.errors.append(f"{msg} {e}")
            logger.error(f"({self.source_context}) {msg}: {e}", exc_info=True)
            return None


def _value_label(resolved: ResolvedEncoding) -> str:
    return resolved.value_field.name if resolved.value_field is not None else resolved.value_col


def _goal2_label(resolved: ResolvedEncoding) -> str:
    return resolved.goal2_field.name if resolved.goal2_field is not None else settings.ENGINE.secondary_goal_label


def compute_kpi(data_table: Union[DataTable, Mapping[str, Any], None],
                encodings: Optional[Mapping[str, Any]],
                config: Union[None, KpiConfig, Mapping[str, Any]] = None,
                today: Optional[date] = None) -> Optional[KpiResult]:
    """
    Computes the KPI summary for one query result.

    Args:
        data_table: A DataTable or ``{"rows": [...], "columns": [...]}`` mapping.
        encodings: Role id ('value', 'goal', 'goal2', 'date', ...) to field reference.
        config: Widget configuration (KpiConfig, option mapping or prefixed store).
        today: The reference day for period-to-date pace; defaults to the local date.

    Returns:
        The KpiResult, or None when no KPI can be produced.
    """
    return KpiEngine(data_table, encodings, config, today).run()
