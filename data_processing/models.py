# kpi_summary_root/data_processing/models.py
# KPI SUMMARY ENGINE - INPUT & INTERMEDIATE DATA MODELS

"""
Typed shapes for what the host hands the engine (columns, field references,
the encoding map, the data table) and for what the engine builds on the way
to a KPI (resolved columns, period buckets).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

ENCODING_ROLE_IDS = ("value", "goal", "goal2", "date")
MEASURE_ROLE_IDS = ("value", "goal", "goal2")
BUCKET_ROW_COLUMNS = ["date", "value", "goal", "goal2"]


class FieldRole(str, Enum):
    MEASURE = "measure"
    DIMENSION = "dimension"


class FieldRef(BaseModel):
    """A field placed on one of the host's visual roles."""
    model_config = ConfigDict(frozen=True)

    name: str
    role: Optional[FieldRole] = None

    @field_validator("role", mode="before")
    @classmethod
    def _unknown_role_is_none(cls, value: Any) -> Optional[str]:
        if isinstance(value, FieldRole):
            return value
        text = str(value).strip().lower() if value is not None else ""
        return text if text in {r.value for r in FieldRole} else None


class ColumnInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field_name: str = Field(alias="fieldName")
    data_type: Optional[str] = Field(None, alias="dataType")
    index: Optional[int] = None


class ResolvedEncoding(BaseModel):
    """Concrete column names chosen for each role. A None column disables that feature."""
    model_config = ConfigDict(frozen=True)

    value_col: Optional[str] = None
    goal_col: Optional[str] = None
    goal2_col: Optional[str] = None
    date_col: Optional[str] = None
    ptd_col: Optional[str] = None
    date_field_name: str = ""
    value_field: Optional[FieldRef] = None
    goal2_field: Optional[FieldRef] = None

    @property
    def has_value(self) -> bool:
        return self.value_col is not None


@dataclass
class PeriodBucket:
    """Aggregated totals for one formatted date label."""
    period_key: str
    label: str
    sort_key: Any
    value: float = 0.0
    goal: float = 0.0
    goal2: float = 0.0
    ptd_value: Optional[float] = None
    rows: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=BUCKET_ROW_COLUMNS))


@dataclass(frozen=True)
class DataTable:
    rows: Sequence[Mapping[str, Any]]
    columns: List[ColumnInfo]

    @property
    def column_names(self) -> List[str]:
        return [c.field_name for c in self.columns]


EncodingMap = Dict[str, Optional[FieldRef]]


# --- Boundary Coercion ---

def coerce_field_ref(raw: Any) -> Optional[FieldRef]:
    if raw is None or isinstance(raw, FieldRef):
        return raw
    if isinstance(raw, Mapping):
        name = raw.get("name")
        if name is None:
            return None
        return FieldRef(name=str(name), role=raw.get("role"))
    return FieldRef(name=str(raw))


def coerce_encoding_map(raw: Optional[Mapping[str, Any]]) -> EncodingMap:
    """Normalizes an encoding map, keeping the host's role order."""
    if not raw:
        return {}
    return {str(role_id): coerce_field_ref(ref) for role_id, ref in raw.items()}


def coerce_columns(raw: Optional[Sequence[Any]]) -> List[ColumnInfo]:
    columns: List[ColumnInfo] = []
    for position, col in enumerate(raw or []):
        if isinstance(col, ColumnInfo):
            columns.append(col)
        elif isinstance(col, Mapping):
            columns.append(ColumnInfo.model_validate(dict(col)))
        else:
            columns.append(ColumnInfo(field_name=str(col), index=position))
    return columns


def coerce_data_table(raw: Union[DataTable, Mapping[str, Any], None]) -> DataTable:
    """Accepts a DataTable or a ``{"rows": [...], "columns": [...]}`` mapping."""
    if isinstance(raw, DataTable):
        return raw
    if raw is None:
        return DataTable(rows=[], columns=[])
    rows = list(raw.get("rows") or [])
    columns = coerce_columns(raw.get("columns"))
    if not columns and rows:
        # Column metadata is optional; fall back to the first row's fields.
        columns = coerce_columns(list(rows[0].keys()))
    return DataTable(rows=rows, columns=columns)
