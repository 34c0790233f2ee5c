# kpi_summary_root/config/kpi_config.py
# KPI SUMMARY ENGINE - TYPED WIDGET CONFIGURATION

"""
The per-widget configuration consumed by the KPI engine.

Hosts persist widget options as a flat store of string values under
prefixed keys (``kpi_fmtDecimals`` -> ``"2"``). ``KpiConfig`` is the one
place those strings are parsed: every option has an explicit default, and
values that cannot be parsed fall back to that default with a warning
instead of failing the computation.
"""

import logging
import math
import re
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .settings import settings

logger = logging.getLogger(__name__)

_LEADING_INT_PATTERN = re.compile(r'^\s*[-+]?\d+')


class KpiConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra='ignore')

    # --- Data fields ---
    date_field_name: Optional[str] = Field(None, alias="dateFieldName")
    ptd_field_name: Optional[str] = Field(None, alias="ptdFieldName")

    # --- Global number format ---
    fmt_prefix: str = Field("", alias="fmtPrefix")
    fmt_suffix: str = Field("", alias="fmtSuffix")
    fmt_decimals: int = Field(-1, alias="fmtDecimals")
    fmt_abbreviate: bool = Field(False, alias="fmtAbbreviate")
    fmt_delta_decimals: int = Field(-1, alias="fmtDeltaDecimals")

    # --- Comparison ---
    ptd_enabled: bool = Field(False, alias="ptdEnabled")
    reverse_delta: bool = Field(False, alias="reverseDelta")

    # --- Labels (None = default text, "" = hidden) ---
    value_label: Optional[str] = Field(None, alias="valueLabel")
    delta_label: Optional[str] = Field(None, alias="deltaLabel")
    goal_label: Optional[str] = Field(None, alias="goalLabel")
    goal2_label: Optional[str] = Field(None, alias="goal2Label")
    ptd_label: Optional[str] = Field(None, alias="ptdLabel")

    @field_validator("date_field_name", "ptd_field_name", mode="before")
    @classmethod
    def _blank_field_name_is_unset(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value)
        return text if text.strip() else None

    @field_validator("fmt_prefix", "fmt_suffix", mode="before")
    @classmethod
    def _affix_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("value_label", "delta_label", "goal_label", "goal2_label", "ptd_label", mode="before")
    @classmethod
    def _label_as_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("fmt_decimals", "fmt_delta_decimals", mode="before")
    @classmethod
    def _parse_decimals(cls, value: Any, info: ValidationInfo) -> int:
        if value is None or (isinstance(value, str) and not value.strip()):
            return -1
        parsed: Optional[int] = None
        if isinstance(value, bool):
            parsed = None
        elif isinstance(value, int):
            parsed = value
        elif isinstance(value, float):
            parsed = int(value) if math.isfinite(value) else None
        else:
            match = _LEADING_INT_PATTERN.match(str(value))
            parsed = int(match.group(0)) if match else None
        if parsed is None or parsed < -1:
            logger.warning(f"Invalid value {value!r} for '{info.field_name}'; using automatic decimals.")
            return -1
        return parsed

    @field_validator("fmt_abbreviate", "ptd_enabled", "reverse_delta", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any, info: ValidationInfo) -> bool:
        if value is None:
            return cls.model_fields[info.field_name].default
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    # --- Derived accessors ---
    @property
    def number_decimals(self) -> Optional[int]:
        """Configured fraction digits for values, or None when left on auto."""
        return self.fmt_decimals if self.fmt_decimals >= 0 else None

    @property
    def delta_decimals(self) -> int:
        return self.fmt_delta_decimals if self.fmt_delta_decimals >= 0 else settings.ENGINE.default_delta_decimals

    # --- Host settings store ---
    @classmethod
    def from_store(cls, store: Mapping[str, Any], prefix: Optional[str] = None) -> 'KpiConfig':
        """Builds a config from the host's flat, prefixed, string-valued settings store."""
        prefix = settings.ENGINE.settings_key_prefix if prefix is None else prefix
        values: Dict[str, Any] = {}
        for field in cls.model_fields.values():
            raw = store.get(f"{prefix}{field.alias}")
            if raw is not None:
                values[field.alias] = raw
        return cls.model_validate(values)

    def to_store(self, prefix: Optional[str] = None) -> Dict[str, str]:
        """Serializes back to store form. Unset options are omitted so the host erases them."""
        prefix = settings.ENGINE.settings_key_prefix if prefix is None else prefix
        store: Dict[str, str] = {}
        for name, field in type(self).model_fields.items():
            value = getattr(self, name)
            if value is None:
                continue
            store[f"{prefix}{field.alias}"] = str(value).lower() if isinstance(value, bool) else str(value)
        return store


def load_kpi_config(source: Union[None, KpiConfig, Mapping[str, Any]] = None) -> KpiConfig:
    """
    Normalizes any accepted configuration input into a KpiConfig.

    Accepts None (all defaults), an existing KpiConfig, a mapping keyed by
    option name (camelCase or snake_case), or a raw prefixed settings store.
    """
    if source is None:
        return KpiConfig()
    if isinstance(source, KpiConfig):
        return source
    if isinstance(source, Mapping):
        prefix = settings.ENGINE.settings_key_prefix
        if any(str(key).startswith(prefix) for key in source):
            return KpiConfig.from_store(source, prefix)
        return KpiConfig.model_validate(dict(source))
    raise TypeError(f"Unsupported configuration type: {type(source).__name__}")
