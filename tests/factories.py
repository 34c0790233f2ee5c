# kpi_summary_root/tests/factories.py
# KPI SUMMARY ENGINE - TEST DATA BUILDERS

from typing import Any, Dict, Optional


def cell(value: Any, formatted: Optional[str] = None) -> Dict[str, Any]:
    """Builds a host data cell; the formatted value defaults to the raw value's text."""
    if formatted is None and value is not None:
        formatted = str(value)
    return {"value": value, "formattedValue": formatted}
