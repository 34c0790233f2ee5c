# kpi_summary_root/tests/conftest.py
# KPI SUMMARY ENGINE - PYTEST FIXTURES

import sys
from pathlib import Path

# --- Path Setup for Module Imports ---
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from datetime import date, datetime
from typing import Any, Dict

import pytest

from factories import cell

# --- Core Data Fixtures ---

@pytest.fixture
def today() -> date:
    """A fixed reference day inside 2026 Q1."""
    return date(2026, 2, 15)


@pytest.fixture
def quarterly_table() -> Dict[str, Any]:
    """Two quarters of sales with a target, keyed by quarter labels only."""
    rows = [
        {"Quarter": cell("2025 Q4"), "SUM(Sales)": cell(100000), "SUM(Target)": cell(90000)},
        {"Quarter": cell("2026 Q1"), "SUM(Sales)": cell(120000), "SUM(Target)": cell(150000)},
    ]
    columns = [
        {"fieldName": "Quarter", "dataType": "string"},
        {"fieldName": "SUM(Sales)", "dataType": "float"},
        {"fieldName": "SUM(Target)", "dataType": "float"},
    ]
    return {"rows": rows, "columns": columns}


@pytest.fixture
def quarterly_encodings() -> Dict[str, Any]:
    return {
        "value": {"name": "Sales", "role": "measure"},
        "goal": {"name": "Target", "role": "measure"},
        "date": {"name": "Quarter", "role": "dimension"},
    }


@pytest.fixture
def daily_table() -> Dict[str, Any]:
    """Day-level rows grouped by quarter label, for period-to-date pace."""
    def row(day: datetime, label: str, sales: float, sales_ptd: float) -> Dict[str, Any]:
        return {
            "Order Date": cell(day, label),
            "Sales": cell(sales),
            "Sales PTD": cell(sales_ptd),
        }

    rows = [
        row(datetime(2025, 10, 5), "Q4 2025", 10, 4),
        row(datetime(2025, 11, 20), "Q4 2025", 20, 6),
        row(datetime(2026, 1, 10), "Q1 2026", 15, 0),
        row(datetime(2026, 2, 1), "Q1 2026", 5, 0),
    ]
    columns = [{"fieldName": name} for name in ("Order Date", "Sales", "Sales PTD")]
    return {"rows": rows, "columns": columns}


@pytest.fixture
def daily_encodings() -> Dict[str, Any]:
    return {
        "value": {"name": "Sales", "role": "measure"},
        "date": {"name": "Order Date", "role": "dimension"},
    }
