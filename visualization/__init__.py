# kpi_summary_root/visualization/__init__.py
# KPI SUMMARY ENGINE - PACKAGE API

"""
Initializes the visualization package, defining its public API.
Formatting and card view models only; drawing belongs to the host renderer.
"""

# --- Number Formatting from formatting.py ---
from .formatting import (
    NumberFormatter,
    abbreviate_number,
    build_global_formatter,
    format_number_compact,
    format_delta,
    quantize_half_up,
)

# --- Card View Models from ui_elements.py ---
from .ui_elements import (
    build_delta_badge,
    build_goal_progress,
    build_kpi_card_model,
)

# --- Define the canonical public API for the package ---
__all__ = [
    # from formatting.py
    "NumberFormatter",
    "abbreviate_number",
    "build_global_formatter",
    "format_number_compact",
    "format_delta",
    "quantize_half_up",

    # from ui_elements.py
    "build_delta_badge",
    "build_goal_progress",
    "build_kpi_card_model",
]
