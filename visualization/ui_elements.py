# kpi_summary_root/visualization/ui_elements.py
# KPI SUMMARY ENGINE - CARD VIEW MODELS

"""
Display-ready descriptions of the pieces of a KPI card: delta badges, goal
progress bars and the card as a whole. Renderers draw these; nothing here
touches a UI toolkit.
"""

import logging
from typing import Any, Dict, Optional

from config import KpiConfig, settings
from .formatting import format_delta

logger = logging.getLogger(__name__)


def _label_or_default(configured: Optional[str], default: str) -> str:
    """A configured label wins even when empty (empty hides the element)."""
    return configured if configured is not None else default


def build_delta_badge(delta: Optional[float], label: str, decimals: int, reverse: bool = False) -> Optional[Dict[str, Any]]:
    """
    Describes a percentage-change badge.

    Sentiment is neutral when the displayed magnitude rounds to zero; an
    increase is positive unless ``reverse`` marks lower values as better.
    """
    if delta is None:
        return None
    magnitude = format_delta(delta, decimals)
    is_neutral = float(magnitude) == 0
    is_up = delta > 0
    if is_neutral:
        sentiment, arrow = "neutral", settings.DISPLAY.arrow_flat
    else:
        sentiment = "positive" if is_up != reverse else "negative"
        arrow = settings.DISPLAY.arrow_up if is_up else settings.DISPLAY.arrow_down
    return {
        "magnitude": magnitude,
        "arrow": arrow,
        "sentiment": sentiment,
        "text": f"{magnitude}% {label}",
    }


def build_goal_progress(goal_pct: Optional[int], formatted_goal: Optional[str], label: str) -> Optional[Dict[str, Any]]:
    """Describes a goal bar; the fill is clamped to 0-100 while the text keeps the true percentage."""
    if goal_pct is None or label == "":
        return None
    return {
        "fill_pct": max(0, min(goal_pct, 100)),
        "caption": f"{label}: {formatted_goal or ''}",
        "status": f"{goal_pct}% of goal",
    }


def build_kpi_card_model(kpi: Any, config: Optional[KpiConfig] = None) -> Dict[str, Any]:
    """
    Assembles everything a KPI card shows from a computed KPI and the widget
    configuration. Hidden elements (empty labels, disabled PTD) come back as None.
    """
    config = config or KpiConfig()
    decimals = config.delta_decimals

    delta_label = config.delta_label or settings.DISPLAY.delta_label
    ptd_label = _label_or_default(config.ptd_label, settings.DISPLAY.ptd_label)
    ptd_badge = None
    if config.ptd_enabled and ptd_label != "":
        ptd_badge = build_delta_badge(kpi.ptd_delta, ptd_label, decimals, config.reverse_delta)

    card = {
        "header_label": _label_or_default(config.value_label, kpi.label),
        "period_label": kpi.period_label,
        "formatted_value": kpi.formatted_value,
        "delta_badge": build_delta_badge(kpi.delta, delta_label, decimals, config.reverse_delta),
        "ptd_badge": ptd_badge,
        "goal_bar": build_goal_progress(
            kpi.goal_pct, kpi.formatted_goal, _label_or_default(config.goal_label, settings.DISPLAY.goal_label)),
        "goal2_bar": build_goal_progress(
            kpi.goal2_pct, kpi.formatted_goal2, _label_or_default(config.goal2_label, kpi.goal2_label)),
        "spark_data": kpi.spark_data,
        "ptd_spark_data": kpi.ptd_spark_data if config.ptd_enabled else None,
    }
    logger.debug(f"Built card model for '{card['header_label']}'.")
    return card
