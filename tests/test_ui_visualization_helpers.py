# kpi_summary_root/tests/test_ui_visualization_helpers.py
# KPI SUMMARY ENGINE - FORMATTING & CARD MODEL TESTS

from datetime import date

import pytest

from analytics import compute_kpi
from config import KpiConfig
from visualization import (abbreviate_number, build_delta_badge,
                           build_global_formatter, build_goal_progress,
                           build_kpi_card_model, format_delta,
                           format_number_compact)

# Fixtures are sourced from conftest.py

# --- Number Formatting Tests ---
@pytest.mark.parametrize("n, expected", [
    (1500, "1.5K"),
    (2500000, "2.5M"),
    (3000000000, "3B"),
    (999, "999"),
    (-1200, "-1.2K"),
    (120000, "120K"),
    (None, ""),
    (float("nan"), ""),
])
def test_abbreviate_number_auto_decimals(n, expected):
    assert abbreviate_number(n) == expected

def test_abbreviate_number_with_fixed_decimals_and_affixes():
    assert abbreviate_number(1234, 2, "$", " USD") == "$1.23K USD"
    # An all-zero fraction is dropped even when decimals are fixed.
    assert abbreviate_number(2000, 2) == "2K"

def test_global_formatter_applies_configuration():
    fmt = build_global_formatter(KpiConfig(fmt_prefix="$", fmt_suffix="/mo", fmt_decimals=2))
    assert fmt(1234.5) == "$1,234.50/mo"
    assert fmt(None) == ""

def test_global_formatter_defaults_to_whole_numbers():
    fmt = build_global_formatter()
    assert fmt(1234567.4) == "1,234,567"
    assert fmt(0) == "0"

def test_ties_round_away_from_zero():
    """Displayed halves always round up in magnitude, matching the host's number rendering."""
    fmt = build_global_formatter()
    assert abbreviate_number(1250) == "1.3K"
    assert abbreviate_number(-1250) == "-1.3K"
    assert fmt(2.5) == "3"
    assert fmt(1234.5) == "1,235"
    assert format_delta(12.5, 0) == "13"
    assert format_delta(-0.25, 1) == "0.3"
    assert format_number_compact(1250) == "1.3K"
    assert build_delta_badge(12.5, "vs prev", 0)["text"] == "13% vs prev"

def test_global_formatter_groups_thousands_with_commas():
    fmt = build_global_formatter(KpiConfig(fmt_decimals=1))
    assert fmt(1e30) == "1" + ",000" * 10 + ".0"
    assert fmt(-9876543.21) == "-9,876,543.2"

def test_global_formatter_abbreviates_when_enabled():
    fmt = build_global_formatter(KpiConfig(fmt_abbreviate=True, fmt_suffix="%"))
    assert fmt(1500) == "1.5K%"
    assert fmt(42) == "42%"

@pytest.mark.parametrize("n, expected", [
    (2500000, "2.5M"),
    (1200, "1.2K"),
    (1234.0, "1.2K"),
    (999, "999"),
    (12.5, "12.5"),
    (3.14159, "3.14"),
    (None, ""),
])
def test_format_number_compact(n, expected):
    assert format_number_compact(n) == expected

def test_format_delta_drops_sign():
    assert format_delta(-12.345, 1) == "12.3"
    assert format_delta(20.0, 0) == "20"
    assert format_delta(None, 1) == ""

# --- Card Element Tests ---
def test_delta_badge_sentiment():
    up = build_delta_badge(20.0, "vs prev", 1)
    assert up == {"magnitude": "20.0", "arrow": "▲", "sentiment": "positive", "text": "20.0% vs prev"}

    down = build_delta_badge(-5.0, "vs prev", 1)
    assert down["arrow"] == "▼" and down["sentiment"] == "negative"

    assert build_delta_badge(None, "vs prev", 1) is None

def test_delta_badge_reverse_marks_decrease_as_good():
    badge = build_delta_badge(-5.0, "vs prev", 1, reverse=True)
    assert badge["arrow"] == "▼"
    assert badge["sentiment"] == "positive"

def test_delta_badge_neutral_when_rounding_to_zero():
    badge = build_delta_badge(0.04, "vs prev", 1)
    assert badge["sentiment"] == "neutral"
    assert badge["arrow"] == "–"
    assert badge["magnitude"] == "0.0"

def test_goal_progress_clamps_fill_but_reports_true_percentage():
    bar = build_goal_progress(130, "150,000", "Goal")
    assert bar["fill_pct"] == 100
    assert bar["status"] == "130% of goal"
    assert bar["caption"] == "Goal: 150,000"
    assert build_goal_progress(-20, "10", "Goal")["fill_pct"] == 0
    assert build_goal_progress(None, None, "Goal") is None
    assert build_goal_progress(50, "10", "") is None

# --- Card Model Tests ---
def test_card_model_defaults(quarterly_table, quarterly_encodings):
    kpi = compute_kpi(quarterly_table, quarterly_encodings, today=date(2026, 10, 18))
    card = build_kpi_card_model(kpi)

    assert card["header_label"] == "Sales"
    assert card["period_label"] == "2025 Q4 — 2026 Q1"
    assert card["formatted_value"] == "120,000"
    assert card["delta_badge"]["text"] == "20.0% vs prev"
    assert card["goal_bar"]["status"] == "80% of goal"
    assert card["goal2_bar"] is None
    assert card["ptd_badge"] is None
    assert card["ptd_spark_data"] is None
    assert len(card["spark_data"]) == 2

def test_card_model_labels_and_ptd(daily_table, daily_encodings, today):
    config = KpiConfig(ptd_enabled=True, value_label="Revenue", goal_label="", fmt_delta_decimals=0, delta_label="")
    kpi = compute_kpi(daily_table, daily_encodings, config, today=today)
    card = build_kpi_card_model(kpi, config)

    assert card["header_label"] == "Revenue"
    # An empty delta label falls back to the default text.
    assert card["delta_badge"]["text"] == "33% vs prev"
    assert card["ptd_badge"]["text"] == "100% vs prev PTD"
    assert card["ptd_spark_data"] == kpi.ptd_spark_data

def test_card_model_hides_ptd_badge_with_empty_label(daily_table, daily_encodings, today):
    config = KpiConfig(ptd_enabled=True, ptd_label="")
    kpi = compute_kpi(daily_table, daily_encodings, config, today=today)
    card = build_kpi_card_model(kpi, config)
    assert card["ptd_badge"] is None
    assert card["ptd_spark_data"] is not None
