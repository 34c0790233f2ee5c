# kpi_summary_root/tests/test_config.py
# KPI SUMMARY ENGINE - CONFIGURATION TESTS

import logging

import pytest

from config import KpiConfig, configure_logging, load_kpi_config, settings

# --- Widget Configuration Tests ---
def test_defaults():
    config = KpiConfig()
    assert config.fmt_decimals == -1
    assert config.number_decimals is None
    assert config.delta_decimals == settings.ENGINE.default_delta_decimals
    assert config.fmt_abbreviate is False
    assert config.ptd_enabled is False
    assert config.date_field_name is None

def test_from_store_parses_string_values():
    store = {
        "kpi_fmtPrefix": "$",
        "kpi_fmtDecimals": "2",
        "kpi_fmtAbbreviate": "true",
        "kpi_reverseDelta": "false",
        "kpi_ptdEnabled": "TRUE",
        "kpi_dateFieldName": "Order Date",
        "kpi_deltaLabel": "",
        "unrelated": "ignored",
    }
    config = KpiConfig.from_store(store)
    assert config.fmt_prefix == "$"
    assert config.fmt_decimals == 2
    assert config.number_decimals == 2
    assert config.fmt_abbreviate is True
    assert config.reverse_delta is False
    assert config.ptd_enabled is True
    assert config.date_field_name == "Order Date"
    assert config.delta_label == ""

@pytest.mark.parametrize("raw, expected", [
    ("3", 3),
    ("2px", 2),
    ("-1", -1),
    ("", -1),
    ("abc", -1),
    ("-5", -1),
    (1.9, 1),
])
def test_decimals_parsing(raw, expected):
    assert KpiConfig(fmt_decimals=raw).fmt_decimals == expected

def test_invalid_decimals_warn(caplog):
    with caplog.at_level(logging.WARNING):
        KpiConfig(fmtDeltaDecimals="many")
    assert "fmt_delta_decimals" in caplog.text

@pytest.mark.parametrize("raw, expected", [("true", True), ("yes", False), ("1", False), (True, True), (None, False)])
def test_flag_parsing(raw, expected):
    assert KpiConfig(fmt_abbreviate=raw).fmt_abbreviate is expected

def test_blank_field_names_are_unset():
    config = KpiConfig(dateFieldName="   ", ptdFieldName="")
    assert config.date_field_name is None
    assert config.ptd_field_name is None

def test_to_store_round_trips_through_from_store():
    config = KpiConfig(fmt_prefix="€", fmt_abbreviate=True, ptd_field_name="Sales PTD", goal_label="")
    store = config.to_store()
    assert store["kpi_fmtAbbreviate"] == "true"
    assert store["kpi_goalLabel"] == ""
    assert "kpi_valueLabel" not in store
    assert KpiConfig.from_store(store) == config

# --- Loader Tests ---
def test_load_kpi_config_accepts_supported_inputs():
    existing = KpiConfig(fmt_suffix="%")
    assert load_kpi_config(None) == KpiConfig()
    assert load_kpi_config(existing) is existing
    assert load_kpi_config({"fmtSuffix": "%"}).fmt_suffix == "%"
    assert load_kpi_config({"fmt_suffix": "%"}).fmt_suffix == "%"
    assert load_kpi_config({"kpi_fmtSuffix": "%"}).fmt_suffix == "%"

def test_load_kpi_config_rejects_other_types():
    with pytest.raises(TypeError):
        load_kpi_config(42)

# --- Logging Setup Tests ---
def test_configure_logging_sets_levels():
    configure_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG
    for name in settings.NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
    configure_logging()
    assert logging.getLogger().level == getattr(logging, settings.LOG_LEVEL)
