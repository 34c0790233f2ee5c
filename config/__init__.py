# kpi_summary_root/config/__init__.py
# This file makes the 'config' directory a Python package.
# It exposes the singleton 'settings' instance and the widget configuration model.

from .settings import settings
from .kpi_config import KpiConfig, load_kpi_config
from .logging_config import configure_logging

__all__ = ["settings", "KpiConfig", "load_kpi_config", "configure_logging"]
