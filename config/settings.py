# kpi_summary_root/config/settings.py
# KPI SUMMARY ENGINE - CENTRALIZED CONFIGURATION HUB

import logging
from typing import List, Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

settings_logger = logging.getLogger(__name__)

# --- Nested Models for Structured Configuration ---
class EngineConfig(BaseModel):
    max_periods: int = 4
    default_delta_decimals: int = 1
    quarter_field_markers: List[str] = ["QUARTER", "QTR"]
    previous_period_fallback_label: str = "Previous"
    secondary_goal_label: str = "Secondary Goal"
    period_range_separator: str = " — "
    settings_key_prefix: str = "kpi_"

class DisplayConfig(BaseModel):
    delta_label: str = "vs prev"; ptd_label: str = "vs prev PTD"; goal_label: str = "Goal"
    arrow_up: str = "▲"; arrow_down: str = "▼"; arrow_flat: str = "–"

# --- Main Settings Class ---
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='KPI_', case_sensitive=False, env_file='.env', env_file_encoding='utf-8', extra='ignore')

    APP_NAME: str = "KPI Summary Engine"; APP_VERSION: str = "1.0.0"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    NOISY_LOGGERS: List[str] = ["urllib3", "asyncio"]

    ENGINE: EngineConfig = EngineConfig(); DISPLAY: DisplayConfig = DisplayConfig()

try:
    settings = Settings()
    settings_logger.info(f"KPI settings loaded successfully. App: {settings.APP_NAME} v{settings.APP_VERSION}")
except Exception as e:
    settings_logger.critical(f"FATAL: Could not initialize Pydantic settings. Error: {e}", exc_info=True)
    raise
