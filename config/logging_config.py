# kpi_summary_root/config/logging_config.py
# KPI SUMMARY ENGINE - LOGGING SETUP

import logging
import sys
from typing import Optional

from .settings import settings


def configure_logging(level: Optional[str] = None) -> None:
    """
    Applies the process-wide logging configuration from settings.

    Host integrations call this once at start-up; the engine itself only
    emits through module loggers.
    """
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format=settings.LOG_FORMAT,
        datefmt=settings.LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True
    )
    # Keep third-party INFO/DEBUG chatter out of the engine's output.
    for name in settings.NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
