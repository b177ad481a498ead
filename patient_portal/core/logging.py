"""Centralized logging configuration."""

import logging
import sys
from typing import Optional

from patient_portal.config import settings


LOGGER_NAME = "patient_portal"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure and return the application logger.
    
    Safe to call again: an app built with its own Settings re-applies its
    LOG_LEVEL to the one stdout handler instead of adding another.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    
    portal_logger = logging.getLogger(LOGGER_NAME)
    portal_logger.setLevel(numeric_level)
    
    handler = next(
        (h for h in portal_logger.handlers if getattr(h, "_portal_console", False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._portal_console = True
        portal_logger.addHandler(handler)
    handler.setLevel(numeric_level)
    
    portal_logger.debug(f"Logging configured with level: {level_name}")
    return portal_logger


# Create the global logger instance
logger = setup_logging()
