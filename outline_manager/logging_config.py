# outline_manager/logging_config.py
"""Logging setup for applications embedding the management client."""

import logging
import sys
from typing import Optional

from outline_manager.settings import Settings, settings as default_settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'


def configure_logging(config: Optional[Settings] = None) -> None:
    """Configure structured logging to stdout from settings."""
    config = config or default_settings
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=JSON_FORMAT if config.log_format == "json" else TEXT_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger(__name__).debug(
        f"Logging configured: level={config.log_level} format={config.log_format}"
    )
