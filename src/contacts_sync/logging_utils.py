from __future__ import annotations

import logging
import os
from typing import Optional

from .config_loader import SyncConfig

LOG_LEVEL_ENV = "CONTACTS_SYNC_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def level_number(name: Optional[str], default: int = logging.WARNING) -> int:
    """Turn "debug", "DEBUG" or "10" into a logging level; unknown names give ``default``."""
    text = (name or "").strip().upper()
    if not text:
        return default
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text)
    return level if isinstance(level, int) else default


def resolve_log_level(config: SyncConfig, level_override: Optional[str] = None) -> int:
    """
    Pick the effective level for a sync run.

    ``CONTACTS_SYNC_LOG_LEVEL`` beats the ``--log-level`` flag, which beats
    ``logging.level`` in the YAML config.
    """
    for candidate in (os.getenv(LOG_LEVEL_ENV), level_override, config.logging.level):
        if candidate and candidate.strip():
            return level_number(candidate)
    return logging.WARNING


def configure_logging(config: SyncConfig, level_override: Optional[str] = None) -> int:
    level = resolve_log_level(config, level_override)
    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    # pandas reports CSV dtype problems through the warnings module
    logging.captureWarnings(True)
    return level
