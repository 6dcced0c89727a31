from __future__ import annotations

from .config import LoggingConfig, logging_config_from_run
from .core import (
    _CONFIGURED_FLAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    configure_logging,
    get_default_log_path,
    get_logger,
    shutdown_logging,
)
from .handlers import _HANDLER_TAG_ATTR

__all__ = [
    "LoggingConfig",
    "logging_config_from_run",
    "configure_logging",
    "get_logger",
    "get_default_log_path",
    "shutdown_logging",
]
