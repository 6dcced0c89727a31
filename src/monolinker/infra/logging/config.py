from __future__ import annotations

"""
Logging Configuration Models.

Maps the run configuration (debug flag, save_log, log_file) onto the settings
of the logging subsystem.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings for the logging subsystem of a single linking run.

    Attributes:
        level: Minimum severity captured by every handler.
        console: Write records to stderr (stdout is reserved for results).
        log_file: Optional path of a rotating log file.
        max_bytes: Size of one log segment before rollover.
        backup_count: Rolled-over segments to keep.
        console_fmt: Record layout on the terminal.
        file_fmt: Record layout in the log file. Includes the worker thread,
            which identifies the project being linked.
        datefmt: Timestamp layout in the log file.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 512 * 1024
    backup_count: int = 3

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"


def logging_config_from_run(
        run_config: Mapping[str, Any],
        *,
        debug: bool = False,
        default_log_file: Optional[str] = None,
) -> LoggingConfig:
    """
    Derive the logging settings from a (merged) run configuration.

    Args:
        run_config: Configuration dictionary; reads 'save_log' and 'log_file'.
        debug: Lower the level to DEBUG.
        default_log_file: Log path used when 'save_log' is set without 'log_file'.

    Returns:
        LoggingConfig: Settings for configure_logging.
    """
    log_file = None
    if run_config.get("save_log"):
        log_file = run_config.get("log_file") or default_log_file
    return LoggingConfig(level="DEBUG" if debug else "INFO", console=True, log_file=log_file)
