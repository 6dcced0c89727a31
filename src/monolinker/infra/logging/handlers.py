from __future__ import annotations

"""
Logging Handler Factories.

Every handler built here is tagged, so reconfiguration and shutdown only ever
touch handlers installed by monolinker and leave those of pytest or embedding
applications alone.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

_HANDLER_TAG_ATTR: str = "_monolinker_handler"


def _tag_handler(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _create_console_handler(level_int: int, fmt: str) -> logging.Handler:
    """Build the stderr handler; stdout carries the run summary or JSON result."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level_int)
    handler.setFormatter(logging.Formatter(fmt))
    return _tag_handler(handler)


def _create_rotating_file_handler(
        log_file: str,
        level_int: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Build the rotating file handler.

    Args:
        log_file: Target path; missing parent folders are created.
        level_int: Numeric logging level.
        formatter: Formatter for file records.
        max_bytes: Rollover threshold in bytes.
        backup_count: Number of rolled-over files to keep.

    Returns:
        Optional[RotatingFileHandler]: The handler, or None when the file
        cannot be opened. The run then logs to the console only.
    """
    try:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Cannot open log file '{log_file}': {e}\n")
        return None

    handler.setLevel(level_int)
    handler.setFormatter(formatter)
    _tag_handler(handler)
    return handler
