from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, and log file rotation logic.
"""

import logging
import time
from logging.handlers import QueueListener
from pathlib import Path

import pytest

from monolinker.infra.logging import (
    _CONFIGURED_FLAG_ATTR,
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    logging_config_from_run,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Clean up root logger handlers before and after each test."""
    root = logging.getLogger()

    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener and isinstance(listener, QueueListener):
        listener.stop()
        setattr(root, _QUEUE_LISTENER_ATTR, None)

    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG_ATTR, False):
            root.removeHandler(h)
            h.close()

    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)

    yield

    shutdown_logging()


def test_logging_idempotency() -> None:
    """TC-01: Verify that multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_log_rotation(tmp_path: Path) -> None:
    """TC-02: Verify file rotation when size limit is exceeded."""
    log_file = tmp_path / "test_rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1,
    )

    configure_logging(cfg)
    logger = logging.getLogger("test_rotate")

    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # Give time for the QueueListener to process
    time.sleep(0.5)

    assert log_file.exists()
    assert (tmp_path / "test_rotate.log.1").exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """TC-03: Verify that the root logger uses a QueueHandler-based architecture."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    tagged = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]

    assert len(tagged) == 1
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None


def test_force_reconfigure_keeps_foreign_handlers() -> None:
    """TC-04: Reconfiguration removes only handlers installed by monolinker."""
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig(level="INFO"))
        configure_logging(LoggingConfig(level="DEBUG"), force=True)

        assert foreign in root.handlers
        assert root.level == logging.DEBUG
    finally:
        root.removeHandler(foreign)


def test_unwritable_log_file_degrades_to_console(tmp_path: Path) -> None:
    """TC-05: A log path that cannot be created does not break configuration."""
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a folder", encoding="utf-8")

    configure_logging(LoggingConfig(level="INFO", console=True, log_file=str(blocker / "app.log")))

    assert getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR) is not None


def test_default_log_path_lives_in_user_data_dir() -> None:
    path = get_default_log_path()
    assert path.replace("\\", "/").endswith("/logs/monolinker.log")


def test_logging_config_from_run_config() -> None:
    """TC-06: save_log selects a file; the explicit log_file wins over the default."""
    assert logging_config_from_run({"save_log": False}, default_log_file="/x.log").log_file is None
    assert logging_config_from_run({"save_log": True}, default_log_file="/x.log").log_file == "/x.log"

    cfg = logging_config_from_run({"save_log": True, "log_file": "/y.log"}, debug=True, default_log_file="/x.log")
    assert cfg.log_file == "/y.log"
    assert cfg.level == "DEBUG"
