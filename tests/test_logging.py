"""Tests for labspace.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from labspace.logging import configure_logging, get_logger


def test_get_logger_namespaces_under_package() -> None:
    assert get_logger("fetcher").name == "labspace.fetcher"
    assert get_logger().name == "labspace"


def test_verbose_and_quiet_levels() -> None:
    assert configure_logging(verbose=True).level == logging.DEBUG
    assert configure_logging(quiet=True).level == logging.WARNING
    assert configure_logging().level == logging.INFO


def test_reconfiguring_replaces_handlers_and_writes_log_file(tmp_path: Path) -> None:
    log_file = tmp_path / "labspace.log"
    configure_logging()
    logger = configure_logging(log_file=log_file)

    assert len(logger.handlers) == 2
    get_logger("orchestrator").info("bundle ready")
    for handler in logger.handlers:
        handler.flush()

    assert "INFO labspace.orchestrator: bundle ready" in log_file.read_text(encoding="utf-8")
    configure_logging()
