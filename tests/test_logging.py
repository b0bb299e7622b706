"""Tests for logging configuration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from loguru import logger

from github_activity_tracker.logging import (
    LogContext,
    bind_repo,
    get_logger,
    is_configured,
    reset_logging,
    setup_logging,
)

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _reset_logging_state() -> Generator[None, None, None]:
    """Reset loguru state before and after each test."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def captured() -> Generator[list[dict], None, None]:
    records: list[dict] = []
    handler_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_marks_configured(self) -> None:
        setup_logging(level="INFO")
        assert is_configured()

    def test_reset_clears_configured(self) -> None:
        setup_logging(level="INFO")
        reset_logging()
        assert not is_configured()

    def test_file_sink_receives_debug(self, tmp_path) -> None:
        log_file = tmp_path / "tracker.log"
        setup_logging(level="WARNING", log_file=log_file)

        get_logger("tests").debug("written to file")
        logger.complete()

        assert "written to file" in log_file.read_text(encoding="utf-8")

    def test_stdlib_records_are_intercepted(self) -> None:
        records: list[dict] = []
        setup_logging(level="DEBUG")
        logger.add(lambda msg: records.append(msg.record), level="DEBUG")

        logging.getLogger("sqlalchemy.engine").warning("from stdlib")

        intercepted = [r for r in records if r["message"] == "from stdlib"]
        assert intercepted
        assert intercepted[0]["extra"]["name"] == "sqlalchemy.engine"


class TestContextBinding:
    def test_get_logger_binds_name(self, captured) -> None:
        get_logger("github_activity_tracker.sync").info("hello")
        assert captured[-1]["extra"]["name"] == "github_activity_tracker.sync"

    def test_bind_repo(self, captured) -> None:
        bind_repo("prebid/prebid-server").info("syncing")
        assert captured[-1]["extra"]["repo"] == "prebid/prebid-server"

    def test_log_context_is_temporary(self, captured) -> None:
        with LogContext(repo="prebid/Prebid.js"):
            logger.info("inside")
        logger.info("outside")

        assert captured[0]["extra"]["repo"] == "prebid/Prebid.js"
        assert "repo" not in captured[1]["extra"]
