"""Tests for configure_logging()."""

import json
from collections.abc import Iterator

import pytest
import structlog

from inference_gateway import configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


def test_json_lines(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("DEBUG")

    structlog.get_logger("test").info("gateway_request_complete", status=200)

    line = json.loads(capsys.readouterr().out.strip())
    assert line["event"] == "gateway_request_complete"
    assert line["status"] == 200
    assert line["level"] == "info"
    assert "timestamp" in line


def test_level_filters_debug(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("WARNING")

    logger = structlog.get_logger("test")
    logger.debug("hidden")
    logger.warning("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out


def test_unknown_level_falls_back_to_info(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("chatty")

    logger = structlog.get_logger("test")
    logger.debug("hidden")
    logger.info("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out
