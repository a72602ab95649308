"""Tests for logging setup."""

import logging
import sys

import pytest
from loguru import logger

from src.core.logger import InterceptHandler, _appointment_patcher, appointment_ctx, setup_structured_logging


@pytest.fixture
def restore_loguru():
    saved_handlers = logging.root.handlers[:]
    saved_level = logging.root.level
    yield
    logger.remove()
    logger.configure(patcher=None)
    logger.add(sys.stderr)
    logging.root.handlers[:] = saved_handlers
    logging.root.setLevel(saved_level)


class TestAppointmentPatcher:
    def test_adds_href_from_context(self):
        record = {"extra": {}}
        token = appointment_ctx.set("https://portal.example.com/r")
        try:
            _appointment_patcher(record)
        finally:
            appointment_ctx.reset(token)
        assert record["extra"]["appointment"] == "https://portal.example.com/r"

    def test_no_context(self):
        record = {"extra": {}}
        _appointment_patcher(record)
        assert "appointment" not in record["extra"]


class TestSetup:
    def test_creates_log_files(self, tmp_path, restore_loguru):
        setup_structured_logging("INFO", json_format=True, logs_dir=tmp_path)
        logger.info("hello")
        logger.complete()
        assert (tmp_path / "booking_bot.jsonl").exists()

    def test_text_format(self, tmp_path, restore_loguru):
        setup_structured_logging("DEBUG", json_format=False, logs_dir=tmp_path)
        logger.debug("hello")
        assert (tmp_path / "booking_bot.log").exists()

    def test_stdlib_logging_intercepted(self, tmp_path, restore_loguru):
        setup_structured_logging("INFO", json_format=False, logs_dir=tmp_path)
        assert any(isinstance(h, InterceptHandler) for h in logging.root.handlers)

        messages = []
        logger.add(messages.append, format="{message}", level="INFO")
        logging.getLogger("asyncpg.pool").warning("pool warning")
        assert any("pool warning" in m for m in messages)
