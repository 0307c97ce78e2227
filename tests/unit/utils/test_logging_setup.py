"""Tests for loguru configuration."""

from __future__ import annotations

from loguru import logger

from fraunhofer.utils.logging_config import log_format, setup_logging


class TestSetupLogging:
    def test_file_sink_receives_messages(self, tmp_path):
        log_file = tmp_path / "run.log"
        setup_logging(level="DEBUG", log_file=log_file)
        logger.debug("fft stage done")

        # Reconfiguring closes the file sink
        setup_logging()
        assert "fft stage done" in log_file.read_text()

    def test_level_filters(self, tmp_path):
        log_file = tmp_path / "quiet.log"
        setup_logging(level="WARNING", log_file=log_file, show_time=False)
        logger.info("hidden")
        logger.warning("shown")

        setup_logging()
        text = log_file.read_text()
        assert "shown" in text
        assert "hidden" not in text

    def test_format_without_time_or_level(self, tmp_path):
        log_file = tmp_path / "bare.log"
        setup_logging(level="INFO", log_file=log_file, show_time=False, show_level=False)
        logger.info("normalize stage done")

        setup_logging()
        assert log_file.read_text().strip() == "normalize stage done"


class TestLogFormat:
    def test_all_columns(self):
        assert log_format().count(" | ") == 2

    def test_message_only(self):
        assert log_format(show_time=False, show_level=False) == "<level>{message}</level>"
