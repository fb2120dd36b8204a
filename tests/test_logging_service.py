"""Tests for the logging service."""

import json
import logging
import os
import tempfile
from io import StringIO
from pathlib import Path
from unittest.mock import patch

from hypothesis import given, settings, strategies as st

from statlink.services.logging import LoggingService, setup_logging


class TestLoggingService:
    """Test cases for LoggingService."""

    def test_development_logging_format(self) -> None:
        """Development logging renders human-readable lines on stderr."""
        with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
            with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
                service = LoggingService(log_level="INFO")
                service.configure()

                logger = service.get_logger("test")
                logger.info("test message", key="value")

                output = mock_stderr.getvalue()

        assert "test message" in output
        assert "key" in output
        assert not output.strip().startswith("{")

    def test_production_logging_format(self) -> None:
        """Production logging renders one JSON object per line."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
                service = LoggingService(log_level="INFO")
                service.configure()

                service.get_logger("test").info("test message", key="value")
                output = mock_stderr.getvalue()

        lines = [line for line in output.strip().split('\n') if line.strip()]
        parsed = json.loads(lines[-1])
        assert parsed["event"] == "test message"
        assert parsed["key"] == "value"
        assert "timestamp" in parsed
        assert parsed["level"] == "info"

    def test_stdout_is_left_for_command_output(self) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            with patch("sys.stdout", new_callable=StringIO) as mock_stdout, \
                    patch("sys.stderr", new_callable=StringIO):
                service = LoggingService(log_level="INFO")
                service.configure()
                service.get_logger("test").warning("not on stdout")

        assert mock_stdout.getvalue() == ""

    def test_file_logging_setup(self) -> None:
        """File logging writes JSON lines to app.log."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir)
            with patch.dict(os.environ, {"ENVIRONMENT": "production"}), patch("sys.stderr", new_callable=StringIO):
                service = LoggingService(log_level="INFO", log_dir=log_dir)
                service.configure()

                service.get_logger("test").info("test file message", data="test")

                app_log = log_dir / "app.log"
                assert app_log.exists()
                assert (log_dir / "error.log").exists()

                parsed = json.loads(app_log.read_text().strip().splitlines()[-1])
                assert parsed["event"] == "test file message"
                assert parsed["data"] == "test"

                logging.getLogger().handlers.clear()

    def test_error_file_logging(self) -> None:
        """Errors are also written to error.log."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir)
            with patch.dict(os.environ, {"ENVIRONMENT": "production"}), patch("sys.stderr", new_callable=StringIO):
                service = LoggingService(log_level="DEBUG", log_dir=log_dir)
                service.configure()

                service.get_logger("test").error("test error message", error_code=500)

                parsed = json.loads((log_dir / "error.log").read_text().strip())
                assert parsed["event"] == "test error message"
                assert parsed["error_code"] == 500
                assert parsed["level"] == "error"

                logging.getLogger().handlers.clear()

    def test_httpx_request_logging_is_quieted(self) -> None:
        with patch("sys.stderr", new_callable=StringIO):
            setup_logging(log_level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING


class TestStructuredLoggingProperties:
    """Property-based tests for structured logging consistency."""

    @given(
        log_level=st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
        message=st.text(min_size=1, max_size=100, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd", "Zs"))),
    )
    @settings(deadline=None, max_examples=25)
    def test_root_level_matches_configuration(self, log_level: str, message: str) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
                service = setup_logging(log_level=log_level.lower())
                service.get_logger("prop").critical(message)
                output = mock_stderr.getvalue()

        assert service.log_level == log_level
        assert logging.getLogger().level == getattr(logging, log_level)
        assert json.loads(output.strip().splitlines()[-1])["event"] == message
