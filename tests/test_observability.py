"""
Tests for logging setup.
"""

import logging
from pathlib import Path

import pytest

from javastage.core.observability.logging_config import _parse_level, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseLevel:
    def test_names(self):
        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level("ERROR") == logging.ERROR

    def test_unknown_and_empty_default_to_info(self):
        assert _parse_level("chatty") == logging.INFO
        assert _parse_level(None) == logging.INFO


class TestSetupLogging:
    def test_info_uses_build_log_format(self, capsys):
        setup_logging("INFO")
        logging.getLogger("javastage.test").info("Installing OpenJDK")
        assert capsys.readouterr().out == "-----> Installing OpenJDK\n"

    def test_warning_level_hides_info(self, capsys):
        setup_logging("WARNING")
        logging.getLogger("javastage.test").info("hidden")
        logging.getLogger("javastage.test").warning("shown")
        assert capsys.readouterr().out == "       **WARNING** shown\n"

    def test_multiline_messages_are_indented(self, capsys):
        setup_logging("INFO")
        logging.getLogger("javastage.test").error("Staging failed\ncause: disk full")
        assert capsys.readouterr().out == "       **ERROR** Staging failed\n       cause: disk full\n"

    def test_log_file_gets_more_detail(self, tmp_path: Path, capsys):
        log_file = tmp_path / "stage.log"
        setup_logging("ERROR", log_file=str(log_file), log_file_level="DEBUG")
        logging.getLogger("javastage.test").debug("detail")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert capsys.readouterr().out == ""
        assert "detail" in log_file.read_text()

    def test_third_party_quieted(self):
        setup_logging("INFO")
        assert logging.getLogger("httpx").level == logging.WARNING
