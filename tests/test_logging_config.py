"""Tests for logging setup."""

import logging

import pytest

from repo_analyzer.logging_config import GIT_TRACE_LOGGER_NAME, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logging.getLogger("repo_analyzer").setLevel(logging.NOTSET)
    logging.getLogger(GIT_TRACE_LOGGER_NAME).setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_levels(self):
        assert setup_logging().level == logging.WARNING
        assert setup_logging(verbose=True).level == logging.DEBUG
        assert setup_logging(quiet=True).level == logging.ERROR

    def test_git_trace_hidden_in_verbose_mode(self):
        setup_logging(verbose=True)
        assert not logging.getLogger(GIT_TRACE_LOGGER_NAME).isEnabledFor(logging.DEBUG)
        assert get_logger("repo_analyzer.git.sync").isEnabledFor(logging.DEBUG)

    def test_git_trace_on_request(self):
        setup_logging(trace_git=True)
        assert logging.getLogger(GIT_TRACE_LOGGER_NAME).isEnabledFor(logging.DEBUG)

    def test_quiet_still_silences_git(self):
        setup_logging(quiet=True)
        assert not logging.getLogger(GIT_TRACE_LOGGER_NAME).isEnabledFor(logging.WARNING)

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "run.log"
        setup_logging(log_file=str(log_file))
        get_logger("repo_analyzer.pipeline").warning("scan skipped")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "scan skipped" in log_file.read_text()


class TestGetLogger:
    def test_prefixes_foreign_names(self):
        assert get_logger("custom").name == "repo_analyzer.custom"

    def test_root(self):
        assert get_logger().name == "repo_analyzer"
