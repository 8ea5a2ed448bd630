"""Tests for logging setup."""

import logging

import pytest
import structlog

from zerokit_admin.common.logging import configure_library_defaults, get_logger
from zerokit_admin.signer import SignableRequest


@pytest.fixture
def library_logging():
    saved = structlog.get_config()
    structlog.reset_defaults()
    configure_library_defaults()
    yield
    structlog.configure(**saved)


class TestLibraryDefaults:
    """Test logging before an application configures it."""

    def test_sign_prints_nothing(self, library_logging, signer, capsys):
        signer.sign(SignableRequest("POST", "/p", body=b"{}"))

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_events_reach_stdlib_logger(self, library_logging, signer, caplog):
        with caplog.at_level(logging.DEBUG, logger="zerokit_admin.signer"):
            signer.sign(SignableRequest("GET", "/p"))

        assert [record.name for record in caplog.records] == ["zerokit_admin.signer"]
        assert "Signed admin request" in caplog.text

    def test_warnings_are_filtered_by_stdlib_level(self, library_logging, caplog):
        logger = get_logger("zerokit_admin.test")

        with caplog.at_level(logging.ERROR, logger="zerokit_admin.test"):
            logger.warning("Dropped")
            logger.error("Kept")

        assert "Kept" in caplog.text
        assert "Dropped" not in caplog.text
