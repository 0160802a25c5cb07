"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Logfire initialization with various configurations
- Feature flag handling
- Domain event, API request and error logging helpers
"""

import logging
from unittest.mock import MagicMock, patch

import pytest

import emotions_app.core.monitoring as monitoring


@pytest.fixture
def mock_logfire():
    with patch("emotions_app.core.monitoring.logfire") as mock:
        yield mock


@pytest.fixture(autouse=True)
def _reset_initialized(monkeypatch):
    monkeypatch.setattr(monitoring, "_initialized", False)


class TestInitializeLogfire:
    """Test Logfire initialization function."""

    @patch("emotions_app.core.monitoring.LOGFIRE_ENABLED", False)
    def test_disabled(self, mock_logfire):
        assert monitoring.initialize_logfire() is False
        mock_logfire.configure.assert_not_called()
        assert monitoring.is_logfire_active() is False

    @patch("emotions_app.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("emotions_app.core.monitoring.LOGFIRE_TOKEN", "")
    @patch("emotions_app.core.monitoring.logger")
    def test_enabled_without_token_warns(self, mock_logger, mock_logfire):
        assert monitoring.initialize_logfire() is False
        mock_logger.warning.assert_called_once()
        assert "token" in mock_logger.warning.call_args[0][0].lower()
        mock_logfire.configure.assert_not_called()

    @patch("emotions_app.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("emotions_app.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("emotions_app.core.monitoring.LOGFIRE_SERVICE_NAME", "test-service")
    @patch("emotions_app.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", True)
    @patch("emotions_app.core.monitoring.LOGFIRE_TRACE_HTTPX", True)
    @patch("emotions_app.core.monitoring.LOGFIRE_TRACE_FASTAPI", True)
    def test_configures_and_instruments(self, mock_logfire):
        app = MagicMock()
        assert monitoring.initialize_logfire(app) is True
        assert mock_logfire.configure.call_args.kwargs["token"] == "test-token"
        assert mock_logfire.configure.call_args.kwargs["service_name"] == "test-service"
        mock_logfire.instrument_sqlalchemy.assert_called_once()
        mock_logfire.instrument_httpx.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once_with(app=app)
        assert monitoring.is_logfire_active() is True

    @patch("emotions_app.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("emotions_app.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("emotions_app.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", False)
    @patch("emotions_app.core.monitoring.LOGFIRE_TRACE_HTTPX", False)
    @patch("emotions_app.core.monitoring.LOGFIRE_TRACE_FASTAPI", True)
    def test_flags_disable_instrumentation(self, mock_logfire):
        assert monitoring.initialize_logfire() is True
        mock_logfire.instrument_sqlalchemy.assert_not_called()
        mock_logfire.instrument_httpx.assert_not_called()
        mock_logfire.instrument_fastapi.assert_not_called()

    @patch("emotions_app.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("emotions_app.core.monitoring.LOGFIRE_TOKEN", "test-token")
    def test_configure_failure_is_reported(self, mock_logfire):
        mock_logfire.configure.side_effect = RuntimeError("boom")
        assert monitoring.initialize_logfire() is False
        assert monitoring.is_logfire_active() is False

    @patch("emotions_app.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("emotions_app.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("emotions_app.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", True)
    def test_instrumentation_failure_is_not_fatal(self, mock_logfire):
        mock_logfire.instrument_sqlalchemy.side_effect = RuntimeError("no engine")
        assert monitoring.initialize_logfire() is True


class TestLoggingHelpers:
    def test_helpers_are_noops_when_inactive(self, mock_logfire):
        monitoring.log_api_request("GET", "/health", 200, 1.5)
        monitoring.log_error("ValueError", "bad")
        mock_logfire.info.assert_not_called()
        mock_logfire.error.assert_not_called()

    def test_domain_event_always_goes_to_std_logging(self, mock_logfire, caplog):
        with caplog.at_level(logging.INFO, logger="emotions_app.core.monitoring"):
            monitoring.log_domain_event("appointment.booked", appointment_id="a1")
        assert any("appointment.booked" in record.getMessage() for record in caplog.records)
        mock_logfire.info.assert_not_called()

    def test_helpers_forward_when_active(self, mock_logfire, monkeypatch):
        monkeypatch.setattr(monitoring, "_initialized", True)
        monitoring.log_api_request("GET", "/health", 200, 1.5)
        monitoring.log_domain_event("review.submitted", review_id="r1")
        monitoring.log_error("ValueError", "bad", {"path": "/x"})
        assert mock_logfire.info.call_count == 2
        error_kwargs = mock_logfire.error.call_args.kwargs
        assert error_kwargs["error_type"] == "ValueError"
        assert error_kwargs["path"] == "/x"

    def test_forwarding_errors_are_swallowed(self, mock_logfire, monkeypatch):
        monkeypatch.setattr(monitoring, "_initialized", True)
        mock_logfire.info.side_effect = RuntimeError("exporter down")
        monitoring.log_api_request("GET", "/health", 200, 1.5)
        monitoring.log_domain_event("review.submitted", review_id="r1")
