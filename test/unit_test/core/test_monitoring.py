"""
Unit tests for the Logfire monitoring helpers.

This test suite covers:
- Initialization guarded by the enabled flag and the token
- The logging helpers being no-ops until Logfire is configured
- Business events always reaching the standard logger
"""

import logging
from unittest.mock import patch

import pytest

from diligence_labs.core import monitoring
from diligence_labs.server.core.config import MonitoringConfig


@pytest.fixture(autouse=True)
def _reset_configured():
    original = monitoring._configured
    yield
    monitoring._configured = original


class TestInitializeLogfire:
    def test_disabled_does_not_configure(self):
        with patch.object(monitoring.logfire, "configure") as configure:
            monitoring.initialize_logfire(config=MonitoringConfig(enabled=False))

        configure.assert_not_called()
        assert monitoring.is_logfire_configured() is False

    def test_defaults_come_from_settings(self):
        # The test environment sets LOGFIRE_ENABLED=false
        with patch.object(monitoring.logfire, "configure") as configure:
            monitoring.initialize_logfire()

        configure.assert_not_called()

    def test_enabled_without_token_does_not_configure(self):
        with patch.object(monitoring.logfire, "configure") as configure:
            monitoring.initialize_logfire(config=MonitoringConfig(enabled=True, token=""))

        configure.assert_not_called()
        assert monitoring.is_logfire_configured() is False

    def test_enabled_with_token_configures_and_instruments(self):
        with (
            patch.object(monitoring.logfire, "configure") as configure,
            patch.object(monitoring.logfire, "instrument_sqlalchemy") as instrument_sqlalchemy,
            patch.object(monitoring.logfire, "instrument_fastapi") as instrument_fastapi,
        ):
            monitoring.initialize_logfire(app=object(), config=MonitoringConfig(enabled=True, token="test-token"))

        configure.assert_called_once()
        assert configure.call_args.kwargs["token"] == "test-token"
        assert configure.call_args.kwargs["service_name"] == "diligence-labs-api"
        instrument_sqlalchemy.assert_called_once()
        instrument_fastapi.assert_called_once()
        assert monitoring.is_logfire_configured() is True

    def test_tracing_flags_are_honoured(self):
        config = MonitoringConfig(enabled=True, token="test-token", trace_sqlalchemy=False)
        with (
            patch.object(monitoring.logfire, "configure"),
            patch.object(monitoring.logfire, "instrument_sqlalchemy") as instrument_sqlalchemy,
            patch.object(monitoring.logfire, "instrument_fastapi") as instrument_fastapi,
        ):
            monitoring.initialize_logfire(config=config)

        instrument_sqlalchemy.assert_not_called()
        instrument_fastapi.assert_not_called()

    def test_configure_failure_is_logged(self):
        with (
            patch.object(monitoring.logfire, "configure", side_effect=RuntimeError("boom")),
            patch.object(monitoring, "logger") as mock_logger,
        ):
            monitoring.initialize_logfire(config=MonitoringConfig(enabled=True, token="test-token"))

        mock_logger.error.assert_called_once()
        assert monitoring.is_logfire_configured() is False


class TestLoggingHelpers:
    def test_helpers_skip_logfire_when_not_configured(self):
        monitoring._configured = False
        with patch.object(monitoring.logfire, "info") as info, patch.object(monitoring.logfire, "error") as error:
            monitoring.log_api_request("GET", "/api/v1/health", 200, 1.5)
            monitoring.log_error("ValueError", "bad value")

        info.assert_not_called()
        error.assert_not_called()

    def test_business_event_reaches_standard_logger(self, caplog):
        monitoring._configured = False
        with caplog.at_level(logging.INFO, logger="diligence_labs.core.monitoring"):
            monitoring.log_business_event("project.submitted", project_id="p-1")

        record = next(r for r in caplog.records if "project.submitted" in r.getMessage())
        assert record.event == "project.submitted"
        assert record.attributes == {"project_id": "p-1"}

    def test_business_event_accepts_reserved_record_names(self, caplog):
        monitoring._configured = False
        with caplog.at_level(logging.INFO, logger="diligence_labs.core.monitoring"):
            monitoring.log_business_event("expert.profile_saved", created=True, name="x")

        record = next(r for r in caplog.records if "expert.profile_saved" in r.getMessage())
        assert record.attributes == {"created": True, "name": "x"}

    def test_business_event_sent_to_logfire_when_configured(self):
        monitoring._configured = True
        with patch.object(monitoring.logfire, "info") as info:
            monitoring.log_business_event("rewards.distributed", distribution_id="d-1")

        info.assert_called_once()
        assert info.call_args.kwargs["event"] == "rewards.distributed"
        assert info.call_args.kwargs["distribution_id"] == "d-1"

    def test_logfire_failure_is_swallowed(self):
        monitoring._configured = True
        with patch.object(monitoring.logfire, "error", side_effect=RuntimeError("offline")):
            monitoring.log_error("SMTPException", "connection refused", {"recipient": "a@example.com"})
