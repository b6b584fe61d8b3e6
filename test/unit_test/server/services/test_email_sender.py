"""Unit tests for the SMTP email sender."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from diligence_labs.server.core.config import SMTPConfig
from diligence_labs.server.services import email as email_module
from diligence_labs.server.services.email import EmailSender, get_email_sender
from diligence_labs.server.services.email_templates import EmailTemplate

TEMPLATE = EmailTemplate("Subject line", "<p>html</p>", "plain text")


def _config(**overrides) -> SMTPConfig:
    values = {"host": "smtp.mock", "port": 2525, "use_tls": False}
    values.update(overrides)
    return SMTPConfig(**values)


def test_build_message_has_both_bodies():
    message = EmailSender(_config(from_email="Team <team@mock.test>")).build_message("ann@example.com", TEMPLATE)

    assert message["Subject"] == "Subject line"
    assert message["From"] == "Team <team@mock.test>"
    assert message["To"] == "ann@example.com"
    assert message.get_body(preferencelist=("plain",)).get_content().strip() == "plain text"
    assert message.get_body(preferencelist=("html",)).get_content().strip() == "<p>html</p>"


def test_shared_sender_dependency():
    assert get_email_sender() is get_email_sender()


@pytest.mark.asyncio
class TestSend:
    async def test_unconfigured_smtp_only_logs(self):
        sender = EmailSender(_config(host=None))

        with patch.object(email_module.smtplib, "SMTP") as smtp:
            assert await sender.send("ann@example.com", TEMPLATE) is True

        smtp.assert_not_called()

    async def test_delivers_with_tls_and_login(self):
        sender = EmailSender(_config(use_tls=True, user="mailer", password="secret"))
        client = MagicMock()

        with patch.object(email_module.smtplib, "SMTP") as smtp:
            smtp.return_value.__enter__.return_value = client
            assert await sender.send("ann@example.com", TEMPLATE) is True

        smtp.assert_called_once_with("smtp.mock", 2525, timeout=30)
        client.starttls.assert_called_once()
        client.login.assert_called_once_with("mailer", "secret")
        client.send_message.assert_called_once()

    async def test_skips_login_without_credentials(self):
        sender = EmailSender(_config())
        client = MagicMock()

        with patch.object(email_module.smtplib, "SMTP") as smtp:
            smtp.return_value.__enter__.return_value = client
            await sender.send("ann@example.com", TEMPLATE)

        client.starttls.assert_not_called()
        client.login.assert_not_called()

    @pytest.mark.parametrize("error", [smtplib.SMTPException("rejected"), OSError("connection refused")])
    async def test_failure_returns_false(self, error):
        sender = EmailSender(_config())

        with patch.object(email_module.smtplib, "SMTP", side_effect=error):
            with patch.object(email_module, "log_error") as log_error:
                assert await sender.send("ann@example.com", TEMPLATE) is False

        log_error.assert_called_once()
        assert log_error.call_args.args[0] == "EmailDeliveryError"
