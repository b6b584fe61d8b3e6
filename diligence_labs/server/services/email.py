"""
Outbound Email Service.

Sends rendered templates over SMTP when a host is configured; otherwise the
message is only logged, which is the normal mode for local development and
tests. Sending never raises: callers get ``True`` or ``False`` back.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.monitoring import log_error
from diligence_labs.server.core.config import SMTPConfig, settings

from .email_templates import EmailTemplate

logger = get_logger(__name__)


class EmailSender:
    """SMTP email sender."""

    def __init__(self, config: Optional[SMTPConfig] = None):
        self._config = config

    @property
    def config(self) -> SMTPConfig:
        return self._config or settings.smtp

    def build_message(self, to: str, template: EmailTemplate) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = template.subject
        message["From"] = self.config.from_email
        message["To"] = to
        message.set_content(template.text)
        message.add_alternative(template.html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        config = self.config
        with smtplib.SMTP(config.host, config.port, timeout=30) as client:
            if config.use_tls:
                client.starttls()
            if config.user and config.password:
                client.login(config.user, config.password)
            client.send_message(message)

    async def send(self, to: str, template: EmailTemplate) -> bool:
        """
        Send a rendered template to a single recipient.

        Args:
            to: Recipient address
            template: Rendered subject, HTML and text bodies

        Returns:
            True when the message was handed to the SMTP server (or logged
            because SMTP is not configured), False on any delivery failure.
        """
        if not self.config.host:
            logger.info(f"SMTP not configured, email to {to} not sent: {template.subject}")
            return True

        message = self.build_message(to, template)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}", exc_info=True)
            log_error("EmailDeliveryError", str(e), {"recipient": to, "subject": template.subject})
            return False

        logger.info(f"Email sent to {to}: {template.subject}")
        return True


_sender = EmailSender()


def get_email_sender() -> EmailSender:
    """Dependency returning the shared email sender."""
    return _sender
