"""
Outbound email for password reset codes, sent over SMTP.
"""
import logging
import smtplib
import ssl
from email.mime.text import MIMEText

from .config import Settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when a message could not be handed to the mail server."""


class Mailer:
    def __init__(self, settings: Settings):
        self.settings = settings

    def send(self, to_address: str, subject: str, body: str) -> None:
        if not self.settings.SMTP_HOST:
            raise MailDeliveryError("SMTP is not configured")

        message = MIMEText(body, "plain", "utf-8")
        message["Subject"] = subject
        message["From"] = self.settings.SMTP_FROM
        message["To"] = to_address

        try:
            with smtplib.SMTP(self.settings.SMTP_HOST, self.settings.SMTP_PORT, timeout=30) as server:
                server.starttls(context=ssl.create_default_context())
                if self.settings.SMTP_USER and self.settings.SMTP_PASSWORD:
                    server.login(self.settings.SMTP_USER, self.settings.SMTP_PASSWORD)
                server.sendmail(self.settings.SMTP_FROM, [to_address], message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to_address}: {str(e)}")
            raise MailDeliveryError(str(e)) from e

        logger.info(f"Email '{subject}' sent to {to_address}")

    def send_reset_code(self, to_address: str, name: str, code: str, expires_minutes: int) -> None:
        body = (
            f"Hello {name},\n\n"
            f"Your password reset code is {code}. "
            f"It expires in {expires_minutes} minutes.\n\n"
            "If you did not request a password reset, you can ignore this email.\n"
        )
        self.send(to_address, "Your password reset code", body)
