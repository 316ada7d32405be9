"""SMTP adapter for account mail.

Implements NotificationSender by delivering plain-text + HTML messages over
SMTP with STARTTLS.
"""

import logging
import smtplib
from email.message import EmailMessage
from html import escape

from domain.model.errors import DependencyError
from domain.model.user import User

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10.0

WELCOME_SUBJECT = "Welcome to the Natours Family!"
RESET_SUBJECT = "Your password reset token (valid for only {minutes} minutes)"


def _first_name(user: User) -> str:
    if user.name:
        return user.name.split(' ')[0]
    return user.email.split('@')[0]


class SmtpNotificationSender:
    """Send account mail through an SMTP relay."""

    def __init__(
        self,
        host: str | None,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        reset_expires_minutes: int = 10,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.reset_expires_minutes = reset_expires_minutes

    def send_welcome(self, user: User, url: str) -> None:
        text = (
            f"Hi {_first_name(user)},\n\n"
            "Welcome to Natours, we're glad to have you!\n"
            f"Upload your user photo and finish your profile here: {url}\n"
        )
        html = (
            f"<p>Hi {escape(_first_name(user))},</p>"
            "<p>Welcome to Natours, we're glad to have you!</p>"
            f'<p><a href="{escape(url)}">Finish your profile</a></p>'
        )
        self._send(user.email, WELCOME_SUBJECT, text, html)

    def send_password_reset(self, user: User, reset_url: str) -> None:
        text = (
            f"Hi {_first_name(user)},\n\n"
            "Forgot your password? Submit a PATCH request with your new password "
            f"and passwordConfirm to: {reset_url}\n"
            "If you didn't forget your password, please ignore this email.\n"
        )
        html = (
            f"<p>Hi {escape(_first_name(user))},</p>"
            "<p>Forgot your password? Submit a PATCH request with your new password "
            f'and passwordConfirm to: <a href="{escape(reset_url)}">{escape(reset_url)}</a></p>'
            "<p>If you didn't forget your password, please ignore this email.</p>"
        )
        subject = RESET_SUBJECT.format(minutes=self.reset_expires_minutes)
        self._send(user.email, subject, text, html)

    def _send(self, to: str, subject: str, text: str, html: str) -> None:
        if not self.host:
            logger.error("EMAIL_HOST not configured", extra={"to": to})
            raise DependencyError()

        message = EmailMessage()
        message['From'] = self.sender
        message['To'] = to
        message['Subject'] = subject
        message.set_content(text)
        message.add_alternative(html, subtype='html')

        try:
            with smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS) as smtp:
                smtp.starttls()
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email", extra={"to": to, "subject": subject, "error": str(e)})
            raise DependencyError() from e

        logger.info("Email sent", extra={"to": to, "subject": subject})
