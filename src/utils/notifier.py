"""Borrow notifications.

A successful borrow emits a ``BookBorrowed`` event. The notifier schedules the
mail as a background task so the borrow never waits on, or fails because of,
mail delivery.
"""

import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

import jinja2
from fastapi import BackgroundTasks

import config

logger = logging.getLogger(__name__)

BOOK_BORROWED_SUBJECT = "Book Borrowed Mail"
BOOK_BORROWED_TEMPLATE = "book_borrowed.html"


@dataclass(frozen=True)
class BookBorrowed:
    """Event emitted after a borrow is committed.

    Carries plain values so it stays usable after the request's database
    session is closed.
    """

    user_id: str
    user_name: str
    user_email: str
    book_id: str
    book_name: str
    borrowed_at: datetime


class MailTransport:
    """Sends a fully built message."""

    def send(self, message: EmailMessage) -> None:
        raise NotImplementedError


class LogTransport(MailTransport):
    """Writes messages to the log instead of sending them."""

    def send(self, message: EmailMessage) -> None:
        logger.info(
            "Mail to %s: %s\n%s", message["To"], message["Subject"], message.get_content()
        )


class SmtpTransport(MailTransport):
    """Delivers messages through an SMTP server."""

    def __init__(
        self,
        host: str = config.MAIL_HOST,
        port: int = config.MAIL_PORT,
        username: Optional[str] = config.MAIL_USERNAME,
        password: Optional[str] = config.MAIL_PASSWORD,
        use_tls: bool = config.MAIL_USE_TLS,
        timeout: float = config.MAIL_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(message)


def get_transport(driver: str = config.MAIL_DRIVER) -> MailTransport:
    """Build the transport named by ``driver`` ("log" or "smtp")."""
    if driver == "smtp":
        return SmtpTransport()
    if driver != "log":
        logger.warning("Unknown MAIL_DRIVER '%s', falling back to log", driver)
    return LogTransport()


class Notifier:
    """Renders and dispatches borrow notification mails."""

    def __init__(self, transport: Optional[MailTransport] = None):
        """Initialize the notifier.

        Args:
            transport: Where mail goes. Defaults to the configured driver.
        """
        self.transport = transport or get_transport()
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(config.TEMPLATE_DIR)),
            autoescape=jinja2.select_autoescape(["html"]),
        )

    def book_borrowed(self, event: BookBorrowed, background_tasks: BackgroundTasks) -> None:
        """Schedule the borrow mail to run after the response is sent."""
        background_tasks.add_task(self.deliver, event)

    def build_message(self, event: BookBorrowed) -> EmailMessage:
        body = self.env.get_template(BOOK_BORROWED_TEMPLATE).render(
            subject=BOOK_BORROWED_SUBJECT,
            user_name=event.user_name,
            book_name=event.book_name,
            borrowed_at=event.borrowed_at.strftime("%Y-%m-%d %H:%M UTC"),
            from_name=config.MAIL_FROM_NAME,
        )
        message = EmailMessage()
        message["Subject"] = BOOK_BORROWED_SUBJECT
        message["From"] = formataddr((config.MAIL_FROM_NAME, config.MAIL_FROM_ADDRESS))
        message["To"] = event.user_email
        message.set_content(body, subtype="html")
        return message

    def deliver(self, event: BookBorrowed) -> bool:
        """Render and send the mail for ``event``.

        Returns:
            True if the transport accepted the message, False otherwise.
        """
        try:
            self.transport.send(self.build_message(event))
        except Exception:
            # The borrow is already committed; a lost mail is only logged
            logger.error(
                "Failed to send borrow notification for book %s to user %s",
                event.book_id,
                event.user_id,
                exc_info=True,
            )
            return False
        logger.info("Sent borrow notification for book %s to %s", event.book_id, event.user_email)
        return True


_notifier_instance: Optional[Notifier] = None


def get_notifier() -> Notifier:
    """Get Notifier singleton instance."""
    global _notifier_instance
    if _notifier_instance is None:
        _notifier_instance = Notifier()
    return _notifier_instance
