"""
Mail sender abstraction layer.
SMTP for real delivery, console for development and tests.
"""

import asyncio
import logging
import smtplib
import ssl
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

from app.core.config import settings


logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: Optional[str] = None


@dataclass
class DeliveryResult:
    """Standardised response from any mail sender."""
    success: bool
    message_id: Optional[str] = None
    backend: str = ""
    error: Optional[str] = None


class BaseMailSender(ABC):
    """Abstract base for mail senders."""

    @abstractmethod
    async def send(self, message: OutgoingEmail) -> DeliveryResult:
        ...

    @abstractmethod
    def backend_name(self) -> str:
        ...


class SmtpMailSender(BaseMailSender):
    """Plain smtplib, run in a worker thread so the event loop never blocks."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: Optional[bool] = None,
        from_address: Optional[str] = None,
        from_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.host = host or settings.SMTP_HOST
        if not self.host:
            raise ValueError("SMTP_HOST not set")
        self.port = port or settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USERNAME
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self.from_address = from_address or settings.EMAIL_FROM
        self.from_name = from_name if from_name is not None else settings.EMAIL_FROM_NAME
        self.timeout = timeout or settings.SMTP_TIMEOUT_SECONDS

    def backend_name(self) -> str:
        return f"smtp/{self.host}:{self.port}"

    def _build_mime(self, message: OutgoingEmail) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = formataddr((self.from_name, self.from_address)) if self.from_name else self.from_address
        msg["To"] = message.to
        msg.attach(MIMEText(message.text, "plain"))
        if message.html:
            msg.attach(MIMEText(message.html, "html"))
        return msg

    def _send_blocking(self, message: OutgoingEmail) -> None:
        msg = self._build_mime(message)

        if self.port == 465:
            server = smtplib.SMTP_SSL(self.host, self.port, context=ssl.create_default_context(), timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.port != 465 and self.use_tls:
                server.starttls(context=ssl.create_default_context())
            if self.username:
                server.login(self.username, self.password or "")
            server.sendmail(self.from_address, [message.to], msg.as_string())
        finally:
            server.quit()

    async def send(self, message: OutgoingEmail) -> DeliveryResult:
        try:
            await asyncio.to_thread(self._send_blocking, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP send to {message.to} failed: {e}")
            return DeliveryResult(success=False, backend=self.backend_name(), error=str(e))

        logger.info(f"Email sent via {self.host} to {message.to}: {message.subject}")
        return DeliveryResult(success=True, message_id=f"smtp-{uuid.uuid4().hex}", backend=self.backend_name())


class ConsoleMailSender(BaseMailSender):
    """Logs messages instead of sending them. Keeps an in-memory outbox."""

    def __init__(self):
        self.outbox: list[OutgoingEmail] = []

    def backend_name(self) -> str:
        return "console"

    async def send(self, message: OutgoingEmail) -> DeliveryResult:
        self.outbox.append(message)
        logger.info(f"[console mail] to={message.to} subject={message.subject!r}\n{message.text}")
        return DeliveryResult(success=True, message_id=f"console-{len(self.outbox)}", backend=self.backend_name())


def get_mail_sender() -> BaseMailSender:
    """Factory to get the configured mail sender."""
    backend = settings.MAIL_BACKEND

    if backend == "smtp":
        return SmtpMailSender()
    elif backend == "console":
        return ConsoleMailSender()
    else:
        raise ValueError(f"Unknown mail backend: {backend}")
