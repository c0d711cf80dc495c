from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import Protocol

from ..logging_config import get_logger
from .circuit_breaker import create_circuit_breaker

logger = get_logger(__name__)


class EmailSender(Protocol):
    def send(self, *, to: str, subject: str, body: str) -> None:
        raise NotImplementedError


class SmtpEmailSender:
    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        sender: str = "no-reply@erp.local",
        use_tls: bool = True,
        timeout: int = 10,
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._use_tls = use_tls
        self._timeout = timeout
        self._breaker = create_circuit_breaker("smtp", "email")

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls()
            if self._username:
                smtp.login(self._username, self._password)
            smtp.send_message(message)

    def send(self, *, to: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        self._breaker.call(self._deliver, message)
        logger.info("Email sent to %s (%s)", to, subject)
