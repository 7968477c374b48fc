"""
ConnectPair Backend: Mail Transport Interface
==============================================

What:  Abstract contract for handing a rendered email to a delivery system,
       plus the SMTP implementation used in production.
How:   The Notifier only knows `MailTransport.send()`. SMTPTransport opens an
       aiosmtplib connection per message; tests plug in a recording transport.

Contract:
    - send() either returns after the server accepted the message or raises
      NotificationError (no retries, no queueing)
    - close() releases whatever the transport holds; called once at shutdown
"""

import logging
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from connectpair.exceptions import NotificationError

logger = logging.getLogger(__name__)


class MailTransport(ABC):
    """Delivery backend for outgoing email."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        """
        Deliver one message.

        Raises:
            NotificationError: the message was not accepted for delivery.
        """
        ...

    async def close(self) -> None:
        """Release transport resources (no-op by default)."""
        return None


class SMTPTransport(MailTransport):
    """
    SMTP delivery through aiosmtplib.

    TLS:
        Port 465 uses implicit TLS. Any other port connects in plain text
        and lets aiosmtplib upgrade with STARTTLS when the server offers it.
    Auth:
        LOGIN is attempted only when a username is configured.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username or None
        self.password = password or None
        self.timeout = timeout

    @property
    def use_tls(self) -> bool:
        return self.port == 465

    async def send(self, message: EmailMessage) -> None:
        if not self.host:
            raise NotificationError(
                message="SMTP host is not configured",
                context={"to": message.get("To")},
            )
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.use_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise NotificationError(
                message=f"SMTP delivery failed: {e}",
                context={
                    "to": message.get("To"),
                    "host": self.host,
                    "port": self.port,
                    "error_type": type(e).__name__,
                },
            ) from e
