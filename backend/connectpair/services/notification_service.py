"""
ConnectPair Backend: Notification Dispatcher
=============================================

What:  Renders the transactional emails and hands them to the mail transport.
How:   Each message kind maps to a Jinja2 template and a subject line. The
       rendered HTML goes into an EmailMessage which the MailTransport sends.
Who:   Scheduled as background tasks by the consultation and newsletter
       pipelines, after the response has been sent.

Failure policy:
    Delivery is best effort. Rendering errors, transport errors and missing
    configuration are all caught in dispatch(), logged, and dropped. Nothing
    is retried and nothing reaches the caller: the stored record is the
    source of truth, the email is a side channel.

Message kinds:
    confirmation  → the customer, after a consultation request
    admin-alert   → ADMIN_EMAIL, after a consultation request
    welcome       → the subscriber, after a newsletter signup
"""

import logging
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formatdate, make_msgid, parseaddr
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from fastapi import Request
from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from connectpair.config import Settings
from connectpair.services.mail_transport import MailTransport, SMTPTransport

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    CONFIRMATION = "confirmation"
    ADMIN_ALERT = "admin-alert"
    WELCOME = "welcome"


@dataclass(frozen=True)
class MessageTemplate:
    template: str
    subject: str


MESSAGE_TEMPLATES: Dict[NotificationKind, MessageTemplate] = {
    NotificationKind.CONFIRMATION: MessageTemplate(
        template="confirmation.html",
        subject="💕 We're Finding Your Perfect Numbers! - ConnectPair",
    ),
    NotificationKind.ADMIN_ALERT: MessageTemplate(
        template="admin_alert.html",
        subject="🚨 New Consultation Request #{consultation_id} - {names}",
    ),
    NotificationKind.WELCOME: MessageTemplate(
        template="welcome.html",
        subject="💕 Welcome to the ConnectPair Family!",
    ),
}


def build_template_environment() -> Environment:
    """
    Jinja2 environment for the email templates.

    Autoescaping is on for HTML: names and preferences come straight from a
    public form and end up in the admin's inbox.
    """
    return Environment(
        loader=PackageLoader("connectpair", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class Notifier:
    """
    Sends templated messages through a MailTransport.

    Built once by the app factory (see `from_settings`) and closed at
    shutdown together with its transport.
    """

    def __init__(
        self,
        transport: MailTransport,
        sender: str,
        admin_email: str,
        frontend_url: str,
        admin_url: str,
        environment: Optional[Environment] = None,
    ):
        self.transport = transport
        self.sender = sender
        self.admin_email = admin_email
        self.frontend_url = frontend_url.rstrip("/")
        self.admin_url = admin_url.rstrip("/")
        self.env = environment or build_template_environment()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Notifier":
        transport = SMTPTransport(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_pass,
            timeout=settings.smtp_timeout,
        )
        return cls(
            transport=transport,
            sender=settings.smtp_from,
            admin_email=settings.admin_email,
            frontend_url=settings.frontend_url,
            admin_url=settings.admin_url,
        )

    # ── Rendering ─────────────────────────────────────────────────────────

    def render(self, kind: NotificationKind, context: Mapping[str, Any]) -> Tuple[str, str]:
        """Return (subject, html) for a message kind."""
        template = MESSAGE_TEMPLATES[NotificationKind(kind)]
        values = {
            "frontend_url": self.frontend_url,
            "admin_url": self.admin_url,
            **context,
        }
        html = self.env.get_template(template.template).render(**values)
        subject = template.subject.format(**values)
        return subject, html

    def build_message(
        self, kind: NotificationKind, recipient: str, context: Mapping[str, Any]
    ) -> EmailMessage:
        subject, html = self.render(kind, context)
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = subject
        message["Date"] = formatdate(localtime=False)
        message["Message-ID"] = make_msgid(domain=parseaddr(self.sender)[1].rpartition("@")[2] or None)
        message.set_content(html, subtype="html")
        return message

    # ── Dispatch ──────────────────────────────────────────────────────────

    async def dispatch(
        self, kind: NotificationKind, recipient: str, context: Mapping[str, Any]
    ) -> bool:
        """
        Render and send one message. Never raises.

        Returns:
            True when the transport accepted the message, False otherwise.
            The request pipeline ignores this value.
        """
        kind = NotificationKind(kind)
        if not recipient:
            logger.error("Skipping %s email: no recipient configured", kind.value)
            return False
        try:
            message = self.build_message(kind, recipient, context)
            await self.transport.send(message)
        except Exception as e:
            logger.error(
                "Error sending %s email to %s: %s",
                kind.value,
                recipient,
                str(e),
                exc_info=True,
            )
            return False
        logger.info("%s email sent to: %s", kind.value, recipient)
        return True

    async def send_consultation_confirmation(
        self, email: str, names: str, consultation_id: int
    ) -> bool:
        return await self.dispatch(
            NotificationKind.CONFIRMATION,
            email,
            {"names": names, "consultation_id": consultation_id},
        )

    async def send_admin_alert(self, consultation: Mapping[str, Any]) -> bool:
        """
        Alert the admin inbox about a new consultation.

        `consultation` needs consultation_id, relationship_type, names, email,
        phone and budget; anniversary and preferences are optional.
        """
        context = {"anniversary": None, "preferences": "", **consultation}
        return await self.dispatch(NotificationKind.ADMIN_ALERT, self.admin_email, context)

    async def send_welcome(self, email: str) -> bool:
        return await self.dispatch(NotificationKind.WELCOME, email, {})

    async def close(self) -> None:
        await self.transport.close()


# ── Dependency ────────────────────────────────────────────────────────────
def get_notifier(request: Request) -> Notifier:
    """FastAPI dependency returning the Notifier built at startup."""
    return request.app.state.notifier
