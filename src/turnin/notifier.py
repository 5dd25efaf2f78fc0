from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from .errors import NotificationError
from .normalizer import CanonicalRecord
from .settings import SmtpSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attachment:
    file_name: str
    content: bytes
    mime_type: str = "application/pdf"


@dataclass(frozen=True)
class Notification:
    recipient: str
    subject: str
    body: str
    attachment: Attachment | None = None


def resolve_recipient(record: CanonicalRecord, override: str = "") -> str:
    if override:
        return override
    email = record.get("Homeowner Email")
    return email.strip() if isinstance(email, str) else ""


def compose_notification(
    record: CanonicalRecord,
    *,
    recipient: str,
    pdf_url: str,
    attachment: Attachment | None = None,
) -> Notification:
    homeowner = record.get("Homeowner Name") or "Homeowner"
    address = record.get("Project Address") or "Not specified"
    status = record.get("Status") or "Not specified"
    body = (
        f"A new Turn-In document has been generated for {homeowner}.\n\n"
        f"You can view and download the PDF using this link:\n{pdf_url}\n\n"
        f"Project Address: {address}\n"
        f"Status: {status}\n\n"
        "This is an automated notification."
    )
    return Notification(
        recipient=recipient,
        subject=f"New Turn-In Document - {homeowner}",
        body=body,
        attachment=attachment,
    )


def build_message(notification: Notification, sender: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = notification.subject
    msg["From"] = sender
    msg["To"] = notification.recipient
    msg.set_content(notification.body)
    if notification.attachment is not None:
        maintype, _, subtype = notification.attachment.mime_type.partition("/")
        msg.add_attachment(
            notification.attachment.content,
            maintype=maintype,
            subtype=subtype,
            filename=notification.attachment.file_name,
        )
    return msg


class SmtpNotifier:
    def __init__(self, settings: SmtpSettings, *, timeout: float = 30.0) -> None:
        self.settings = settings
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        if self.settings.secure:
            return smtplib.SMTP_SSL(self.settings.host, self.settings.port, timeout=self.timeout)
        server = smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.timeout)
        server.ehlo()
        if server.has_extn("starttls"):
            server.starttls()
            server.ehlo()
        return server

    def send(self, notification: Notification) -> None:
        if not self.settings.host:
            raise NotificationError("SMTP_HOST is not configured")
        msg = build_message(notification, self.settings.sender)
        try:
            with self._connect() as server:
                if self.settings.user:
                    server.login(self.settings.user, self.settings.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(
                f"Could not send email to {notification.recipient}: {exc}"
            ) from exc
        logger.info("Email sent.", extra={"recipient": notification.recipient})
