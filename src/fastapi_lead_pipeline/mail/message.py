"""Immutable outbound message values."""

from __future__ import annotations

from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr


@dataclass(frozen=True)
class MailAddress:
    address: str
    name: str | None = None

    def format(self) -> str:
        return formataddr((self.name or "", self.address))


@dataclass(frozen=True)
class MailMessage:
    """Built once per request; every provider attempt gets this same value."""

    sender: str
    to: tuple[str, ...]
    subject: str
    html: str
    reply_to: MailAddress | None = None

    def to_email_message(self) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = ", ".join(self.to)
        msg["Subject"] = self.subject
        if self.reply_to is not None:
            msg["Reply-To"] = self.reply_to.format()
        msg.set_content(self.html, subtype="html")
        return msg
