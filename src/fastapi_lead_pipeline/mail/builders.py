"""Compose MailMessage values from validated form submissions."""

from __future__ import annotations

from html import escape
from typing import Any

from fastapi_lead_pipeline.mail.message import MailAddress, MailMessage

_PRE_STYLE = (
    "white-space:pre-wrap;font-family:ui-monospace,Menlo,Monaco,Consolas,"
    "'Liberation Mono','Courier New',monospace"
)

LEAD_SUBJECTS = {
    "quick-quote": "Quick Quote Request",
    "brochure": "Brochure Request",
}


def _reply_to(name: str | None, email: str | None) -> MailAddress | None:
    if not email:
        return None
    return MailAddress(address=str(email), name=(name or "")[:120] or "Website User")


def _line(label: str, value: Any) -> str:
    return f"<p><strong>{label}:</strong> {escape(str(value))}</p>"


def build_contact_mail(data: Any, *, sender: str, recipient: str) -> MailMessage:
    html = "\n".join(
        [
            "<h2>Contact Form Submission</h2>",
            _line("Name", data.name),
            _line("Email", data.email),
            _line("Phone", data.phone),
            "<p><strong>Message:</strong></p>",
            f'<pre style="{_PRE_STYLE}">{escape(data.message)}</pre>',
        ]
    )
    return MailMessage(
        sender=sender,
        to=(recipient,),
        subject="New Contact Form Submission",
        html=html,
        reply_to=_reply_to(data.name, data.email),
    )


def build_popup_lead_mail(data: Any, *, sender: str, recipient: str) -> MailMessage:
    subject = LEAD_SUBJECTS.get(data.type or "", "Popup Lead")
    lines = [
        f"<h2>{escape(subject)}</h2>",
        _line("Name", data.name),
        _line("Phone", data.phone),
    ]
    if data.email:
        lines.append(_line("Email", data.email))
    if data.productName:
        lines.append(_line("Product", data.productName))
    if data.lookingFor:
        lines.append(_line("Looking For", data.lookingFor))
    return MailMessage(
        sender=sender,
        to=(recipient,),
        subject=subject,
        html="\n".join(lines),
        reply_to=_reply_to(data.name, data.email),
    )
