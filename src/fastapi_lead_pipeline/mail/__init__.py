"""Mail delivery: message values, providers, pooling and fallback dispatch."""

from fastapi_lead_pipeline.mail.builders import build_contact_mail, build_popup_lead_mail
from fastapi_lead_pipeline.mail.dispatcher import MailDispatcher
from fastapi_lead_pipeline.mail.errors import (
    MailDeliveryError,
    MailError,
    ProviderError,
    ProviderFailure,
)
from fastapi_lead_pipeline.mail.message import MailAddress, MailMessage
from fastapi_lead_pipeline.mail.pool import SMTPPool
from fastapi_lead_pipeline.mail.providers import MailProvider, ResendProvider, SmtpProvider

__all__ = [
    "MailAddress",
    "MailDeliveryError",
    "MailDispatcher",
    "MailError",
    "MailMessage",
    "MailProvider",
    "ProviderError",
    "ProviderFailure",
    "ResendProvider",
    "SMTPPool",
    "SmtpProvider",
    "build_contact_mail",
    "build_popup_lead_mail",
]
