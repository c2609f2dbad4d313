"""Built-in pipeline stages."""

from fastapi_lead_pipeline.components.body import JsonBody
from fastapi_lead_pipeline.components.csrf import CsrfProtect
from fastapi_lead_pipeline.components.delivery import DeliverMail
from fastapi_lead_pipeline.components.grants import IssueDownloadGrant, lead_grant_kind
from fastapi_lead_pipeline.components.origin import OriginGate
from fastapi_lead_pipeline.components.throttling import RateLimit
from fastapi_lead_pipeline.components.validation import HoneypotTrap, SchemaValidation

__all__ = [
    "CsrfProtect",
    "DeliverMail",
    "HoneypotTrap",
    "IssueDownloadGrant",
    "JsonBody",
    "OriginGate",
    "RateLimit",
    "SchemaValidation",
    "lead_grant_kind",
]
