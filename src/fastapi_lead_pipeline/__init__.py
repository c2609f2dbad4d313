"""FastAPI Lead Pipeline - hardened intake for public lead and contact forms."""

from fastapi_lead_pipeline.app import create_app
from fastapi_lead_pipeline.component import ComponentCategory, FlowComponent
from fastapi_lead_pipeline.components import (
    CsrfProtect,
    DeliverMail,
    HoneypotTrap,
    IssueDownloadGrant,
    JsonBody,
    OriginGate,
    RateLimit,
    SchemaValidation,
)
from fastapi_lead_pipeline.config import Settings, get_settings
from fastapi_lead_pipeline.context import RequestContext, ResponseCookie, SecurityContext
from fastapi_lead_pipeline.dependency import flow_dependency, install_flow_handlers
from fastapi_lead_pipeline.exceptions import (
    CsrfMismatch,
    DeliveryFailure,
    FlowAbort,
    FlowException,
    FlowInternalError,
    ForbiddenOrigin,
    MalformedBody,
    PayloadTooLarge,
    RateLimited,
    ValidationFailed,
)
from fastapi_lead_pipeline.flow import Flow
from fastapi_lead_pipeline.grants import DownloadGrant, GrantKind, GrantSigner
from fastapi_lead_pipeline.guard import DownloadGuard
from fastapi_lead_pipeline.hooks import FlowHook, LoggingHook
from fastapi_lead_pipeline.mail import MailDispatcher, MailMessage
from fastapi_lead_pipeline.ratelimit import (
    InMemoryThrottleBackend,
    RateLimitDecision,
    RedisThrottleBackend,
    SlidingWindowLimiter,
    StoreFailurePolicy,
    ThrottleBackend,
)

__all__ = [
    "ComponentCategory",
    "CsrfMismatch",
    "CsrfProtect",
    "DeliverMail",
    "DeliveryFailure",
    "DownloadGrant",
    "DownloadGuard",
    "Flow",
    "FlowAbort",
    "FlowComponent",
    "FlowException",
    "FlowHook",
    "FlowInternalError",
    "ForbiddenOrigin",
    "GrantKind",
    "GrantSigner",
    "HoneypotTrap",
    "InMemoryThrottleBackend",
    "IssueDownloadGrant",
    "JsonBody",
    "LoggingHook",
    "MailDispatcher",
    "MailMessage",
    "MalformedBody",
    "OriginGate",
    "PayloadTooLarge",
    "RateLimit",
    "RateLimitDecision",
    "RateLimited",
    "RedisThrottleBackend",
    "RequestContext",
    "ResponseCookie",
    "SchemaValidation",
    "SecurityContext",
    "Settings",
    "SlidingWindowLimiter",
    "StoreFailurePolicy",
    "ThrottleBackend",
    "ValidationFailed",
    "create_app",
    "flow_dependency",
    "get_settings",
    "install_flow_handlers",
]
