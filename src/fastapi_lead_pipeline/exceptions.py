"""FlowException hierarchy for controlled pipeline aborts."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi_lead_pipeline.ratelimit import RateLimitDecision
    from fastapi_lead_pipeline.validation import ValidationIssue


class FlowException(Exception):
    """Base for all flow exceptions."""


class FlowAbort(FlowException):
    """Controlled abort with HTTP status code and detail."""

    def __init__(self, detail: str, *, status_code: int = 400) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class ForbiddenOrigin(FlowAbort):
    """Declared origin is neither allow-listed nor same-host (403)."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(detail, status_code=403)


class CsrfMismatch(FlowAbort):
    """Missing or unequal double-submit token pair (403)."""

    def __init__(self, detail: str = "Invalid CSRF token") -> None:
        super().__init__(detail, status_code=403)


class PayloadTooLarge(FlowAbort):
    """Request body exceeds the byte ceiling (413)."""

    def __init__(self, detail: str = "Payload too large") -> None:
        super().__init__(detail, status_code=413)


class MalformedBody(FlowAbort):
    """Request body is present but not parseable (400)."""

    def __init__(self, detail: str = "Invalid JSON") -> None:
        super().__init__(detail, status_code=400)


class ValidationFailed(FlowAbort):
    """Schema validator rejected the structured content (400)."""

    def __init__(
        self,
        issues: Sequence[ValidationIssue] = (),
        detail: str = "Validation failed",
    ) -> None:
        super().__init__(detail, status_code=400)
        self.issues = tuple(issues)


class RateLimited(FlowAbort):
    """Sliding-window limiter denied the call (429)."""

    def __init__(
        self,
        decision: RateLimitDecision,
        *,
        retry_after: int,
        detail: str = "Too many requests",
    ) -> None:
        super().__init__(detail, status_code=429)
        self.decision = decision
        self.retry_after = retry_after


class DeliveryFailure(FlowAbort):
    """Every mail provider failed; terminal for the request (500)."""

    def __init__(self, detail: str = "Failed to send email") -> None:
        super().__init__(detail, status_code=500)


class FlowInternalError(FlowException):
    """Engine-level error wrapping unexpected exceptions."""

    def __init__(self, detail: str, *, cause: Exception | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.cause = cause
