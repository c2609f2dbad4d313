"""Deterministic response header set for the JSON endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi_lead_pipeline.ratelimit import RateLimitDecision

API_CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'none'",
        "frame-ancestors 'none'",
        "base-uri 'none'",
        "script-src 'none'",
        "style-src 'none'",
        "img-src 'none'",
        "font-src 'none'",
        "connect-src 'self'",
    ]
)

_BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "X-Frame-Options": "DENY",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Cache-Control": "no-store",
    "Vary": "Origin",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "Content-Security-Policy": API_CONTENT_SECURITY_POLICY,
}

CORS_ALLOW_HEADERS = "Content-Type, Authorization, X-Requested-With, X-CSRF-Token"
CORS_ALLOW_METHODS = "GET, POST, OPTIONS"


def rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(max(0, decision.remaining)),
        "X-RateLimit-Reset": str(decision.reset),
    }


def security_headers(
    allowed_origin: str | None = None,
    *,
    rate_limit: RateLimitDecision | None = None,
    request_id: str | None = None,
    retry_after: int | None = None,
) -> dict[str, str]:
    """Build the response headers for an API response.

    CORS headers appear only for an explicit ``allowed_origin``; without one
    the response is not readable by cross-origin scripts.
    """
    headers = dict(_BASE_HEADERS)
    if allowed_origin:
        headers["Access-Control-Allow-Origin"] = allowed_origin
        headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
        headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    if rate_limit is not None:
        headers.update(rate_limit_headers(rate_limit))
    if retry_after is not None:
        headers["Retry-After"] = str(max(0, retry_after))
    if request_id:
        headers["X-Request-Id"] = request_id
    return headers
