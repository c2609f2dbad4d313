"""SecurityContext and RequestContext: per-request state."""

from __future__ import annotations

import secrets
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from starlette.requests import Request

if TYPE_CHECKING:
    from fastapi_lead_pipeline.ratelimit import RateLimitDecision

# Checked in order; the first header present wins.
CLIENT_IP_HEADERS = (
    "x-vercel-ip",
    "cf-connecting-ip",
    "x-forwarded-for",
    "x-real-ip",
)
REQUEST_ID_HEADERS = (
    "x-request-id",
    "x-vercel-id",
    "x-amzn-trace-id",
    "cf-ray",
)
UNKNOWN_IP = "0.0.0.0"


def get_client_ip(
    headers: Mapping[str, str],
    *,
    trusted_headers: Sequence[str] = CLIENT_IP_HEADERS,
    peer: str | None = None,
) -> str:
    """Derive the client IP from trusted proxy headers, then the socket peer."""
    for name in trusted_headers:
        value = headers.get(name)
        if value:
            # X-Forwarded-For carries a chain; the client is the first hop
            return value.split(",")[0].strip()
    return peer or UNKNOWN_IP


def get_request_id(headers: Mapping[str, str], *, prefix: str = "svs") -> str:
    """Reuse an upstream request id when present, otherwise mint one."""
    for name in REQUEST_ID_HEADERS:
        value = headers.get(name)
        if value:
            return value
    stamp = format(int(time.time() * 1000), "x")
    return f"{prefix}-{stamp}-{secrets.token_hex(4)}"


@dataclass(frozen=True)
class SecurityContext:
    """Identity of a single request, fixed for its whole lifetime."""

    request_id: str
    client_ip: str
    origin: str | None = None

    @classmethod
    def from_request(
        cls,
        request: Request,
        *,
        trusted_headers: Sequence[str] = CLIENT_IP_HEADERS,
        request_id_prefix: str = "svs",
    ) -> SecurityContext:
        headers = request.headers
        peer = request.client.host if request.client is not None else None
        return cls(
            request_id=get_request_id(headers, prefix=request_id_prefix),
            client_ip=get_client_ip(headers, trusted_headers=trusted_headers, peer=peer),
            origin=headers.get("origin"),
        )


@dataclass(frozen=True)
class ResponseCookie:
    """A cookie a stage asks the final response to set."""

    name: str
    value: str
    max_age: int
    secure: bool = False


@dataclass
class RequestContext:
    """Lightweight per-request state container mutated by flow components."""

    request: Request
    security: SecurityContext
    origin_allowed: bool = False
    body: Any = None
    data: Any = None
    rate_limit: RateLimitDecision | None = None
    cookies: list[ResponseCookie] = field(default_factory=list)
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def allowed_origin(self) -> str | None:
        """Origin eligible for CORS headers on the response, if any."""
        if self.origin_allowed:
            return self.security.origin
        return None
