"""Origin allow-listing, constant-time comparison and CSRF token helpers."""

from __future__ import annotations

import secrets
from collections.abc import Sequence
from urllib.parse import urlsplit


def is_origin_allowed(
    origin: str | None,
    allowed_origins: Sequence[str],
    host: str | None,
) -> bool:
    """Return whether a declared ``Origin`` may use this API.

    No origin means a non-browser or same-origin fetch and is allowed. With
    an empty allow-list the origin's host must equal the request's own
    ``Host`` header.
    """
    if not origin:
        return True
    if allowed_origins:
        return origin in allowed_origins
    if not host:
        return False
    try:
        parts = urlsplit(origin)
        origin_host = parts.netloc
    except ValueError:
        return False
    if not parts.scheme or not origin_host:
        return False
    return origin_host.lower() == host.strip().lower()


def constant_time_equals(a: str | bytes, b: str | bytes) -> bool:
    """Compare two tokens without leaking where they differ.

    A length mismatch returns immediately; only equal-length inputs get the
    full fold over every byte.
    """
    left = a.encode() if isinstance(a, str) else a
    right = b.encode() if isinstance(b, str) else b
    if len(left) != len(right):
        return False
    diff = 0
    for x, y in zip(left, right):
        diff |= x ^ y
    return diff == 0


def validate_csrf_pair(cookie_token: str | None, header_token: str | None) -> bool:
    """Double-submit check; fails closed on anything missing or empty."""
    if not cookie_token or not header_token:
        return False
    return constant_time_equals(cookie_token, header_token)


def generate_csrf_token(size: int = 32) -> str:
    return secrets.token_urlsafe(size)
