"""Short-lived signed download grants."""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
from dataclasses import dataclass
from enum import Enum

from fastapi_lead_pipeline._types import Clock
from fastapi_lead_pipeline.security import constant_time_equals


class GrantKind(str, Enum):
    QUOTES = "quotes"
    BROCHURE = "brochure"


@dataclass(frozen=True)
class DownloadGrant:
    """A time-boxed capability to fetch one kind of protected asset."""

    kind: GrantKind
    issued_at: int
    ttl_seconds: int
    signature: str

    @property
    def expires_at(self) -> int:
        return self.issued_at + self.ttl_seconds

    def encode(self) -> str:
        """Cookie value: ``<expires_at>.<signature>``."""
        return f"{self.expires_at}.{self.signature}"


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class GrantSigner:
    """Mints and verifies grants with HMAC-SHA256 over ``kind:expires_at``."""

    def __init__(self, secret: str | bytes, *, clock: Clock = time.time) -> None:
        if not secret:
            raise ValueError("grant secret must not be empty")
        self._secret = secret.encode() if isinstance(secret, str) else secret
        self._clock = clock

    def sign(self, kind: GrantKind | str, expires_at: int) -> str:
        payload = f"{GrantKind(kind).value}:{expires_at}".encode()
        return _b64url(hmac.new(self._secret, payload, hashlib.sha256).digest())

    def issue(self, kind: GrantKind | str, ttl_seconds: int = 180) -> DownloadGrant:
        kind = GrantKind(kind)
        issued_at = int(self._clock())
        ttl = max(1, int(ttl_seconds))
        return DownloadGrant(
            kind=kind,
            issued_at=issued_at,
            ttl_seconds=ttl,
            signature=self.sign(kind, issued_at + ttl),
        )

    def verify(self, value: str | None, kind: GrantKind | str) -> bool:
        if not value:
            return False
        expires_raw, sep, signature = value.partition(".")
        # str.isdigit() also admits non-ASCII digits that int() rejects
        if not (sep and signature and expires_raw.isascii() and expires_raw.isdigit()):
            return False
        expires_at = int(expires_raw)
        if expires_at < int(self._clock()):
            return False
        return constant_time_equals(signature, self.sign(kind, expires_at))


def grant_cookie_name(kind: GrantKind | str, prefix: str = "svs_dl_") -> str:
    return f"{prefix}{GrantKind(kind).value}"
