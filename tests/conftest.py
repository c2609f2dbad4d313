"""Shared pytest fixtures for fastapi-lead-pipeline tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from starlette.requests import Request

from fastapi_lead_pipeline.config import Settings
from fastapi_lead_pipeline.context import RequestContext, SecurityContext
from fastapi_lead_pipeline.mail.message import MailMessage


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider:
    """Mail provider double that records messages or fails on demand."""

    def __init__(
        self,
        name: str,
        *,
        error: Exception | None = None,
        hang: bool = False,
    ) -> None:
        self.name = name
        self.error = error
        self.hang = hang
        self.sent: list[MailMessage] = []
        self.cancelled = False
        self.closed = False

    async def send(self, message: MailMessage) -> None:
        if self.hang:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise self.error
        self.sent.append(message)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stub_provider() -> type[StubProvider]:
    """Factory for mail provider doubles: ``stub_provider("smtp", error=...)``."""
    return StubProvider


@pytest.fixture
def make_request() -> Any:
    """Factory for Starlette Request objects with an optional body."""

    def _make(
        method: str = "POST",
        path: str = "/",
        headers: dict[str, str] | None = None,
        body: bytes | list[bytes] = b"",
        client: tuple[str, int] | None = ("203.0.113.7", 50000),
    ) -> Request:
        chunks = body if isinstance(body, list) else [body]
        messages = [
            {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
            for i, chunk in enumerate(chunks)
        ]

        async def receive() -> dict[str, Any]:
            if messages:
                return messages.pop(0)
            return {"type": "http.disconnect"}

        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [
                (k.lower().encode(), v.encode("latin-1")) for k, v in (headers or {}).items()
            ],
            "client": client,
            "root_path": "",
        }
        return Request(scope, receive)

    return _make


@pytest.fixture
def make_ctx(make_request: Any) -> Any:
    """Factory for a RequestContext around a fresh request."""

    def _make(**kwargs: Any) -> RequestContext:
        request = make_request(**kwargs)
        return RequestContext(request=request, security=SecurityContext.from_request(request))

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        API_ALLOWED_ORIGINS="https://www.example.com",
        EMAIL_USER="sales@example.com",
        EMAIL_PASS="app-password",
        DOWNLOAD_SECRET="test-download-secret",
    )
