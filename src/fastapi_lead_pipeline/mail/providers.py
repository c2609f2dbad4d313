"""Mail providers: the Resend HTTP API and pooled SMTP."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import aiosmtplib
import httpx

from fastapi_lead_pipeline._lazy import Lazy
from fastapi_lead_pipeline.mail.errors import ProviderError
from fastapi_lead_pipeline.mail.message import MailMessage
from fastapi_lead_pipeline.mail.pool import SMTPPool

logger = logging.getLogger(__name__)

GMAIL_HOST = "smtp.gmail.com"
GMAIL_PORT = 465


@runtime_checkable
class MailProvider(Protocol):
    name: str

    async def send(self, message: MailMessage) -> None: ...


class ResendProvider:
    """Transactional email over the Resend REST API."""

    name = "resend"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.resend.com",
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: Lazy[httpx.AsyncClient] = Lazy(self._build_client)

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )

    async def send(self, message: MailMessage) -> None:
        payload: dict[str, object] = {
            "from": message.sender,
            "to": list(message.to),
            "subject": message.subject,
            "html": message.html,
        }
        if message.reply_to is not None:
            payload["reply_to"] = message.reply_to.address

        response = await self._client.get().post("/emails", json=payload)
        if not response.is_success:
            raise ProviderError(
                f"Resend API error: {response.status_code} "
                f"{response.reason_phrase} {response.text[:200]}".strip(),
                status_code=response.status_code,
            )

    async def aclose(self) -> None:
        client = self._client.reset()
        if client is not None:
            await client.aclose()


class SmtpProvider:
    """SMTP submission through a shared, capped connection pool.

    Without a host the provider targets Gmail over implicit TLS.
    """

    name = "smtp"

    def __init__(
        self,
        *,
        username: str | None,
        password: str | None,
        host: str | None = None,
        port: int = 0,
        secure: bool = False,
        timeout_seconds: float = 15.0,
        max_connections: int = 2,
        max_messages: int = 50,
    ) -> None:
        self._username = username
        self._password = password
        self._host = host
        self._port = port
        self._secure = secure
        self._timeout = timeout_seconds
        self._max_connections = max_connections
        self._max_messages = max_messages
        self._pool: Lazy[SMTPPool] = Lazy(self._build_pool)

    def _client(self) -> aiosmtplib.SMTP:
        if self._host:
            port = self._port or (465 if self._secure else 587)
            use_tls = self._secure
            hostname = self._host
        else:
            hostname, port, use_tls = GMAIL_HOST, GMAIL_PORT, True
        return aiosmtplib.SMTP(
            hostname=hostname,
            port=port,
            username=self._username,
            password=self._password,
            use_tls=use_tls,
            timeout=self._timeout,
        )

    def _build_pool(self) -> SMTPPool:
        if not self._username or not self._password:
            raise ProviderError("Missing SMTP/EMAIL credentials in environment")
        return SMTPPool(
            self._client,
            max_connections=self._max_connections,
            max_messages=self._max_messages,
        )

    @property
    def pool(self) -> SMTPPool:
        return self._pool.get()

    async def send(self, message: MailMessage) -> None:
        email = message.to_email_message()
        async with self.pool.acquire() as client:
            await client.send_message(email)

    async def aclose(self) -> None:
        pool = self._pool.reset()
        if pool is not None:
            await pool.aclose()
