"""Tests for the Resend and SMTP providers."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from fastapi_lead_pipeline.mail import (
    MailAddress,
    MailMessage,
    MailProvider,
    ProviderError,
    ResendProvider,
    SmtpProvider,
)

MESSAGE = MailMessage(
    sender="Site <site@example.com>",
    to=("sales@example.com",),
    subject="Quick Quote Request",
    html="<h2>Quick Quote Request</h2>",
    reply_to=MailAddress("bo@example.com", "Bo"),
)


def _resend(handler: Any) -> ResendProvider:
    return ResendProvider(
        "re_test",
        base_url="https://api.resend.test",
        transport=httpx.MockTransport(handler),
    )


class TestResendProvider:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(ResendProvider("k"), MailProvider)

    async def test_posts_message(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "email_1"})

        provider = _resend(handler)
        await provider.send(MESSAGE)
        await provider.aclose()

        (request,) = seen
        assert request.method == "POST"
        assert str(request.url) == "https://api.resend.test/emails"
        assert request.headers["authorization"] == "Bearer re_test"
        assert json.loads(request.content) == {
            "from": "Site <site@example.com>",
            "to": ["sales@example.com"],
            "subject": "Quick Quote Request",
            "html": "<h2>Quick Quote Request</h2>",
            "reply_to": "bo@example.com",
        }

    async def test_error_status_raises(self) -> None:
        provider = _resend(lambda request: httpx.Response(500, text="upstream down"))
        with pytest.raises(ProviderError) as info:
            await provider.send(MESSAGE)
        assert info.value.status_code == 500
        assert "upstream down" in str(info.value)
        await provider.aclose()

    async def test_client_built_once(self) -> None:
        provider = _resend(lambda request: httpx.Response(200, json={}))
        await provider.send(MESSAGE)
        client = provider._client.get()
        await provider.send(MESSAGE)
        assert provider._client.get() is client
        await provider.aclose()
        assert not provider._client.built


class TestSmtpProvider:
    def test_missing_credentials(self) -> None:
        provider = SmtpProvider(username=None, password=None)
        with pytest.raises(ProviderError):
            _ = provider.pool

    @pytest.mark.parametrize(
        ("kwargs", "expected"),
        [
            ({}, ("smtp.gmail.com", 465, True)),
            ({"host": "mail.example.com"}, ("mail.example.com", 587, False)),
            ({"host": "mail.example.com", "secure": True}, ("mail.example.com", 465, True)),
            ({"host": "mail.example.com", "port": 2525}, ("mail.example.com", 2525, False)),
        ],
    )
    def test_connection_settings(self, kwargs: dict[str, Any], expected: tuple[Any, ...]) -> None:
        provider = SmtpProvider(username="u", password="p", **kwargs)
        with patch("fastapi_lead_pipeline.mail.providers.aiosmtplib.SMTP") as smtp:
            provider._client()
        call = smtp.call_args.kwargs
        assert (call["hostname"], call["port"], call["use_tls"]) == expected
        assert call["username"] == "u"
        assert call["timeout"] == 15.0

    async def test_sends_through_pool(self) -> None:
        client = MagicMock()
        client.is_connected = True
        client.connect = AsyncMock()
        client.send_message = AsyncMock()
        client.quit = AsyncMock()
        provider = SmtpProvider(username="u", password="p", max_connections=1)
        with patch.object(SmtpProvider, "_client", return_value=client):
            await provider.send(MESSAGE)
            await provider.send(MESSAGE)

        assert client.connect.await_count == 1
        assert client.send_message.await_count == 2
        email = client.send_message.await_args.args[0]
        assert email["To"] == "sales@example.com"
        assert email["Reply-To"] == "Bo <bo@example.com>"
        assert provider.pool.peak_in_use == 1

        await provider.aclose()
        client.quit.assert_awaited_once()
