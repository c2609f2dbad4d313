"""Tests for client IP, request id and context objects."""

from __future__ import annotations

from typing import Any

from fastapi_lead_pipeline.context import (
    UNKNOWN_IP,
    RequestContext,
    SecurityContext,
    get_client_ip,
    get_request_id,
)


class TestGetClientIp:
    def test_header_precedence(self) -> None:
        headers = {"x-real-ip": "10.0.0.4", "cf-connecting-ip": "10.0.0.2"}
        assert get_client_ip(headers) == "10.0.0.2"

    def test_forwarded_for_uses_first_hop(self) -> None:
        headers = {"x-forwarded-for": " 198.51.100.1 , 10.0.0.1, 10.0.0.2"}
        assert get_client_ip(headers) == "198.51.100.1"

    def test_falls_back_to_peer(self) -> None:
        assert get_client_ip({}, peer="192.0.2.9") == "192.0.2.9"

    def test_unknown_without_anything(self) -> None:
        assert get_client_ip({}) == UNKNOWN_IP

    def test_only_trusted_headers_are_read(self) -> None:
        headers = {"x-forwarded-for": "198.51.100.1"}
        assert get_client_ip(headers, trusted_headers=(), peer="192.0.2.9") == "192.0.2.9"


class TestGetRequestId:
    def test_reuses_upstream_id(self) -> None:
        assert get_request_id({"x-vercel-id": "fra1::abc"}) == "fra1::abc"
        assert get_request_id({"x-request-id": "a", "cf-ray": "b"}) == "a"

    def test_generates_prefixed_id(self) -> None:
        first = get_request_id({}, prefix="svs")
        second = get_request_id({}, prefix="svs")
        assert first.startswith("svs-")
        assert len(first.split("-")) == 3
        assert first != second


class TestSecurityContext:
    def test_from_request(self, make_request: Any) -> None:
        request = make_request(
            headers={"Origin": "https://www.example.com", "X-Request-Id": "rid-7"}
        )
        security = SecurityContext.from_request(request)
        assert security.request_id == "rid-7"
        assert security.client_ip == "203.0.113.7"
        assert security.origin == "https://www.example.com"

    def test_without_client(self, make_request: Any) -> None:
        security = SecurityContext.from_request(make_request(client=None))
        assert security.client_ip == UNKNOWN_IP
        assert security.origin is None


class TestRequestContext:
    def test_defaults(self, make_ctx: Any) -> None:
        ctx: RequestContext = make_ctx()
        assert ctx.body is None
        assert ctx.data is None
        assert ctx.rate_limit is None
        assert ctx.cookies == []
        assert ctx.state == {}

    def test_allowed_origin_requires_gate(self, make_ctx: Any) -> None:
        ctx: RequestContext = make_ctx(headers={"Origin": "https://a.example"})
        assert ctx.allowed_origin is None
        ctx.origin_allowed = True
        assert ctx.allowed_origin == "https://a.example"

    def test_state_isolated_between_instances(self, make_ctx: Any) -> None:
        first, second = make_ctx(), make_ctx()
        first.state["x"] = 1
        first.cookies.append(object())
        assert second.state == {}
        assert second.cookies == []
