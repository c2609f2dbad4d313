"""Tests for the RateLimit stage."""

from __future__ import annotations

from typing import Any

import pytest

from fastapi_lead_pipeline.component import ComponentCategory
from fastapi_lead_pipeline.components.throttling import RateLimit
from fastapi_lead_pipeline.exceptions import RateLimited
from fastapi_lead_pipeline.ratelimit import SlidingWindowLimiter


class TestRateLimit:
    def test_category(self, clock: Any) -> None:
        limiter = SlidingWindowLimiter(1, clock=clock)
        assert RateLimit("r", limiter).category == ComponentCategory.THROTTLING

    async def test_records_decision(self, make_ctx: Any, clock: Any) -> None:
        limiter = SlidingWindowLimiter(3, 60, clock=clock)
        ctx = make_ctx()
        await RateLimit("send-email", limiter).resolve(ctx)
        assert ctx.rate_limit.allowed
        assert ctx.rate_limit.remaining == 2

    async def test_raises_when_exhausted(self, make_ctx: Any, clock: Any) -> None:
        limiter = SlidingWindowLimiter(1, 60, clock=clock)
        stage = RateLimit("send-email", limiter)
        await stage.resolve(make_ctx())
        clock.advance(15)
        ctx = make_ctx()
        with pytest.raises(RateLimited) as info:
            await stage.resolve(ctx)
        assert info.value.retry_after == 45
        assert ctx.rate_limit is info.value.decision

    async def test_buckets_by_client_ip(self, make_ctx: Any, clock: Any) -> None:
        stage = RateLimit("send-email", SlidingWindowLimiter(1, 60, clock=clock))
        await stage.resolve(make_ctx(headers={"X-Forwarded-For": "198.51.100.1"}))
        await stage.resolve(make_ctx(headers={"X-Forwarded-For": "198.51.100.2"}))
