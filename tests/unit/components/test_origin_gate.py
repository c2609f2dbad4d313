"""Tests for the origin gate."""

from __future__ import annotations

from typing import Any

import pytest

from fastapi_lead_pipeline.component import ComponentCategory
from fastapi_lead_pipeline.components.origin import OriginGate
from fastapi_lead_pipeline.exceptions import ForbiddenOrigin


class TestOriginGate:
    def test_category(self) -> None:
        assert OriginGate().category == ComponentCategory.ORIGIN

    async def test_allow_listed_origin(self, make_ctx: Any) -> None:
        ctx = make_ctx(headers={"Origin": "https://www.example.com"})
        await OriginGate(["https://www.example.com"]).resolve(ctx)
        assert ctx.allowed_origin == "https://www.example.com"

    async def test_foreign_origin_rejected(self, make_ctx: Any) -> None:
        ctx = make_ctx(headers={"Origin": "https://evil.example"})
        with pytest.raises(ForbiddenOrigin):
            await OriginGate(["https://www.example.com"]).resolve(ctx)
        assert ctx.allowed_origin is None

    async def test_no_origin_passes_without_cors(self, make_ctx: Any) -> None:
        ctx = make_ctx()
        await OriginGate(["https://www.example.com"]).resolve(ctx)
        assert ctx.origin_allowed
        assert ctx.allowed_origin is None

    async def test_same_host_when_list_empty(self, make_ctx: Any) -> None:
        ctx = make_ctx(headers={"Origin": "https://shop.example", "Host": "shop.example"})
        await OriginGate().resolve(ctx)
        assert ctx.allowed_origin == "https://shop.example"
