"""Tests for the double-submit CSRF stage."""

from __future__ import annotations

from typing import Any

import pytest

from fastapi_lead_pipeline.component import ComponentCategory
from fastapi_lead_pipeline.components.csrf import CsrfProtect
from fastapi_lead_pipeline.exceptions import CsrfMismatch


class TestCsrfProtect:
    def test_category(self) -> None:
        assert CsrfProtect().category == ComponentCategory.CSRF

    async def test_matching_pair_passes(self, make_ctx: Any) -> None:
        ctx = make_ctx(headers={"Cookie": "svs_csrf=tok123", "X-CSRF-Token": "tok123"})
        await CsrfProtect().resolve(ctx)

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Cookie": "svs_csrf=tok123"},
            {"X-CSRF-Token": "tok123"},
            {"Cookie": "svs_csrf=tok123", "X-CSRF-Token": "tok124"},
            {"Cookie": "other=tok123", "X-CSRF-Token": "tok123"},
        ],
    )
    async def test_rejects(self, make_ctx: Any, headers: dict[str, str]) -> None:
        with pytest.raises(CsrfMismatch):
            await CsrfProtect().resolve(make_ctx(headers=headers))

    async def test_custom_names(self, make_ctx: Any) -> None:
        ctx = make_ctx(headers={"Cookie": "c=v", "X-Token": "v"})
        await CsrfProtect(cookie_name="c", header="X-Token").resolve(ctx)
