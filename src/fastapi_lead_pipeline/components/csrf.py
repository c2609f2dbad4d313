"""Double-submit CSRF check."""

from __future__ import annotations

from fastapi_lead_pipeline.component import ComponentCategory, FlowComponent
from fastapi_lead_pipeline.context import RequestContext
from fastapi_lead_pipeline.exceptions import CsrfMismatch
from fastapi_lead_pipeline.security import validate_csrf_pair


class CsrfProtect(FlowComponent):
    """Cookie token and ``X-CSRF-Token`` header must be present and equal."""

    category = ComponentCategory.CSRF

    def __init__(
        self,
        *,
        cookie_name: str = "svs_csrf",
        header: str = "X-CSRF-Token",
    ) -> None:
        self._cookie_name = cookie_name
        self._header = header

    async def resolve(self, ctx: RequestContext) -> None:
        cookie_token = ctx.request.cookies.get(self._cookie_name)
        header_token = ctx.request.headers.get(self._header)
        if not validate_csrf_pair(cookie_token, header_token):
            raise CsrfMismatch()
