"""Origin gate: the first check on every request."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi_lead_pipeline.component import ComponentCategory, FlowComponent
from fastapi_lead_pipeline.context import RequestContext
from fastapi_lead_pipeline.exceptions import ForbiddenOrigin
from fastapi_lead_pipeline.security import is_origin_allowed


class OriginGate(FlowComponent):
    """Rejects requests whose ``Origin`` is not allow-listed (or same-host)."""

    category = ComponentCategory.ORIGIN

    def __init__(self, allowed_origins: Sequence[str] = ()) -> None:
        self._allowed_origins = tuple(allowed_origins)

    async def resolve(self, ctx: RequestContext) -> None:
        host = ctx.request.headers.get("host")
        if not is_origin_allowed(ctx.security.origin, self._allowed_origins, host):
            raise ForbiddenOrigin()
        ctx.origin_allowed = True
