"""IssueDownloadGrant stage: runs only after delivery succeeded."""

from __future__ import annotations

from fastapi_lead_pipeline._types import KindResolver
from fastapi_lead_pipeline.component import ComponentCategory, FlowComponent
from fastapi_lead_pipeline.context import RequestContext, ResponseCookie
from fastapi_lead_pipeline.grants import GrantKind, GrantSigner, grant_cookie_name


def lead_grant_kind(data: object) -> GrantKind:
    """Brochure requests get the brochure; everything else gets quotes."""
    if getattr(data, "type", None) == GrantKind.BROCHURE.value:
        return GrantKind.BROCHURE
    return GrantKind.QUOTES


class IssueDownloadGrant(FlowComponent):
    category = ComponentCategory.GRANT

    def __init__(
        self,
        signer: GrantSigner,
        *,
        kind_for: KindResolver = lead_grant_kind,
        ttl_seconds: int = 180,
        cookie_prefix: str = "svs_dl_",
        secure: bool = False,
    ) -> None:
        self._signer = signer
        self._kind_for = kind_for
        self._ttl = ttl_seconds
        self._cookie_prefix = cookie_prefix
        self._secure = secure

    async def resolve(self, ctx: RequestContext) -> None:
        grant = self._signer.issue(self._kind_for(ctx.data), self._ttl)
        ctx.cookies.append(
            ResponseCookie(
                name=grant_cookie_name(grant.kind, self._cookie_prefix),
                value=grant.encode(),
                max_age=grant.ttl_seconds,
                secure=self._secure,
            )
        )
        ctx.state["grant"] = grant
