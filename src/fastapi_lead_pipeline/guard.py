"""DownloadGuard: gate protected static assets behind a download grant."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

from fastapi_lead_pipeline.grants import GrantKind, GrantSigner, grant_cookie_name

logger = logging.getLogger(__name__)

DEFAULT_PROTECTED_PREFIXES: Mapping[str, GrantKind] = {
    "/Broucher/": GrantKind.BROCHURE,
    "/Lift Quotes Pdf/": GrantKind.QUOTES,
}


class DownloadGuard(BaseHTTPMiddleware):
    """Requests under a protected prefix need a valid grant cookie of that kind."""

    def __init__(
        self,
        app: ASGIApp,
        signer: GrantSigner,
        *,
        protected: Mapping[str, GrantKind] = DEFAULT_PROTECTED_PREFIXES,
        cookie_prefix: str = "svs_dl_",
    ) -> None:
        super().__init__(app)
        self._signer = signer
        self._protected = dict(protected)
        self._cookie_prefix = cookie_prefix

    def _kind_for(self, path: str) -> GrantKind | None:
        for prefix, kind in self._protected.items():
            if path.startswith(prefix):
                return kind
        return None

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # scope["path"] is already percent-decoded
        kind = self._kind_for(request.scope["path"])
        if kind is None:
            return await call_next(request)

        value = request.cookies.get(grant_cookie_name(kind, self._cookie_prefix))
        if self._signer.verify(value, kind):
            return await call_next(request)

        logger.info("download_denied", extra={"kind": kind.value, "has_cookie": bool(value)})
        return PlainTextResponse("Forbidden", status_code=403)
