"""JsonBody: size-bounded read and parse of the request body."""

from __future__ import annotations

import json

from fastapi_lead_pipeline.component import ComponentCategory, FlowComponent
from fastapi_lead_pipeline.context import RequestContext
from fastapi_lead_pipeline.exceptions import MalformedBody, PayloadTooLarge


class JsonBody(FlowComponent):
    """Reads at most ``max_bytes`` and parses JSON into ``ctx.body``.

    Stops reading as soon as the ceiling is crossed, so an oversized body
    is never buffered in full. An empty body parses as ``{}``.
    """

    category = ComponentCategory.BODY

    def __init__(self, max_bytes: int = 20_000) -> None:
        self._max_bytes = max_bytes

    async def resolve(self, ctx: RequestContext) -> None:
        raw = await self._read(ctx)
        if not raw.strip():
            ctx.body = {}
            return
        try:
            ctx.body = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, RecursionError):
            raise MalformedBody() from None

    async def _read(self, ctx: RequestContext) -> bytes:
        declared = ctx.request.headers.get("content-length")
        if (
            declared is not None
            and declared.isascii()
            and declared.isdigit()
            and int(declared) > self._max_bytes
        ):
            raise PayloadTooLarge()

        chunks: list[bytes] = []
        size = 0
        async for chunk in ctx.request.stream():
            size += len(chunk)
            if size > self._max_bytes:
                raise PayloadTooLarge()
            chunks.append(chunk)
        return b"".join(chunks)
