"""RateLimit stage over the sliding-window limiter."""

from __future__ import annotations

from fastapi_lead_pipeline.component import ComponentCategory, FlowComponent
from fastapi_lead_pipeline.context import RequestContext
from fastapi_lead_pipeline.exceptions import RateLimited
from fastapi_lead_pipeline.ratelimit import SlidingWindowLimiter


class RateLimit(FlowComponent):
    """Counts the request against ``route`` + client IP; 429 when over."""

    category = ComponentCategory.THROTTLING

    def __init__(self, route: str, limiter: SlidingWindowLimiter) -> None:
        self._route = route
        self._limiter = limiter

    async def resolve(self, ctx: RequestContext) -> None:
        decision = await self._limiter.check(self._route, ctx.security.client_ip)
        ctx.rate_limit = decision
        if not decision.allowed:
            raise RateLimited(decision, retry_after=decision.retry_after(self._limiter.clock()))
