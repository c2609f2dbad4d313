"""FlowHook base and the logging hook."""

from __future__ import annotations

import logging

from fastapi_lead_pipeline.component import FlowComponent
from fastapi_lead_pipeline.context import RequestContext
from fastapi_lead_pipeline.exceptions import FlowException, RateLimited

logger = logging.getLogger("fastapi_lead_pipeline.flow")


class FlowHook:
    """Base abstraction for lifecycle hooks. All methods are no-op by default."""

    async def on_flow_start(self, ctx: RequestContext) -> None:
        pass

    async def on_flow_end(self, ctx: RequestContext) -> None:
        pass

    async def on_component(
        self,
        ctx: RequestContext,
        component: FlowComponent,
        error: FlowException | None,
    ) -> None:
        pass


class LoggingHook(FlowHook):
    """Log every stage that aborts the flow. Never logs body content."""

    def __init__(self, route: str) -> None:
        self._route = route

    async def on_component(
        self,
        ctx: RequestContext,
        component: FlowComponent,
        error: FlowException | None,
    ) -> None:
        if error is None:
            return
        event = "rate_limited" if isinstance(error, RateLimited) else "flow_aborted"
        logger.info(
            event,
            extra={
                "route": self._route,
                "stage": type(component).__name__,
                "status": getattr(error, "status_code", None),
                "client_ip": ctx.security.client_ip,
            },
        )
