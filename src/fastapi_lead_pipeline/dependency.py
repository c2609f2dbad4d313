"""flow_dependency(): run a flow as a FastAPI dependency; render its outcome."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from fastapi_lead_pipeline.context import (
    CLIENT_IP_HEADERS,
    RequestContext,
    SecurityContext,
)
from fastapi_lead_pipeline.exceptions import (
    FlowAbort,
    FlowException,
    FlowInternalError,
    RateLimited,
    ValidationFailed,
)
from fastapi_lead_pipeline.flow import Flow, ResolvedFlow
from fastapi_lead_pipeline.headers import security_headers
from fastapi_lead_pipeline.observability import request_id_var

logger = logging.getLogger(__name__)


def flow_dependency(
    flow: Flow,
    *,
    trusted_headers: Sequence[str] = CLIENT_IP_HEADERS,
    request_id_prefix: str = "svs",
) -> Callable[..., Awaitable[RequestContext]]:
    """Return a FastAPI-compatible dependency that executes the flow.

    A stage failure is raised as the ``FlowException`` itself; register
    :func:`install_flow_handlers` on the app to turn it into a response.
    """
    resolved = flow.resolve()
    dep = _make_dependency(resolved, trusted_headers, request_id_prefix)
    dep._flow_resolved = resolved  # type: ignore[attr-defined]
    return dep


def _make_dependency(
    resolved: ResolvedFlow,
    trusted_headers: Sequence[str],
    request_id_prefix: str,
) -> Callable[..., Awaitable[RequestContext]]:
    async def dependency(request: Request) -> RequestContext:
        security = SecurityContext.from_request(
            request,
            trusted_headers=trusted_headers,
            request_id_prefix=request_id_prefix,
        )
        ctx = RequestContext(request=request, security=security)
        request.state.flow_context = ctx
        request_id_var.set(security.request_id)

        for hook in resolved.hooks:
            await hook.on_flow_start(ctx)

        try:
            for component in resolved.components:
                try:
                    await component.resolve(ctx)
                except FlowAbort as exc:
                    for hook in resolved.hooks:
                        await hook.on_component(ctx, component, exc)
                    raise
                else:
                    for hook in resolved.hooks:
                        await hook.on_component(ctx, component, None)
        except FlowException:
            for hook in resolved.hooks:
                await hook.on_flow_end(ctx)
            raise
        except Exception as exc:
            for hook in resolved.hooks:
                await hook.on_flow_end(ctx)
            logger.exception("flow_error", extra={"route": resolved.name})
            raise FlowInternalError(resolved.failure_detail, cause=exc) from exc

        for hook in resolved.hooks:
            await hook.on_flow_end(ctx)

        return ctx

    return dependency


def _headers(ctx: RequestContext | None, *, cors: bool = True, **extra: Any) -> dict[str, str]:
    if ctx is None:
        return security_headers(None, **extra)
    origin = ctx.allowed_origin if cors else None
    return security_headers(origin, request_id=ctx.security.request_id, **extra)


def json_response(ctx: RequestContext, content: Any, *, status_code: int = 200) -> Response:
    """Success response: security and rate-limit headers plus staged cookies."""
    response = JSONResponse(
        content,
        status_code=status_code,
        headers=_headers(ctx, rate_limit=ctx.rate_limit),
    )
    for cookie in ctx.cookies:
        response.set_cookie(
            cookie.name,
            cookie.value,
            max_age=cookie.max_age,
            path="/",
            secure=cookie.secure,
            httponly=True,
            samesite="strict",
        )
    return response


def empty_response(ctx: RequestContext, *, status_code: int = 204) -> Response:
    return Response(status_code=status_code, headers=_headers(ctx))


def render_flow_exception(ctx: RequestContext | None, exc: FlowException) -> Response:
    """Terminal error response. Internal details never reach the body."""
    if isinstance(exc, FlowInternalError):
        return JSONResponse(
            {"error": exc.detail}, status_code=500, headers=_headers(ctx, cors=False)
        )
    if not isinstance(exc, FlowAbort):
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
            headers=_headers(ctx, cors=False),
        )

    if isinstance(exc, ValidationFailed):
        content: dict[str, Any] = {
            "errors": [{"msg": issue.message, "param": issue.param} for issue in exc.issues]
        }
    else:
        content = {"error": exc.detail}

    if isinstance(exc, RateLimited):
        headers = _headers(ctx, rate_limit=exc.decision, retry_after=exc.retry_after)
    else:
        headers = _headers(ctx, cors=exc.status_code < 500)
    return JSONResponse(content, status_code=exc.status_code, headers=headers)


async def flow_exception_handler(request: Request, exc: Exception) -> Response:
    ctx: RequestContext | None = getattr(request.state, "flow_context", None)
    if ctx is None:
        # failed outside a flow; still answer with a request id
        ctx = RequestContext(request=request, security=SecurityContext.from_request(request))
    if not isinstance(exc, FlowException):
        logger.error(
            "unhandled_error",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"path": request.url.path},
        )
        exc = FlowInternalError("Internal server error", cause=exc)
    return render_flow_exception(ctx, exc)


def install_flow_handlers(app: FastAPI) -> None:
    """Render flow aborts, and any other uncaught error, as JSON responses."""
    app.add_exception_handler(FlowException, flow_exception_handler)
    app.add_exception_handler(Exception, flow_exception_handler)
