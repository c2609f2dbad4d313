"""FastAPI application wiring the lead and contact pipelines."""

from __future__ import annotations

import logging
import platform
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import partial

from fastapi import Depends, FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.responses import JSONResponse, Response

from fastapi_lead_pipeline.components import (
    CsrfProtect,
    DeliverMail,
    HoneypotTrap,
    IssueDownloadGrant,
    JsonBody,
    OriginGate,
    RateLimit,
    SchemaValidation,
)
from fastapi_lead_pipeline.config import Settings, get_settings
from fastapi_lead_pipeline.context import RequestContext, ResponseCookie
from fastapi_lead_pipeline.dependency import (
    empty_response,
    flow_dependency,
    install_flow_handlers,
    json_response,
)
from fastapi_lead_pipeline.flow import Flow
from fastapi_lead_pipeline.grants import GrantSigner
from fastapi_lead_pipeline.guard import DownloadGuard
from fastapi_lead_pipeline.headers import security_headers
from fastapi_lead_pipeline.hooks import LoggingHook
from fastapi_lead_pipeline.mail import (
    MailDispatcher,
    MailProvider,
    ResendProvider,
    SmtpProvider,
    build_contact_mail,
    build_popup_lead_mail,
)
from fastapi_lead_pipeline.ratelimit import RedisThrottleBackend, SlidingWindowLimiter
from fastapi_lead_pipeline.schemas import ContactSubmission, PopupLead
from fastapi_lead_pipeline.security import generate_csrf_token
from fastapi_lead_pipeline.validation import PydanticValidator

logger = logging.getLogger(__name__)

_STARTED = time.monotonic()


def build_limiter(settings: Settings) -> SlidingWindowLimiter:
    backend = None
    if settings.redis_url:
        backend = RedisThrottleBackend(settings.redis_url, prefix=settings.rate_limit_prefix)
    return SlidingWindowLimiter(
        settings.rate_limit_max,
        settings.rate_limit_window_seconds,
        backend=backend,
        on_store_error=settings.rate_limit_store_failure,
    )


def build_dispatcher(settings: Settings) -> MailDispatcher:
    """Resend first when configured; SMTP is always the last resort."""
    providers: list[MailProvider] = []
    if settings.resend_api_key is not None:
        providers.append(
            ResendProvider(
                settings.resend_api_key.get_secret_value(),
                base_url=settings.resend_base_url,
                timeout_seconds=settings.mail_timeout_seconds,
            )
        )
    providers.append(
        SmtpProvider(
            username=settings.smtp_user,
            password=(
                settings.smtp_password.get_secret_value()
                if settings.smtp_password is not None
                else None
            ),
            host=settings.smtp_host,
            port=settings.smtp_port,
            secure=settings.smtp_secure,
            timeout_seconds=settings.mail_timeout_seconds,
            max_connections=settings.smtp_max_connections,
            max_messages=settings.smtp_max_messages,
        )
    )
    return MailDispatcher(providers, timeout_seconds=settings.mail_timeout_seconds)


def health_payload() -> dict[str, object]:
    return {
        "ok": True,
        "uptime": round(time.monotonic() - _STARTED, 3),
        "python": platform.python_version(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def create_app(
    settings: Settings | None = None,
    *,
    dispatcher: MailDispatcher | None = None,
    limiter: SlidingWindowLimiter | None = None,
    signer: GrantSigner | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    dispatcher = dispatcher or build_dispatcher(settings)
    limiter = limiter or build_limiter(settings)
    signer = signer or GrantSigner(settings.download_secret.get_secret_value())

    if not settings.mail_recipient:
        logger.warning("No EMAIL_USER configured; submissions cannot be delivered")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await dispatcher.aclose()
        await limiter.aclose()

    app = FastAPI(title="Lead Pipeline", lifespan=lifespan)
    app.state.settings = settings
    app.state.dispatcher = dispatcher
    app.state.limiter = limiter
    app.state.signer = signer
    install_flow_handlers(app)
    app.add_middleware(DownloadGuard, signer=signer, cookie_prefix=settings.grant_cookie_prefix)

    def dependency(flow: Flow):  # type: ignore[no-untyped-def]
        return flow_dependency(flow, request_id_prefix=settings.request_id_prefix)

    gate = Flow(OriginGate(settings.allowed_origins), name="origin")
    recipient = settings.mail_recipient or ""

    contact_flow = Flow(
        gate,
        CsrfProtect(cookie_name=settings.csrf_cookie_name),
        JsonBody(settings.max_body_bytes),
        HoneypotTrap("company"),
        SchemaValidation(PydanticValidator(ContactSubmission)),
        RateLimit("send-email", limiter),
        DeliverMail(
            partial(build_contact_mail, sender=settings.mail_sender, recipient=recipient),
            dispatcher,
            failure_detail="Failed to send email",
        ),
        name="send-email",
        failure_detail="Failed to send email",
    ).add_hook(LoggingHook("/send-email"))

    lead_flow = Flow(
        gate,
        CsrfProtect(cookie_name=settings.csrf_cookie_name),
        JsonBody(settings.max_body_bytes),
        SchemaValidation(PydanticValidator(PopupLead)),
        RateLimit("popup-lead", limiter),
        DeliverMail(
            partial(build_popup_lead_mail, sender=settings.mail_sender, recipient=recipient),
            dispatcher,
            failure_detail="Failed to send lead",
        ),
        IssueDownloadGrant(
            signer,
            ttl_seconds=settings.download_ttl_seconds,
            cookie_prefix=settings.grant_cookie_prefix,
            secure=settings.is_production,
        ),
        name="popup-lead",
        failure_detail="Failed to send lead",
    ).add_hook(LoggingHook("/popup-lead"))

    csrf_flow = Flow(gate, name="csrf", failure_detail="Failed to issue CSRF token")

    async def preflight(ctx: RequestContext = Depends(dependency(gate))) -> Response:  # noqa: B008
        return empty_response(ctx)

    for path in ("/send-email", "/popup-lead", "/csrf"):
        app.add_api_route(path, preflight, methods=["OPTIONS"], include_in_schema=False)

    @app.post("/send-email")
    async def send_email(
        ctx: RequestContext = Depends(dependency(contact_flow)),  # noqa: B008
    ) -> Response:
        logger.info(
            "email_sent",
            extra={"route": "/send-email", "client_ip": ctx.security.client_ip},
        )
        return json_response(ctx, {"message": "Email sent successfully"})

    @app.post("/popup-lead")
    async def popup_lead(
        ctx: RequestContext = Depends(dependency(lead_flow)),  # noqa: B008
    ) -> Response:
        logger.info(
            "lead_sent",
            extra={"route": "/popup-lead", "client_ip": ctx.security.client_ip},
        )
        return json_response(ctx, {"message": "Lead sent successfully"})

    @app.get("/csrf")
    async def issue_csrf_token(
        ctx: RequestContext = Depends(dependency(csrf_flow)),  # noqa: B008
    ) -> Response:
        existing = ctx.request.cookies.get(settings.csrf_cookie_name)
        token = existing or generate_csrf_token()
        ctx.cookies.append(
            ResponseCookie(
                name=settings.csrf_cookie_name,
                value=token,
                max_age=settings.csrf_cookie_max_age,
                secure=settings.is_production,
            )
        )
        logger.info("csrf_token_issued", extra={"route": "/csrf", "reused": bool(existing)})
        return json_response(ctx, {"token": token})

    @app.get("/health")
    async def health() -> Response:
        return JSONResponse(health_payload(), headers=security_headers(None))

    if settings.static_dir:
        app.mount("/", StaticFiles(directory=settings.static_dir), name="static")

    return app
