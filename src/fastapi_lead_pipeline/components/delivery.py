"""DeliverMail stage: compose and dispatch the notification email."""

from __future__ import annotations

import logging

from fastapi_lead_pipeline._types import MailBuilder
from fastapi_lead_pipeline.component import ComponentCategory, FlowComponent
from fastapi_lead_pipeline.context import RequestContext
from fastapi_lead_pipeline.exceptions import DeliveryFailure
from fastapi_lead_pipeline.mail.dispatcher import MailDispatcher
from fastapi_lead_pipeline.mail.errors import MailDeliveryError

logger = logging.getLogger(__name__)


class DeliverMail(FlowComponent):
    category = ComponentCategory.DELIVERY

    def __init__(
        self,
        builder: MailBuilder,
        dispatcher: MailDispatcher,
        *,
        failure_detail: str = "Failed to send email",
    ) -> None:
        self._builder = builder
        self._dispatcher = dispatcher
        self._failure_detail = failure_detail

    async def resolve(self, ctx: RequestContext) -> None:
        message = self._builder(ctx.data)
        try:
            provider = await self._dispatcher.send(message)
        except MailDeliveryError as exc:
            logger.error(
                "mail_delivery_failed",
                extra={
                    "providers": [f.provider for f in exc.failures],
                    "errors": [repr(f.error) for f in exc.failures],
                },
            )
            raise DeliveryFailure(self._failure_detail) from exc
        ctx.state["mail_provider"] = provider
