"""Honeypot trap and schema validation stages."""

from __future__ import annotations

from fastapi_lead_pipeline.component import ComponentCategory, FlowComponent
from fastapi_lead_pipeline.context import RequestContext
from fastapi_lead_pipeline.exceptions import FlowAbort, ValidationFailed
from fastapi_lead_pipeline.validation import Validator


class HoneypotTrap(FlowComponent):
    """A hidden form field only bots fill in."""

    category = ComponentCategory.VALIDATION

    def __init__(self, field: str = "company") -> None:
        self._field = field

    async def resolve(self, ctx: RequestContext) -> None:
        if isinstance(ctx.body, dict) and ctx.body.get(self._field):
            raise FlowAbort("Bad Request", status_code=400)


class SchemaValidation(FlowComponent):
    """Delegates to a pluggable validator; stores the result in ``ctx.data``."""

    category = ComponentCategory.VALIDATION

    def __init__(self, validator: Validator) -> None:
        self._validator = validator

    async def resolve(self, ctx: RequestContext) -> None:
        result = self._validator.validate(ctx.body)
        if not result.ok:
            raise ValidationFailed(result.issues)
        ctx.data = result.data
