"""FlowComponent abstract base class and ComponentCategory enum."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from fastapi_lead_pipeline.context import RequestContext


class ComponentCategory(Enum):
    """Pipeline stage categories, defining strict execution order.

    Cheap gates run first: nothing that consumes rate-limit budget or talks
    to a mail provider runs before origin, CSRF and body checks pass.
    """

    ORIGIN = "origin"
    CSRF = "csrf"
    BODY = "body"
    VALIDATION = "validation"
    THROTTLING = "throttling"
    DELIVERY = "delivery"
    GRANT = "grant"
    CUSTOM = "custom"

    @property
    def order(self) -> int:
        return _ORDER[self]


_ORDER = {category: index for index, category in enumerate(ComponentCategory, 1)}


class FlowComponent(ABC):
    """Base abstraction for all processing stages in a flow."""

    category: ClassVar[ComponentCategory]

    @abstractmethod
    async def resolve(self, ctx: RequestContext) -> None: ...
