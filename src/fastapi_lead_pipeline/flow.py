"""Flow: the ordered stage plan for one endpoint."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fastapi_lead_pipeline.component import ComponentCategory, FlowComponent

if TYPE_CHECKING:
    from fastapi_lead_pipeline.hooks import FlowHook

# A stage of the key category may only appear in a plan that also has
# every stage of the value categories.
_PREREQUISITES: dict[ComponentCategory, tuple[ComponentCategory, ...]] = {
    ComponentCategory.DELIVERY: (ComponentCategory.THROTTLING,),
    ComponentCategory.GRANT: (ComponentCategory.DELIVERY,),
}


@dataclass(frozen=True)
class ResolvedFlow:
    """Immutable execution plan: stages in category order plus hooks."""

    name: str
    components: tuple[FlowComponent, ...]
    hooks: tuple[FlowHook, ...] = ()
    failure_detail: str = "Internal server error"

    @property
    def categories(self) -> tuple[ComponentCategory, ...]:
        return tuple(c.category for c in self.components)


class Flow:
    """Stages for one endpoint, composable from smaller flows.

    Nested flows are inlined; a stage instance shared through several
    nested flows runs once. ``failure_detail`` is the message the client
    sees when a stage fails unexpectedly.
    """

    def __init__(
        self,
        *items: FlowComponent | Flow,
        name: str = "flow",
        failure_detail: str = "Internal server error",
    ) -> None:
        self.name = name
        self.failure_detail = failure_detail
        self._items: list[FlowComponent | Flow] = list(items)
        self._hooks: list[FlowHook] = []
        self._resolved: ResolvedFlow | None = None

    def add(self, *items: FlowComponent | Flow) -> Flow:
        self._items.extend(items)
        self._resolved = None
        return self

    def add_hook(self, hook: FlowHook) -> Flow:
        self._hooks.append(hook)
        self._resolved = None
        return self

    def resolve(self) -> ResolvedFlow:
        """Build (once) the plan; raises ``ValueError`` on a broken stage order."""
        if self._resolved is None:
            unique = list({id(c): c for c in self._walk(self._items)}.values())
            # stable sort: registration order holds within a category
            plan = tuple(sorted(unique, key=lambda c: c.category.order))
            self._check(plan)
            self._resolved = ResolvedFlow(
                name=self.name,
                components=plan,
                hooks=tuple(self._hooks),
                failure_detail=self.failure_detail,
            )
        return self._resolved

    @classmethod
    def _walk(cls, items: Iterable[FlowComponent | Flow]) -> Iterator[FlowComponent]:
        for item in items:
            if isinstance(item, Flow):
                yield from cls._walk(item._items)
            else:
                yield item

    def _check(self, plan: tuple[FlowComponent, ...]) -> None:
        present = {c.category for c in plan}
        for category in present:
            missing = [p.value for p in _PREREQUISITES.get(category, ()) if p not in present]
            if missing:
                raise ValueError(
                    f"flow {self.name!r}: {category.value} stage needs {', '.join(missing)}"
                )
