"""Validator contract and the pydantic-backed implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ValidationIssue:
    path: tuple[str | int, ...]
    message: str

    @property
    def param(self) -> str:
        return str(self.path[0]) if self.path else ""


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    data: Any = None
    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)


@runtime_checkable
class Validator(Protocol):
    """validate(raw structured input) -> ok with data, or structured issues."""

    def validate(self, raw: Any) -> ValidationResult: ...


class PydanticValidator(Generic[ModelT]):
    """Adapts a pydantic model to the Validator contract."""

    def __init__(self, model: type[ModelT]) -> None:
        self._model = model

    def validate(self, raw: Any) -> ValidationResult:
        try:
            data = self._model.model_validate(raw)
        except ValidationError as exc:
            issues = tuple(
                ValidationIssue(path=tuple(err["loc"]), message=err["msg"])
                for err in exc.errors()
            )
            return ValidationResult(ok=False, issues=issues)
        return ValidationResult(ok=True, data=data)
