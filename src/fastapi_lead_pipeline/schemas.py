"""Form payload models for the contact and lead endpoints."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, StringConstraints

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
_PHONE_PATTERN = r"^\+?[\d\s-]{10,}$"


def _lower(value: str) -> str:
    return value.lower()


Email = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=_EMAIL_PATTERN, max_length=254),
    AfterValidator(_lower),
]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, pattern=_PHONE_PATTERN)]
SafeShort = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
SafeLong = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]
OptionalShort = Annotated[str, StringConstraints(strip_whitespace=True, max_length=200)]
OptionalLong = Annotated[str, StringConstraints(strip_whitespace=True, max_length=2000)]


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ContactSubmission(_Strict):
    name: SafeShort
    email: Email
    phone: Phone
    message: SafeLong
    company: str | None = None  # honeypot; real users never fill it


class PopupLead(_Strict):
    name: SafeShort
    phone: Phone
    type: Literal["quick-quote", "brochure"] | None = None
    productName: OptionalShort | None = None  # noqa: N815
    lookingFor: OptionalLong | None = None  # noqa: N815
    email: Email | None = None
