"""Mail-layer errors, independent of the request pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


class MailError(Exception):
    """Base for mail delivery errors."""


class ProviderError(MailError):
    """A single provider rejected or failed to accept a message."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class ProviderFailure:
    provider: str
    error: BaseException
    timed_out: bool = False


class MailDeliveryError(MailError):
    """Every configured provider failed. Raised once per send."""

    def __init__(self, failures: Sequence[ProviderFailure]) -> None:
        names = ", ".join(f.provider for f in failures) or "none configured"
        super().__init__(f"Mail delivery failed via: {names}")
        self.failures = tuple(failures)
