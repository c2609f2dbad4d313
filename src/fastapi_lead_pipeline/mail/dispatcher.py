"""MailDispatcher: ordered provider fallback with per-attempt timeouts."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from fastapi_lead_pipeline.mail.errors import MailDeliveryError, ProviderFailure
from fastapi_lead_pipeline.mail.message import MailMessage
from fastapi_lead_pipeline.mail.providers import MailProvider

logger = logging.getLogger(__name__)


class MailDispatcher:
    """Try each provider once, in order, until one accepts the message.

    Every attempt gets its own ``timeout_seconds``. A timed-out attempt is
    cancelled, which aborts its in-flight request or SMTP exchange.
    """

    def __init__(
        self,
        providers: Sequence[MailProvider],
        *,
        timeout_seconds: float = 15.0,
    ) -> None:
        if not providers:
            raise ValueError("MailDispatcher needs at least one provider")
        self._providers = tuple(providers)
        self._timeout = timeout_seconds

    @property
    def providers(self) -> tuple[MailProvider, ...]:
        return self._providers

    async def send(self, message: MailMessage) -> str:
        """Deliver ``message``; return the name of the provider that took it."""
        failures: list[ProviderFailure] = []
        for provider in self._providers:
            try:
                await asyncio.wait_for(provider.send(message), timeout=self._timeout)
            except asyncio.TimeoutError as exc:
                failures.append(ProviderFailure(provider.name, exc, timed_out=True))
                logger.warning(
                    "mail_provider_failed",
                    extra={"provider": provider.name, "error": "timeout", "timeout": self._timeout},
                )
            except Exception as exc:
                failures.append(ProviderFailure(provider.name, exc))
                logger.warning(
                    "mail_provider_failed",
                    extra={"provider": provider.name, "error": str(exc)},
                )
            else:
                if failures:
                    logger.info(
                        "mail_fallback_used",
                        extra={"provider": provider.name, "failed": [f.provider for f in failures]},
                    )
                return provider.name
        raise MailDeliveryError(failures)

    async def aclose(self) -> None:
        for provider in self._providers:
            close = getattr(provider, "aclose", None)
            if close is not None:
                await close()
