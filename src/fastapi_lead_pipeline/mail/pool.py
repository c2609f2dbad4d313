"""SMTPPool: a small, capped pool of reusable aiosmtplib connections."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

import aiosmtplib

logger = logging.getLogger(__name__)


@dataclass
class _Connection:
    client: aiosmtplib.SMTP
    sent: int = 0


class SMTPPool:
    """At most ``max_connections`` live sessions; each retired after ``max_messages``."""

    def __init__(
        self,
        factory: Callable[[], aiosmtplib.SMTP],
        *,
        max_connections: int = 2,
        max_messages: int = 50,
    ) -> None:
        if max_connections < 1 or max_messages < 1:
            raise ValueError("max_connections and max_messages must be positive")
        self._factory = factory
        self._max_messages = max_messages
        self._semaphore = asyncio.Semaphore(max_connections)
        self._idle: list[_Connection] = []
        self.in_use = 0
        self.peak_in_use = 0

    @property
    def idle(self) -> int:
        return len(self._idle)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosmtplib.SMTP]:
        async with self._semaphore:
            conn = await self._checkout()
            self.in_use += 1
            self.peak_in_use = max(self.peak_in_use, self.in_use)
            try:
                yield conn.client
            except BaseException:
                # Errored or cancelled mid-exchange; the session state is unknown
                self._discard(conn)
                raise
            else:
                conn.sent += 1
                if conn.sent >= self._max_messages:
                    await self._retire(conn)
                else:
                    self._idle.append(conn)
            finally:
                self.in_use -= 1

    async def _checkout(self) -> _Connection:
        while self._idle:
            conn = self._idle.pop()
            if conn.client.is_connected:
                return conn
            self._discard(conn)

        client = self._factory()
        try:
            await client.connect()
        except BaseException:
            client.close()
            raise
        return _Connection(client)

    @staticmethod
    def _discard(conn: _Connection) -> None:
        conn.client.close()

    async def _retire(self, conn: _Connection) -> None:
        try:
            await conn.client.quit()
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.debug("SMTP quit failed on recycle: %r", exc)
            conn.client.close()

    async def aclose(self) -> None:
        idle, self._idle = self._idle, []
        for conn in idle:
            await self._retire(conn)
