"""Sliding-window abuse limiter with a shared store and a per-process fallback."""

from __future__ import annotations

import asyncio
import logging
import math
import secrets
import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import redis.asyncio as aioredis

from fastapi_lead_pipeline._lazy import Lazy
from fastapi_lead_pipeline._types import Clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one limiter call. Derived per call, never stored."""

    allowed: bool
    limit: int
    remaining: int
    reset: int  # epoch seconds at which the window's oldest entry expires

    def retry_after(self, now: float) -> int:
        return max(0, self.reset - math.ceil(now))


class StoreFailurePolicy(str, Enum):
    """What the limiter does for a call whose shared-store request failed."""

    LOCAL = "local"  # count against this process's fallback window
    DENY = "deny"  # reject the call


@runtime_checkable
class ThrottleBackend(Protocol):
    """Pluggable storage for sliding-window counters."""

    async def hit(
        self, key: str, limit: int, window_seconds: float, now: float
    ) -> RateLimitDecision: ...


class InMemoryThrottleBackend:
    """Per-process sliding-window log. Shared by every request in the process."""

    SWEEP_EVERY = 1024

    def __init__(self) -> None:
        self._windows: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._calls = 0

    async def hit(
        self, key: str, limit: int, window_seconds: float, now: float
    ) -> RateLimitDecision:
        return self.hit_sync(key, limit, window_seconds, now)

    def hit_sync(
        self, key: str, limit: int, window_seconds: float, now: float
    ) -> RateLimitDecision:
        cutoff = now - window_seconds
        with self._lock:
            window = self._windows.setdefault(key, deque())
            while window and window[0] <= cutoff:
                window.popleft()

            if len(window) >= limit:
                oldest = window[0] if window else now
                return RateLimitDecision(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset=math.ceil(oldest + window_seconds),
                )

            window.append(now)
            decision = RateLimitDecision(
                allowed=True,
                limit=limit,
                remaining=max(limit - len(window), 0),
                reset=math.ceil(window[0] + window_seconds),
            )

            self._calls += 1
            if self._calls % self.SWEEP_EVERY == 0:
                self._sweep(cutoff)
        return decision

    def _sweep(self, cutoff: float) -> None:
        stale = [k for k, w in self._windows.items() if not w or w[-1] <= cutoff]
        for k in stale:
            del self._windows[k]

    def __len__(self) -> int:
        return len(self._windows)

    async def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)


# Prune, count, conditionally add and expire in one atomic step.
# Returns {allowed, count, oldest_score}; the score is a string so Redis
# does not truncate it to an integer.
SLIDING_WINDOW_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
local member = ARGV[4]

redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
local count = redis.call('ZCARD', key)
local allowed = 0
if count < limit then
  redis.call('ZADD', key, now, member)
  count = count + 1
  allowed = 1
end
redis.call('PEXPIRE', key, math.ceil(window * 1000))

local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
local oldest_score = now
if oldest[2] then
  oldest_score = tonumber(oldest[2])
end
return {allowed, count, tostring(oldest_score)}
"""


class RedisThrottleBackend:
    """Distributed sliding window over a Redis sorted set per key."""

    def __init__(
        self,
        url: str | None = None,
        *,
        client: Any | None = None,
        prefix: str = "svs:rl",
        timeout_seconds: float = 2.0,
    ) -> None:
        if client is None and url is None:
            raise ValueError("RedisThrottleBackend needs a url or a client")
        self._url = url
        self._prefix = prefix
        self._timeout = timeout_seconds
        self._client: Lazy[Any] = Lazy(lambda: client or self._connect())
        self._script: Lazy[Any] = Lazy(
            lambda: self._client.get().register_script(SLIDING_WINDOW_SCRIPT)
        )

    def _connect(self) -> Any:
        logger.info("Connecting rate limiter to Redis")
        return aioredis.from_url(
            self._url,
            socket_timeout=self._timeout,
            socket_connect_timeout=self._timeout,
            health_check_interval=30,
        )

    async def hit(
        self, key: str, limit: int, window_seconds: float, now: float
    ) -> RateLimitDecision:
        member = f"{now:.6f}:{secrets.token_hex(4)}"
        script = self._script.get()
        allowed, count, oldest = await asyncio.wait_for(
            script(
                keys=[f"{self._prefix}:{key}"],
                args=[repr(now), repr(float(window_seconds)), limit, member],
            ),
            timeout=self._timeout,
        )
        return RateLimitDecision(
            allowed=int(allowed) == 1,
            limit=limit,
            remaining=max(limit - int(count), 0),
            reset=math.ceil(float(oldest) + window_seconds),
        )

    async def aclose(self) -> None:
        client = self._client.reset()
        self._script.reset()
        if client is not None:
            await client.aclose()


class SlidingWindowLimiter:
    """Rate limiter keyed by (route, client IP).

    The shared backend is preferred. When it errors, ``on_store_error``
    decides: ``LOCAL`` narrows the limit to this process for that call,
    ``DENY`` rejects the call.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float = 60,
        *,
        backend: ThrottleBackend | None = None,
        fallback: InMemoryThrottleBackend | None = None,
        on_store_error: StoreFailurePolicy = StoreFailurePolicy.LOCAL,
        clock: Clock = time.time,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._backend = backend
        self._fallback = fallback or InMemoryThrottleBackend()
        self._on_store_error = on_store_error

    async def check(self, route: str, client_ip: str | None) -> RateLimitDecision:
        key = f"{route}:{client_ip or '0.0.0.0'}"
        now = self.clock()

        if self._backend is not None:
            try:
                return await self._backend.hit(key, self.limit, self.window_seconds, now)
            except Exception as exc:
                logger.warning(
                    "rate_limit_store_error",
                    extra={
                        "key": key,
                        "policy": self._on_store_error.value,
                        "error": repr(exc),
                    },
                )
                if self._on_store_error is StoreFailurePolicy.DENY:
                    return RateLimitDecision(
                        allowed=False,
                        limit=self.limit,
                        remaining=0,
                        reset=math.ceil(now + self.window_seconds),
                    )

        return await self._fallback.hit(key, self.limit, self.window_seconds, now)

    async def aclose(self) -> None:
        close = getattr(self._backend, "aclose", None)
        if close is not None:
            await close()
