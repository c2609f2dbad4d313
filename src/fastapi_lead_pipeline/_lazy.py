"""Lazy: once-guarded, process-wide construction of shared clients."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class Lazy(Generic[T]):
    """Build a value on first access; concurrent first callers share one winner."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._value: T | None = None
        self._lock = threading.Lock()

    @property
    def built(self) -> bool:
        return self._value is not None

    def get(self) -> T:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = self._factory()
            return self._value

    def reset(self) -> T | None:
        """Forget the cached value and hand it back for cleanup."""
        with self._lock:
            value, self._value = self._value, None
        return value
