"""Shared callable type aliases."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

# Seconds since the epoch; injectable so windows and expiries are testable
Clock = Callable[[], float]

# Callback types used by delivery and grant components
MailBuilder = Callable[[Any], Any]
KindResolver = Callable[[Any], Any]
