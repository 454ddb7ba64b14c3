"""Per-user attempt limiter (core domain).

The limiter itself holds no counters. Each decision is a single conditional
upsert executed by the storage adapter, so two concurrent submissions from the
same user cannot both slip past the limit.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from core.clock import unix_now
from core.ports import StoragePort

LOGGER = logging.getLogger(__name__)


class RateLimiter:
    """Sliding window counter with reset, backed by the store."""

    def __init__(
        self,
        storage: StoragePort,
        max_attempts: int,
        window_seconds: int,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        if window_seconds < 1:
            raise ValueError(f"window_seconds must be at least 1, got {window_seconds}")
        self._storage = storage
        self._max_attempts = max_attempts
        self._window_seconds = window_seconds
        self._clock = clock

    def can_pass(self, user_id: int, now: Optional[int] = None) -> bool:
        """Count one attempt for ``user_id`` and return whether it may proceed.

        A window is expired once ``now - window_start >= window_seconds``; the
        next attempt then starts a fresh window with a count of 1. StoreBusyError
        from the adapter propagates unchanged so callers can tell contention
        apart from a denial.
        """

        if now is None:
            now = self._clock()
        allowed = self._storage.consume_attempt(
            user_id,
            now,
            self._max_attempts,
            self._window_seconds,
        )
        if not allowed:
            LOGGER.info("Rate limit exceeded for user %s", user_id)
        return allowed
