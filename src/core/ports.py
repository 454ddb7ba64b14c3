"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for storage, DNS and notification adapters
so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import List, Protocol

from core.models import Submission, SubmissionResult


class StoragePort(Protocol):
    """Storage operations required by the core pipeline."""

    def consume_attempt(self, user_id: int, now: int, max_attempts: int, window_seconds: int) -> bool:
        """Atomically count one attempt; return False when the quota is spent."""
        ...

    def insert_domain(self, domain: str, user_id: int, now: int) -> None:
        ...


class ResolverPort(Protocol):
    """Single DNS lookup attempt against a fixed resolver."""

    async def lookup_host(self, hostname: str) -> List[str]:
        ...


class NotifierPort(Protocol):
    """Notification operations required by the core pipeline."""

    async def reply(self, submission: Submission, result: SubmissionResult) -> None:
        ...

    async def alert_operator(self, submission: Submission, error: Exception) -> None:
        ...
