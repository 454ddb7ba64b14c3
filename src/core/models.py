"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Submission:
    """One inbound text message from a user."""

    user_id: int
    chat_id: int
    message_id: int
    text: str


@dataclass(frozen=True)
class DomainRecord:
    """Persisted representation of an accepted domain."""

    domain: str
    created_ts: int
    created_by_id: int


@dataclass(frozen=True)
class RateLimitRecord:
    """Per-user attempt counter for the current window."""

    user_id: int
    window_start_ts: int
    attempt_count: int


class Outcome(str, Enum):
    """Closed set of results a submission can end with."""

    ACCEPTED = "accepted"
    RATE_LIMITED = "rate_limited"
    INVALID_DOMAIN = "invalid_domain"
    DUPLICATE = "duplicate"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one pipeline run, plus the normalized domain when known."""

    outcome: Outcome
    domain: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def needs_operator(self) -> bool:
        return self.outcome is Outcome.INTERNAL_ERROR
