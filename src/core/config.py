"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitConfig:
    """Attempts allowed per user within one window."""

    max_attempts: int
    window_seconds: int


@dataclass(frozen=True)
class DnsConfig:
    """Resolver settings consumed by the DNS adapter and validator."""

    nameserver: str
    timeout_seconds: float
    retries: int
