"""UTC clock helpers.

Rate limit windows are plain unix-second arithmetic, so the process refuses to
start unless it runs with TZ=UTC.
"""

from __future__ import annotations

import os
import time

from core.errors import TimezoneError


def unix_now() -> int:
    """Return the current UTC time as integer unix seconds."""

    return int(time.time())


def require_utc() -> None:
    """Raise TimezoneError unless the TZ environment variable is exactly UTC."""

    tz = os.environ.get("TZ")
    if tz != "UTC":
        raise TimezoneError(f"TZ environment variable must be set to UTC, got: {tz!r}")
