from __future__ import annotations

import pytest

from core.clock import require_utc, unix_now
from core.errors import StartupError, TimezoneError


def test_require_utc_accepts_utc(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TZ", "UTC")
    require_utc()


@pytest.mark.parametrize("tz", ["Asia/Tehran", "utc", ""])
def test_require_utc_rejects_other_zones(monkeypatch: pytest.MonkeyPatch, tz: str) -> None:
    monkeypatch.setenv("TZ", tz)
    with pytest.raises(TimezoneError):
        require_utc()


def test_require_utc_rejects_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TZ", raising=False)
    with pytest.raises(StartupError):
        require_utc()


def test_unix_now_is_int() -> None:
    assert isinstance(unix_now(), int)
