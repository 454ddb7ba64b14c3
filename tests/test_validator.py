from __future__ import annotations

import asyncio

import pytest

from core.errors import InvalidDomainError, LookupFailedError, LookupTimeoutError
from core.validator import DomainValidator, extract_apex_zone, is_public_unicast


class FakeResolver:
    """Replays scripted lookup results; exceptions are raised, lists returned."""

    def __init__(self, *responses) -> None:
        self._responses = list(responses)
        self.calls: list[str] = []

    async def lookup_host(self, hostname: str) -> list[str]:
        self.calls.append(hostname)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_extract_apex_zone_from_url() -> None:
    assert extract_apex_zone("https://Sub.Example.COM/x") == "example.com"
    assert extract_apex_zone("http://git.ir/page") == "git.ir"


def test_extract_apex_zone_from_bare_host_and_path() -> None:
    assert extract_apex_zone("git.ir") == "git.ir"
    assert extract_apex_zone("  www.git.ir/some/page \n") == "git.ir"


def test_extract_apex_zone_allows_five_dots() -> None:
    assert extract_apex_zone("a.b.c.d.example.com") == "example.com"


@pytest.mark.parametrize(
    "text",
    [
        "a.b.c.d.e.f.example.com",
        "localhost",
        "",
        "   ",
        "example.",
        ".com",
        "http://[::1",
    ],
)
def test_extract_apex_zone_rejects(text: str) -> None:
    with pytest.raises(InvalidDomainError):
        extract_apex_zone(text)


def test_is_public_unicast() -> None:
    assert is_public_unicast("185.143.232.1")
    assert is_public_unicast("2606:4700:4700::1111")
    assert not is_public_unicast("not-an-ip")
    assert not is_public_unicast("0.0.0.0")
    assert not is_public_unicast("::1")
    assert not is_public_unicast("192.168.1.10")


def test_is_resolvable_with_public_addresses() -> None:
    resolver = FakeResolver(["185.143.232.1", "2606:4700:4700::1111"])
    validator = DomainValidator(resolver, max_retries=3)

    assert asyncio.run(validator.is_resolvable("git.ir")) is True
    assert resolver.calls == ["git.ir"]


@pytest.mark.parametrize("address", ["127.0.0.1", "10.0.0.1", "169.254.0.1", "224.0.0.1"])
def test_is_resolvable_rejects_non_public_addresses(address: str) -> None:
    validator = DomainValidator(FakeResolver([address]), max_retries=3)

    with pytest.raises(InvalidDomainError) as excinfo:
        asyncio.run(validator.is_resolvable("example.com"))
    assert address in str(excinfo.value)


def test_is_resolvable_rejects_mixed_addresses() -> None:
    validator = DomainValidator(FakeResolver(["185.143.232.1", "10.0.0.1"]), max_retries=0)

    with pytest.raises(InvalidDomainError):
        asyncio.run(validator.is_resolvable("example.com"))


def test_is_resolvable_empty_answer_is_false() -> None:
    validator = DomainValidator(FakeResolver([]), max_retries=0)

    assert asyncio.run(validator.is_resolvable("example.com")) is False


def test_timeouts_are_retried_until_success() -> None:
    resolver = FakeResolver(
        LookupTimeoutError("slow"),
        LookupTimeoutError("slow"),
        ["185.143.232.1"],
    )
    validator = DomainValidator(resolver, max_retries=3)

    assert asyncio.run(validator.is_resolvable("git.ir")) is True
    assert len(resolver.calls) == 3


def test_timeouts_stop_after_max_retries() -> None:
    resolver = FakeResolver(*[LookupTimeoutError("slow") for _ in range(5)])
    validator = DomainValidator(resolver, max_retries=2)

    with pytest.raises(LookupTimeoutError):
        asyncio.run(validator.is_resolvable("git.ir"))
    assert len(resolver.calls) == 3


def test_other_lookup_errors_are_not_retried() -> None:
    resolver = FakeResolver(LookupFailedError("no such domain"), ["185.143.232.1"])
    validator = DomainValidator(resolver, max_retries=3)

    with pytest.raises(LookupFailedError):
        asyncio.run(validator.is_resolvable("nope.ir"))
    assert len(resolver.calls) == 1


def test_cancellation_stops_retries() -> None:
    class HangingResolver:
        def __init__(self) -> None:
            self.calls = 0

        async def lookup_host(self, hostname: str) -> list[str]:
            self.calls += 1
            await asyncio.Event().wait()
            return []

    resolver = HangingResolver()
    validator = DomainValidator(resolver, max_retries=3)

    async def scenario() -> None:
        task = asyncio.create_task(validator.is_resolvable("git.ir"))
        for _ in range(3):
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert resolver.calls == 1


def test_negative_retries_rejected() -> None:
    with pytest.raises(ValueError):
        DomainValidator(FakeResolver(), max_retries=-1)
