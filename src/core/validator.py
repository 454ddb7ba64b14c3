"""Domain extraction and resolvability checks (core domain)."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
from urllib.parse import urlsplit

from core.errors import InvalidDomainError, LookupTimeoutError
from core.ports import ResolverPort

LOGGER = logging.getLogger(__name__)

# More dots than this is treated as abuse rather than a real hostname.
MAX_SUBDOMAIN_DEPTH = 5


def _host_from_text(text: str) -> str:
    try:
        parsed = urlsplit(text.strip())
        host = parsed.hostname or ""
    except ValueError as exc:
        raise InvalidDomainError(f"could not parse '{text}': {exc}") from exc

    if not host:
        host = parsed.path.split("/", 1)[0]
    return host


def extract_apex_zone(text: str) -> str:
    """Return the lowercased ``zone.tld`` pair found in free-form text.

    Accepts bare hostnames (``git.ir``), hostnames with a path
    (``git.ir/page``) and full URLs (``https://www.git.ir/page``).
    """

    host = _host_from_text(text)

    depth = host.count(".")
    if depth > MAX_SUBDOMAIN_DEPTH:
        raise InvalidDomainError(f"subdomains depth exceeded maximum limit in '{host}'")
    if depth < 1:
        raise InvalidDomainError(f"could not find domain apex zone and tld parts in '{host}'")

    labels = host.split(".")
    if len(labels) < 2:
        raise InvalidDomainError(f"could not extract domain apex zone from '{host}'")
    zone, tld = labels[-2], labels[-1]
    if not zone or not tld:
        raise InvalidDomainError(f"empty label in '{host}'")

    return f"{zone}.{tld}".lower()


def is_public_unicast(address: str) -> bool:
    """Return True for a parseable address outside private and special ranges."""

    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return not (ip.is_private or ip.is_unspecified or ip.is_multicast or ip.is_loopback)


class DomainValidator:
    """Checks that an apex domain resolves only to public unicast addresses."""

    def __init__(self, resolver: ResolverPort, max_retries: int = 3) -> None:
        if max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got {max_retries}")
        self._resolver = resolver
        self._max_retries = max_retries

    def extract(self, text: str) -> str:
        return extract_apex_zone(text)

    async def is_resolvable(self, domain: str) -> bool:
        """Look the domain up, retrying timeouts up to ``max_retries`` times.

        Raises InvalidDomainError when a returned address is not public and
        propagates LookupError_ subclasses when the lookup itself fails.
        """

        attempts = self._max_retries + 1
        for attempt in range(1, attempts + 1):
            # Cancellation point between attempts.
            await asyncio.sleep(0)
            try:
                addresses = await self._resolver.lookup_host(domain)
            except LookupTimeoutError:
                if attempt == attempts:
                    raise
                LOGGER.debug("DNS lookup for %s timed out (attempt %s/%s)", domain, attempt, attempts)
                continue
            break

        if not addresses:
            return False
        for address in addresses:
            if not is_public_unicast(address):
                raise InvalidDomainError(
                    f"resolved ip is not a valid public unicast ip address: {address}"
                )
        return True
