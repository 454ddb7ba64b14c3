"""DNS resolver adapter.

Implements the core ResolverPort with dnspython, always querying a fixed public
nameserver instead of whatever the host's resolv.conf points at.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import dns.asyncresolver
import dns.exception
import dns.resolver

from core.errors import LookupFailedError, LookupTimeoutError

LOGGER = logging.getLogger(__name__)

DEFAULT_NAMESERVER = "8.8.8.8"
DEFAULT_TIMEOUT_SECONDS = 10.0


def build_resolver(nameserver: str, timeout: float) -> dns.asyncresolver.Resolver:
    """Create an async resolver pinned to one nameserver."""

    resolver = dns.asyncresolver.Resolver(configure=False)
    resolver.nameservers = [nameserver]
    resolver.timeout = float(timeout)
    resolver.lifetime = float(timeout)
    return resolver


class PublicDnsResolver:
    """One lookup attempt per call; retries are the validator's job."""

    def __init__(
        self,
        nameserver: str = DEFAULT_NAMESERVER,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        resolver: Optional[dns.asyncresolver.Resolver] = None,
    ) -> None:
        self._nameserver = nameserver
        self._resolver = resolver or build_resolver(nameserver, timeout)

    async def lookup_host(self, hostname: str) -> List[str]:
        """Return every A and AAAA address for ``hostname``."""

        qname = hostname.rstrip(".") + "."
        try:
            answers = await self._resolver.resolve_name(qname)
        except dns.exception.Timeout as exc:
            raise LookupTimeoutError(f"lookup of {hostname} via {self._nameserver} timed out") from exc
        except dns.resolver.NXDOMAIN as exc:
            raise LookupFailedError(f"no such domain: {hostname}") from exc
        except dns.resolver.NoAnswer as exc:
            raise LookupFailedError(f"no addresses for {hostname}") from exc
        except dns.exception.DNSException as exc:
            raise LookupFailedError(f"failed to lookup domain {hostname}: {exc}") from exc

        addresses = list(answers.addresses())
        LOGGER.debug("Resolved %s to %s", hostname, addresses)
        return addresses
