"""Error taxonomy shared by the core pipeline and adapters."""

from __future__ import annotations


class StartupError(RuntimeError):
    """Fatal condition detected before the bot starts serving submissions."""


class StorageConfigurationError(StartupError):
    """A storage pragma could not be applied or did not read back as set."""


class TimezoneError(StartupError):
    """The process is not running with a UTC time zone."""


class ConfigurationError(StartupError):
    """Required environment or config values are missing or malformed."""


class InvalidDomainError(ValueError):
    """Submitted text does not contain a usable, public apex domain."""


class LookupError_(Exception):
    """Base class for DNS lookup failures reported by resolver adapters."""


class LookupTimeoutError(LookupError_):
    """A single lookup attempt ran out of time; safe to retry."""


class LookupFailedError(LookupError_):
    """A lookup failed for a reason other than a timeout."""


class StoreError(Exception):
    """Unexpected storage failure."""


class StoreBusyError(StoreError):
    """The store is locked by another writer."""

    def __init__(self, message: str = "database is busy at the moment. try again later") -> None:
        super().__init__(message)


class DuplicateDomainError(StoreError):
    """The domain has already been recorded."""

    def __init__(self, domain: str) -> None:
        super().__init__(f"domain already exists: {domain}")
        self.domain = domain


class StoreConsistencyError(StoreError):
    """A write reported an unexpected number of affected rows."""
