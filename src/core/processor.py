"""Core submission pipeline.

This module is integration-agnostic. It only relies on ports for storage, DNS
and notifications, enabling future frontends or adapters without changes here.

The pipeline enforces a strict order and stops at the first rejection:
1) Per-user rate limit (atomic upsert in the store)
2) Apex zone extraction from the message text
3) DNS resolvability against a fixed public resolver
4) Durable insert with a uniqueness constraint on the domain

Store calls block on SQLite locks, so they run in worker threads; awaiting
them keeps the event loop free and lets the caller cancel the submission.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from core.clock import unix_now
from core.errors import (
    DuplicateDomainError,
    InvalidDomainError,
    LookupError_,
    StoreBusyError,
    StoreError,
)
from core.models import Outcome, Submission, SubmissionResult
from core.ports import NotifierPort, StoragePort
from core.rate_limit import RateLimiter
from core.validator import DomainValidator

LOGGER = logging.getLogger(__name__)


class SubmissionProcessor:
    """Orchestrates rate limiting, validation, persistence, and replies."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        validator: DomainValidator,
        storage: StoragePort,
        notifier: NotifierPort,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._validator = validator
        self._storage = storage
        self._notifier = notifier
        self._clock = clock

    async def handle(self, submission: Submission) -> SubmissionResult:
        """Process one submission, reply to the user, and escalate failures."""

        result = await self.evaluate(submission)
        try:
            await self._notifier.reply(submission, result)
        finally:
            # Escalation must not depend on the user reply going through.
            if result.needs_operator and result.error is not None:
                await self._notifier.alert_operator(submission, result.error)
        return result

    async def evaluate(self, submission: Submission) -> SubmissionResult:
        """Run the pipeline stages without sending anything."""

        user_id = submission.user_id

        try:
            allowed = await asyncio.to_thread(self._rate_limiter.can_pass, user_id, self._clock())
        except StoreBusyError as exc:
            LOGGER.error("Database busy on rate limit check for user %s", user_id)
            return SubmissionResult(Outcome.INTERNAL_ERROR, error=exc)
        except StoreError as exc:
            LOGGER.error("Failed to check rate limit for user %s: %s", user_id, exc)
            return SubmissionResult(Outcome.INTERNAL_ERROR, error=exc)
        if not allowed:
            return SubmissionResult(Outcome.RATE_LIMITED)

        try:
            domain = self._validator.extract(submission.text)
        except InvalidDomainError as exc:
            LOGGER.debug("Failed to extract domain from message text: %s", exc)
            return SubmissionResult(Outcome.INVALID_DOMAIN, error=exc)

        # No store transaction is open here; the lookup may take several seconds.
        try:
            resolvable = await self._validator.is_resolvable(domain)
        except (InvalidDomainError, LookupError_) as exc:
            LOGGER.debug("Resolver rejected %s: %s", domain, exc)
            return SubmissionResult(Outcome.INVALID_DOMAIN, domain=domain, error=exc)
        if not resolvable:
            LOGGER.debug("Domain %s is not resolvable", domain)
            return SubmissionResult(Outcome.INVALID_DOMAIN, domain=domain)

        try:
            await asyncio.to_thread(self._storage.insert_domain, domain, user_id, self._clock())
        except DuplicateDomainError as exc:
            return SubmissionResult(Outcome.DUPLICATE, domain=domain, error=exc)
        except StoreBusyError as exc:
            LOGGER.error("Database busy on insert of %s", domain)
            return SubmissionResult(Outcome.INTERNAL_ERROR, domain=domain, error=exc)
        except StoreError as exc:
            LOGGER.error("Failed to insert %s into database: %s", domain, exc)
            return SubmissionResult(Outcome.INTERNAL_ERROR, domain=domain, error=exc)

        LOGGER.info("Domain %s accepted from user %s", domain, user_id)
        return SubmissionResult(Outcome.ACCEPTED, domain=domain)
