"""Telegram reply adapter.

Sends pipeline outcomes back to the submitting user and escalates internal
failures to an operator chat through the same Telethon client.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from telethon import errors

from adapters.notification_formatting import format_operator_alert, format_reply
from core.models import Outcome, Submission, SubmissionResult

LOGGER = logging.getLogger(__name__)

# RPC failures, unresolvable chats and a dropped connection all surface here.
_SEND_ERRORS = (errors.RPCError, ValueError, ConnectionError)


class TelegramReplyNotifier:
    """Notifier adapter that replies in the user's private chat."""

    def __init__(
        self,
        client,
        operator_chat_id: Optional[Union[int, str]],
        window_seconds: int,
    ) -> None:
        self._client = client
        self._operator_chat_id = operator_chat_id
        self._window_seconds = window_seconds

    async def reply(self, submission: Submission, result: SubmissionResult) -> None:
        """Send the formatted outcome to the user."""

        text = format_reply(result, self._window_seconds)
        # Accepted domains are threaded under the original message.
        reply_to = submission.message_id if result.outcome is Outcome.ACCEPTED else None
        try:
            await self._client.send_message(
                submission.chat_id,
                text,
                reply_to=reply_to,
                parse_mode="md",
            )
        except _SEND_ERRORS:
            LOGGER.exception(
                "Failed to send %s reply to chat %s",
                result.outcome.value,
                submission.chat_id,
            )

    async def alert_operator(self, submission: Submission, error: Exception) -> None:
        """Forward an internal failure to the operator chat."""

        if self._operator_chat_id is None:
            LOGGER.warning("No operator chat configured; dropping alert for %s", error)
            return
        try:
            await self._client.send_message(
                self._operator_chat_id,
                format_operator_alert(submission, error),
                parse_mode="md",
            )
        except _SEND_ERRORS:
            LOGGER.exception("Failed to send alert to operator chat %s (root error: %s)", self._operator_chat_id, error)
