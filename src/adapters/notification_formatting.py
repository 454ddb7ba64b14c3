"""Shared reply formatting helpers.

Keeping formatting here prevents drift between adapters and keeps replies
consistent regardless of delivery channel. Replies are bilingual
(English, then Persian) and use Telegram Markdown.
"""

from __future__ import annotations

from typing import Optional

from core.models import Outcome, Submission, SubmissionResult

_PERSIAN_DIGITS = str.maketrans("0123456789", "۰۱۲۳۴۵۶۷۸۹")

DUPLICATE_TEXT = "Domain is already registered.\n\nنام دامنه قبلا ثبت شده است."

INTERNAL_ERROR_TEXT = (
    "Internal error occurred. Retry, and reach support if the problem persists.\n\n"
    "خطای داخلی رخ داده است. در صورتی که پس از تلاش مجدد مشکل برطرف نشد، به پشتیبانی پیام دهید."
)

INVALID_DOMAIN_TEXT = (
    "Invalid domain name. It should be a simple domain name like: `git.ir`.\n\n"
    "نام دامنه نامعتبر است. ورودی باید یک نام دامنه مثل `git.ir` باشد."
)

HELP_TEXT = (
    "Send a domain name (for example `git.ir` or `https://git.ir/page`) and it will be "
    "checked and recorded if it is new.\n\n"
    "یک نام دامنه (مثلا `git.ir`) ارسال کنید تا بررسی و در صورت جدید بودن ثبت شود."
)

INFO_TEXT = (
    "This bot collects Iranian domain names submitted by users. Each domain must resolve "
    "to a public address and is recorded only once.\n\n"
    "این ربات نام دامنه‌های ایرانی ارسال‌شده توسط کاربران را جمع‌آوری می‌کند."
)


def format_rate_limited(window_seconds: int) -> str:
    hours = max(1, window_seconds // 3600)
    return (
        f"Rate limit exceeded. Retry in the next {hours} hours.\n\n"
        "تعداد درخواست‌های شما بیشتر از حد مجاز هستند. "
        f"می‌توانید مجددا بعد از {str(hours).translate(_PERSIAN_DIGITS)} ساعت تلاش کنید."
    )


def format_reply(result: SubmissionResult, window_seconds: int) -> str:
    """Return the user-facing reply for a pipeline outcome."""

    if result.outcome is Outcome.ACCEPTED:
        return f"`{result.domain}`"
    if result.outcome is Outcome.DUPLICATE:
        return DUPLICATE_TEXT
    if result.outcome is Outcome.RATE_LIMITED:
        return format_rate_limited(window_seconds)
    if result.outcome is Outcome.INVALID_DOMAIN:
        return INVALID_DOMAIN_TEXT
    if result.outcome is Outcome.INTERNAL_ERROR:
        return INTERNAL_ERROR_TEXT
    raise ValueError(f"Unsupported outcome: {result.outcome}")


def format_operator_alert(submission: Submission, error: Exception) -> str:
    """Create the alert body sent to the operator chat."""

    # Triple backticks inside the error text would close the pre block early.
    details = str(error).replace("```", "'''")
    return "\n".join(
        [
            "🚨 An unexpected error occurred. Please check the logs...",
            "",
            f"**User:** {submission.user_id}",
            f"**Message:** {submission.message_id}",
            "",
            f"```\n{type(error).__name__}: {details}\n```",
        ]
    )


def format_start(version: str, started_at: str) -> str:
    # Code spans render their content verbatim, so no escaping is needed.
    return "\n".join([f"Started At: `{started_at}`", f"Version: `{version}`"])


def format_command_reply(command: str, version: str, started_at: str) -> Optional[str]:
    """Return the static reply for a bot command, or None if unknown."""

    if command == "/start":
        return format_start(version, started_at)
    if command == "/help":
        return HELP_TEXT
    if command == "/info":
        return INFO_TEXT
    return None
