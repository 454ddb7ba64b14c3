"""Application entry point for the domainbot Telegram bot."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone
from typing import Optional

from art import tprint
from telethon import events

import settings
from adapters.dns_resolver import PublicDnsResolver
from adapters.notification_formatting import format_command_reply
from adapters.sqlite_storage import SQLiteStorage
from adapters.telegram_mapper import build_submission, parse_command, should_discard
from adapters.telegram_notifier import TelegramReplyNotifier
from client import build_client, load_environment, operator_chat_id, require_env
from core.clock import require_utc
from core.config import DnsConfig, RateLimitConfig
from core.errors import StartupError
from core.processor import SubmissionProcessor
from core.rate_limit import RateLimiter
from core.validator import DomainValidator
from logging_config import configure_logging

NAME = "DOMAINBOT"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _open_storage(db_path: str) -> SQLiteStorage:
    """Open the store and verify durability settings before anything else runs."""

    logger = logging.getLogger(__name__)
    storage = SQLiteStorage(db_path)
    storage.configure()
    logger.info("Successfully executed database pragmas on %s", db_path)
    storage.init_db()
    return storage


def _run(env_file: Optional[str], db_path: Optional[str], log_level: Optional[str]) -> None:
    _print_banner()
    started_at = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    load_environment(env_file)
    configure_logging(settings.LOGGING, level_override=log_level)
    logger = logging.getLogger(__name__)

    logger.info("Starting domainbot %s", settings.VERSION)

    require_utc()
    bot_token = require_env("BOT_TOKEN")
    alert_chat = operator_chat_id()
    if alert_chat is None:
        logger.warning("PUBLISH_CHAT_ID is not set; operator alerts will only be logged")

    storage = _open_storage(db_path or settings.DB_PATH)

    rate_config = RateLimitConfig(
        max_attempts=settings.RATE_LIMIT_MAX_ATTEMPTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    dns_config = DnsConfig(
        nameserver=settings.DNS_NAMESERVER,
        timeout_seconds=settings.DNS_TIMEOUT_SECONDS,
        retries=settings.DNS_RETRIES,
    )
    rate_limiter = RateLimiter(
        storage,
        max_attempts=rate_config.max_attempts,
        window_seconds=rate_config.window_seconds,
    )
    validator = DomainValidator(
        PublicDnsResolver(dns_config.nameserver, dns_config.timeout_seconds),
        max_retries=dns_config.retries,
    )
    logger.info(
        "Rate limit is %s attempts per %s seconds; resolving via %s",
        rate_config.max_attempts,
        rate_config.window_seconds,
        dns_config.nameserver,
    )

    client = build_client()
    notifier = TelegramReplyNotifier(client, alert_chat, rate_config.window_seconds)
    processor = SubmissionProcessor(
        rate_limiter=rate_limiter,
        validator=validator,
        storage=storage,
        notifier=notifier,
    )

    # Single handler keeps Telethon integration minimal and defers all
    # decisions to the core processor for consistency and testability.
    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            if await should_discard(event):
                return
            command = parse_command(event.raw_text or "")
            if command is not None:
                reply = format_command_reply(command, settings.VERSION, started_at)
                await event.respond(reply, parse_mode="md")
                return
            submission = build_submission(event.message)
            logger.info(
                "Submission from user_id=%s chat_id=%s message_id=%s",
                submission.user_id,
                submission.chat_id,
                submission.message_id,
            )
            result = await processor.handle(submission)
            logger.info("Submission %s finished with %s", submission.message_id, result.outcome.value)
        except Exception:
            logger.exception("Error while processing message")

    try:
        client.start(bot_token=bot_token)
        logger.info("Bot connected. Listening for incoming messages...")
        client.run_until_disconnected()
    finally:
        logger.info("Closing database connection")
        storage.close()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="domainbot", description="Iranian domains Telegram bot")
    parser.add_argument("--version", action="version", version=f"%(prog)s {settings.VERSION}")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Start the bot server")
    run_parser.add_argument(
        "-e",
        "--env",
        dest="env_file",
        help="Custom .env file. Defaults to .env in the current working directory",
    )
    run_parser.add_argument(
        "--db",
        dest="db_path",
        help="Database file name. Defaults to domains.db in the current working directory",
    )
    run_parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level",
    )

    args = parser.parse_args(argv)
    try:
        _run(
            getattr(args, "env_file", None),
            getattr(args, "db_path", None),
            getattr(args, "log_level", None),
        )
    except StartupError as exc:
        logging.getLogger(__name__).critical("Startup aborted: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
