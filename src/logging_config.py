"""Logging setup for domainbot.

Timestamps are UTC to match the unix-second arithmetic used everywhere else,
and bot credentials are scrubbed from every record before it is written.
"""

from __future__ import annotations

import logging
import os
import re
import time
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

import settings

# Bot API tokens look like "123456789:AA...". Telethon can echo them in errors.
BOT_TOKEN_PATTERN = re.compile(r"\b\d{6,12}:[A-Za-z0-9_-]{30,}")

# Environment variables that are always scrubbed, in addition to configured ones.
ALWAYS_REDACTED = ("BOT_TOKEN", "API_HASH")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"


class SecretRedactingFormatter(logging.Formatter):
    """UTC formatter that masks known secrets and anything shaped like a bot token."""

    converter = time.gmtime

    def __init__(self, secrets: Iterable[str], fmt: str = LOG_FORMAT, datefmt: str = LOG_DATEFMT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return BOT_TOKEN_PATTERN.sub("***", message)


def redaction_values(config: dict) -> list[str]:
    """Return env values to scrub: the bot credentials plus configured names."""

    names = list(ALWAYS_REDACTED)
    redact_cfg = config.get("redact", {}) if config else {}
    if redact_cfg.get("enabled", True):
        names.extend(redact_cfg.get("patterns", []))
    return [value for value in (os.getenv(name) for name in names) if value]


def _file_handler(file_cfg: dict, formatter: logging.Formatter, level: int) -> RotatingFileHandler:
    path = file_cfg.get("path", "logs/domainbot.log")
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    handler = RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(config: dict, level_override: Optional[str] = None) -> None:
    """Install console and optional rotating file handlers on the root logger.

    ``level_override`` (from the CLI) wins over the configured level. Telethon's
    own logger stays at WARNING unless ``telethon_level`` says otherwise, since
    its INFO output is connection chatter.
    """

    config = config or {}
    if not config.get("enabled", True) and level_override is None:
        return

    level_name = str(level_override or config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = SecretRedactingFormatter(redaction_values(config))

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg, formatter, level))

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers, force=True)
    telethon_level = str(config.get("telethon_level", "WARNING")).upper()
    logging.getLogger("telethon").setLevel(getattr(logging, telethon_level, logging.WARNING))
