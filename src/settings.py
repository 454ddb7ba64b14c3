"""Static configuration for domainbot.

Tunable settings (storage path, rate limits, DNS, logging) live in an optional
config.json at the project root. Secrets such as the bot token are read from
the environment by client.py instead.
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

VERSION = "0.1.0"

CONFIG_PATH = os.environ.get("DOMAINBOT_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema.

    Every setting has a default, so a missing file means "use defaults".
    """

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# SQLite database file; relative paths resolve against the working directory.
_storage = _CONFIG.get("storage", {})
DB_PATH = _storage.get("db_path", "domains.db")

# Per-user submission quota.
# - RATE_LIMIT_MAX_ATTEMPTS: attempts allowed in one window
# - RATE_LIMIT_WINDOW_SECONDS: window length; expiry is inclusive
_rate_limit = _CONFIG.get("rate_limit", {})
RATE_LIMIT_MAX_ATTEMPTS = int(_rate_limit.get("max_attempts", 300))
RATE_LIMIT_WINDOW_SECONDS = int(_rate_limit.get("window_seconds", 24 * 60 * 60))

# Resolver used for the public-address check. System resolvers are ignored.
_dns = _CONFIG.get("dns", {})
DNS_NAMESERVER = _dns.get("nameserver", "8.8.8.8")
DNS_TIMEOUT_SECONDS = float(_dns.get("timeout_seconds", 10))
DNS_RETRIES = int(_dns.get("retries", 3))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {"enabled": True, "redact": {"enabled": True, "patterns": ["BOT_TOKEN", "API_HASH"]}})
