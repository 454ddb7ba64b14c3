"""Adapters that connect the core pipeline to SQLite, DNS and Telegram."""
