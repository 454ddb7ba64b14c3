"""Core domain package for the domain submission bot.

Core contains rate limiting, domain validation and the submission pipeline
without any Telegram, DNS or storage-specific code.
"""
