"""telestore - a file store kept in a Telegram channel."""

__version__ = "0.1.0"
