"""Configuration management for telestore core."""

import logging
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return default


# Telegram channel backing the store
TELESTORE_BOT_TOKEN = get_env("TELESTORE_BOT_TOKEN")
TELESTORE_CHANNEL_ID = get_env_int("TELESTORE_CHANNEL_ID", 0)

# Filesystem identity
TELESTORE_NAME = get_env("TELESTORE_NAME", "telestore") or "telestore"
TELESTORE_ROOT = get_env("TELESTORE_ROOT", ".") or "."

# Name of the attachment carrying the index on the pinned message
INDEX_FILENAME = "index.json"

# Downloads
DOWNLOAD_CHUNK_SIZE = 64 * 1024
TELESTORE_DOWNLOAD_TIMEOUT = get_env_float("TELESTORE_DOWNLOAD_TIMEOUT", 60.0)

# Logging
LOG_LEVEL = get_env("LOG_LEVEL", "INFO")

# API Server settings
TELESTORE_API_KEY = get_env("TELESTORE_API_KEY")
TELESTORE_HOST = get_env("TELESTORE_HOST", "127.0.0.1")
TELESTORE_PORT = get_env_int("TELESTORE_PORT", 8430)
TELESTORE_ALLOW_NO_AUTH = get_env_bool("TELESTORE_ALLOW_NO_AUTH", False)


def setup_logging() -> logging.Logger:
    """Configure and return logger."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, (LOG_LEVEL or "INFO").upper(), logging.INFO),
    )
    return logging.getLogger(__name__)


def validate_environment() -> tuple[bool, str]:
    """
    Validate required environment variables for connecting to a channel.

    Returns:
        (is_valid, message) - If not valid, message explains what's missing.
    """
    required = {
        "TELESTORE_BOT_TOKEN": "Token of a bot that is admin in the channel",
        "TELESTORE_CHANNEL_ID": "ID of the channel to store files in",
    }

    missing = []
    for var, description in required.items():
        if not get_env(var):
            missing.append(f"  - {var}: {description}")

    if missing:
        return False, "Missing required environment variables:\n" + "\n".join(missing)

    channel_id = get_env("TELESTORE_CHANNEL_ID", "") or ""
    try:
        channel_id_int = int(channel_id)
    except ValueError:
        return False, f"TELESTORE_CHANNEL_ID must be a number, got: {channel_id}"

    if channel_id_int == 0:
        return False, "TELESTORE_CHANNEL_ID cannot be 0."

    return True, ""
