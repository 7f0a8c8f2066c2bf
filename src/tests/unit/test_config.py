"""Tests for telestore.core.config module."""

import logging

import pytest

import telestore.core.config as config


class TestEnvHelpers:
    """Tests for environment variable helpers."""

    def test_get_env_returns_value(self, monkeypatch):
        """get_env returns environment variable value."""
        monkeypatch.setenv("TEST_VAR", "test_value")

        assert config.get_env("TEST_VAR") == "test_value"

    def test_get_env_returns_default(self, monkeypatch):
        """get_env returns default when var not set."""
        monkeypatch.delenv("NONEXISTENT_VAR", raising=False)

        assert config.get_env("NONEXISTENT_VAR", "default") == "default"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("42", 42),
            ("-1001234", -1001234),
            ("not_a_number", 99),
            (None, 123),
        ],
    )
    def test_get_env_int(self, monkeypatch, value, expected):
        """get_env_int parses or falls back to default."""
        if value is None:
            monkeypatch.delenv("INT_VAR", raising=False)
        else:
            monkeypatch.setenv("INT_VAR", value)

        assert config.get_env_int("INT_VAR", expected) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [("2.5", 2.5), ("30", 30.0), ("soon", 60.0)],
    )
    def test_get_env_float(self, monkeypatch, value, expected):
        monkeypatch.setenv("FLOAT_VAR", value)

        assert config.get_env_float("FLOAT_VAR", 60.0) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("true", True),
            ("True", True),
            ("1", True),
            ("yes", True),
            ("false", False),
            ("False", False),
            ("0", False),
            ("no", False),
        ],
    )
    def test_get_env_bool_parses_known_values(self, monkeypatch, value, expected):
        """get_env_bool parses known values."""
        monkeypatch.setenv("BOOL_VAR", value)

        assert config.get_env_bool("BOOL_VAR") is expected

    @pytest.mark.parametrize("default", [True, False])
    def test_get_env_bool_default(self, monkeypatch, default):
        """get_env_bool returns default for unknown values."""
        monkeypatch.setenv("BOOL_VAR", "maybe")

        assert config.get_env_bool("BOOL_VAR", default) is default


class TestValidateEnvironment:
    """Tests for environment validation."""

    def test_validate_missing_bot_token(self, monkeypatch):
        """Validation fails without a bot token."""
        monkeypatch.delenv("TELESTORE_BOT_TOKEN", raising=False)
        monkeypatch.setenv("TELESTORE_CHANNEL_ID", "-100123")

        is_valid, message = config.validate_environment()
        assert is_valid is False
        assert "TELESTORE_BOT_TOKEN" in message
        assert "TELESTORE_CHANNEL_ID" not in message

    def test_validate_missing_both(self, monkeypatch):
        """Every missing variable is listed."""
        monkeypatch.delenv("TELESTORE_BOT_TOKEN", raising=False)
        monkeypatch.delenv("TELESTORE_CHANNEL_ID", raising=False)

        is_valid, message = config.validate_environment()
        assert is_valid is False
        assert message.startswith("Missing required environment variables:")
        assert "TELESTORE_BOT_TOKEN" in message
        assert "TELESTORE_CHANNEL_ID" in message

    def test_validate_invalid_channel_id(self, monkeypatch):
        """Validation fails with non-numeric channel ID."""
        monkeypatch.setenv("TELESTORE_BOT_TOKEN", "test_token")
        monkeypatch.setenv("TELESTORE_CHANNEL_ID", "@mychannel")

        is_valid, message = config.validate_environment()
        assert is_valid is False
        assert "must be a number" in message

    def test_validate_fails_with_zero_channel_id(self, monkeypatch):
        monkeypatch.setenv("TELESTORE_BOT_TOKEN", "test_token")
        monkeypatch.setenv("TELESTORE_CHANNEL_ID", "0")

        is_valid, message = config.validate_environment()
        assert is_valid is False
        assert "cannot be 0" in message

    def test_validate_full_success(self, monkeypatch):
        """Validation succeeds with all required vars."""
        monkeypatch.setenv("TELESTORE_BOT_TOKEN", "test_token")
        monkeypatch.setenv("TELESTORE_CHANNEL_ID", "-1001234567890")

        is_valid, message = config.validate_environment()
        assert is_valid is True
        assert message == ""


class TestDefaults:
    """Tests for configuration defaults."""

    def test_index_filename(self):
        assert config.INDEX_FILENAME == "index.json"

    def test_download_chunk_size(self):
        assert config.DOWNLOAD_CHUNK_SIZE == 64 * 1024

    def test_setup_logging_returns_logger(self):
        logger = config.setup_logging()

        assert isinstance(logger, logging.Logger)
        assert logger.name == "telestore.core.config"
