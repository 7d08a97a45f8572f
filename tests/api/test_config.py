"""
Tests for API configuration.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from api.config import APIConfig


class TestAPIConfig:
    """Test cases for APIConfig."""

    def test_defaults(self, monkeypatch):
        for name in ("MONGODB_DATABASE", "BOOKS_COLLECTION", "ENFORCE_UNIQUE_NAMES", "LOG_FILE"):
            monkeypatch.delenv(name, raising=False)

        config = APIConfig(_env_file=None)

        assert config.mongodb_database == "book_management"
        assert config.books_collection == "books"
        assert config.enforce_unique_names is False
        assert config.currency_symbol == "$"
        assert config.algorithm == "HS256"
        assert config.get_log_file_path() is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MONGODB_DATABASE", "catalogue")
        monkeypatch.setenv("ENFORCE_UNIQUE_NAMES", "true")
        monkeypatch.setenv("LOG_FILE", "logs/api.log")

        config = APIConfig(_env_file=None)

        assert config.mongodb_database == "catalogue"
        assert config.enforce_unique_names is True
        assert config.get_log_file_path() == Path("logs/api.log")

    def test_log_level_normalised(self):
        assert APIConfig(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            APIConfig(_env_file=None, log_level="verbose")

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            APIConfig(_env_file=None, log_format="xml")

    def test_invalid_token_expiry(self):
        with pytest.raises(ValidationError):
            APIConfig(_env_file=None, access_token_expire_minutes=0)
