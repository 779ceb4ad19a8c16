from pathlib import Path

import pytest
from pydantic import ValidationError

from userstore.config.settings import Settings, get_settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        for var in ("DATABASE_URL_OVERRIDE", "USER_DELETE_MODE", "DB_OPERATION_TIMEOUT", "TESTING"):
            monkeypatch.delenv(var, raising=False)

        settings = Settings(_env_file=None)

        assert settings.USER_DELETE_MODE == "hard"
        assert settings.DB_OPERATION_TIMEOUT is None
        assert settings.DATABASE_URL.startswith("postgresql+psycopg://")

    def test_database_url_from_parts(self):
        settings = Settings(
            _env_file=None,
            DATABASE_URL_OVERRIDE=None,
            POSTGRES_USERNAME="app",
            POSTGRES_PASSWORD="pw",
            POSTGRES_HOST="db",
            POSTGRES_PORT=5433,
            POSTGRES_DB="users",
        )

        assert settings.DATABASE_URL == "postgresql+psycopg://app:pw@db:5433/users"

    def test_testing_uses_test_database(self):
        settings = Settings(_env_file=None, DATABASE_URL_OVERRIDE=None, TESTING=True,
                            POSTGRES_DB="users", TEST_POSTGRES_DB="users_test")

        assert settings.DATABASE_URL.endswith("/users_test")

    def test_override_wins(self):
        settings = Settings(_env_file=None, DATABASE_URL_OVERRIDE="sqlite+aiosqlite:///./users.db")

        assert settings.DATABASE_URL == "sqlite+aiosqlite:///./users.db"

    def test_values_are_normalised(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "TEXT")
        monkeypatch.setenv("USER_DELETE_MODE", " Soft ")

        settings = Settings(_env_file=None)

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.LOG_FORMAT == "text"
        assert settings.USER_DELETE_MODE == "soft"

    def test_log_dir_is_a_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_DIR", str(tmp_path))

        assert Settings(_env_file=None).LOG_DIR == Path(tmp_path)

    @pytest.mark.parametrize("value", [0, -1.5])
    def test_timeout_must_be_positive(self, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DB_OPERATION_TIMEOUT=value)

    def test_unknown_delete_mode_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, USER_DELETE_MODE="archive")

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
