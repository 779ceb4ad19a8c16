from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache


class Settings(BaseSettings):
    """
    Settings for the user store, loaded from the environment (and `.env`).
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "userstore"

    # Full URL that wins over the POSTGRES_* parts (e.g. "sqlite+aiosqlite:///./users.db")
    DATABASE_URL_OVERRIDE: str | None = None

    # Test database configuration
    TEST_POSTGRES_DB: str | None = None
    TESTING: bool = False

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False
    DB_POOL_PRE_PING: bool = True

    # Repository behaviour
    USER_DELETE_MODE: Literal["hard", "soft"] = "hard"
    DB_OPERATION_TIMEOUT: float | None = None

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/userstore")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL for the current environment.

        Resolution order:
        - `DATABASE_URL_OVERRIDE` when set.
        - With `TESTING=True` and `TEST_POSTGRES_DB` set, the test database, so a
          test run never touches the regular one.
        - Otherwise the regular `POSTGRES_DB`.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        database = self.POSTGRES_DB
        if self.TESTING and self.TEST_POSTGRES_DB:
            database = self.TEST_POSTGRES_DB

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{database}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Upper-case LOG_LEVEL before validation; the logging module expects
        level names such as "DEBUG" or "INFO".
        """
        return v.upper() if isinstance(v, str) else v

    @field_validator("LOG_FORMAT", "USER_DELETE_MODE", mode="before")
    @classmethod
    def normalize_lowercase(cls, v: str | None) -> str | None:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("DB_OPERATION_TIMEOUT")
    @classmethod
    def check_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("DB_OPERATION_TIMEOUT must be a positive number of seconds")
        return v

    model_config = SettingsConfigDict(
        # .env next to the package root (src/userstore/.env)
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# get_settings() always returns the same settings from the environment,
# so it is cached with lru_cache.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
