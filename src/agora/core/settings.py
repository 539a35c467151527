"""Runtime configuration for the Agora forum service.

Every option maps to one environment variable (or ``.env`` entry); the
variable name is the field alias.
"""

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TreeStrategyName = Literal["batched", "per_node"]

# Driver prefixes rewritten so the synchronous engine and Alembic always get psycopg.
_SYNC_DRIVER_PREFIXES = {
    "postgres://": "postgresql+psycopg://",
    "postgresql://": "postgresql+psycopg://",
    "postgresql+asyncpg://": "postgresql+psycopg://",
}


class Settings(BaseSettings):
    """Forum service settings."""

    app_name: str = Field(default="Agora", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Storage
    database_url: str = Field(default="sqlite:///./agora.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")
    sqlite_busy_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        alias="SQLITE_BUSY_TIMEOUT_SECONDS",
    )

    # Attempts at a cast before a uniqueness race is reported as a conflict.
    vote_max_retries: int = Field(default=3, ge=1, alias="VOTE_MAX_RETRIES")

    # "batched" loads a post's comments in one query; "per_node" issues one
    # replies query per comment.
    comment_tree_strategy: TreeStrategyName = Field(
        default="batched",
        alias="COMMENT_TREE_STRATEGY",
    )

    # Browser clients
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["Content-Type", "X-User-Id"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept any case but require a level the logging module knows."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_database_url(self) -> str:
        """Return the test database URL when testing mode is on, else the main one."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def database_url_sync(self) -> str:
        """Return the effective URL with PostgreSQL pinned to the psycopg driver.

        The engine and Alembic are both synchronous, so bare ``postgres://``
        URLs and asyncpg URLs are rewritten; other URLs pass through.
        """
        url = self.effective_database_url
        for prefix, replacement in _SYNC_DRIVER_PREFIXES.items():
            if url.startswith(prefix):
                return replacement + url[len(prefix):]
        return url


settings = Settings()
