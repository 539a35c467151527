"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from agora.core.settings import Settings


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgres://u:p@db/forum", "postgresql+psycopg://u:p@db/forum"),
        ("postgresql://u:p@db/forum", "postgresql+psycopg://u:p@db/forum"),
        ("postgresql+asyncpg://u:p@db/forum", "postgresql+psycopg://u:p@db/forum"),
        ("postgresql+psycopg://u:p@db/forum", "postgresql+psycopg://u:p@db/forum"),
        ("sqlite:///./agora.db", "sqlite:///./agora.db"),
    ],
)
def test_database_url_sync(url: str, expected: str) -> None:
    assert Settings(DATABASE_URL=url).database_url_sync == expected


def test_test_database_takes_over_when_enabled() -> None:
    config = Settings(
        DATABASE_URL="sqlite:///main.db",
        TEST_DATABASE_URL="sqlite:///test.db",
        USE_TEST_DATABASE=True,
    )
    assert config.effective_database_url == "sqlite:///test.db"

    config.use_testing_database = False
    assert config.effective_database_url == "sqlite:///main.db"


def test_log_level_is_normalised() -> None:
    assert Settings(LOG_LEVEL="debug").log_level == "DEBUG"


def test_unknown_log_level_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(LOG_LEVEL="chatty")


@pytest.mark.parametrize("field", ["VOTE_MAX_RETRIES", "COMMENT_TREE_STRATEGY"])
def test_engine_options_are_validated(field: str) -> None:
    bad = {"VOTE_MAX_RETRIES": 0, "COMMENT_TREE_STRATEGY": "recursive"}[field]
    with pytest.raises(ValidationError):
        Settings(**{field: bad})
