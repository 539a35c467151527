# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from agora.db.session import Database
from agora.main import app as fastapi_app
from agora.main import init_services
from agora.models import Comment, Post, User
from agora.services.comment_tree import CommentTreeAssembler
from agora.services.karma import KarmaRecalculator
from agora.services.voting import VotingEngine

_USERNAME_COUNTER = count(1)
BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def minutes(n: int) -> datetime:
    """Return a timestamp ``n`` minutes after the fixed test epoch."""
    return BASE_TIME + timedelta(minutes=n)


@pytest.fixture()
def database(tmp_path: Path) -> Iterator[Database]:
    """Fresh file-backed SQLite database per test."""
    database = Database(f"sqlite:///{tmp_path / 'forum.db'}", busy_timeout=30.0)
    database.create_tables()
    try:
        yield database
    finally:
        database.drop_tables()
        database.close()


@pytest.fixture()
def karma(database: Database) -> KarmaRecalculator:
    return KarmaRecalculator(database)


@pytest.fixture()
def engine(database: Database, karma: KarmaRecalculator) -> VotingEngine:
    return VotingEngine(database, karma=karma)


@pytest.fixture()
def tree(database: Database) -> CommentTreeAssembler:
    return CommentTreeAssembler(database)


@pytest.fixture()
def make_user(database: Database) -> Callable[..., User]:
    """Factory persisting a user and returning the detached instance."""

    def _make_user(username: str | None = None) -> User:
        with database.session() as session:
            user = User(username=username or f"user_{next(_USERNAME_COUNTER)}", karma=0)
            session.add(user)
            session.commit()
            return user

    return _make_user


@pytest.fixture()
def make_post(database: Database, make_user: Callable[..., User]) -> Callable[..., Post]:
    """Factory persisting a post; creates an author when none is given."""

    def _make_post(author: User | None = None, title: str = "Test post") -> Post:
        author = author or make_user()
        with database.session() as session:
            post = Post(
                author_id=author.id,
                title=title,
                content="Test post content",
                community="general",
                upvotes=0,
                downvotes=0,
                comment_count=0,
            )
            session.add(post)
            session.commit()
            return post

    return _make_post


@pytest.fixture()
def make_comment(database: Database, make_user: Callable[..., User]) -> Callable[..., Comment]:
    """Factory persisting a comment with an explicit creation time."""

    def _make_comment(
        post: Post,
        *,
        parent: Comment | None = None,
        author: User | None = None,
        created_at: datetime | None = None,
        content: str = "Test comment",
    ) -> Comment:
        author = author or make_user()
        with database.session() as session:
            comment = Comment(
                post_id=post.id,
                parent_id=parent.id if parent is not None else None,
                author_id=author.id,
                content=content,
                upvotes=0,
                downvotes=0,
            )
            if created_at is not None:
                comment.created_at = created_at
            session.add(comment)
            session.commit()
            return comment

    return _make_comment


@pytest.fixture()
def fetch(database: Database) -> Callable[[type, int], object]:
    """Reload a row in a fresh session."""

    def _fetch(model: type, ident: int) -> object:
        with database.session() as session:
            return session.get(model, ident)

    return _fetch


@pytest.fixture()
def app(database: Database) -> Iterator[FastAPI]:
    init_services(fastapi_app, database)
    try:
        yield fastapi_app
    finally:
        fastapi_app.state.database = None
        fastapi_app.state.voting_engine = None
        fastapi_app.state.comment_tree = None


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def auth_headers(user: User) -> dict[str, str]:
    """Headers naming ``user`` as the caller."""
    return {"X-User-Id": str(user.id)}
