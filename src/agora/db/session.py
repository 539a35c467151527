"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from agora.core.settings import Settings, settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _install_sqlite_immediate_begin(engine: Engine) -> None:
    # pysqlite opens transactions lazily and upgrades read locks on first write,
    # which deadlocks concurrent writers. Take the write lock up front instead.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, *, echo: bool = False, busy_timeout: float = 30.0) -> Engine:
    """Create an engine configured for concurrent vote traffic.

    Args:
        url: SQLAlchemy database URL.
        echo: Log every SQL statement.
        busy_timeout: Seconds a SQLite writer waits for the database lock.

    Returns:
        A configured SQLAlchemy engine.
    """
    if not _is_sqlite(url):
        return create_engine(url, pool_pre_ping=True, echo=echo)

    kwargs: dict[str, Any] = {
        "connect_args": {"check_same_thread": False, "timeout": busy_timeout},
        "echo": echo,
    }
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)
    _install_sqlite_immediate_begin(engine)
    return engine


class Database:
    """Persistence client owning an engine and its session factory.

    One instance is created at process start and handed to every component
    that touches storage; ``close`` disposes the connection pool at shutdown.
    """

    def __init__(self, url: str, *, echo: bool = False, busy_timeout: float = 30.0) -> None:
        self.url = url
        self.engine = build_engine(url, echo=echo, busy_timeout=busy_timeout)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> Database:
        """Build a database client from application settings."""
        config = config or settings
        return cls(
            config.database_url_sync,
            echo=config.sql_debug,
            busy_timeout=config.sqlite_busy_timeout_seconds,
        )

    @property
    def supports_row_locks(self) -> bool:
        """Return True when ``SELECT ... FOR UPDATE`` is meaningful."""
        return not _is_sqlite(self.url)

    def session(self) -> Session:
        """Return a new session; callers own its lifecycle."""
        return self.session_factory()

    def create_tables(self) -> None:
        """Create all database tables."""
        # Ensure model modules are imported so that metadata is populated.
        import agora.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        """Drop all database tables."""
        Base.metadata.drop_all(bind=self.engine)

    def close(self) -> None:
        """Dispose of the connection pool."""
        self.engine.dispose()


def get_db(database: Database) -> Generator[Session, None, None]:
    """Yield a session bound to ``database`` and close it afterwards."""
    db = database.session()
    try:
        yield db
    finally:
        db.close()
