# src/agora/models/post.py
"""SQLAlchemy models for posts and the counters shared with comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from agora.core.errors import InvalidInputError
from agora.db.session import Base
from agora.db.time import utcnow

TITLE_MAX_LENGTH = 300


def require_text(field: str, value: object, *, max_length: int | None = None) -> str:
    """Return ``value`` stripped, raising if it is empty or too long."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} is required")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise InvalidInputError(f"{field} cannot exceed {max_length} characters")
    return value


def require_counter(field: str, value: object) -> int:
    """Validate a denormalised counter value."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError(f"{field} must be a non-negative integer")
    return value


class VoteCountersMixin:
    """Up/down counters carried by every votable entity.

    The counters mirror the vote table and are written only by the voting
    engine, incrementally.
    """

    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @validates("upvotes", "downvotes")
    def _validate_counter(self, key: str, value: int) -> int:
        return require_counter(key, value)

    @property
    def score(self) -> int:
        """Return the net vote score."""
        return self.upvotes - self.downvotes


class Post(VoteCountersMixin, Base):
    """Top-level submission in a community."""

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("upvotes >= 0", name="ck_post_upvotes_non_negative"),
        CheckConstraint("downvotes >= 0", name="ck_post_downvotes_non_negative"),
        Index("ix_post_author_id", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Community slug; community records themselves live outside this service.
    community: Mapped[str] = mapped_column(String(64), nullable=False)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    @validates("title")
    def _validate_title(self, key: str, value: str) -> str:
        return require_text("Title", value, max_length=TITLE_MAX_LENGTH)

    @validates("content")
    def _validate_content(self, key: str, value: str) -> str:
        return require_text("Content", value)

    @validates("community")
    def _validate_community(self, key: str, value: str) -> str:
        return require_text("Community", value, max_length=64).lower()

    @validates("comment_count")
    def _validate_comment_count(self, key: str, value: int) -> int:
        return require_counter(key, value)
