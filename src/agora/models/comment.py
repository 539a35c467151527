# src/agora/models/comment.py
"""SQLAlchemy model for threaded comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from agora.db.session import Base
from agora.db.time import utcnow
from agora.models.post import VoteCountersMixin, require_text


class Comment(VoteCountersMixin, Base):
    """Comment on a post, optionally replying to another comment.

    A parent always belongs to the same post and exists before its replies,
    so the comments of a post form an acyclic forest.
    """

    __tablename__ = "comment"
    __table_args__ = (
        CheckConstraint("upvotes >= 0", name="ck_comment_upvotes_non_negative"),
        CheckConstraint("downvotes >= 0", name="ck_comment_downvotes_non_negative"),
        Index("ix_comment_post_parent_created", "post_id", "parent_id", "created_at"),
        Index("ix_comment_author_id", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Root comments have parent_id = NULL.
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comment.id", ondelete="CASCADE"),
        nullable=True,
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
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

    @validates("content")
    def _validate_content(self, key: str, value: str) -> str:
        return require_text("Content", value)
