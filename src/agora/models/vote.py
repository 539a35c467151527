# src/agora/models/vote.py
"""Models capturing voting interactions on posts and comments."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, validates

from agora.core.errors import InvalidInputError, InvalidVoteValue
from agora.db.session import Base
from agora.db.time import utcnow

UPVOTE = 1
DOWNVOTE = -1
NO_VOTE = 0
VOTE_VALUES = frozenset({DOWNVOTE, NO_VOTE, UPVOTE})


class TargetKind(str, enum.Enum):
    """Kinds of entities that can receive votes."""

    POST = "post"
    COMMENT = "comment"

    @classmethod
    def coerce(cls, value: TargetKind | str) -> TargetKind:
        """Return ``value`` as a TargetKind, raising InvalidInputError if unknown."""
        try:
            return cls(value)
        except ValueError as err:
            raise InvalidInputError(f"Unknown vote target kind: {value!r}") from err


def validate_vote_value(value: object) -> int:
    """Return ``value`` if it is a legal vote request (-1, 0 or 1)."""
    if isinstance(value, bool) or not isinstance(value, int) or value not in VOTE_VALUES:
        raise InvalidVoteValue(value)
    return value


class Vote(Base):
    """Per-user vote on a post or comment.

    A row exists only while the vote is non-zero; retracting a vote deletes
    it, so at most one row exists per (user, target).
    """

    __tablename__ = "vote"
    __table_args__ = (
        CheckConstraint("value IN (1, -1)", name="ck_vote_value"),
        # Composite uniqueness prevents duplicate votes from the same user.
        UniqueConstraint("user_id", "target_kind", "target_id", name="uq_vote_user_target"),
        Index("ix_vote_target", "target_kind", "target_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_kind: Mapped[TargetKind] = mapped_column(
        Enum(
            TargetKind,
            name="vote_target_kind",
            values_callable=lambda kinds: [kind.value for kind in kinds],
        ),
        nullable=False,
    )
    # Polymorphic reference: post.id or comment.id depending on target_kind.
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # 1 = upvote, -1 = downvote.
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)

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

    @validates("value")
    def _validate_value(self, key: str, value: int) -> int:
        value = validate_vote_value(value)
        if value == NO_VOTE:
            raise InvalidVoteValue(value)
        return value

    @validates("target_kind")
    def _validate_target_kind(self, key: str, value: TargetKind | str) -> TargetKind:
        return TargetKind.coerce(value)
