# src/agora/models/user.py
"""SQLAlchemy models for forum users."""

from __future__ import annotations

import re
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from agora.core.errors import InvalidInputError
from agora.db.session import Base
from agora.db.time import utcnow

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,32}$")


class User(Base):
    """Forum member.

    ``karma`` is derived from the counters on the user's posts and comments
    and is only written by the karma recalculator.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    karma: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    @validates("username")
    def _validate_username(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not USERNAME_PATTERN.match(value):
            raise InvalidInputError(
                "Username must be 3-32 characters of letters, numbers and underscores"
            )
        return value

    @validates("karma")
    def _validate_karma(self, key: str, value: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError("Karma must be an integer")
        return value
