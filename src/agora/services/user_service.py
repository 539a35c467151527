"""CRUD-style helpers for managing users."""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agora.core.errors import ConflictError
from agora.models.user import User
from agora.repositories.user_repo import UserRepository

__all__ = [
    "get_user",
    "get_user_by_username",
    "create_user",
]


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    return UserRepository(db).get_by_id(user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    """Return a single user by username."""
    return UserRepository(db).get_by_username(username)


def create_user(db: Session, username: str) -> User:
    """Persist a new user with zero karma.

    Raises:
        ConflictError: If the username is already taken.
    """
    try:
        user = UserRepository(db).create(username=username)
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise ConflictError(f"Username {username!r} is already taken") from err
    return user
