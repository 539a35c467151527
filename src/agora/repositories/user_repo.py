"""Data access helpers for users and their karma."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from agora.models import Comment, Post, User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, user_id: int, *, for_update: bool = False) -> User | None:
        """Return a user by identifier, optionally locking the row."""
        stmt = select(User).where(User.id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.scalars(stmt).first()

    def get_by_username(self, username: str) -> User | None:
        """Return a user by username."""
        return self.session.scalars(select(User).where(User.username == username)).first()

    def create(self, *, username: str) -> User:
        """Insert a new user and return the persisted ORM instance."""
        user = User(username=username, karma=0)
        self.session.add(user)
        self.session.flush()
        return user

    def list_ids(self) -> list[int]:
        """Return every user id in ascending order."""
        return list(self.session.scalars(select(User.id).order_by(User.id)))

    def sum_vote_delta(self, author_id: int) -> int:
        """Return the summed (upvotes - downvotes) over the author's posts and comments."""
        post_total = self.session.scalar(
            select(func.coalesce(func.sum(Post.upvotes - Post.downvotes), 0)).where(
                Post.author_id == author_id
            )
        )
        comment_total = self.session.scalar(
            select(func.coalesce(func.sum(Comment.upvotes - Comment.downvotes), 0)).where(
                Comment.author_id == author_id
            )
        )
        return int(post_total or 0) + int(comment_total or 0)

    def set_karma(self, user: User, karma: int) -> None:
        """Overwrite the stored karma for ``user``."""
        user.karma = karma
        self.session.flush()
