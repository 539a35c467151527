"""Data access helpers for comments."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora.models import Comment

__all__ = ["CommentRepository"]


class CommentRepository:
    """Thin wrapper around database access for comment entities.

    Roots are returned newest first and replies oldest first; ties on
    ``created_at`` fall back to the id in the same direction.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, comment_id: int) -> Comment | None:
        """Return a comment by identifier."""
        return self.session.get(Comment, comment_id)

    def list_roots(self, post_id: int) -> list[Comment]:
        """Return top-level comments of a post, newest first."""
        return list(
            self.session.scalars(
                select(Comment)
                .where(Comment.post_id == post_id, Comment.parent_id.is_(None))
                .order_by(Comment.created_at.desc(), Comment.id.desc())
            )
        )

    def list_replies(self, parent_id: int) -> list[Comment]:
        """Return direct replies to a comment, oldest first."""
        return list(
            self.session.scalars(
                select(Comment)
                .where(Comment.parent_id == parent_id)
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            )
        )

    def list_for_post(self, post_id: int) -> list[Comment]:
        """Return every comment of a post, oldest first."""
        return list(
            self.session.scalars(
                select(Comment)
                .where(Comment.post_id == post_id)
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            )
        )

    def create(
        self,
        *,
        post_id: int,
        author_id: int,
        content: str,
        parent_id: int | None = None,
    ) -> Comment:
        """Insert a new comment and return the persisted ORM instance."""
        comment = Comment(
            post_id=post_id,
            author_id=author_id,
            content=content,
            parent_id=parent_id,
            upvotes=0,
            downvotes=0,
        )
        self.session.add(comment)
        self.session.flush()
        return comment

    def list_ids_for_post(self, post_id: int) -> list[int]:
        """Return the ids of every comment on a post in ascending order."""
        return list(
            self.session.scalars(
                select(Comment.id).where(Comment.post_id == post_id).order_by(Comment.id)
            )
        )

    def collect_subtree_ids(self, comment_id: int) -> list[int]:
        """Return ``comment_id`` and the ids of all its descendants."""
        collected = [comment_id]
        frontier = [comment_id]
        while frontier:
            frontier = list(
                self.session.scalars(select(Comment.id).where(Comment.parent_id.in_(frontier)))
            )
            collected.extend(frontier)
        return collected
