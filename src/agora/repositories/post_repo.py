"""Data access helpers for working with posts."""
from __future__ import annotations

from sqlalchemy.orm import Session

from agora.models.post import Post

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int, *, for_update: bool = False) -> Post | None:
        """Return a post by identifier, optionally locking the row."""
        return self.session.get(Post, post_id, with_for_update=for_update or None)

    def create(
        self,
        *,
        author_id: int,
        title: str,
        content: str,
        community: str,
    ) -> Post:
        """Insert a new post and return the persisted ORM instance.

        Args:
            author_id: Identifier of the posting user.
            title: Post title, at most 300 characters.
            content: Body text.
            community: Slug of the community the post belongs to.
        """
        post = Post(
            author_id=author_id,
            title=title,
            content=content,
            community=community,
            upvotes=0,
            downvotes=0,
            comment_count=0,
        )
        self.session.add(post)
        self.session.flush()
        return post

    def adjust_comment_count(self, post: Post, delta: int) -> Post:
        """Shift the comment counter by ``delta``, never below zero."""
        post.comment_count = max(0, post.comment_count + delta)
        self.session.flush()
        return post

    def update(self, post: Post, *, title: str | None = None, content: str | None = None) -> Post:
        """Apply the given edits; fields left as None are kept."""
        if title is not None:
            post.title = title
        if content is not None:
            post.content = content
        self.session.flush()
        return post
