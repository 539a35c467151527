"""Service-level helpers for creating, editing and deleting posts and comments."""
from __future__ import annotations

from sqlalchemy.orm import Session

from agora.core.errors import InvalidInputError, NotFoundError
from agora.models import Comment, Post
from agora.models.vote import TargetKind
from agora.repositories.comment_repo import CommentRepository
from agora.repositories.post_repo import PostRepository
from agora.repositories.target_repo import VotableTarget
from agora.services.voting import PurgeResult, VotingEngine


def create_post(
    db: Session,
    *,
    author_id: int,
    title: str,
    content: str,
    community: str,
) -> Post:
    """Create a post and commit it."""
    post = PostRepository(db).create(
        author_id=author_id,
        title=title,
        content=content,
        community=community,
    )
    db.commit()
    return post


def create_comment(
    db: Session,
    *,
    author_id: int,
    post_id: int,
    content: str,
    parent_id: int | None = None,
) -> Comment:
    """Create a comment, optionally as a reply, and bump the post's comment count.

    Args:
        db: Database session.
        author_id: Commenting user.
        post_id: Post being discussed.
        content: Comment body.
        parent_id: Comment being replied to, if any.

    Returns:
        The committed comment.

    Raises:
        NotFoundError: If the post or the parent comment does not exist.
        InvalidInputError: If the parent belongs to a different post.
    """
    posts = PostRepository(db)
    comments = CommentRepository(db)

    post = posts.get_by_id(post_id, for_update=True)
    if post is None:
        raise NotFoundError("Post", post_id)

    if parent_id is not None:
        parent = comments.get_by_id(parent_id)
        if parent is None:
            raise NotFoundError("Parent comment", parent_id)
        if parent.post_id != post_id:
            raise InvalidInputError("Parent comment belongs to a different post")

    comment = comments.create(
        post_id=post_id,
        author_id=author_id,
        content=content,
        parent_id=parent_id,
    )
    posts.adjust_comment_count(post, 1)
    db.commit()
    return comment


def update_post(
    db: Session,
    post: Post,
    *,
    title: str | None = None,
    content: str | None = None,
) -> Post:
    """Edit a post's title and/or content and commit."""
    PostRepository(db).update(post, title=title, content=content)
    db.commit()
    return post


def update_comment(db: Session, comment: Comment, *, content: str) -> Comment:
    """Replace a comment's content and commit."""
    comment.content = content
    db.commit()
    return comment


def delete_comment(engine: VotingEngine, comment: Comment) -> PurgeResult:
    """Delete a comment with its whole reply subtree.

    Votes cast on the removed comments go with them, the post's comment count
    drops by the number of comments removed, and the affected authors' karma
    is recomputed.
    """
    with engine.database.session() as session:
        subtree_ids = CommentRepository(session).collect_subtree_ids(comment.id)

    def _drop_from_count(session: Session, removed: list[VotableTarget]) -> None:
        posts = PostRepository(session)
        post = posts.get_by_id(comment.post_id, for_update=True)
        if post is not None:
            posts.adjust_comment_count(post, -len(removed))

    # Replies always have larger ids than their parents, so descending ids
    # remove the deepest comments first.
    return engine.purge_targets(
        [(TargetKind.COMMENT, comment_id) for comment_id in sorted(subtree_ids, reverse=True)],
        before_commit=_drop_from_count,
    )


def delete_post(engine: VotingEngine, post: Post) -> PurgeResult:
    """Delete a post, all of its comments and every vote on any of them."""
    with engine.database.session() as session:
        comment_ids = CommentRepository(session).list_ids_for_post(post.id)

    targets = [(TargetKind.COMMENT, comment_id) for comment_id in reversed(comment_ids)]
    targets.append((TargetKind.POST, post.id))
    return engine.purge_targets(targets)
