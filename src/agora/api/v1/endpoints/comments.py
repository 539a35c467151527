# src/agora/api/v1/endpoints/comments.py
"""Comment-related endpoints for the Agora API."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.orm import Session

from agora.api.v1.dependencies import CommentTreeDep, CurrentUserDep, SessionDep, VotingEngineDep
from agora.models import Comment, User
from agora.repositories.comment_repo import CommentRepository
from agora.schemas.comment import (
    CommentCreate,
    CommentDeleteResponse,
    CommentResponse,
    CommentThreadResponse,
    CommentUpdate,
)
from agora.services.post_service import create_comment, delete_comment, update_comment

router = APIRouter(prefix="/comments", tags=["comments"])


def _owned_comment(db: Session, comment_id: int, user: User) -> Comment:
    """Load a comment the caller authored.

    Raises:
        HTTPException: If the comment does not exist or belongs to someone else.
    """
    comment = CommentRepository(db).get_by_id(comment_id)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    if comment.author_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to modify this comment",
        )
    return comment


@router.get("/post/{post_id}", response_model=list[CommentThreadResponse])
def list_post_comments(post_id: int, tree: CommentTreeDep) -> list[CommentThreadResponse]:
    """Return a post's comments as a nested forest.

    Root comments come newest first; replies within a thread oldest first.
    """
    return [CommentThreadResponse.from_node(node) for node in tree.build_tree(post_id)]


@router.post("/", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def submit_comment(
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Comment:
    """Comment on a post, or reply to a comment on the same post."""
    return create_comment(
        db,
        author_id=current_user.id,
        post_id=comment_data.post_id,
        content=comment_data.content,
        parent_id=comment_data.parent_id,
    )


@router.put("/{comment_id}", response_model=CommentResponse)
def edit_comment(
    comment_id: int,
    comment_data: CommentUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Comment:
    """Replace the content of one of the caller's comments."""
    comment = _owned_comment(db, comment_id, current_user)
    return update_comment(db, comment, content=comment_data.content)


@router.delete("/{comment_id}", response_model=CommentDeleteResponse)
def remove_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    engine: VotingEngineDep,
) -> CommentDeleteResponse:
    """Delete one of the caller's comments together with its replies."""
    # The lookup session must be closed before the engine opens its write
    # transaction, or SQLite would block on our own read.
    with engine.database.session() as db:
        comment = _owned_comment(db, comment_id, current_user)
    result = delete_comment(engine, comment)
    return CommentDeleteResponse(deleted=result.removed)
