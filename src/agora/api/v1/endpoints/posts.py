# src/agora/api/v1/endpoints/posts.py
"""Post-related endpoints for the Agora API."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.orm import Session

from agora.api.v1.dependencies import CurrentUserDep, SessionDep, VotingEngineDep
from agora.models import Post, User
from agora.repositories.post_repo import PostRepository
from agora.schemas.post import PostCreate, PostDeleteResponse, PostResponse, PostUpdate
from agora.services.post_service import create_post, delete_post, update_post

router = APIRouter(prefix="/posts", tags=["posts"])


def _owned_post(db: Session, post_id: int, user: User) -> Post:
    post = PostRepository(db).get_by_id(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    if post.author_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to modify this post",
        )
    return post


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def submit_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Post:
    """Create a new post authored by the caller."""
    return create_post(
        db,
        author_id=current_user.id,
        title=post_data.title,
        content=post_data.content,
        community=post_data.community,
    )


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: int, db: SessionDep) -> Post:
    """Get a specific post by ID.

    Raises:
        HTTPException: If post not found
    """
    post = PostRepository(db).get_by_id(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


@router.put("/{post_id}", response_model=PostResponse)
def edit_post(
    post_id: int,
    post_data: PostUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Post:
    """Edit the title or content of one of the caller's posts."""
    post = _owned_post(db, post_id, current_user)
    return update_post(db, post, title=post_data.title, content=post_data.content)


@router.delete("/{post_id}", response_model=PostDeleteResponse)
def remove_post(
    post_id: int,
    current_user: CurrentUserDep,
    engine: VotingEngineDep,
) -> PostDeleteResponse:
    """Delete one of the caller's posts with all of its comments and votes."""
    with engine.database.session() as db:
        post = _owned_post(db, post_id, current_user)
    result = delete_post(engine, post)
    return PostDeleteResponse(comments_deleted=max(result.removed - 1, 0))
