# src/agora/api/v1/endpoints/users.py
"""User-related endpoints for the Agora API."""

from fastapi import APIRouter, HTTPException, status

from agora.api.v1.dependencies import SessionDep
from agora.models import User
from agora.schemas.user import UserCreate, UserResponse
from agora.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user_data: UserCreate, db: SessionDep) -> User:
    """Register a forum user with zero karma."""
    return user_service.create_user(db, user_data.username)


@router.get("/{username}", response_model=UserResponse)
def get_user_profile(username: str, db: SessionDep) -> User:
    """Return a user's public profile, including karma.

    Raises:
        HTTPException: If no user has that username.
    """
    user = user_service.get_user_by_username(db, username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
