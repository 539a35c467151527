# src/agora/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import (
    CommentCreate,
    CommentDeleteResponse,
    CommentResponse,
    CommentThreadResponse,
    CommentUpdate,
)
from .post import PostCreate, PostDeleteResponse, PostResponse, PostUpdate
from .user import UserCreate, UserResponse
from .vote import MyVoteResponse, VoteCreate, VoteResponse

__all__ = [
    "CommentCreate", "CommentDeleteResponse", "CommentResponse", "CommentThreadResponse",
    "CommentUpdate",
    "PostCreate", "PostDeleteResponse", "PostResponse", "PostUpdate",
    "UserCreate", "UserResponse",
    "MyVoteResponse", "VoteCreate", "VoteResponse",
]
