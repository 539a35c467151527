# src/agora/models/__init__.py
"""SQLAlchemy models for the Agora forum."""

from .comment import Comment
from .post import Post
from .user import User
from .vote import TargetKind, Vote

__all__ = [
    "Comment",
    "Post",
    "TargetKind",
    "User",
    "Vote",
]
