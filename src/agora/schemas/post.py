# src/agora/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agora.db.time import ensure_utc


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=1, max_length=300, description="Post title")
    content: str = Field(..., min_length=1, description="Post body")
    community: str = Field(
        ...,
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z0-9_]+$",
        description="Community slug",
    )


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    content: str
    author_id: int
    community: str
    upvotes: int
    downvotes: int
    comment_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        """Report timestamps in UTC whatever the backend returned."""
        return ensure_utc(v)


class PostUpdate(BaseModel):
    """Schema for editing a post; omitted fields keep their value."""

    title: str | None = Field(None, min_length=1, max_length=300)
    content: str | None = Field(None, min_length=1)


class PostDeleteResponse(BaseModel):
    """Result of deleting a post with its comments."""

    message: str = "Post deleted successfully"
    comments_deleted: int
