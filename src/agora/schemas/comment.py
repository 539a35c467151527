# src/agora/schemas/comment.py
"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agora.db.time import ensure_utc
from agora.services.comment_tree import CommentNode


class CommentCreate(BaseModel):
    """Schema for creating a comment or a reply."""

    post_id: int
    parent_id: int | None = Field(None, description="Comment being replied to")
    content: str = Field(..., min_length=1, max_length=10000)


class CommentResponse(BaseModel):
    """Schema for a single comment."""

    id: int
    post_id: int
    parent_id: int | None
    author_id: int
    content: str
    upvotes: int
    downvotes: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        """Report timestamps in UTC whatever the backend returned."""
        return ensure_utc(v)


class CommentThreadResponse(CommentResponse):
    """A comment with its nested replies."""

    replies: list[CommentThreadResponse] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: CommentNode) -> CommentThreadResponse:
        """Convert an assembled tree node without recursing on the call stack."""
        root = cls.model_validate(node.comment)
        pending = [(node, root)]
        while pending:
            current, rendered = pending.pop()
            for reply in current.replies:
                child = cls.model_validate(reply.comment)
                rendered.replies.append(child)
                pending.append((reply, child))
        return root


class CommentUpdate(BaseModel):
    """Schema for editing a comment."""

    content: str = Field(..., min_length=1, max_length=10000)


class CommentDeleteResponse(BaseModel):
    """Result of deleting a comment thread."""

    message: str = "Comment deleted successfully"
    deleted: int
