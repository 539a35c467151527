# src/agora/schemas/user.py
"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agora.db.time import ensure_utc


class UserCreate(BaseModel):
    """Schema for registering a forum user."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=32,
        pattern=r"^[A-Za-z0-9_]+$",
        description="Letters, numbers and underscores",
    )


class UserResponse(BaseModel):
    """Public profile including karma."""

    id: int
    username: str
    karma: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        """Report timestamps in UTC whatever the backend returned."""
        return ensure_utc(v)
