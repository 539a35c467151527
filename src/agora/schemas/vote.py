# src/agora/schemas/vote.py
"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field, StrictInt


class VoteCreate(BaseModel):
    """Schema for casting a vote on a post or comment.

    Only JSON integers are accepted; booleans, strings and floats are rejected
    here. The range is checked by the voting engine so that an out-of-range
    integer gets the same "Invalid vote value" rejection from every entry point.
    """

    vote: StrictInt = Field(..., description="1 for upvote, -1 for downvote, 0 to retract")


class VoteResponse(BaseModel):
    """Counters of the target after a vote was recorded."""

    message: str = "Vote recorded successfully"
    upvotes: int
    downvotes: int


class MyVoteResponse(BaseModel):
    """The caller's current vote on a target."""

    direction: int = Field(..., description="1, -1, or 0 when the caller has not voted")
