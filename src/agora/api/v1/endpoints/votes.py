# src/agora/api/v1/endpoints/votes.py
"""Vote-related endpoints for posts and comments."""

from fastapi import APIRouter

from agora.api.v1.dependencies import CurrentUserDep, VotingEngineDep
from agora.models.vote import TargetKind
from agora.schemas.vote import MyVoteResponse, VoteCreate, VoteResponse
from agora.services.voting import VotingEngine

router = APIRouter(tags=["votes"])


def _cast(
    engine: VotingEngine,
    user_id: int,
    target_id: int,
    kind: TargetKind,
    vote_data: VoteCreate,
) -> VoteResponse:
    result = engine.cast_vote(user_id, target_id, kind, vote_data.vote)
    return VoteResponse(upvotes=result.upvotes, downvotes=result.downvotes)


@router.post("/posts/{post_id}/vote", response_model=VoteResponse)
def vote_on_post(
    post_id: int,
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    engine: VotingEngineDep,
) -> VoteResponse:
    """Cast, change or retract the caller's vote on a post."""
    return _cast(engine, current_user.id, post_id, TargetKind.POST, vote_data)


@router.post("/comments/{comment_id}/vote", response_model=VoteResponse)
def vote_on_comment(
    comment_id: int,
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    engine: VotingEngineDep,
) -> VoteResponse:
    """Cast, change or retract the caller's vote on a comment."""
    return _cast(engine, current_user.id, comment_id, TargetKind.COMMENT, vote_data)


@router.get("/posts/{post_id}/my-vote", response_model=MyVoteResponse)
def get_my_post_vote(
    post_id: int,
    current_user: CurrentUserDep,
    engine: VotingEngineDep,
) -> MyVoteResponse:
    """Get current user's vote on a specific post."""
    return MyVoteResponse(direction=engine.get_user_vote(current_user.id, post_id, TargetKind.POST))


@router.get("/comments/{comment_id}/my-vote", response_model=MyVoteResponse)
def get_my_comment_vote(
    comment_id: int,
    current_user: CurrentUserDep,
    engine: VotingEngineDep,
) -> MyVoteResponse:
    """Get current user's vote on a specific comment."""
    direction = engine.get_user_vote(current_user.id, comment_id, TargetKind.COMMENT)
    return MyVoteResponse(direction=direction)
