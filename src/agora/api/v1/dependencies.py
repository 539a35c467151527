"""Shared API dependencies for request identity and the forum services."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from agora.db.session import Database, get_db
from agora.models import User
from agora.services.comment_tree import CommentTreeAssembler
from agora.services.voting import VotingEngine


def get_database(request: Request) -> Database:
    """Return the persistence client created at application startup."""
    return request.app.state.database


DatabaseDep = Annotated[Database, Depends(get_database)]


def get_session(database: DatabaseDep) -> Generator[Session, None, None]:
    """Yield a request-scoped database session."""
    yield from get_db(database)


# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_session)]


def get_voting_engine(request: Request) -> VotingEngine:
    """Return the process-wide voting engine (it owns the per-target locks)."""
    return request.app.state.voting_engine


def get_comment_tree(request: Request) -> CommentTreeAssembler:
    """Return the comment tree assembler."""
    return request.app.state.comment_tree


VotingEngineDep = Annotated[VotingEngine, Depends(get_voting_engine)]
CommentTreeDep = Annotated[CommentTreeAssembler, Depends(get_comment_tree)]


def get_current_user(
    database: DatabaseDep,
    x_user_id: Annotated[int | None, Header()] = None,
) -> User:
    """Resolve the acting user from the ``X-User-Id`` header.

    Authentication is handled upstream; this service trusts the gateway to
    forward the id of an authenticated user.

    Raises:
        HTTPException: If the header is missing or names an unknown user.
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    # Short-lived session: a transaction held for the whole request would block
    # the voting engine's own writes on SQLite.
    with database.session() as db:
        user = db.get(User, x_user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]
