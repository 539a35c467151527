"""Vote record storage keyed by (user, target)."""
from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from agora.models.vote import (
    DOWNVOTE,
    NO_VOTE,
    UPVOTE,
    TargetKind,
    Vote,
    validate_vote_value,
)

__all__ = ["VoteStore"]


class VoteStore:
    """Persist one vote row per user and target.

    Counter maintenance belongs to the voting engine; this store only touches
    the vote rows themselves. Callers check that the target exists first.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    def get_vote(self, user_id: int, target_id: int, target_kind: TargetKind | str) -> Vote | None:
        """Return the user's vote on a target, or None if they never voted."""
        kind = TargetKind.coerce(target_kind)
        return self.session.scalars(
            select(Vote).where(
                Vote.user_id == user_id,
                Vote.target_kind == kind,
                Vote.target_id == target_id,
            )
        ).first()

    def set_vote(
        self,
        user_id: int,
        target_id: int,
        target_kind: TargetKind | str,
        value: int,
    ) -> Vote | None:
        """Create, update or delete the vote row so it reflects ``value``.

        Args:
            user_id: Voting user.
            target_id: Identifier of the post or comment.
            target_kind: Which table ``target_id`` refers to.
            value: -1, 0 or 1; zero removes the row.

        Returns:
            The persisted vote, or None when the vote was retracted.

        Raises:
            InvalidVoteValue: If ``value`` is not -1, 0 or 1.
            sqlalchemy.exc.IntegrityError: If a concurrent writer inserted the
                same (user, target) row first.
        """
        value = validate_vote_value(value)
        kind = TargetKind.coerce(target_kind)
        existing = self.get_vote(user_id, target_id, kind)

        if value == NO_VOTE:
            if existing is not None:
                self.session.delete(existing)
                self.session.flush()
            return None

        if existing is None:
            existing = Vote(user_id=user_id, target_kind=kind, target_id=target_id, value=value)
            self.session.add(existing)
        elif existing.value != value:
            existing.value = value
        self.session.flush()
        return existing

    def count_by_value(self, target_id: int, target_kind: TargetKind | str) -> tuple[int, int]:
        """Return ``(upvotes, downvotes)`` counted from the vote rows."""
        kind = TargetKind.coerce(target_kind)
        rows = self.session.execute(
            select(Vote.value, func.count())
            .where(Vote.target_kind == kind, Vote.target_id == target_id)
            .group_by(Vote.value)
        ).all()
        tally = {value: count for value, count in rows}
        return tally.get(UPVOTE, 0), tally.get(DOWNVOTE, 0)

    def delete_for_target(self, target_id: int, target_kind: TargetKind | str) -> int:
        """Remove every vote on a target that is being deleted; return the count."""
        kind = TargetKind.coerce(target_kind)
        result = self.session.execute(
            delete(Vote).where(Vote.target_kind == kind, Vote.target_id == target_id)
        )
        return result.rowcount or 0
