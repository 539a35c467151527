"""Data access helpers for votable targets (posts and comments)."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora.core.errors import NotFoundError
from agora.models import Comment, Post
from agora.models.vote import TargetKind

__all__ = ["TargetRepository", "VotableTarget"]

VotableTarget = Post | Comment

_MODELS: dict[TargetKind, type[Post] | type[Comment]] = {
    TargetKind.POST: Post,
    TargetKind.COMMENT: Comment,
}


class TargetRepository:
    """Resolve vote targets and persist their counters."""

    def __init__(self, session: Session, *, row_locks: bool = False) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy session used for every query.
            row_locks: Issue ``SELECT ... FOR UPDATE`` when locking targets.
        """
        self.session = session
        self.row_locks = row_locks

    def get(
        self,
        target_id: int,
        target_kind: TargetKind | str,
        *,
        for_update: bool = False,
    ) -> VotableTarget | None:
        """Return the target, optionally locking its row for the transaction."""
        model = _MODELS[TargetKind.coerce(target_kind)]
        stmt = select(model).where(model.id == target_id)
        if for_update and self.row_locks:
            stmt = stmt.with_for_update()
        return self.session.scalars(stmt).first()

    def get_or_raise(
        self,
        target_id: int,
        target_kind: TargetKind | str,
        *,
        for_update: bool = False,
    ) -> VotableTarget:
        """Return the target or raise NotFoundError."""
        kind = TargetKind.coerce(target_kind)
        target = self.get(target_id, kind, for_update=for_update)
        if target is None:
            raise NotFoundError(kind.value.capitalize(), target_id)
        return target

    def target_exists(self, target_id: int, target_kind: TargetKind | str) -> bool:
        """Return True if the target exists."""
        return self.get(target_id, target_kind) is not None

    def get_author(self, target_id: int, target_kind: TargetKind | str) -> int:
        """Return the author id of the target."""
        return self.get_or_raise(target_id, target_kind).author_id

    def set_counters(self, target: VotableTarget, *, upvotes: int, downvotes: int) -> None:
        """Write both counters on ``target`` and flush."""
        target.upvotes = upvotes
        target.downvotes = downvotes
        self.session.flush()

    def iter_all(self, target_kind: TargetKind | str) -> list[VotableTarget]:
        """Return every target of the given kind ordered by id."""
        model = _MODELS[TargetKind.coerce(target_kind)]
        return list(self.session.scalars(select(model).order_by(model.id)))
