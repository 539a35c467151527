"""Vote casting with consistent counters and karma."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from agora.core.errors import ConflictError, ForumError, NotFoundError, StorageFailureError
from agora.core.settings import settings
from agora.db.session import Database
from agora.models.vote import DOWNVOTE, NO_VOTE, UPVOTE, TargetKind, validate_vote_value
from agora.repositories.target_repo import TargetRepository, VotableTarget
from agora.repositories.user_repo import UserRepository
from agora.repositories.vote_repo import VoteStore
from agora.services.karma import KarmaRecalculator
from agora.services.locks import KeyedLock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteResult:
    """Outcome of a cast: the target's counters and the vote now on record."""

    upvotes: int
    downvotes: int
    value: int
    changed: bool
    author_id: int


@dataclass(frozen=True)
class PurgeResult:
    """Outcome of removing targets: how many rows went and whose karma moved."""

    removed: int
    authors: frozenset[int]


TargetKey = tuple[TargetKind, int]
BeforeCommit = Callable[[Session, list[VotableTarget]], None]


def _lock_order(key: TargetKey) -> tuple[str, int]:
    return key[0].value, key[1]


def apply_transition(
    upvotes: int,
    downvotes: int,
    previous: int,
    requested: int,
) -> tuple[int, int, bool]:
    """Return counters after moving a vote from ``previous`` to ``requested``.

    Each counter is clamped at zero; the third element reports whether a
    clamp was needed, which only happens when the stored counters had already
    drifted from the vote rows.
    """
    if previous == UPVOTE:
        upvotes -= 1
    elif previous == DOWNVOTE:
        downvotes -= 1

    if requested == UPVOTE:
        upvotes += 1
    elif requested == DOWNVOTE:
        downvotes += 1

    clamped = upvotes < 0 or downvotes < 0
    return max(upvotes, 0), max(downvotes, 0), clamped


class VotingEngine:
    """Apply vote transitions to posts and comments.

    The read of the previous vote, the counter update and the vote row write
    run in one transaction while the target is locked, so concurrent casts on
    the same target behave as if they ran one after another. Casts on
    different targets use different locks.
    """

    def __init__(
        self,
        database: Database,
        *,
        karma: KarmaRecalculator | None = None,
        locks: KeyedLock | None = None,
        max_retries: int | None = None,
    ) -> None:
        self.database = database
        self.karma = karma or KarmaRecalculator(database)
        self.locks = locks or KeyedLock()
        self.max_retries = settings.vote_max_retries if max_retries is None else max_retries
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    def cast_vote(
        self,
        user_id: int,
        target_id: int,
        target_kind: TargetKind | str,
        requested_value: int,
    ) -> VoteResult:
        """Record ``requested_value`` as the user's vote on a target.

        Args:
            user_id: Voting user.
            target_id: Identifier of the post or comment.
            target_kind: ``"post"`` or ``"comment"``.
            requested_value: 1 (up), -1 (down) or 0 (retract).

        Returns:
            The target's counters after the cast.

        Raises:
            InvalidVoteValue: If ``requested_value`` is not -1, 0 or 1.
            InvalidInputError: If ``target_kind`` is unknown.
            NotFoundError: If the target or the voting user does not exist.
            ConflictError: If a concurrent duplicate vote kept winning the race.
            StorageFailureError: If the database could not be reached.
        """
        requested_value = validate_vote_value(requested_value)
        kind = TargetKind.coerce(target_kind)

        result = self._cast_with_retry(user_id, target_id, kind, requested_value)
        logger.debug(
            "User %s voted %d on %s %s (changed=%s, up=%d, down=%d)",
            user_id,
            requested_value,
            kind.value,
            target_id,
            result.changed,
            result.upvotes,
            result.downvotes,
        )

        if result.changed:
            self._refresh_karma(result.author_id)
        return result

    def get_user_vote(self, user_id: int, target_id: int, target_kind: TargetKind | str) -> int:
        """Return the user's current vote on a target, 0 when there is none."""
        kind = TargetKind.coerce(target_kind)
        try:
            with self.database.session() as session:
                if not TargetRepository(session).target_exists(target_id, kind):
                    raise NotFoundError(kind.value.capitalize(), target_id)
                vote = VoteStore(session).get_vote(user_id, target_id, kind)
                return vote.value if vote is not None else NO_VOTE
        except SQLAlchemyError as err:
            raise StorageFailureError("Storage is temporarily unavailable") from err

    def purge_targets(
        self,
        targets: Sequence[tuple[TargetKind | str, int]],
        *,
        before_commit: BeforeCommit | None = None,
    ) -> PurgeResult:
        """Delete posts or comments together with every vote cast on them.

        Every target is locked (in-process and, where supported, ``FOR
        UPDATE``) before any vote row is touched, so a concurrent cast either
        finishes first and has its vote purged, or runs afterwards and finds
        the target gone. Rows are deleted in the order given; replies must
        come before their parents. Missing targets are skipped.

        Args:
            targets: ``(kind, id)`` pairs to remove.
            before_commit: Called with the session and the removed rows inside
                the same transaction, for bookkeeping such as comment counts.

        Returns:
            The number of rows removed and the authors whose karma was refreshed.

        Raises:
            InvalidInputError: If a target kind is unknown.
            StorageFailureError: If the database could not be reached.
        """
        keys = [(TargetKind.coerce(kind), target_id) for kind, target_id in targets]
        try:
            with self._holding(keys):
                removed = self._purge_once(keys, before_commit)
        except SQLAlchemyError as err:
            raise StorageFailureError("Storage is temporarily unavailable") from err

        authors = frozenset(target.author_id for target in removed)
        logger.info("Purged %d target(s) and their votes", len(removed))
        for author_id in sorted(authors):
            self._refresh_karma(author_id)
        return PurgeResult(removed=len(removed), authors=authors)

    def recount(self, target_id: int, target_kind: TargetKind | str) -> bool:
        """Rebuild a target's counters from its vote rows.

        Returns:
            True if the stored counters had drifted and were rewritten.

        Raises:
            NotFoundError: If the target does not exist.
            StorageFailureError: If the database could not be reached.
        """
        kind = TargetKind.coerce(target_kind)
        try:
            with self.locks.hold((kind, target_id)):
                with self.database.session() as session, session.begin():
                    targets = TargetRepository(session, row_locks=self.database.supports_row_locks)
                    target = targets.get_or_raise(target_id, kind, for_update=True)
                    upvotes, downvotes = VoteStore(session).count_by_value(target_id, kind)
                    if (target.upvotes, target.downvotes) == (upvotes, downvotes):
                        return False
                    logger.warning(
                        "Recounted %s %s: up %d -> %d, down %d -> %d",
                        kind.value,
                        target_id,
                        target.upvotes,
                        upvotes,
                        target.downvotes,
                        downvotes,
                    )
                    targets.set_counters(target, upvotes=upvotes, downvotes=downvotes)
                    return True
        except SQLAlchemyError as err:
            raise StorageFailureError("Storage is temporarily unavailable") from err

    @contextmanager
    def _holding(self, keys: list[TargetKey]) -> Iterator[None]:
        # Fixed acquisition order so two multi-target holders cannot deadlock.
        with ExitStack() as stack:
            for key in sorted(set(keys), key=_lock_order):
                stack.enter_context(self.locks.hold(key))
            yield

    def _purge_once(
        self,
        keys: list[TargetKey],
        before_commit: BeforeCommit | None,
    ) -> list[VotableTarget]:
        with self.database.session() as session, session.begin():
            targets = TargetRepository(session, row_locks=self.database.supports_row_locks)
            votes = VoteStore(session)

            locked: dict[TargetKey, VotableTarget] = {}
            for kind, target_id in sorted(set(keys), key=_lock_order):
                target = targets.get(target_id, kind, for_update=True)
                if target is not None:
                    locked[(kind, target_id)] = target

            removed: list[VotableTarget] = []
            for kind, target_id in keys:
                target = locked.pop((kind, target_id), None)
                if target is None:
                    continue
                votes.delete_for_target(target_id, kind)
                session.delete(target)
                session.flush()
                removed.append(target)

            if before_commit is not None:
                before_commit(session, removed)
        return removed

    def _cast_with_retry(
        self,
        user_id: int,
        target_id: int,
        kind: TargetKind,
        requested_value: int,
    ) -> VoteResult:
        for attempt in range(1, self.max_retries + 1):
            try:
                with self.locks.hold((kind, target_id)):
                    return self._cast_once(user_id, target_id, kind, requested_value)
            except IntegrityError:
                # Another process inserted the same (user, target) row first.
                logger.warning(
                    "Vote uniqueness race for user %s on %s %s (attempt %d/%d)",
                    user_id,
                    kind.value,
                    target_id,
                    attempt,
                    self.max_retries,
                )
            except SQLAlchemyError as err:
                raise StorageFailureError("Storage is temporarily unavailable") from err

        raise ConflictError(
            f"Concurrent votes on {kind.value} {target_id} could not be reconciled"
        )

    def _cast_once(
        self,
        user_id: int,
        target_id: int,
        kind: TargetKind,
        requested_value: int,
    ) -> VoteResult:
        with self.database.session() as session, session.begin():
            targets = TargetRepository(session, row_locks=self.database.supports_row_locks)
            target = targets.get_or_raise(target_id, kind, for_update=True)
            if UserRepository(session).get_by_id(user_id) is None:
                raise NotFoundError("User", user_id)

            votes = VoteStore(session)
            previous = votes.get_vote(user_id, target_id, kind)
            previous_value = previous.value if previous is not None else NO_VOTE

            if previous_value == requested_value:
                return VoteResult(
                    upvotes=target.upvotes,
                    downvotes=target.downvotes,
                    value=previous_value,
                    changed=False,
                    author_id=target.author_id,
                )

            upvotes, downvotes, clamped = apply_transition(
                target.upvotes,
                target.downvotes,
                previous_value,
                requested_value,
            )
            if clamped:
                logger.warning(
                    "Clamped drifted counters on %s %s (up=%d, down=%d)",
                    kind.value,
                    target_id,
                    target.upvotes,
                    target.downvotes,
                )

            targets.set_counters(target, upvotes=upvotes, downvotes=downvotes)
            votes.set_vote(user_id, target_id, kind, requested_value)

            return VoteResult(
                upvotes=upvotes,
                downvotes=downvotes,
                value=requested_value,
                changed=True,
                author_id=target.author_id,
            )

    def _refresh_karma(self, author_id: int) -> None:
        try:
            self.karma.recompute(author_id)
        except (ForumError, SQLAlchemyError):
            # Karma heals on the author's next vote event.
            logger.exception("Karma recompute failed for user %s", author_id)
