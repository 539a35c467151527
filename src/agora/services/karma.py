"""Karma recomputation for forum users."""

from __future__ import annotations

import logging

from agora.core.errors import NotFoundError
from agora.db.session import Database
from agora.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class KarmaRecalculator:
    """Derive a user's karma from the counters on everything they authored.

    Every call is a full recomputation that overwrites the stored value, so
    concurrent runs are safe: the last one to commit wins and is correct as of
    its own read.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def recompute(self, user_id: int) -> int:
        """Recompute and store karma for ``user_id``.

        Args:
            user_id: Author whose karma should be refreshed.

        Returns:
            The karma value written.

        Raises:
            NotFoundError: If the user does not exist.
        """
        with self.database.session() as session, session.begin():
            users = UserRepository(session)
            # Row lock orders concurrent recomputes for one author on servers
            # that support it; SQLite already serialises write transactions.
            user = users.get_by_id(user_id, for_update=self.database.supports_row_locks)
            if user is None:
                raise NotFoundError("User", user_id)
            karma = users.sum_vote_delta(user_id)
            users.set_karma(user, karma)

        logger.info("Recomputed karma for user %s: %d", user_id, karma)
        return karma

    def recompute_all(self) -> int:
        """Recompute karma for every user and return how many were processed."""
        with self.database.session() as session:
            user_ids = UserRepository(session).list_ids()

        for user_id in user_ids:
            self.recompute(user_id)
        return len(user_ids)
