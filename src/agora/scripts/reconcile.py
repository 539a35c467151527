# src/agora/scripts/reconcile.py
"""Maintenance commands that rebuild derived vote data from the source rows."""
from __future__ import annotations

import argparse
import logging
import sys

from agora.core.errors import NotFoundError
from agora.core.settings import settings
from agora.db.session import Database
from agora.models.vote import TargetKind
from agora.repositories.target_repo import TargetRepository
from agora.services.karma import KarmaRecalculator
from agora.services.voting import VotingEngine

logger = logging.getLogger(__name__)


def recount_counters(database: Database, engine: VotingEngine | None = None) -> int:
    """Recount every target's up/down counters from the vote table.

    Each target is corrected by the voting engine in its own transaction,
    so a recount never interleaves with a cast or delete on that target.

    Returns:
        Number of targets whose stored counters were wrong.
    """
    engine = engine or VotingEngine(database)
    fixed = 0
    for kind in TargetKind:
        with database.session() as session:
            target_ids = [target.id for target in TargetRepository(session).iter_all(kind)]

        for target_id in target_ids:
            try:
                if engine.recount(target_id, kind):
                    fixed += 1
            except NotFoundError:
                logger.debug("%s %s was deleted before it was recounted", kind.value, target_id)
    return fixed


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override DATABASE_URL for this run.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("karma", help="Recompute karma for every user.")
    subparsers.add_parser(
        "counters",
        help="Recount post and comment vote counters, then recompute karma.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )
    database = (
        Database(args.database_url, busy_timeout=settings.sqlite_busy_timeout_seconds)
        if args.database_url
        else Database.from_settings(settings)
    )
    try:
        karma = KarmaRecalculator(database)
        if args.command == "counters":
            fixed = recount_counters(database, VotingEngine(database, karma=karma))
            print(f"Corrected counters on {fixed} target(s)")
        users = karma.recompute_all()
        print(f"Recomputed karma for {users} user(s)")
    finally:
        database.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
