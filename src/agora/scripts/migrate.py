# src/agora/scripts/migrate.py
"""Apply the bundled Alembic migrations to the forum database."""
from __future__ import annotations

import argparse
import os
import sys

from alembic import command
from alembic.config import Config

from agora.core.settings import settings

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def build_config(database_url: str | None = None) -> Config:
    """Return an Alembic config for ``database_url`` (default: the configured database)."""
    cfg = Config(os.path.join(MIGRATIONS_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", database_url or settings.database_url_sync)
    return cfg


def run_upgrade_head(database_url: str | None = None) -> None:
    """Bring the schema up to the newest revision."""
    command.upgrade(build_config(database_url), "head")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL.")
    parser.add_argument(
        "--sql",
        action="store_true",
        help="Print the SQL instead of executing it.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    upgrade = subparsers.add_parser("upgrade", help="Upgrade to a revision.")
    upgrade.add_argument("revision", nargs="?", default="head")
    downgrade = subparsers.add_parser("downgrade", help="Downgrade to a revision.")
    downgrade.add_argument("revision")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    cfg = build_config(args.database_url)
    if args.command == "upgrade":
        command.upgrade(cfg, args.revision, sql=args.sql)
    else:
        command.downgrade(cfg, args.revision, sql=args.sql)
    return 0


if __name__ == "__main__":
    sys.exit(main())
