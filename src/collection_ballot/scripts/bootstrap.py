# src/collection_ballot/scripts/bootstrap.py
"""Prepare a fresh deployment: create tables and open the first period."""

from __future__ import annotations

import argparse
import sys

from collection_ballot.core.errors import BallotError
from collection_ballot.core.settings import settings
from collection_ballot.db.session import Database
from collection_ballot.db.time import is_cycle_label
from collection_ballot.services.periods import PeriodManager


def bootstrap(database: Database, *, create_tables: bool, label: str | None = None) -> str:
    """Open the first period and return a human readable summary."""
    if create_tables:
        database.create_tables()
    db = database.session()
    try:
        period = PeriodManager().open_first_period(db, label=label)
        return f"Opened period {period.id} ({period.label}) in {period.phase} phase"
    finally:
        db.close()


def _cycle_label_arg(value: str) -> str:
    if not is_cycle_label(value):
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}")
    return value


def main() -> None:
    parser = argparse.ArgumentParser(description="Open the first ballot period")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables from the models instead of relying on migrations.",
    )
    parser.add_argument(
        "--label",
        type=_cycle_label_arg,
        default=None,
        help="Cycle label for the first period (defaults to the current YYYY-MM).",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to effective settings URL)",
    )
    args = parser.parse_args()

    database = Database(args.url) if args.url else Database.from_settings(settings)
    try:
        print(f"[bootstrap] {bootstrap(database, create_tables=args.create_tables, label=args.label)}")
    except BallotError as exc:
        print(f"[bootstrap] ERROR: {exc.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
