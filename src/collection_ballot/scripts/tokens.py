# src/collection_ballot/scripts/tokens.py
"""Mint development bearer tokens and register the matching member."""

from __future__ import annotations

import argparse

from collection_ballot.core.security import create_access_token
from collection_ballot.core.settings import settings
from collection_ballot.db.session import Database
from collection_ballot.services.authorization import upsert_member


def main() -> None:
    parser = argparse.ArgumentParser(description="Mint a development bearer token")
    parser.add_argument("user_id", help="Subject of the token")
    parser.add_argument("--username", default=None)
    parser.add_argument(
        "--grant-role",
        action="store_true",
        help="Record the member as holding the required community role.",
    )
    parser.add_argument(
        "--no-member",
        action="store_true",
        help="Only print the token; do not touch the member table.",
    )
    parser.add_argument("--expires-minutes", type=int, default=None)
    args = parser.parse_args()

    if not args.no_member:
        database = Database.from_settings(settings)
        db = database.session()
        try:
            upsert_member(
                db,
                args.user_id,
                username=args.username,
                has_required_role=args.grant_role,
            )
        finally:
            db.close()
            database.dispose()

    print(create_access_token(args.user_id, expires_minutes=args.expires_minutes))


if __name__ == "__main__":
    main()
