"""Storefront database management CLI.

Creates or drops every table the checkout pipeline uses, against the
database named by ``DATABASE_URL``.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import dataclasses
import sys

from storefront.config import Settings
from storefront.domain import init_domain
from storefront.utils.db import drop_db, setup_db


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    parser.add_argument("--database-url", help="Override DATABASE_URL")

    args = parser.parse_args()

    settings = Settings.from_env()
    if args.database_url:
        settings = dataclasses.replace(settings, database_url=args.database_url)

    print("Initializing storefront domain...")
    domain = init_domain(settings)

    if args.command == "setup-db":
        print("Creating storefront database schema...")
        setup_db(domain)
        print("  schema ready.")
    elif args.command == "drop-db":
        print("Dropping storefront database schema...")
        drop_db(domain)
        print("  schema dropped.")
    else:
        parser.print_help()
        sys.exit(1)

    print("Done.")


if __name__ == "__main__":
    main()
