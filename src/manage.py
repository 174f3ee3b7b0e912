"""Storefront commerce database management CLI.

Creates and drops the commerce domain's tables and, when
COMMERCE_LEDGER_DATABASE_URI is set, the stock and coupon-usage ledgers.

Usage:
    python src/manage.py setup-db                    # Create all tables
    python src/manage.py drop-db                     # Drop all tables
    python src/manage.py setup-db --target ledgers   # Only the ledger tables
"""

import argparse
import sys

TARGETS = ["domain", "ledgers"]


def setup_databases(targets=None):
    """Create schemas for the specified (or all) targets."""
    from commerce.config import ledger_database_uri
    from commerce.domain import commerce
    from commerce.utils.db import setup_db, setup_ledgers

    targets = targets or TARGETS

    if "domain" in targets:
        print("Initializing commerce domain...")
        commerce.init()
        print("Creating commerce database schema...")
        setup_db(commerce)
        print("  commerce schema ready.")

    if "ledgers" in targets:
        uri = ledger_database_uri()
        if uri:
            print("Creating ledger tables...")
            setup_ledgers(uri)
            print("  ledger tables ready.")
        else:
            print("COMMERCE_LEDGER_DATABASE_URI is not set; ledgers are kept in memory.")

    print("Done.")


def drop_databases(targets=None):
    """Drop schemas for the specified (or all) targets."""
    from commerce.config import ledger_database_uri
    from commerce.domain import commerce
    from commerce.utils.db import drop_db, drop_ledgers

    targets = targets or TARGETS

    if "domain" in targets:
        print("Initializing commerce domain...")
        commerce.init()
        print("Dropping commerce database schema...")
        drop_db(commerce)
        print("  commerce schema dropped.")

    if "ledgers" in targets:
        uri = ledger_database_uri()
        if uri:
            print("Dropping ledger tables...")
            drop_ledgers(uri)
            print("  ledger tables dropped.")

    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Storefront commerce database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup-db", help="Create all database tables")
    setup_parser.add_argument(
        "--target",
        choices=TARGETS,
        nargs="*",
        help="Specific schema(s) to set up (default: all)",
    )

    drop_parser = subparsers.add_parser("drop-db", help="Drop all database tables")
    drop_parser.add_argument(
        "--target",
        choices=TARGETS,
        nargs="*",
        help="Specific schema(s) to drop (default: all)",
    )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.target)
    elif args.command == "drop-db":
        drop_databases(args.target)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
