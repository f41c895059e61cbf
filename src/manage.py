"""Warehouse management CLI.

Database schema management plus the scheduled maintenance jobs.

Usage:
    python src/manage.py setup-db              # Create all tables
    python src/manage.py drop-db               # Drop all tables
    python src/manage.py expire-reservations   # Expire reservations past their TTL
"""

import argparse
import sys
from datetime import UTC, datetime


def _domain():
    from warehouse.domain import warehouse

    warehouse.init()
    return warehouse


def setup_database():
    from warehouse.utils.db import setup_db

    domain = _domain()
    print("Creating warehouse database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from warehouse.utils.db import drop_db

    domain = _domain()
    print("Dropping warehouse database schema...")
    drop_db(domain)
    print("Done.")


def expire_reservations(as_of=None):
    from warehouse.reservation.expiry import ExpireStaleReservations

    domain = _domain()
    with domain.domain_context():
        expired = domain.process(ExpireStaleReservations(as_of=as_of or datetime.now(UTC)), asynchronous=False)
    print(f"Expired {expired or 0} reservation(s).")
    return expired or 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Warehouse management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    expire_parser = subparsers.add_parser("expire-reservations", help="Expire reservations past their TTL")
    expire_parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        help="Treat this ISO timestamp as now (default: current time)",
    )

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "expire-reservations":
        expire_reservations(args.as_of)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
