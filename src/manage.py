"""Tillpoint management CLI.

Creates and drops the order store schema, and lets an operator retry a
ready notification that did not go out.

Usage:
    python src/manage.py setup-db
    python src/manage.py drop-db
    python src/manage.py resend-ready COD-1 [--email someone@example.com]
"""

import argparse
import sys


def setup_database():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Creating ordering database schema...")
    setup_db(ordering)
    print("Done.")


def drop_database():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Dropping ordering database schema...")
    drop_db(ordering)
    print("Done.")


def resend_ready(order_id, email=None):
    from ordering.domain import ordering
    from ordering.pipeline.status_updates import resend_ready_notification

    ordering.init()
    with ordering.domain_context():
        outcome = resend_ready_notification(order_id, email_override=email)

    print(f"{order_id}: {outcome.status.value}" + (f" ({outcome.reason})" if outcome.reason else ""))
    return 0 if outcome.delivered else 2


def main():
    parser = argparse.ArgumentParser(description="Tillpoint management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    resend_parser = subparsers.add_parser("resend-ready", help="Retry an undelivered ready notification")
    resend_parser.add_argument("order_id")
    resend_parser.add_argument("--email", help="Send to this address instead of the stored one")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "resend-ready":
        sys.exit(resend_ready(args.order_id, args.email))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
