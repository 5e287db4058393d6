"""Dispatch management CLI.

Provides commands to create and drop the database schema, and to flip the
system-wide shipping integration switch without going through the API.
Reuses the setup_db/drop_db utilities defined in the domain.

Usage:
    python src/manage.py setup-db               # Create all tables
    python src/manage.py drop-db                # Drop all tables
    python src/manage.py shipping-integration on
"""

import argparse
import sys


def setup_database():
    """Create the database schema for the dispatch domain."""
    from dispatch.domain import dispatch
    from dispatch.utils.db import setup_db

    print("Initializing dispatch domain...")
    dispatch.init()
    print("Creating dispatch database schema...")
    setup_db(dispatch)
    print("Done.")


def drop_database():
    """Drop the database schema for the dispatch domain."""
    from dispatch.domain import dispatch
    from dispatch.utils.db import drop_db

    print("Initializing dispatch domain...")
    dispatch.init()
    print("Dropping dispatch database schema...")
    drop_db(dispatch)
    print("Done.")


def switch_shipping_integration(enabled: bool):
    """Turn automatic shipping on or off for every company."""
    from dispatch.domain import dispatch
    from dispatch.logistics.administration import ConfigureShippingIntegration

    dispatch.init()
    with dispatch.domain_context():
        dispatch.process(ConfigureShippingIntegration(enabled=enabled), asynchronous=False)
    print(f"Shipping integration {'enabled' if enabled else 'disabled'}.")


def main():
    parser = argparse.ArgumentParser(description="Dispatch database and settings management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    integration_parser = subparsers.add_parser(
        "shipping-integration",
        help="Enable or disable automatic shipping system-wide",
    )
    integration_parser.add_argument("state", choices=["on", "off"])

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "shipping-integration":
        switch_shipping_integration(args.state == "on")
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
