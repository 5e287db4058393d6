"""Protean Engine runner for the Dispatch domain.

Starts the Engine so events raised by the aggregates are handled
asynchronously when the domain runs with ``event_processing = "async"``.
With ``--sync-shipments`` it instead polls the shipping aggregator for
every open shipment and exits.

Usage:
    python src/server.py                     # Run the dispatch engine
    python src/server.py --sync-shipments    # Sync open shipments once
"""

import argparse
import asyncio

from protean.server.engine import Engine


def _get_domain():
    """Import and initialize the dispatch domain."""
    from dispatch.domain import dispatch

    dispatch.init()
    return dispatch


async def run():
    domain = _get_domain()
    await Engine(domain).run()


def sync_shipments():
    domain = _get_domain()
    from dispatch.shipment.tracking import sync_pending_shipments

    with domain.domain_context():
        summary = sync_pending_shipments()
    print(f"synced={summary['synced']} updated={summary['updated']} failed={summary['failed']}")


def main():
    parser = argparse.ArgumentParser(description="Dispatch Engine runner")
    parser.add_argument(
        "--sync-shipments",
        action="store_true",
        help="Poll the shipping aggregator for open shipments and exit",
    )
    args = parser.parse_args()

    if args.sync_shipments:
        sync_shipments()
    else:
        asyncio.run(run())


if __name__ == "__main__":
    main()
