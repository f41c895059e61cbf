"""Protean Engine runner for the warehouse domain.

Processes the asynchronous side of the domain:
- OutboxProcessor: polls the outbox table and publishes events to Redis Streams
- StreamSubscriptions: invokes projectors and event handlers (movement log, alerts)

Usage:
    python src/server.py
    python src/server.py --test-mode   # process what is pending, then exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


def build_engine(test_mode=False):
    from warehouse.domain import warehouse

    warehouse.init()
    return Engine(warehouse, test_mode=test_mode)


def main():
    parser = argparse.ArgumentParser(description="Warehouse Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Drain pending messages once and exit",
    )
    args = parser.parse_args()

    engine = build_engine(test_mode=args.test_mode)
    asyncio.run(engine.run())


if __name__ == "__main__":
    main()
