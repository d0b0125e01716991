"""Protean Engine runner for the inventory domain.

Subscribes the inventory event handlers to the Catalogue and Ordering
streams, so new products get tracked and shipped or returned orders post
sales and returns to the stock ledger.

Usage:
    python src/server.py
"""

import asyncio

from protean.server.engine import Engine


async def run():
    from inventory.domain import inventory
    from inventory.utils.logging import configure_logging

    configure_logging()
    inventory.init()

    await Engine(inventory).run()


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
