"""Inventory bounded context — Stock Ledger and Adjustment Engine.

Owns the authoritative stock quantity of every tracked product (event-sourced),
the append-only transaction log derived from the ledger's commits, and the
read-side services built on it: transaction queries, CSV export and low-stock
alerts.
"""

import structlog
from protean.domain import Domain

inventory = Domain(name="inventory")

logger = structlog.get_logger(__name__)
