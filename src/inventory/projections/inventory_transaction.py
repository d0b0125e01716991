"""Inventory transaction log — append-only audit trail of every ledger commit.

Records are written by the stock adjustment handler in the same unit of work
that persists the item, so a stock change and its record commit or roll back
together. Records are never updated or deleted afterwards. ``sequence`` is a
strictly increasing insertion counter across the whole log.
"""

import threading

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from inventory.domain import inventory

logger = structlog.get_logger(__name__)


@inventory.projection
class InventoryTransaction:
    transaction_id = Identifier(identifier=True, required=True)
    sequence = Integer(required=True)
    inventory_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    transaction_type = String(required=True, max_length=20)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    date = DateTime(required=True)
    notes = Text()
    created_by = String(required=True, max_length=255)
    reference_id = String(max_length=255)


_sequence_lock = threading.Lock()
_last_sequence = 0


def _next_sequence(repo):
    """Next log position. Never reissued within a process, even before the previous record is flushed."""
    global _last_sequence
    with _sequence_lock:
        latest = repo._dao.query.order_by("-sequence").limit(1).all().items
        stored = latest[0].sequence if latest else 0
        _last_sequence = max(_last_sequence, stored) + 1
        return _last_sequence


def record(event):
    """Append the transaction carried by a StockAdjusted event.

    A redelivered event finds its record already present and leaves it as is.
    """
    repo = current_domain.repository_for(InventoryTransaction)
    try:
        existing = repo.get(event.transaction_id)
    except ObjectNotFoundError:
        existing = None

    if existing is not None:
        logger.info(
            "Transaction already recorded",
            transaction_id=str(event.transaction_id),
            sequence=existing.sequence,
        )
        return existing

    transaction = InventoryTransaction(
        transaction_id=event.transaction_id,
        sequence=_next_sequence(repo),
        inventory_item_id=event.inventory_item_id,
        product_id=event.product_id,
        transaction_type=event.transaction_type,
        quantity=event.quantity,
        previous_stock=event.previous_stock,
        new_stock=event.new_stock,
        date=event.occurred_at,
        notes=event.notes,
        created_by=event.created_by,
        reference_id=event.reference_id,
    )
    repo.add(transaction)
    return transaction
