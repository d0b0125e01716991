"""Stock ledger — the single entry point for changing an item's stock.

Wraps the AdjustStock command with per-item serialization and translates
store-level failures into the ledger's error taxonomy. Each successful call
appends exactly one InventoryTransaction and returns it. The record comes
straight from the handler, so it is available even when the call joins an
enclosing unit of work that has not committed yet.

Adjustments on the same item are serialized in-process by a per-item lock.
Across processes, the event store's version check rejects a stale append,
which surfaces here as ConcurrencyConflict. Conflicts are never retried
internally; the caller decides whether to re-read and resubmit.
"""

import threading

import structlog
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.utils.globals import current_domain

from inventory.projections.inventory_transaction import InventoryTransaction
from inventory.stock.adjustment import AdjustStock
from inventory.stock.engine import AdjustmentType, TransactionType
from inventory.stock.errors import ConcurrencyConflict, InventoryError, ItemNotFound, PersistenceFailure
from inventory.stock.tracking import load_item

logger = structlog.get_logger(__name__)

_registry_lock = threading.Lock()
_item_locks: dict[str, threading.RLock] = {}


def lock_for(item_id) -> threading.RLock:
    """Return the lock guarding one item's read-compute-commit cycle."""
    with _registry_lock:
        return _item_locks.setdefault(str(item_id), threading.RLock())


class StockLedger:
    """Atomic, audited stock adjustments."""

    def apply_adjustment(
        self,
        item_id,
        adjustment_type,
        amount,
        transaction_type,
        notes=None,
        actor=None,
        reference_id=None,
        expected_stock=None,
    ) -> InventoryTransaction:
        command = AdjustStock(
            inventory_item_id=str(item_id),
            adjustment_type=getattr(adjustment_type, "value", adjustment_type),
            amount=amount,
            transaction_type=getattr(transaction_type, "value", transaction_type),
            notes=notes,
            created_by=actor,
            reference_id=reference_id,
            expected_stock=expected_stock,
        )

        with lock_for(item_id):
            try:
                transaction = current_domain.process(command, asynchronous=False)
            except (ValidationError, InventoryError, ItemNotFound):
                raise
            except ExpectedVersionError as exc:
                logger.warning("Stale inventory item version at commit", inventory_item_id=str(item_id))
                raise ConcurrencyConflict(item_id) from exc
            except Exception as exc:
                logger.error(
                    "Inventory adjustment could not be committed",
                    inventory_item_id=str(item_id),
                    exc_info=True,
                )
                raise PersistenceFailure(f"Could not commit adjustment for inventory item `{item_id}`") from exc

        logger.info(
            "Stock adjusted",
            inventory_item_id=str(item_id),
            transaction_id=str(transaction.transaction_id),
            transaction_type=transaction.transaction_type,
            quantity=transaction.quantity,
            previous_stock=transaction.previous_stock,
            new_stock=transaction.new_stock,
            created_by=transaction.created_by,
        )
        return transaction

    def restock(self, item_id, actor, quantity=None, notes=None) -> InventoryTransaction:
        """Add stock as a restock. Defaults to the item's reorder quantity."""
        if quantity is None:
            quantity = load_item(item_id).reorder_quantity
        return self.apply_adjustment(
            item_id,
            AdjustmentType.ADD,
            quantity,
            TransactionType.RESTOCK,
            notes=notes or f"Manual restock by {actor}",
            actor=actor,
        )

    def record_sale(self, item_id, quantity, actor, reference_id=None, notes=None) -> InventoryTransaction:
        return self.apply_adjustment(
            item_id,
            AdjustmentType.SUBTRACT,
            quantity,
            TransactionType.SALE,
            notes=notes,
            actor=actor,
            reference_id=reference_id,
        )

    def record_return(self, item_id, quantity, actor, reference_id=None, notes=None) -> InventoryTransaction:
        return self.apply_adjustment(
            item_id,
            AdjustmentType.ADD,
            quantity,
            TransactionType.RETURN,
            notes=notes,
            actor=actor,
            reference_id=reference_id,
        )
