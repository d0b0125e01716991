"""Domain events for the InventoryItem aggregate.

All events are versioned, immutable facts. They are persisted to the event
store and used for:
- Rebuilding aggregate state via @apply (event sourcing)
- Building the transaction log and the item listing via projectors
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from inventory.domain import inventory


@inventory.event(part_of="InventoryItem")
class ItemTracked:
    """A product started being tracked in inventory."""

    __version__ = "v1"

    inventory_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    opening_stock = Integer(required=True)
    min_stock_threshold = Integer(required=True)
    reorder_quantity = Integer(required=True)
    tracked_at = DateTime(required=True)


@inventory.event(part_of="InventoryItem")
class StockAdjusted:
    """One committed ledger mutation. The payload is the transaction record."""

    __version__ = "v1"

    transaction_id = Identifier(required=True)
    inventory_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    transaction_type = String(required=True)  # restock, adjustment, sale, return, damage
    adjustment_type = String(required=True)  # add, subtract, set
    quantity = Integer(required=True)  # Signed delta actually applied
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    notes = Text()
    created_by = String(required=True, max_length=255)
    reference_id = String(max_length=255)
    occurred_at = DateTime(required=True)


@inventory.event(part_of="InventoryItem")
class StockThresholdChanged:
    """The per-item minimum threshold or reorder quantity changed."""

    __version__ = "v1"

    inventory_item_id = Identifier(required=True)
    previous_min_stock_threshold = Integer(required=True)
    min_stock_threshold = Integer(required=True)
    reorder_quantity = Integer(required=True)
    changed_at = DateTime(required=True)


@inventory.event(part_of="InventoryItem")
class ItemDetailsRefreshed:
    """Descriptive fields mirrored from the catalogue changed."""

    __version__ = "v1"

    inventory_item_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    refreshed_at = DateTime(required=True)


@inventory.event(part_of="InventoryItem")
class LowStockDetected:
    """A commit left the item below its minimum threshold."""

    __version__ = "v1"

    inventory_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    current_stock = Integer(required=True)
    min_stock_threshold = Integer(required=True)
    status = String(required=True)
    detected_at = DateTime(required=True)
