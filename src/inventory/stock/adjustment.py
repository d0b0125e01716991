"""Stock adjustment — command and handler.

The handler persists the item together with its transaction record and level
row, so the three commit or roll back as one unit of work.
"""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from inventory.domain import inventory
from inventory.projections.inventory_level import apply_stock_change
from inventory.projections.inventory_transaction import record
from inventory.stock.errors import ConcurrencyConflict
from inventory.stock.stock import InventoryItem
from inventory.stock.tracking import load_item


@inventory.command(part_of="InventoryItem")
class AdjustStock:
    """Change an item's stock and record the transaction."""

    inventory_item_id = Identifier(required=True)
    adjustment_type = String(required=True)  # add, subtract, set
    amount = Integer(required=True)
    transaction_type = String(required=True)  # restock, adjustment, sale, return, damage
    notes = Text()
    created_by = String(required=True, max_length=255)
    reference_id = String(max_length=255)
    expected_stock = Integer()  # Stock value the caller based its request on


@inventory.command_handler(part_of=InventoryItem)
class StockAdjustmentHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        item = load_item(command.inventory_item_id)

        if command.expected_stock is not None and item.current_stock != command.expected_stock:
            raise ConcurrencyConflict(
                item.id,
                expected_stock=command.expected_stock,
                actual_stock=item.current_stock,
            )

        event = item.adjust(
            adjustment_type=command.adjustment_type,
            amount=command.amount,
            transaction_type=command.transaction_type,
            created_by=command.created_by,
            notes=command.notes,
            reference_id=command.reference_id,
        )
        transaction = record(event)
        apply_stock_change(item, event)
        current_domain.repository_for(InventoryItem).add(item)
        return transaction
