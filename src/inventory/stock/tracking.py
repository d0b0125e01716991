"""Item tracking — commands and handler for item lifecycle and policy."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from inventory.config import setting
from inventory.domain import inventory
from inventory.stock.errors import ItemAlreadyTracked, ItemNotFound
from inventory.stock.stock import InventoryItem


@inventory.command(part_of="InventoryItem")
class TrackItem:
    """Start tracking stock for a catalogue product."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    sku = String(max_length=50)
    initial_stock = Integer(default=0)
    min_stock_threshold = Integer()
    reorder_quantity = Integer()


@inventory.command(part_of="InventoryItem")
class ChangeStockThreshold:
    """Change an item's minimum stock threshold and, optionally, its reorder quantity."""

    inventory_item_id = Identifier(required=True)
    min_stock_threshold = Integer(required=True)
    reorder_quantity = Integer()


@inventory.command(part_of="InventoryItem")
class RefreshItemDetails:
    """Mirror descriptive product fields from the catalogue."""

    inventory_item_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    sku = String(max_length=50)


def load_item(inventory_item_id):
    try:
        return current_domain.repository_for(InventoryItem).get(str(inventory_item_id))
    except ObjectNotFoundError:
        raise ItemNotFound(inventory_item_id) from None


@inventory.command_handler(part_of=InventoryItem)
class ItemTrackingHandler:
    @handle(TrackItem)
    def track_item(self, command):
        repo = current_domain.repository_for(InventoryItem)
        try:
            repo.get(str(command.product_id))
        except ObjectNotFoundError:
            pass
        else:
            raise ItemAlreadyTracked({"product_id": [f"Product {command.product_id} is already tracked"]})

        item = InventoryItem.track(
            product_id=command.product_id,
            product_name=command.product_name,
            sku=command.sku,
            initial_stock=command.initial_stock or 0,
            min_stock_threshold=(
                setting("DEFAULT_MIN_STOCK_THRESHOLD")
                if command.min_stock_threshold is None
                else command.min_stock_threshold
            ),
            reorder_quantity=(
                setting("DEFAULT_REORDER_QUANTITY") if command.reorder_quantity is None else command.reorder_quantity
            ),
        )
        repo.add(item)
        return str(item.id)

    @handle(ChangeStockThreshold)
    def change_threshold(self, command):
        item = load_item(command.inventory_item_id)
        item.change_threshold(
            min_stock_threshold=command.min_stock_threshold,
            reorder_quantity=command.reorder_quantity,
        )
        current_domain.repository_for(InventoryItem).add(item)

    @handle(RefreshItemDetails)
    def refresh_details(self, command):
        item = load_item(command.inventory_item_id)
        item.refresh_details(product_name=command.product_name, sku=command.sku)
        current_domain.repository_for(InventoryItem).add(item)
