"""Inventory level — per-item stock and status for the item listing and alerts."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from inventory.config import DEFAULTS
from inventory.domain import inventory
from inventory.stock.events import ItemDetailsRefreshed, ItemTracked, StockThresholdChanged
from inventory.stock.status import classify
from inventory.stock.stock import InventoryItem


@inventory.projection
class InventoryLevel:
    inventory_item_id = Identifier(identifier=True, required=True)
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    current_stock = Integer(default=0)
    min_stock_threshold = Integer(default=DEFAULTS["DEFAULT_MIN_STOCK_THRESHOLD"])
    reorder_quantity = Integer(default=DEFAULTS["DEFAULT_REORDER_QUANTITY"])
    status = String(required=True, max_length=20)
    last_restocked = DateTime()
    updated_at = DateTime()


def _refresh_status(level):
    level.status = classify(level.current_stock, level.min_stock_threshold).value


def apply_stock_change(item, event):
    """Bring an item's level row in line with a StockAdjusted event.

    Called from the adjustment handler, inside its unit of work. The row is
    rebuilt from the aggregate when it has not been projected yet.
    """
    repo = current_domain.repository_for(InventoryLevel)
    try:
        level = repo.get(str(item.id))
    except ObjectNotFoundError:
        level = InventoryLevel(
            inventory_item_id=str(item.id),
            product_id=item.product_id,
            product_name=item.product_name,
            sku=item.sku,
            min_stock_threshold=item.min_stock_threshold,
            reorder_quantity=item.reorder_quantity,
            status=item.status.value,
        )

    level.current_stock = event.new_stock
    if event.transaction_type == "restock":
        level.last_restocked = event.occurred_at
    level.updated_at = event.occurred_at
    _refresh_status(level)
    repo.add(level)
    return level


@inventory.projector(projector_for=InventoryLevel, aggregates=[InventoryItem])
class InventoryLevelProjector:
    @on(ItemTracked)
    def on_item_tracked(self, event):
        current_domain.repository_for(InventoryLevel).add(
            InventoryLevel(
                inventory_item_id=event.inventory_item_id,
                product_id=event.product_id,
                product_name=event.product_name,
                sku=event.sku,
                current_stock=event.opening_stock,
                min_stock_threshold=event.min_stock_threshold,
                reorder_quantity=event.reorder_quantity,
                status=classify(event.opening_stock, event.min_stock_threshold).value,
                updated_at=event.tracked_at,
            )
        )

    @on(StockThresholdChanged)
    def on_stock_threshold_changed(self, event):
        repo = current_domain.repository_for(InventoryLevel)
        level = repo.get(event.inventory_item_id)
        level.min_stock_threshold = event.min_stock_threshold
        level.reorder_quantity = event.reorder_quantity
        level.updated_at = event.changed_at
        _refresh_status(level)
        repo.add(level)

    @on(ItemDetailsRefreshed)
    def on_item_details_refreshed(self, event):
        repo = current_domain.repository_for(InventoryLevel)
        level = repo.get(event.inventory_item_id)
        level.product_name = event.product_name
        level.sku = event.sku
        level.updated_at = event.refreshed_at
        repo.add(level)
