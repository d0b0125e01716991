"""Inventory item listing."""

from protean.exceptions import ValidationError

from inventory.projections.inventory_level import InventoryLevel
from inventory.queries.paging import fetch_all
from inventory.stock.errors import ItemNotFound
from inventory.stock.status import StockStatus


class InventoryItemQueryService:
    def list(self, status=None, search=None) -> list[InventoryLevel]:
        """All tracked items ordered by product name.

        ``status`` narrows to one stock status; ``search`` matches product
        name or SKU, case-insensitively.
        """
        criteria = {}
        if status is not None:
            try:
                criteria["status"] = StockStatus(getattr(status, "value", status)).value
            except ValueError:
                choices = ", ".join(s.value for s in StockStatus)
                raise ValidationError({"status": [f"Unknown status {status!r}; expected one of: {choices}"]}) from None

        levels = fetch_all(InventoryLevel, "product_name", **criteria)
        if not search:
            return list(levels)

        needle = search.lower()
        return [level for level in levels if needle in level.product_name.lower() or needle in level.sku.lower()]

    def get(self, item_id) -> InventoryLevel:
        matches = list(fetch_all(InventoryLevel, "product_name", inventory_item_id=str(item_id)))
        if not matches:
            raise ItemNotFound(item_id)
        return matches[0]
