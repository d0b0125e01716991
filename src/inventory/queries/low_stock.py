"""Low-stock ranking for the dashboard alert panel."""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError

from inventory.config import setting
from inventory.projections.inventory_level import InventoryLevel
from inventory.queries.paging import fetch_all

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LowStockAlert:
    item_id: str
    product_name: str
    current_stock: int


class LowStockMonitor:
    def rank(self, threshold=None, limit=None) -> list[LowStockAlert]:
        """Items with stock strictly below ``threshold``, lowest stock first.

        Ties on stock are broken by item id, so the ranking is deterministic.
        The threshold here is the panel's own cut-off, independent of each
        item's ``min_stock_threshold``.
        """
        threshold = setting("LOW_STOCK_THRESHOLD") if threshold is None else threshold
        limit = setting("LOW_STOCK_LIMIT") if limit is None else limit

        errors = {}
        if threshold < 0:
            errors["threshold"] = ["Threshold cannot be negative"]
        if limit < 0:
            errors["limit"] = ["Limit cannot be negative"]
        if errors:
            raise ValidationError(errors)

        candidates = [level for level in fetch_all(InventoryLevel, "product_name") if level.current_stock < threshold]
        candidates.sort(key=lambda level: (level.current_stock, str(level.inventory_item_id)))

        alerts = [
            LowStockAlert(
                item_id=str(level.inventory_item_id),
                product_name=level.product_name,
                current_stock=level.current_stock,
            )
            for level in candidates[:limit]
        ]
        logger.debug("Low stock ranked", threshold=threshold, limit=limit, matches=len(candidates))
        return alerts
