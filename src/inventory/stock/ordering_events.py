"""Inbound cross-domain event handler: Inventory reacts to Ordering events.

Shipped orders become sales and returned orders become returns, one ledger
transaction per order line, referencing the order.

Each order is posted in the handler's unit of work, which the ledger's
commands join. A rejected command rolls back that whole unit of work, so lines
the ledger would reject are screened out before they are posted.
"""

import json

import structlog
from protean.utils.mixins import handle
from shared.events.ordering import OrderReturned, OrderShipped

from inventory.config import setting
from inventory.domain import inventory
from inventory.stock.engine import AdjustmentType, TransactionType, compute_adjustment
from inventory.stock.errors import ConcurrencyConflict, ItemNotFound, NoOpAdjustment
from inventory.stock.ledger import StockLedger
from inventory.stock.stock import InventoryItem
from inventory.stock.tracking import load_item

logger = structlog.get_logger(__name__)

# Register external events so Protean can deserialize them
inventory.register_external_event(OrderShipped, "Ordering.OrderShipped.v1")
inventory.register_external_event(OrderReturned, "Ordering.OrderReturned.v1")

_ACTOR = "ordering"


def _order_lines(event):
    if not event.items:
        return []
    return json.loads(event.items) if isinstance(event.items, str) else event.items


def _quantity(line):
    return int(line.get("quantity", 1))


def _postable(order_id, line, adjustment_type, transaction_type):
    """Whether the ledger would accept this line against the item's current stock."""
    product_id = str(line["product_id"])
    try:
        item = load_item(product_id)
    except ItemNotFound:
        logger.warning("Order line for untracked product skipped", order_id=str(order_id), product_id=product_id)
        return False

    try:
        compute_adjustment(item.current_stock, adjustment_type, _quantity(line), transaction_type)
    except NoOpAdjustment:
        logger.info("Order line did not change stock", order_id=str(order_id), product_id=product_id)
        return False
    return True


def _post_with_retry(post, order_id, line):
    """Post one order line, re-reading and retrying on a stock conflict."""
    attempts = setting("CONFLICT_RETRY_ATTEMPTS")
    for attempt in range(1, attempts + 1):
        try:
            return post(line["product_id"], _quantity(line), _ACTOR, reference_id=str(order_id))
        except ConcurrencyConflict:
            if attempt == attempts:
                logger.error(
                    "Giving up on order line after repeated conflicts",
                    order_id=str(order_id),
                    product_id=str(line["product_id"]),
                    attempts=attempts,
                )
                raise
            logger.warning("Retrying order line after conflict", order_id=str(order_id), attempt=attempt)


@inventory.event_handler(part_of=InventoryItem, stream_category="ordering::order")
class OrderingInventoryEventHandler:
    """Reacts to Ordering domain events by posting sales and returns."""

    @handle(OrderShipped)
    def on_order_shipped(self, event: OrderShipped) -> None:
        lines = _order_lines(event)
        if not lines:
            logger.info("No item details in shipment event", order_id=str(event.order_id))
            return

        ledger = StockLedger()
        posted = 0
        for line in lines:
            if _postable(event.order_id, line, AdjustmentType.SUBTRACT, TransactionType.SALE):
                _post_with_retry(ledger.record_sale, event.order_id, line)
                posted += 1
        logger.info("Recorded sales for shipped order", order_id=str(event.order_id), lines=posted)

    @handle(OrderReturned)
    def on_order_returned(self, event: OrderReturned) -> None:
        lines = _order_lines(event)
        if not lines:
            logger.info("No item details in return event", order_id=str(event.order_id))
            return

        ledger = StockLedger()
        posted = 0
        for line in lines:
            if _postable(event.order_id, line, AdjustmentType.ADD, TransactionType.RETURN):
                _post_with_retry(ledger.record_return, event.order_id, line)
                posted += 1
        logger.info("Recorded returns for returned order", order_id=str(event.order_id), lines=posted)
