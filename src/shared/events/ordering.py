"""Cross-domain event contracts for Ordering domain events.

Inventory consumes these to record sales when an order ships and returns
when it comes back. ``items`` is a JSON list of ``{product_id, quantity}``.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, Text


class OrderShipped(BaseEvent):
    """An order left the warehouse."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    items = Text()  # JSON list of {product_id, quantity}
    shipped_at = DateTime()


class OrderReturned(BaseEvent):
    """Returned items were received back from the customer."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    items = Text()  # JSON list of {product_id, quantity}
    returned_at = DateTime()
