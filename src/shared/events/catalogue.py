"""Cross-domain event contracts for Catalogue domain events.

Inventory consumes these to start tracking new products and to keep the
mirrored product name current. They are registered as external events via
domain.register_external_event() with matching __type__ strings so Protean's
stream deserialization works correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, Integer, String


class ProductCreated(BaseEvent):
    """A product was added to the catalogue with its opening stock."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    name = String(required=True)
    sku = String()
    stock = Integer(default=0)
    created_at = DateTime()


class ProductRenamed(BaseEvent):
    """A product's display name changed."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    name = String(required=True)
    sku = String()
    renamed_at = DateTime()
