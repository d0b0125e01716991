"""Inbound cross-domain event handler: Inventory reacts to Catalogue events.

New catalogue products start being tracked with the catalogue's opening stock;
renames refresh the mirrored product name. Stock itself never flows from the
catalogue after tracking starts; the ledger owns it.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.catalogue import ProductCreated, ProductRenamed

from inventory.domain import inventory
from inventory.stock.errors import ItemAlreadyTracked, ItemNotFound
from inventory.stock.stock import InventoryItem
from inventory.stock.tracking import RefreshItemDetails, TrackItem

logger = structlog.get_logger(__name__)

# Register external events so Protean can deserialize them
inventory.register_external_event(ProductCreated, "Catalogue.ProductCreated.v1")
inventory.register_external_event(ProductRenamed, "Catalogue.ProductRenamed.v1")


@inventory.event_handler(part_of=InventoryItem, stream_category="catalogue::product")
class CatalogueInventoryEventHandler:
    """Reacts to Catalogue domain events to keep inventory items in step."""

    @handle(ProductCreated)
    def on_product_created(self, event: ProductCreated) -> None:
        try:
            current_domain.process(
                TrackItem(
                    product_id=event.product_id,
                    product_name=event.name,
                    sku=event.sku,
                    initial_stock=event.stock or 0,
                ),
                asynchronous=False,
            )
        except ItemAlreadyTracked:
            logger.info("Product already tracked, skipping", product_id=str(event.product_id))
            return

        logger.info("Started tracking catalogue product", product_id=str(event.product_id), opening_stock=event.stock)

    @handle(ProductRenamed)
    def on_product_renamed(self, event: ProductRenamed) -> None:
        try:
            current_domain.process(
                RefreshItemDetails(inventory_item_id=event.product_id, product_name=event.name, sku=event.sku),
                asynchronous=False,
            )
        except ItemNotFound:
            logger.warning("Renamed product is not tracked", product_id=str(event.product_id))
