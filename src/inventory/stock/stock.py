"""InventoryItem aggregate (Event Sourced) — the stock ledger of one product.

Every change to an item is captured as a domain event and the current state is
rebuilt by replaying events through @apply handlers. The StockAdjusted event is
the transaction record itself, so an item's stock value and its audit trail are
appended to the event store in the same write and can never drift apart.

Stock Model:
    current_stock:       Authoritative quantity, never negative
    min_stock_threshold: Below this the item is low-stock
    reorder_quantity:    Suggested restock amount (advisory)
    status:              Derived from the two above, never stored
"""

from datetime import UTC, datetime
from uuid import uuid4

from protean import apply
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from inventory.config import DEFAULTS
from inventory.domain import inventory
from inventory.stock.engine import TransactionType, compute_adjustment
from inventory.stock.events import (
    ItemDetailsRefreshed,
    ItemTracked,
    LowStockDetected,
    StockAdjusted,
    StockThresholdChanged,
)
from inventory.stock.status import StockStatus, classify

DEFAULT_MIN_STOCK_THRESHOLD = DEFAULTS["DEFAULT_MIN_STOCK_THRESHOLD"]
DEFAULT_REORDER_QUANTITY = DEFAULTS["DEFAULT_REORDER_QUANTITY"]


def default_sku(product_id):
    """Derive a SKU from the product identity when the catalogue supplies none."""
    return f"SKU-{str(product_id)[:6].upper()}"


@inventory.aggregate(is_event_sourced=True)
class InventoryItem:
    """Event-sourced aggregate holding the stock ledger of one tracked product."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    current_stock = Integer(default=0, min_value=0)
    min_stock_threshold = Integer(default=DEFAULT_MIN_STOCK_THRESHOLD, min_value=0)
    reorder_quantity = Integer(default=DEFAULT_REORDER_QUANTITY, min_value=0)
    last_restocked = DateTime()
    transaction_count = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def track(
        cls,
        product_id,
        product_name,
        sku=None,
        initial_stock=0,
        min_stock_threshold=DEFAULT_MIN_STOCK_THRESHOLD,
        reorder_quantity=DEFAULT_REORDER_QUANTITY,
    ):
        """Start tracking a catalogue product.

        The item shares the product's identity. ``initial_stock`` is the
        catalogue's seed value and becomes the opening balance of the ledger.
        """
        errors = {}
        if initial_stock is None or initial_stock < 0:
            errors["initial_stock"] = ["Initial stock cannot be negative"]
        if min_stock_threshold is None or min_stock_threshold < 0:
            errors["min_stock_threshold"] = ["Minimum stock threshold cannot be negative"]
        if reorder_quantity is None or reorder_quantity < 0:
            errors["reorder_quantity"] = ["Reorder quantity cannot be negative"]
        if errors:
            raise ValidationError(errors)

        now = datetime.now(UTC)
        sku = sku or default_sku(product_id)
        item = cls(
            id=str(product_id),
            product_id=str(product_id),
            product_name=product_name,
            sku=sku,
            current_stock=initial_stock,
            min_stock_threshold=min_stock_threshold,
            reorder_quantity=reorder_quantity,
        )
        item.raise_(
            ItemTracked(
                inventory_item_id=str(product_id),
                product_id=str(product_id),
                product_name=product_name,
                sku=sku,
                opening_stock=initial_stock,
                min_stock_threshold=min_stock_threshold,
                reorder_quantity=reorder_quantity,
                tracked_at=now,
            )
        )
        return item

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def status(self) -> StockStatus:
        return classify(self.current_stock or 0, self.min_stock_threshold or 0)

    def _check_low_stock(self):
        """Raise LowStockDetected if the committed stock is below threshold."""
        status = self.status
        if status is StockStatus.IN_STOCK:
            return
        self.raise_(
            LowStockDetected(
                inventory_item_id=str(self.id),
                product_id=str(self.product_id),
                product_name=self.product_name,
                current_stock=self.current_stock,
                min_stock_threshold=self.min_stock_threshold,
                status=status.value,
                detected_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # Stock adjustment
    # -------------------------------------------------------------------
    def adjust(
        self,
        adjustment_type,
        amount,
        transaction_type,
        created_by,
        notes=None,
        reference_id=None,
    ):
        """Apply an adjustment and record it. Returns the StockAdjusted event."""
        if not created_by:
            raise ValidationError({"created_by": ["Acting user is required"]})

        previous_stock = self.current_stock or 0
        result = compute_adjustment(previous_stock, adjustment_type, amount, transaction_type, notes)

        event = StockAdjusted(
            transaction_id=str(uuid4()),
            inventory_item_id=str(self.id),
            product_id=str(self.product_id),
            transaction_type=result.transaction_type,
            adjustment_type=getattr(adjustment_type, "value", adjustment_type),
            quantity=result.delta,
            previous_stock=previous_stock,
            new_stock=result.new_stock,
            notes=notes,
            created_by=str(created_by),
            reference_id=str(reference_id) if reference_id else None,
            occurred_at=datetime.now(UTC),
        )
        self.raise_(event)
        self._check_low_stock()
        return event

    # -------------------------------------------------------------------
    # Policy and descriptive fields
    # -------------------------------------------------------------------
    def change_threshold(self, min_stock_threshold, reorder_quantity=None):
        errors = {}
        if min_stock_threshold is None or min_stock_threshold < 0:
            errors["min_stock_threshold"] = ["Minimum stock threshold cannot be negative"]
        if reorder_quantity is not None and reorder_quantity < 0:
            errors["reorder_quantity"] = ["Reorder quantity cannot be negative"]
        if errors:
            raise ValidationError(errors)

        self.raise_(
            StockThresholdChanged(
                inventory_item_id=str(self.id),
                previous_min_stock_threshold=self.min_stock_threshold,
                min_stock_threshold=min_stock_threshold,
                reorder_quantity=self.reorder_quantity if reorder_quantity is None else reorder_quantity,
                changed_at=datetime.now(UTC),
            )
        )

    def refresh_details(self, product_name, sku=None):
        """Mirror a catalogue rename. Stock is untouched."""
        if not product_name:
            raise ValidationError({"product_name": ["Product name is required"]})

        sku = sku or self.sku
        if product_name == self.product_name and sku == self.sku:
            return

        self.raise_(
            ItemDetailsRefreshed(
                inventory_item_id=str(self.id),
                product_name=product_name,
                sku=sku,
                refreshed_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # @apply methods — rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_item_tracked(self, event: ItemTracked):
        self.id = event.inventory_item_id
        self.product_id = event.product_id
        self.product_name = event.product_name
        self.sku = event.sku
        self.current_stock = event.opening_stock
        self.min_stock_threshold = event.min_stock_threshold
        self.reorder_quantity = event.reorder_quantity
        self.transaction_count = 0
        self.created_at = event.tracked_at
        self.updated_at = event.tracked_at

    @apply
    def _on_stock_adjusted(self, event: StockAdjusted):
        self.current_stock = event.new_stock
        self.transaction_count = (self.transaction_count or 0) + 1
        if event.transaction_type == TransactionType.RESTOCK.value:
            self.last_restocked = event.occurred_at
        self.updated_at = event.occurred_at

    @apply
    def _on_stock_threshold_changed(self, event: StockThresholdChanged):
        self.min_stock_threshold = event.min_stock_threshold
        self.reorder_quantity = event.reorder_quantity
        self.updated_at = event.changed_at

    @apply
    def _on_item_details_refreshed(self, event: ItemDetailsRefreshed):
        self.product_name = event.product_name
        self.sku = event.sku
        self.updated_at = event.refreshed_at

    @apply
    def _on_low_stock_detected(self, event: LowStockDetected):  # noqa: ARG002
        # Notification-only event — no state change
        pass
