"""Error taxonomy of the stock ledger.

Validation failures follow Protean's convention (a ``messages`` dict keyed by
field) so they surface like every other domain validation error. The remaining
kinds carry a distinct, user-facing message for the presentation layer.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class ItemNotFound(ObjectNotFoundError):
    """No inventory item is tracked under the given identifier."""

    user_message = "Inventory item not found"

    def __init__(self, item_id):
        self.item_id = str(item_id)
        super().__init__(f"Inventory item `{self.item_id}` does not exist")


class ItemAlreadyTracked(ValidationError):
    """The product already has an inventory item."""

    user_message = "This product is already tracked in inventory"


class InvalidAdjustment(ValidationError):
    """The requested adjustment is malformed (negative amount, unknown type)."""

    user_message = "The adjustment request is invalid"


class NoOpAdjustment(ValidationError):
    """The adjustment would not change stock, so nothing is recorded."""

    user_message = "The adjustment does not change the stock level"


class InventoryError(Exception):
    """Base class for ledger failures that are not validation errors."""

    user_message = "The inventory operation failed"

    def __init__(self, message=None):
        self.message = message or self.user_message
        super().__init__(self.message)


class ConcurrencyConflict(InventoryError):
    """Stock changed between the caller's read and the commit."""

    user_message = "Stock was changed by someone else. Reload the item and retry the adjustment."

    def __init__(self, item_id, expected_stock=None, actual_stock=None):
        self.item_id = str(item_id)
        self.expected_stock = expected_stock
        self.actual_stock = actual_stock
        detail = f"Stale stock read for inventory item `{self.item_id}`"
        if expected_stock is not None:
            detail += f": expected {expected_stock}, found {actual_stock}"
        super().__init__(detail)


class PersistenceFailure(InventoryError):
    """The store could not durably commit; nothing was applied."""

    user_message = "The inventory store is unavailable. No changes were saved."


class ExportEmptyResult(InventoryError):
    """An export was requested for a filter that matches no transactions."""

    user_message = "No transactions to export"
