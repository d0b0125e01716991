"""Shared BDD fixtures and step definitions for the Inventory domain."""

from datetime import UTC, datetime

import pytest
from inventory.stock.events import (
    ItemDetailsRefreshed,
    ItemTracked,
    LowStockDetected,
    StockAdjusted,
    StockThresholdChanged,
)
from inventory.stock.status import classify
from inventory.stock.stock import InventoryItem
from protean.exceptions import ValidationError
from protean.testing import given as given_
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup in Then steps
_INVENTORY_EVENT_CLASSES = {
    "ItemTracked": ItemTracked,
    "StockAdjusted": StockAdjusted,
    "StockThresholdChanged": StockThresholdChanged,
    "ItemDetailsRefreshed": ItemDetailsRefreshed,
    "LowStockDetected": LowStockDetected,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def inventory_item_id():
    return "prod-001"


# ---------------------------------------------------------------------------
# Event fixtures (past tense — what happened)
# ---------------------------------------------------------------------------
def _item_tracked(inventory_item_id, opening_stock):
    return ItemTracked(
        inventory_item_id=inventory_item_id,
        product_id=inventory_item_id,
        product_name="Espresso Beans 1kg",
        sku="BEAN-ESP-1K",
        opening_stock=opening_stock,
        min_stock_threshold=10,
        reorder_quantity=40,
        tracked_at=datetime.now(UTC),
    )


@pytest.fixture()
def item_tracked(inventory_item_id):
    return _item_tracked(inventory_item_id, 50)


@pytest.fixture()
def item_tracked_low(inventory_item_id):
    """Item tracked with stock below its threshold."""
    return _item_tracked(inventory_item_id, 5)


@pytest.fixture()
def item_tracked_scarce(inventory_item_id):
    return _item_tracked(inventory_item_id, 3)


@pytest.fixture()
def stock_sold(inventory_item_id):
    return StockAdjusted(
        transaction_id="txn-001",
        inventory_item_id=inventory_item_id,
        product_id=inventory_item_id,
        transaction_type="sale",
        adjustment_type="subtract",
        quantity=-4,
        previous_stock=50,
        new_stock=46,
        created_by="ordering",
        reference_id="ord-001",
        occurred_at=datetime.now(UTC),
    )


# ---------------------------------------------------------------------------
# Given steps — InventoryItem (event sourcing via protean.testing)
# ---------------------------------------------------------------------------
@given("an item was tracked", target_fixture="item")
def _(item_tracked):
    return given_(InventoryItem, item_tracked)


@given("an item was tracked with low stock", target_fixture="item")
def _(item_tracked_low):
    return given_(InventoryItem, item_tracked_low)


@given("an item was tracked with 3 units", target_fixture="item")
def _(item_tracked_scarce):
    return given_(InventoryItem, item_tracked_scarce)


@given("stock was sold", target_fixture="item")
def _(item, stock_sold):
    return item.after(stock_sold)


# ---------------------------------------------------------------------------
# Then steps — shared assertions
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the current stock is {qty:d}"))
def _(item, qty):
    assert item.current_stock == qty


@then(parsers.cfparse("the item is {status}"))
def _(item, status):
    assert classify(item.current_stock, item.min_stock_threshold).value == status


@then("the action fails with a validation error")
def _(item):
    assert item.rejected
    assert isinstance(item.rejection, ValidationError)


@then(parsers.cfparse("a {event_type} event is raised"))
def _(item, event_type):
    event_cls = _INVENTORY_EVENT_CLASSES[event_type]
    assert event_cls in item.events


@then(parsers.cfparse("no {event_type} event is raised"))
def _(item, event_type):
    event_cls = _INVENTORY_EVENT_CLASSES[event_type]
    assert event_cls not in item.events
