"""Pydantic request/response schemas for the Inventory API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class TrackItemRequest(BaseModel):
    product_id: str
    product_name: str
    sku: str | None = None
    initial_stock: int = Field(ge=0, default=0)
    min_stock_threshold: int | None = Field(ge=0, default=None)
    reorder_quantity: int | None = Field(ge=0, default=None)


class AdjustStockRequest(BaseModel):
    adjustment_type: str
    amount: int
    transaction_type: str
    actor: str
    notes: str | None = None
    reference_id: str | None = None
    expected_stock: int | None = None


class RestockRequest(BaseModel):
    actor: str
    quantity: int | None = Field(ge=1, default=None)
    notes: str | None = None


class ChangeThresholdRequest(BaseModel):
    min_stock_threshold: int = Field(ge=0)
    reorder_quantity: int | None = Field(ge=0, default=None)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class InventoryItemIdResponse(BaseModel):
    inventory_item_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class InventoryItemResponse(BaseModel):
    inventory_item_id: str
    product_id: str
    product_name: str
    sku: str
    current_stock: int
    min_stock_threshold: int
    reorder_quantity: int
    status: str
    last_restocked: datetime | None = None


class TransactionResponse(BaseModel):
    transaction_id: str
    sequence: int
    inventory_item_id: str
    product_id: str
    transaction_type: str
    quantity: int
    previous_stock: int
    new_stock: int
    date: datetime
    notes: str | None = None
    created_by: str
    reference_id: str | None = None


class LowStockAlertResponse(BaseModel):
    item_id: str
    product_name: str
    current_stock: int
