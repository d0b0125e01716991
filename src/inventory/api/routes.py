"""FastAPI routes for the Inventory domain: items, the stock ledger and reports."""

from datetime import datetime

from fastapi import APIRouter, Query
from fastapi.responses import Response
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from inventory.api.schemas import (
    AdjustStockRequest,
    ChangeThresholdRequest,
    InventoryItemIdResponse,
    InventoryItemResponse,
    LowStockAlertResponse,
    RestockRequest,
    StatusResponse,
    TrackItemRequest,
    TransactionResponse,
)
from inventory.queries.items import InventoryItemQueryService
from inventory.queries.low_stock import LowStockMonitor
from inventory.queries.transactions import (
    DateRange,
    TransactionFilter,
    TransactionQueryService,
    TransactionSort,
    as_utc,
)
from inventory.stock.ledger import StockLedger
from inventory.stock.tracking import ChangeStockThreshold, TrackItem

inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


def _transaction_response(transaction) -> TransactionResponse:
    return TransactionResponse(
        transaction_id=str(transaction.transaction_id),
        sequence=transaction.sequence,
        inventory_item_id=str(transaction.inventory_item_id),
        product_id=str(transaction.product_id),
        transaction_type=transaction.transaction_type,
        quantity=transaction.quantity,
        previous_stock=transaction.previous_stock,
        new_stock=transaction.new_stock,
        date=transaction.date,
        notes=transaction.notes,
        created_by=transaction.created_by,
        reference_id=transaction.reference_id,
    )


def _item_response(level) -> InventoryItemResponse:
    return InventoryItemResponse(
        inventory_item_id=str(level.inventory_item_id),
        product_id=str(level.product_id),
        product_name=level.product_name,
        sku=level.sku,
        current_stock=level.current_stock,
        min_stock_threshold=level.min_stock_threshold,
        reorder_quantity=level.reorder_quantity,
        status=level.status,
        last_restocked=level.last_restocked,
    )


def _transaction_query(transaction_type, date_range, start, end, search, sort, direction):
    """Build filter and sort from query parameters, reporting bad values as validation errors."""
    errors = {}
    window = None
    if start is not None or end is not None:
        if date_range:
            errors["date_range"] = ["Use either a named date range or start/end, not both"]
        elif start is not None and end is not None and as_utc(start) > as_utc(end):
            errors["end"] = ["End must not be before start"]
        else:
            window = DateRange(start=start, end=end)
    elif date_range:
        try:
            window = DateRange.preset(date_range)
        except ValueError as exc:
            errors["date_range"] = [str(exc)]

    try:
        transaction_sort = TransactionSort.parse(sort, direction)
    except ValueError as exc:
        errors["sort"] = [str(exc)]

    if errors:
        raise ValidationError(errors)

    return TransactionFilter(transaction_type=transaction_type, date_range=window, search=search), transaction_sort


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------
@inventory_router.post("", status_code=201, response_model=InventoryItemIdResponse)
async def track_item(body: TrackItemRequest) -> InventoryItemIdResponse:
    command = TrackItem(
        product_id=body.product_id,
        product_name=body.product_name,
        sku=body.sku,
        initial_stock=body.initial_stock,
        min_stock_threshold=body.min_stock_threshold,
        reorder_quantity=body.reorder_quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    return InventoryItemIdResponse(inventory_item_id=result)


@inventory_router.get("", response_model=list[InventoryItemResponse])
async def list_items(status: str | None = None, search: str | None = None) -> list[InventoryItemResponse]:
    levels = InventoryItemQueryService().list(status=status, search=search)
    return [_item_response(level) for level in levels]


@inventory_router.put("/{inventory_item_id}/adjust", response_model=TransactionResponse)
async def adjust_stock(inventory_item_id: str, body: AdjustStockRequest) -> TransactionResponse:
    transaction = StockLedger().apply_adjustment(
        inventory_item_id,
        body.adjustment_type,
        body.amount,
        body.transaction_type,
        notes=body.notes,
        actor=body.actor,
        reference_id=body.reference_id,
        expected_stock=body.expected_stock,
    )
    return _transaction_response(transaction)


@inventory_router.put("/{inventory_item_id}/restock", response_model=TransactionResponse)
async def restock(inventory_item_id: str, body: RestockRequest) -> TransactionResponse:
    transaction = StockLedger().restock(inventory_item_id, body.actor, quantity=body.quantity, notes=body.notes)
    return _transaction_response(transaction)


@inventory_router.put("/{inventory_item_id}/threshold", response_model=StatusResponse)
async def change_threshold(inventory_item_id: str, body: ChangeThresholdRequest) -> StatusResponse:
    command = ChangeStockThreshold(
        inventory_item_id=inventory_item_id,
        min_stock_threshold=body.min_stock_threshold,
        reorder_quantity=body.reorder_quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------
@inventory_router.get("/transactions", response_model=list[TransactionResponse])
async def list_transactions(
    transaction_type: str | None = Query(default=None, alias="type"),
    date_range: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    search: str | None = None,
    sort: str = "date",
    direction: str = "desc",
) -> list[TransactionResponse]:
    transaction_filter, transaction_sort = _transaction_query(
        transaction_type, date_range, start, end, search, sort, direction
    )
    result = TransactionQueryService().query(transaction_filter, transaction_sort)
    return [_transaction_response(transaction) for transaction in result]


@inventory_router.get("/transactions/export")
async def export_transactions(
    transaction_type: str | None = Query(default=None, alias="type"),
    date_range: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    search: str | None = None,
    sort: str = "date",
    direction: str = "desc",
) -> Response:
    transaction_filter, transaction_sort = _transaction_query(
        transaction_type, date_range, start, end, search, sort, direction
    )
    export = TransactionQueryService().export_csv(transaction_filter, transaction_sort)
    return Response(
        content=export.content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------
@inventory_router.get("/alerts/low-stock", response_model=list[LowStockAlertResponse])
async def low_stock_alerts(threshold: int | None = None, limit: int | None = None) -> list[LowStockAlertResponse]:
    alerts = LowStockMonitor().rank(threshold=threshold, limit=limit)
    return [
        LowStockAlertResponse(item_id=alert.item_id, product_name=alert.product_name, current_stock=alert.current_stock)
        for alert in alerts
    ]


# ---------------------------------------------------------------------------
# Single item; must stay below the fixed /transactions and /alerts paths
# ---------------------------------------------------------------------------
@inventory_router.get("/{inventory_item_id}", response_model=InventoryItemResponse)
async def get_item(inventory_item_id: str) -> InventoryItemResponse:
    return _item_response(InventoryItemQueryService().get(inventory_item_id))
