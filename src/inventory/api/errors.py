"""HTTP error mapping for the Inventory API.

Protean's stock handlers cover generic domain exceptions; the inventory
handlers registered afterwards take precedence for ledger errors and
return each kind's user-facing message.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_exception_handlers

from inventory.stock.errors import (
    ConcurrencyConflict,
    ExportEmptyResult,
    ItemNotFound,
    PersistenceFailure,
)

_GENERIC_VALIDATION_MESSAGE = "The request is invalid"


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": getattr(exc, "user_message", _GENERIC_VALIDATION_MESSAGE),
            "detail": exc.messages,
        },
    )


async def _item_not_found(request: Request, exc: ItemNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": exc.user_message, "item_id": exc.item_id})


async def _concurrency_conflict(request: Request, exc: ConcurrencyConflict) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"error": exc.user_message, "item_id": exc.item_id, "retry": True},
    )


async def _persistence_failure(request: Request, exc: PersistenceFailure) -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": exc.user_message})


async def _export_empty(request: Request, exc: ExportEmptyResult) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": exc.user_message})


def register_exception_handlers(app: FastAPI) -> None:
    register_protean_exception_handlers(app)

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ItemNotFound, _item_not_found)
    app.add_exception_handler(ConcurrencyConflict, _concurrency_conflict)
    app.add_exception_handler(PersistenceFailure, _persistence_failure)
    app.add_exception_handler(ExportEmptyResult, _export_empty)
