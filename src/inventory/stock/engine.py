"""Adjustment engine — computes the effect of an adjustment request.

Pure functions: nothing here reads or writes storage. The ledger calls
``compute_adjustment`` with the item's committed stock and records whatever
it returns.
"""

from dataclasses import dataclass
from enum import Enum

from inventory.stock.errors import InvalidAdjustment, NoOpAdjustment


class AdjustmentType(Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


class TransactionType(Enum):
    RESTOCK = "restock"
    ADJUSTMENT = "adjustment"
    SALE = "sale"
    RETURN = "return"
    DAMAGE = "damage"


TRANSACTION_TYPE_LABELS = {
    TransactionType.RESTOCK.value: "Restock",
    TransactionType.ADJUSTMENT.value: "Adjustment",
    TransactionType.SALE.value: "Sale",
    TransactionType.RETURN.value: "Return",
    TransactionType.DAMAGE.value: "Damage",
}


@dataclass(frozen=True)
class AdjustmentResult:
    new_stock: int
    delta: int
    transaction_type: str


def _coerce(enum_cls, value, field):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise InvalidAdjustment({field: [f"Unknown {field} {value!r}; expected one of: {choices}"]}) from None


def compute_adjustment(current_stock, adjustment_type, amount, transaction_type, reason_text=None):
    """Compute ``(new_stock, delta, transaction_type)`` for an adjustment.

    ``subtract`` clamps at zero and reports the delta actually applied.
    ``reason_text`` is advisory only and never changes the classification.
    """
    if current_stock is None or current_stock < 0:
        raise ValueError(f"current_stock must be >= 0, got {current_stock!r}")

    adjustment_type = _coerce(AdjustmentType, adjustment_type, "adjustment_type")
    transaction_type = _coerce(TransactionType, transaction_type, "transaction_type")

    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAdjustment({"amount": [f"Amount must be a whole number, got {amount!r}"]})
    if amount < 0:
        raise InvalidAdjustment({"amount": [f"Amount must be zero or positive, got {amount}"]})

    if adjustment_type is AdjustmentType.ADD:
        new_stock = current_stock + amount
    elif adjustment_type is AdjustmentType.SUBTRACT:
        new_stock = max(0, current_stock - amount)
    else:
        new_stock = amount

    delta = new_stock - current_stock
    if delta == 0:
        raise NoOpAdjustment({"amount": [f"Adjustment leaves stock unchanged at {current_stock}"]})

    return AdjustmentResult(new_stock=new_stock, delta=delta, transaction_type=transaction_type.value)
