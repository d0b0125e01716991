"""Stock status classification."""

from enum import Enum


class StockStatus(Enum):
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"


def classify(current_stock: int, min_stock_threshold: int) -> StockStatus:
    """Map a stock quantity and its minimum threshold to a status.

    ``out-of-stock`` when nothing is left, ``low-stock`` while strictly below
    the threshold, ``in-stock`` otherwise. Negative inputs are a caller bug.
    """
    if current_stock is None or current_stock < 0:
        raise ValueError(f"current_stock must be >= 0, got {current_stock!r}")
    if min_stock_threshold is None or min_stock_threshold < 0:
        raise ValueError(f"min_stock_threshold must be >= 0, got {min_stock_threshold!r}")

    if current_stock == 0:
        return StockStatus.OUT_OF_STOCK
    if current_stock < min_stock_threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK
