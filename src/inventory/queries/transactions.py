"""Transaction log queries and CSV export.

Filters combine freely (type, date range, free-text search). Results come back
in insertion order before sorting, and sorting is stable, so equal sort keys
keep insertion order and repeated identical queries return identical sequences.
"""

import csv
import io
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from enum import Enum

import structlog
from protean.exceptions import ValidationError

from inventory.projections.inventory_transaction import InventoryTransaction
from inventory.queries.paging import fetch_all
from inventory.stock.engine import TRANSACTION_TYPE_LABELS, TransactionType
from inventory.stock.errors import ExportEmptyResult

logger = structlog.get_logger(__name__)

EXPORT_HEADER = ["Date", "Product ID", "Type", "Quantity", "Previous Stock", "New Stock", "Notes"]

_TYPES_BY_LABEL = {label: value for value, label in TRANSACTION_TYPE_LABELS.items()}


def as_utc(value: datetime) -> datetime:
    """Stores may hand back naive datetimes; they are UTC by convention."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------
class DatePreset(Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_7_DAYS = "last_7_days"
    LAST_30_DAYS = "last_30_days"


# Names used by the admin screens' date filter
_PRESET_ALIASES = {"week": DatePreset.LAST_7_DAYS, "month": DatePreset.LAST_30_DAYS}


@dataclass(frozen=True)
class DateRange:
    """Window evaluated against a transaction's date. Open bounds are ``None``."""

    start: datetime | None = None
    end: datetime | None = None
    end_inclusive: bool = True

    @classmethod
    def preset(cls, name, now: datetime | None = None) -> "DateRange":
        now = as_utc(now or datetime.now(UTC))
        if not isinstance(name, DatePreset):
            try:
                name = _PRESET_ALIASES.get(name) or DatePreset(name)
            except ValueError:
                choices = ", ".join(p.value for p in DatePreset)
                raise ValueError(f"Unknown date range {name!r}; expected one of: {choices}") from None

        start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if name is DatePreset.TODAY:
            return cls(start=start_of_today)
        if name is DatePreset.YESTERDAY:
            return cls(start=start_of_today - timedelta(days=1), end=start_of_today, end_inclusive=False)
        if name is DatePreset.LAST_7_DAYS:
            return cls(start=now - timedelta(days=7))
        return cls(start=now - timedelta(days=30))

    def contains(self, moment: datetime) -> bool:
        moment = as_utc(moment)
        if self.start is not None and moment < as_utc(self.start):
            return False
        if self.end is not None:
            end = as_utc(self.end)
            if moment > end or (moment == end and not self.end_inclusive):
                return False
        return True


@dataclass(frozen=True)
class TransactionFilter:
    transaction_type: str | None = None
    date_range: DateRange | None = None
    search: str | None = None

    def matches(self, transaction) -> bool:
        if self.date_range is not None and not self.date_range.contains(transaction.date):
            return False
        if self.search:
            needle = self.search.lower()
            haystacks = (str(transaction.product_id), transaction.notes or "")
            if not any(needle in haystack.lower() for haystack in haystacks):
                return False
        return True


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------
class SortField(Enum):
    DATE = "date"
    QUANTITY = "quantity"
    TYPE = "type"


_SORT_KEYS = {
    SortField.DATE: lambda t: as_utc(t.date),
    SortField.QUANTITY: lambda t: t.quantity,
    SortField.TYPE: lambda t: t.transaction_type,
}


@dataclass(frozen=True)
class TransactionSort:
    field: SortField = SortField.DATE
    descending: bool = True

    @classmethod
    def parse(cls, field="date", direction="desc") -> "TransactionSort":
        try:
            sort_field = SortField(field)
        except ValueError:
            choices = ", ".join(f.value for f in SortField)
            raise ValueError(f"Unknown sort field {field!r}; expected one of: {choices}") from None
        if direction not in ("asc", "desc"):
            raise ValueError(f"Unknown sort direction {direction!r}; expected asc or desc")
        return cls(field=sort_field, descending=direction == "desc")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
class TransactionResult:
    """Re-runs the query on every iteration; nothing is cached between passes."""

    def __init__(self, transaction_filter: TransactionFilter, sort: TransactionSort):
        self.filter = transaction_filter
        self.sort = sort

    def _fetch(self):
        criteria = {}
        if self.filter.transaction_type:
            criteria["transaction_type"] = self.filter.transaction_type
        matching = [t for t in fetch_all(InventoryTransaction, "sequence", **criteria) if self.filter.matches(t)]
        return sorted(matching, key=_SORT_KEYS[self.sort.field], reverse=self.sort.descending)

    def __iter__(self):
        return iter(self._fetch())


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str
    row_count: int


@dataclass(frozen=True)
class ExportedRow:
    date: datetime
    product_id: str
    transaction_type: str
    quantity: int
    previous_stock: int
    new_stock: int
    notes: str


def export_filename(on: date) -> str:
    return f"inventory-transactions-{on.isoformat()}.csv"


def read_export(content: str) -> list[ExportedRow]:
    """Parse an export back into rows, mapping display types back to their codes.

    Missing notes are exported as an empty field and read back as ``None``.
    """
    reader = csv.reader(io.StringIO(content))
    header = next(reader, None)
    if header != EXPORT_HEADER:
        raise ValueError(f"Unexpected export header: {header!r}")

    return [
        ExportedRow(
            date=datetime.fromisoformat(row[0]),
            product_id=row[1],
            transaction_type=_TYPES_BY_LABEL.get(row[2], row[2]),
            quantity=int(row[3]),
            previous_stock=int(row[4]),
            new_stock=int(row[5]),
            notes=row[6] or None,
        )
        for row in reader
    ]


class TransactionQueryService:
    def __init__(self, clock=None):
        self._clock = clock or (lambda: datetime.now(UTC))

    def query(self, transaction_filter: TransactionFilter | None = None, sort: TransactionSort | None = None):
        transaction_filter = transaction_filter or TransactionFilter()
        if transaction_filter.transaction_type:
            try:
                TransactionType(transaction_filter.transaction_type)
            except ValueError:
                choices = ", ".join(t.value for t in TransactionType)
                raise ValidationError(
                    {"transaction_type": [f"Unknown transaction type {transaction_filter.transaction_type!r}; expected one of: {choices}"]}
                ) from None
        return TransactionResult(transaction_filter, sort or TransactionSort())

    def export_csv(
        self,
        transaction_filter: TransactionFilter | None = None,
        sort: TransactionSort | None = None,
    ) -> CsvExport:
        transactions = list(self.query(transaction_filter, sort))
        if not transactions:
            logger.info("Transaction export skipped: no matching transactions")
            raise ExportEmptyResult()

        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for transaction in transactions:
            writer.writerow(
                [
                    as_utc(transaction.date).isoformat(),
                    transaction.product_id,
                    TRANSACTION_TYPE_LABELS.get(transaction.transaction_type, transaction.transaction_type),
                    transaction.quantity,
                    transaction.previous_stock,
                    transaction.new_stock,
                    transaction.notes or "",
                ]
            )

        export = CsvExport(
            filename=export_filename(as_utc(self._clock()).date()),
            content=output.getvalue(),
            row_count=len(transactions),
        )
        logger.info("Transactions exported", filename=export.filename, row_count=export.row_count)
        return export
