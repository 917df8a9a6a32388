"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from ticketing.domain.value_objects import Buyer, EventId, Interval, Money, SaleId, TicketId


class SaleType(Enum):
    CASHIER = "cashier"
    BULK = "bulk"


class TicketStatus(Enum):
    AVAILABLE = "available"
    SOLD = "sold"
    USED = "used"


class PaymentMode(Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE = "mobile"


class Verdict(Enum):
    ACCEPTED = "accepted"
    INVALID = "invalid"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event.

    ``range_start``/``range_end`` of ``(0, 0)`` means no tickets have been
    ingested yet and the event's number space is unknown.
    """

    id: EventId
    name: str
    event_date: date
    range_start: int
    range_end: int
    bulk_range: Interval | None
    bulk_buyer: Buyer | None
    created_by: int | None
    created_at: datetime
    updated_at: datetime

    @property
    def awaiting_ingestion(self) -> bool:
        return self.range_start == 0 and self.range_end == 0

    @property
    def full_range(self) -> Interval | None:
        if self.awaiting_ingestion:
            return None
        return Interval(self.range_start, self.range_end)


@dataclass(frozen=True)
class Ticket:
    """Domain representation of a Ticket."""

    id: TicketId
    event_id: EventId
    number: int
    code: str
    qr_payload: str
    sale_type: SaleType
    status: TicketStatus
    buyer: Buyer | None
    sold_at: datetime | None
    sold_by: int | None
    scanned_at: datetime | None
    scanned_by: int | None
    created_at: datetime


@dataclass(frozen=True)
class Sale:
    """Domain representation of a cashier Sale."""

    id: SaleId
    ticket_id: TicketId
    cashier_id: int | None
    amount: Money
    payment_mode: PaymentMode
    timestamp: datetime


@dataclass(frozen=True)
class TicketRow:
    """One parsed ingestion row."""

    number: int
    code: str
    qr_payload: str


@dataclass(frozen=True)
class IngestionResult:
    bulk_succeeded: int
    cashier_succeeded: int
    failed: int
    errors: tuple[str, ...] = ()

    @property
    def succeeded(self) -> int:
        return self.bulk_succeeded + self.cashier_succeeded


@dataclass(frozen=True)
class ScanVerdict:
    """Outcome of a gate scan."""

    verdict: Verdict
    reason: str
    payload: str
    ticket_number: int | None = None
    ticket_code: str | None = None
    buyer_name: str | None = None
    sale_type: SaleType | None = None
    event_name: str | None = None
    scanned_at: datetime | None = None

    @property
    def accepted(self) -> bool:
        return self.verdict is Verdict.ACCEPTED


@dataclass(frozen=True)
class TicketStats:
    total: int
    available: int
    sold: int
    used: int
    bulk_sold: int
    cashier_sold: int
    revenue: Money
    user_count: int
