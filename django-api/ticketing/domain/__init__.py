from ticketing.domain.models import (
    Event,
    IngestionResult,
    PaymentMode,
    Sale,
    SaleType,
    ScanVerdict,
    Ticket,
    TicketRow,
    TicketStats,
    TicketStatus,
    Verdict,
)
from ticketing.domain.value_objects import Buyer, EventId, Interval, Money, SaleId, TicketId

__all__ = [
    "Event",
    "Ticket",
    "Sale",
    "TicketRow",
    "IngestionResult",
    "ScanVerdict",
    "TicketStats",
    "SaleType",
    "TicketStatus",
    "PaymentMode",
    "Verdict",
    "EventId",
    "TicketId",
    "SaleId",
    "Money",
    "Interval",
    "Buyer",
]
