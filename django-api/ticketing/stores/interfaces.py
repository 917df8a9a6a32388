"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Writes that violate a
uniqueness rule raise TicketWriteError; timeouts and connection failures
raise StoreUnavailableError. Raw database exceptions never leave a store.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime
from decimal import Decimal

from ticketing.domain import (
    Buyer,
    Event,
    EventId,
    PaymentMode,
    Sale,
    SaleType,
    Ticket,
    TicketId,
    TicketRow,
    TicketStatus,
)


class TransactionalStore(ABC):
    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group writes so they commit or roll back together."""
        ...


class EventStore(TransactionalStore):
    """Interface for event persistence operations."""

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return all events ordered by event_date descending."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def event_exists(self, event_id: EventId) -> bool:
        """Check if an event exists."""
        ...

    @abstractmethod
    def create_event(
        self,
        name: str,
        event_date: date,
        created_by: int | None,
        range_start: int = 0,
        range_end: int = 0,
    ) -> Event:
        ...

    @abstractmethod
    def lock_event(self, event_id: EventId) -> AbstractContextManager[Event | None]:
        """Open a transaction holding an exclusive lock on the event row.

        Yields the locked event, or None if it does not exist. Writes made
        through any store inside the block commit with it.
        """
        ...

    @abstractmethod
    def save_allocation(self, event: Event) -> Event:
        """Persist range, bulk range and bulk buyer of ``event``."""
        ...


class TicketStore(TransactionalStore):
    """Interface for the ticket ledger."""

    @abstractmethod
    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        ...

    @abstractmethod
    def get_by_number(self, event_id: EventId, number: int) -> Ticket | None:
        ...

    @abstractmethod
    def find_for_scan(self, event_id: EventId, payload: str) -> Ticket | None:
        """Look a ticket up by QR payload, falling back to its code."""
        ...

    @abstractmethod
    def consumed_cashier_numbers(self, event_id: EventId, numbers: list[int]) -> list[int]:
        """Return which of ``numbers`` belong to sold or used cashier tickets."""
        ...

    @abstractmethod
    def upsert_bulk_tickets(
        self,
        event_id: EventId,
        rows: list[TicketRow],
        buyer: Buyer,
        sold_by: int | None,
        sold_at: datetime,
    ) -> int:
        """Write ``rows`` as sold bulk tickets keyed by (event, number).

        Only available tickets and tickets already sold in bulk may be
        rewritten. All rows are written or none are. Returns the number
        written.

        Raises:
            BulkCashierConflictError: If a cashier sold one of the numbers.
            TicketWriteError: If a ticket is already used or a code collides.
        """
        ...

    @abstractmethod
    def insert_available_tickets(self, event_id: EventId, rows: list[TicketRow]) -> int:
        """Insert ``rows`` as available cashier tickets; all or none."""
        ...

    @abstractmethod
    def create_sold_ticket(
        self,
        event_id: EventId,
        row: TicketRow,
        buyer: Buyer,
        sold_by: int | None,
        sold_at: datetime,
    ) -> Ticket:
        ...

    @abstractmethod
    def mark_sold(
        self, ticket: Ticket, buyer: Buyer, sold_by: int | None, sold_at: datetime
    ) -> bool:
        """Move an available ticket to sold (``WHERE status = available``).

        Returns False when the ticket was no longer available.
        """
        ...

    @abstractmethod
    def mark_used(self, ticket: Ticket, scanned_by: int | None, scanned_at: datetime) -> bool:
        """Move a sold ticket to used (``WHERE status = sold``).

        Returns False when the ticket was no longer sold.
        """
        ...

    @abstractmethod
    def count_by_state(self, event_id: EventId | None = None) -> dict[tuple[TicketStatus, SaleType], int]:
        """Ticket counts keyed by (status, sale type), optionally for one event."""
        ...


class SaleStore(TransactionalStore):
    """Interface for cashier sale records."""

    @abstractmethod
    def record_sale(
        self,
        ticket_id: TicketId,
        cashier_id: int | None,
        amount: Decimal,
        payment_mode: PaymentMode,
        timestamp: datetime,
    ) -> Sale:
        ...

    @abstractmethod
    def get_for_ticket(self, ticket_id: TicketId) -> Sale | None:
        ...

    @abstractmethod
    def total_revenue(self, event_id: EventId | None = None) -> Decimal:
        ...
