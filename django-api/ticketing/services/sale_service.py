"""Sale processor: one cashier sale of one ticket number."""

import logging
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from ticketing.domain import Buyer, Event, Money, PaymentMode, SaleType, Ticket, TicketRow, TicketStatus
from ticketing.domain.allocation import available_range, available_segments, is_in_bulk_range
from ticketing.domain.errors import (
    AlreadySoldError,
    AlreadyUsedError,
    BulkTicketNotIndividuallySellableError,
    ConcurrentSaleConflictError,
    DomainError,
    EventAwaitingIngestionError,
    InBulkRangeError,
    InvalidAmountError,
    NoInventoryError,
    OutOfEventRangeError,
    TicketWriteError,
)
from ticketing.services.event_service import require_event
from ticketing.stores.interfaces import EventStore, SaleStore, TicketStore

logger = logging.getLogger(__name__)


def generated_row(event: Event, number: int) -> TicketRow:
    """Code and QR payload for a ticket first created at the cash desk."""
    return TicketRow(
        number=number,
        code=f"T{number:04d}",
        qr_payload=f"EVENT_{str(event.id)[:8]}_TICKET_{number}",
    )


class SaleService:
    """Sells individual tickets from the cashier pool."""

    def __init__(self, events: EventStore, tickets: TicketStore, sales: SaleStore) -> None:
        self._events = events
        self._tickets = tickets
        self._sales = sales

    def sell(
        self,
        event_id: str,
        ticket_number: int,
        buyer: Buyer,
        amount: Decimal,
        payment_mode: PaymentMode,
        actor: int | None,
    ) -> Ticket:
        """Sell ``ticket_number`` to ``buyer`` and record the payment.

        The ticket write and the sale record commit together. Moving an
        existing ticket to sold is conditional on it still being available,
        so two cashiers racing for the same number cannot both succeed.

        Raises:
            InvalidEventIdError / EventNotFoundError: For a bad event.
            InvalidAmountError: If the amount is negative.
            EventAwaitingIngestionError: If the event has no tickets yet.
            OutOfEventRangeError: If the number is outside the event range.
            InBulkRangeError: If the number belongs to the bulk block.
            NoInventoryError: If no cashier numbers remain.
            AlreadySoldError / AlreadyUsedError: If the ticket is taken.
            BulkTicketNotIndividuallySellableError: If the row is a bulk ticket.
            ConcurrentSaleConflictError: If another sale won the race.
            TicketWriteError: If the generated code or QR payload is taken
                by another ticket.
        """
        event = require_event(self._events, event_id)
        try:
            price = self._price(amount)
            self._check_sellable(event, ticket_number)
            ticket = self._sell(event, ticket_number, buyer, price, payment_mode, actor)
        except DomainError as exc:
            logger.warning(
                "Sale of ticket %s for event %s rejected: %s", ticket_number, event.id, exc
            )
            raise

        logger.info(
            "Ticket %s for event %s sold by actor %s (%s %s)",
            ticket_number,
            event.id,
            actor,
            payment_mode.value,
            price,
        )
        return ticket

    @staticmethod
    def _price(amount: Decimal) -> Money:
        try:
            return Money(amount)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidAmountError(amount) from None

    @staticmethod
    def _check_sellable(event: Event, number: int) -> None:
        full = event.full_range
        if full is None:
            raise EventAwaitingIngestionError()
        if number not in full:
            raise OutOfEventRangeError(number, full)
        if is_in_bulk_range(event, number):
            raise InBulkRangeError(number, event.bulk_range)
        if available_range(event) is None:
            raise NoInventoryError()
        if not any(number in segment for segment in available_segments(event)):
            raise NoInventoryError()

    def _sell(
        self,
        event: Event,
        number: int,
        buyer: Buyer,
        amount: Money,
        payment_mode: PaymentMode,
        actor: int | None,
    ) -> Ticket:
        existing = self._tickets.get_by_number(event.id, number)
        sold_at = timezone.now()

        with self._tickets.atomic():
            if existing is None:
                try:
                    ticket = self._tickets.create_sold_ticket(
                        event.id, generated_row(event, number), buyer, actor, sold_at
                    )
                except TicketWriteError:
                    if self._tickets.get_by_number(event.id, number) is None:
                        raise
                    raise ConcurrentSaleConflictError(number) from None
            else:
                self._check_existing(existing)
                if not self._tickets.mark_sold(existing, buyer, actor, sold_at):
                    raise ConcurrentSaleConflictError(number)
                ticket = existing

            self._sales.record_sale(ticket.id, actor, amount.amount, payment_mode, sold_at)

        return self._tickets.get_ticket(ticket.id)

    @staticmethod
    def _check_existing(ticket: Ticket) -> None:
        if ticket.status is TicketStatus.SOLD:
            raise AlreadySoldError(ticket.number)
        if ticket.status is TicketStatus.USED:
            raise AlreadyUsedError(ticket.number)
        if ticket.sale_type is SaleType.BULK:
            raise BulkTicketNotIndividuallySellableError(ticket.number)
