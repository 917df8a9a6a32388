"""Django ORM implementation of the ticketing stores.

Status transitions are conditional ``UPDATE ... WHERE status = <expected>``
statements, never read-then-write. On PostgreSQL every transaction opened by
a store is bounded by ``statement_timeout`` and ``lock_timeout``.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal

from django.db import IntegrityError, OperationalError, connection, transaction
from django.db.models import Count, Sum

from ticketing import models as orm
from ticketing.conf import get_setting
from ticketing.domain import (
    Buyer,
    Event,
    EventId,
    Interval,
    Money,
    PaymentMode,
    Sale,
    SaleId,
    SaleType,
    Ticket,
    TicketId,
    TicketRow,
    TicketStatus,
)
from ticketing.domain.errors import BulkCashierConflictError, StoreUnavailableError, TicketWriteError
from ticketing.signals import ledger_changed
from ticketing.stores.interfaces import EventStore, SaleStore, TicketStore

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors():
    """Map database exceptions onto domain errors."""
    try:
        yield
    except IntegrityError as exc:
        raise TicketWriteError(str(exc).splitlines()[0] if str(exc) else "Duplicate ticket") from exc
    except OperationalError as exc:
        logger.error("Ticket store operation failed: %s", exc)
        raise StoreUnavailableError() from exc


class DjangoStore:
    """Shared transaction handling for the Django-backed stores."""

    def __init__(self, timeout_ms: int | None = None) -> None:
        if timeout_ms is None:
            timeout_ms = get_setting("STORE_TIMEOUT_MS")
        self._timeout_ms = timeout_ms

    @contextmanager
    def atomic(self):
        with translate_errors(), transaction.atomic():
            self._apply_timeout()
            yield

    def _apply_timeout(self) -> None:
        if not self._timeout_ms or connection.vendor != "postgresql":
            return
        with connection.cursor() as cursor:
            cursor.execute(
                "SELECT set_config('statement_timeout', %s, true), set_config('lock_timeout', %s, true)",
                [str(self._timeout_ms), str(self._timeout_ms)],
            )


def event_to_domain(row: orm.Event) -> Event:
    bulk_range = None
    if row.bulk_range_start is not None and row.bulk_range_end is not None:
        bulk_range = Interval(row.bulk_range_start, row.bulk_range_end)
    bulk_buyer = None
    if row.bulk_buyer_name:
        bulk_buyer = Buyer(row.bulk_buyer_name, row.bulk_buyer_email, row.bulk_buyer_phone)
    return Event(
        id=EventId(row.id),
        name=row.name,
        event_date=row.event_date,
        range_start=row.range_start,
        range_end=row.range_end,
        bulk_range=bulk_range,
        bulk_buyer=bulk_buyer,
        created_by=row.created_by_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def ticket_to_domain(row: orm.Ticket) -> Ticket:
    buyer = None
    if row.buyer_name:
        buyer = Buyer(row.buyer_name, row.buyer_email, row.buyer_phone)
    return Ticket(
        id=TicketId(row.id),
        event_id=EventId(row.event_id),
        number=row.number,
        code=row.code,
        qr_payload=row.qr_payload,
        sale_type=SaleType(row.sale_type),
        status=TicketStatus(row.status),
        buyer=buyer,
        sold_at=row.sold_at,
        sold_by=row.sold_by_id,
        scanned_at=row.scanned_at,
        scanned_by=row.scanned_by_id,
        created_at=row.created_at,
    )


def sale_to_domain(row: orm.Sale) -> Sale:
    return Sale(
        id=SaleId(row.id),
        ticket_id=TicketId(row.ticket_id),
        cashier_id=row.cashier_id,
        amount=Money(row.amount),
        payment_mode=PaymentMode(row.payment_mode),
        timestamp=row.sale_timestamp,
    )


class DjangoEventStore(DjangoStore, EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    def list_events(self) -> list[Event]:
        with translate_errors():
            return [event_to_domain(row) for row in orm.Event.objects.all()]

    def get_event(self, event_id: EventId) -> Event | None:
        with translate_errors():
            row = orm.Event.objects.filter(pk=event_id.value).first()
        return event_to_domain(row) if row else None

    def event_exists(self, event_id: EventId) -> bool:
        with translate_errors():
            return orm.Event.objects.filter(pk=event_id.value).exists()

    def create_event(
        self,
        name: str,
        event_date: date,
        created_by: int | None,
        range_start: int = 0,
        range_end: int = 0,
    ) -> Event:
        with self.atomic():
            row = orm.Event.objects.create(
                name=name,
                event_date=event_date,
                range_start=range_start,
                range_end=range_end,
                created_by_id=created_by,
            )
        return event_to_domain(row)

    @contextmanager
    def lock_event(self, event_id: EventId):
        with self.atomic():
            row = orm.Event.objects.select_for_update().filter(pk=event_id.value).first()
            yield event_to_domain(row) if row else None

    def save_allocation(self, event: Event) -> Event:
        with self.atomic():
            row = orm.Event.objects.get(pk=event.id.value)
            row.range_start = event.range_start
            row.range_end = event.range_end
            row.bulk_range_start = event.bulk_range.start if event.bulk_range else None
            row.bulk_range_end = event.bulk_range.end if event.bulk_range else None
            buyer = event.bulk_buyer
            row.bulk_buyer_name = buyer.name if buyer else None
            row.bulk_buyer_email = buyer.email if buyer else None
            row.bulk_buyer_phone = buyer.phone if buyer else None
            row.save(
                update_fields=[
                    "range_start",
                    "range_end",
                    "bulk_range_start",
                    "bulk_range_end",
                    "bulk_buyer_name",
                    "bulk_buyer_email",
                    "bulk_buyer_phone",
                    "updated_at",
                ]
            )
        return event_to_domain(row)


class DjangoTicketStore(DjangoStore, TicketStore):
    """Ticket ledger backed by the Django ORM."""

    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        with translate_errors():
            row = orm.Ticket.objects.filter(pk=ticket_id.value).first()
        return ticket_to_domain(row) if row else None

    def get_by_number(self, event_id: EventId, number: int) -> Ticket | None:
        with translate_errors():
            row = orm.Ticket.objects.filter(event_id=event_id.value, number=number).first()
        return ticket_to_domain(row) if row else None

    def find_for_scan(self, event_id: EventId, payload: str) -> Ticket | None:
        tickets = orm.Ticket.objects.filter(event_id=event_id.value)
        with translate_errors():
            row = tickets.filter(qr_payload=payload).first() or tickets.filter(code=payload).first()
        return ticket_to_domain(row) if row else None

    def consumed_cashier_numbers(self, event_id: EventId, numbers: list[int]) -> list[int]:
        if not numbers:
            return []
        wanted = set(numbers)
        with translate_errors():
            taken = orm.Ticket.objects.filter(
                event_id=event_id.value,
                number__gte=min(wanted),
                number__lte=max(wanted),
                sale_type=orm.Ticket.SaleType.CASHIER,
                status__in=[orm.Ticket.Status.SOLD, orm.Ticket.Status.USED],
            ).values_list("number", flat=True)
            return sorted(n for n in taken if n in wanted)

    def upsert_bulk_tickets(
        self,
        event_id: EventId,
        rows: list[TicketRow],
        buyer: Buyer,
        sold_by: int | None,
        sold_at: datetime,
    ) -> int:
        """Write ``rows`` as sold bulk tickets.

        Existing rows are locked first. Only available tickets and tickets
        already sold in bulk are rewritten; a used ticket fails the write and
        a cashier-owned one raises ``BulkCashierConflictError``.
        """
        by_number = {row.number: row for row in rows}
        sold = {
            "sale_type": orm.Ticket.SaleType.BULK,
            "status": orm.Ticket.Status.SOLD,
            "buyer_name": buyer.name,
            "buyer_email": buyer.email,
            "buyer_phone": buyer.phone,
            "sold_at": sold_at,
            "sold_by_id": sold_by,
        }
        with self.atomic():
            existing = {
                ticket.number: ticket
                for ticket in orm.Ticket.objects.select_for_update().filter(
                    event_id=event_id.value, number__in=list(by_number)
                )
            }
            cashier_owned = sorted(
                number
                for number, ticket in existing.items()
                if ticket.sale_type == orm.Ticket.SaleType.CASHIER
                and ticket.status != orm.Ticket.Status.AVAILABLE
            )
            if cashier_owned:
                raise BulkCashierConflictError(cashier_owned)
            used = sorted(
                number
                for number, ticket in existing.items()
                if ticket.status == orm.Ticket.Status.USED
            )
            if used:
                raise TicketWriteError(
                    f"ticket {', '.join(map(str, used))} already used, not overwritten"
                )

            for number, ticket in existing.items():
                updated = orm.Ticket.objects.filter(pk=ticket.pk, status=ticket.status).update(
                    code=by_number[number].code, qr_payload=by_number[number].qr_payload, **sold
                )
                if updated != 1:
                    raise BulkCashierConflictError([number])
            orm.Ticket.objects.bulk_create(
                [
                    orm.Ticket(
                        event_id=event_id.value,
                        number=row.number,
                        code=row.code,
                        qr_payload=row.qr_payload,
                        **sold,
                    )
                    for row in rows
                    if row.number not in existing
                ]
            )
        ledger_changed.send(sender=type(self), event_id=event_id.value)
        return len(rows)

    def insert_available_tickets(self, event_id: EventId, rows: list[TicketRow]) -> int:
        tickets = [
            orm.Ticket(
                event_id=event_id.value,
                number=row.number,
                code=row.code,
                qr_payload=row.qr_payload,
                sale_type=orm.Ticket.SaleType.CASHIER,
                status=orm.Ticket.Status.AVAILABLE,
            )
            for row in rows
        ]
        with self.atomic():
            orm.Ticket.objects.bulk_create(tickets)
        ledger_changed.send(sender=type(self), event_id=event_id.value)
        return len(tickets)

    def create_sold_ticket(
        self,
        event_id: EventId,
        row: TicketRow,
        buyer: Buyer,
        sold_by: int | None,
        sold_at: datetime,
    ) -> Ticket:
        with self.atomic():
            ticket = orm.Ticket.objects.create(
                event_id=event_id.value,
                number=row.number,
                code=row.code,
                qr_payload=row.qr_payload,
                sale_type=orm.Ticket.SaleType.CASHIER,
                status=orm.Ticket.Status.SOLD,
                buyer_name=buyer.name,
                buyer_email=buyer.email,
                buyer_phone=buyer.phone,
                sold_at=sold_at,
                sold_by_id=sold_by,
            )
        return ticket_to_domain(ticket)

    def mark_sold(
        self, ticket: Ticket, buyer: Buyer, sold_by: int | None, sold_at: datetime
    ) -> bool:
        with self.atomic():
            updated = orm.Ticket.objects.filter(
                pk=ticket.id.value, status=orm.Ticket.Status.AVAILABLE
            ).update(
                status=orm.Ticket.Status.SOLD,
                buyer_name=buyer.name,
                buyer_email=buyer.email,
                buyer_phone=buyer.phone,
                sold_at=sold_at,
                sold_by_id=sold_by,
            )
        if updated:
            ledger_changed.send(sender=type(self), event_id=ticket.event_id.value)
        return updated == 1

    def mark_used(self, ticket: Ticket, scanned_by: int | None, scanned_at: datetime) -> bool:
        with self.atomic():
            updated = orm.Ticket.objects.filter(
                pk=ticket.id.value, status=orm.Ticket.Status.SOLD
            ).update(
                status=orm.Ticket.Status.USED,
                scanned_at=scanned_at,
                scanned_by_id=scanned_by,
            )
        if updated:
            ledger_changed.send(sender=type(self), event_id=ticket.event_id.value)
        return updated == 1

    def count_by_state(
        self, event_id: EventId | None = None
    ) -> dict[tuple[TicketStatus, SaleType], int]:
        tickets = orm.Ticket.objects.all()
        if event_id is not None:
            tickets = tickets.filter(event_id=event_id.value)
        with translate_errors():
            rows = tickets.values("status", "sale_type").annotate(n=Count("id")).order_by()
            return {
                (TicketStatus(row["status"]), SaleType(row["sale_type"])): row["n"] for row in rows
            }


class DjangoSaleStore(DjangoStore, SaleStore):
    """Cashier sale records backed by the Django ORM."""

    def record_sale(
        self,
        ticket_id: TicketId,
        cashier_id: int | None,
        amount: Decimal,
        payment_mode: PaymentMode,
        timestamp: datetime,
    ) -> Sale:
        with self.atomic():
            row = orm.Sale.objects.create(
                ticket_id=ticket_id.value,
                cashier_id=cashier_id,
                amount=amount,
                payment_mode=payment_mode.value,
                sale_timestamp=timestamp,
            )
        return sale_to_domain(row)

    def get_for_ticket(self, ticket_id: TicketId) -> Sale | None:
        with translate_errors():
            row = orm.Sale.objects.filter(ticket_id=ticket_id.value).first()
        return sale_to_domain(row) if row else None

    def total_revenue(self, event_id: EventId | None = None) -> Decimal:
        sales = orm.Sale.objects.all()
        if event_id is not None:
            sales = sales.filter(ticket__event_id=event_id.value)
        with translate_errors():
            total = sales.aggregate(total=Sum("amount"))["total"]
        return total if total is not None else Decimal("0.00")
