"""Unit tests for the services against mocked stores.

These test error handling and domain error mapping.
Run with: pytest tests/test_services.py -v
"""

from contextlib import contextmanager, nullcontext
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from ticketing.domain import (
    Buyer,
    PaymentMode,
    SaleType,
    Ticket,
    TicketId,
    TicketStatus,
    Verdict,
)
from ticketing.domain.errors import (
    BulkTicketNotIndividuallySellableError,
    ConcurrentSaleConflictError,
    EmptyInputError,
    ErrorCode,
    EventNotFoundError,
    InvalidAmountError,
    InvalidEventIdError,
    InvalidIntervalError,
    StoreUnavailableError,
    TicketWriteError,
)
from ticketing.services.admission_service import ALREADY_USED, AdmissionService
from ticketing.services.allocation_service import AllocationService
from ticketing.services.event_service import EventService
from ticketing.services.ingestion_service import IngestionService
from ticketing.services.sale_service import SaleService, generated_row


def locking(event):
    @contextmanager
    def _lock(event_id):
        yield event

    return _lock


def make_ticket(event, number, status=TicketStatus.AVAILABLE, sale_type=SaleType.CASHIER):
    return Ticket(
        id=TicketId(uuid4()),
        event_id=event.id,
        number=number,
        code=f"T{number:04d}",
        qr_payload=f"QR-{number}",
        sale_type=sale_type,
        status=status,
        buyer=None,
        sold_at=None,
        sold_by=None,
        scanned_at=None,
        scanned_by=None,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


class TestEventService:
    """Tests for EventService."""

    def test_get_event_invalid_id_raises_error(self):
        """get_event raises InvalidEventIdError for malformed UUID."""
        store = MagicMock()
        with pytest.raises(InvalidEventIdError):
            EventService(store).get_event("not-a-uuid")
        store.get_event.assert_not_called()

    def test_get_event_not_found_raises_error(self):
        """get_event raises EventNotFoundError when store returns None."""
        store = MagicMock()
        store.get_event.return_value = None
        with pytest.raises(EventNotFoundError):
            EventService(store).get_event(str(uuid4()))

    def test_get_event_returns_store_event(self, domain_event):
        """get_event returns the event the store found."""
        event = domain_event()
        store = MagicMock()
        store.get_event.return_value = event
        assert EventService(store).get_event(str(event.id)) is event
        store.get_event.assert_called_once_with(event.id)

    @pytest.mark.parametrize("ticket_range", [(0, 10), (10, 5)])
    def test_create_event_rejects_bad_range(self, ticket_range):
        """create_event raises InvalidIntervalError before touching the store."""
        store = MagicMock()
        with pytest.raises(InvalidIntervalError):
            EventService(store).create_event("Gala", date(2026, 7, 1), 1, ticket_range=ticket_range)
        store.create_event.assert_not_called()


class TestAllocationService:
    """Tests for AllocationService error paths."""

    def test_missing_event_raises_not_found(self):
        store = MagicMock()
        store.lock_event = locking(None)
        with pytest.raises(EventNotFoundError):
            AllocationService(store).propose_bulk_allocation(str(uuid4()), 1, 10, Buyer("Acme"))
        store.save_allocation.assert_not_called()

    def test_store_outage_propagates(self):
        store = MagicMock()
        store.lock_event.side_effect = StoreUnavailableError()
        with pytest.raises(StoreUnavailableError) as excinfo:
            AllocationService(store).propose_bulk_allocation(str(uuid4()), 1, 10, Buyer("Acme"))
        assert excinfo.value.retryable


class TestIngestionService:
    """Tests for IngestionService input screening and batching."""

    def test_empty_input_raises(self):
        events = MagicMock()
        with pytest.raises(EmptyInputError):
            IngestionService(events, MagicMock(), batch_size=10).ingest(str(uuid4()), [])
        events.lock_event.assert_not_called()

    def test_failed_batch_is_retried_row_by_row(self, domain_event, make_rows):
        event = domain_event()
        events = MagicMock()
        events.lock_event = locking(event)
        tickets = MagicMock()

        def insert(event_id, batch):
            if len(batch) > 1:
                raise TicketWriteError("duplicate code")
            if batch[0].number == 3:
                raise TicketWriteError("duplicate code")
            return 1

        tickets.insert_available_tickets.side_effect = insert
        result = IngestionService(events, tickets, batch_size=5).ingest(
            str(event.id), make_rows(1, 5)
        )
        assert result.cashier_succeeded == 4
        assert result.failed == 1
        assert result.errors[0].startswith("T0003:")


class TestSaleService:
    """Tests for SaleService."""

    def _service(self, event, existing):
        events = MagicMock()
        events.get_event.return_value = event
        tickets = MagicMock()
        tickets.atomic.return_value = nullcontext()
        tickets.get_by_number.return_value = existing
        sales = MagicMock()
        return SaleService(events, tickets, sales), tickets, sales

    def test_lost_race_raises_concurrent_conflict(self, domain_event):
        """A conditional update that matches no row means another cashier won."""
        event = domain_event()
        service, tickets, sales = self._service(event, make_ticket(event, 10))
        tickets.mark_sold.return_value = False
        with pytest.raises(ConcurrentSaleConflictError):
            service.sell(
                str(event.id), 10, Buyer("Jane"), Decimal("20"), PaymentMode.CASH, actor=1
            )
        sales.record_sale.assert_not_called()

    def test_duplicate_insert_raises_concurrent_conflict(self, domain_event):
        """The insert lost to another cashier if the number now has a row."""
        event = domain_event()
        service, tickets, sales = self._service(event, None)
        tickets.get_by_number.side_effect = [None, make_ticket(event, 10, status=TicketStatus.SOLD)]
        tickets.create_sold_ticket.side_effect = TicketWriteError("duplicate")
        with pytest.raises(ConcurrentSaleConflictError):
            service.sell(
                str(event.id), 10, Buyer("Jane"), Decimal("20"), PaymentMode.CASH, actor=1
            )
        sales.record_sale.assert_not_called()

    def test_code_collision_is_a_write_error(self, domain_event):
        """With still no row for the number, the failure was the code or QR."""
        event = domain_event()
        service, tickets, sales = self._service(event, None)
        tickets.create_sold_ticket.side_effect = TicketWriteError("duplicate code")
        with pytest.raises(TicketWriteError):
            service.sell(
                str(event.id), 10, Buyer("Jane"), Decimal("20"), PaymentMode.CASH, actor=1
            )
        sales.record_sale.assert_not_called()

    def test_negative_amount_is_rejected(self, domain_event):
        event = domain_event()
        service, tickets, sales = self._service(event, make_ticket(event, 10))
        with pytest.raises(InvalidAmountError) as excinfo:
            service.sell(
                str(event.id), 10, Buyer("Jane"), Decimal("-1"), PaymentMode.CASH, actor=1
            )
        assert excinfo.value.code is ErrorCode.INVALID_AMOUNT
        tickets.mark_sold.assert_not_called()
        sales.record_sale.assert_not_called()

    def test_bulk_row_outside_bulk_range_is_not_sellable(self, domain_event):
        event = domain_event()
        existing = make_ticket(event, 10, status=TicketStatus.AVAILABLE, sale_type=SaleType.BULK)
        service, tickets, _ = self._service(event, existing)
        with pytest.raises(BulkTicketNotIndividuallySellableError):
            service.sell(
                str(event.id), 10, Buyer("Jane"), Decimal("20"), PaymentMode.CASH, actor=1
            )
        tickets.mark_sold.assert_not_called()

    def test_generated_row_format(self, domain_event):
        event = domain_event()
        row = generated_row(event, 7)
        assert row.code == "T0007"
        assert row.qr_payload == f"EVENT_{str(event.id)[:8]}_TICKET_7"


class TestAdmissionService:
    """Tests for AdmissionService race handling."""

    def test_lost_scan_race_reports_duplicate(self, domain_event):
        event = domain_event()
        sold = make_ticket(event, 10, status=TicketStatus.SOLD)
        events = MagicMock()
        events.get_event.return_value = event
        tickets = MagicMock()
        tickets.find_for_scan.return_value = sold
        tickets.mark_used.return_value = False
        tickets.get_ticket.return_value = replace(sold, status=TicketStatus.USED)

        verdict = AdmissionService(events, tickets).scan(str(event.id), " QR-10 ", actor=1)

        assert verdict.verdict is Verdict.DUPLICATE
        assert verdict.reason == ALREADY_USED
        tickets.find_for_scan.assert_called_once_with(event.id, "QR-10")

    def test_event_id_is_parsed(self):
        with pytest.raises(InvalidEventIdError):
            AdmissionService(MagicMock(), MagicMock()).scan("bad", "QR-1", actor=1)
