"""Integration tests for dashboard stats.

Run with: pytest tests/test_stats.py -v
"""

from decimal import Decimal

import pytest

from ticketing.domain import Buyer, Money, PaymentMode
from ticketing.domain.errors import EventNotFoundError
from ticketing.handlers.providers import active_user_count
from ticketing.services.admission_service import AdmissionService
from ticketing.services.ingestion_service import IngestionService
from ticketing.services.sale_service import SaleService
from ticketing.services.stats_service import StatsService


@pytest.fixture
def stats(event_store, ticket_store, sale_store):
    return StatsService(event_store, ticket_store, sale_store, user_count=active_user_count)


@pytest.fixture
def busy_event(event_store, ticket_store, sale_store, make_event, make_rows, buyer, cashier_user, scanner_user):
    """Event 1-100: 1-20 bulk, 3 cashier sales of which one scanned, one bulk scanned."""
    event = make_event(ticket_range=(1, 100), bulk_range=(1, 20), bulk_buyer=buyer)
    IngestionService(event_store, ticket_store).ingest(str(event.id), make_rows(1, 100))
    sales = SaleService(event_store, ticket_store, sale_store)
    for number, amount in ((30, "10.00"), (31, "12.50"), (32, "7.25")):
        sales.sell(str(event.id), number, Buyer("Jane"), Decimal(amount), PaymentMode.CASH, cashier_user.pk)
    gate = AdmissionService(event_store, ticket_store)
    gate.scan(str(event.id), "QR-T-30", scanner_user.pk)
    gate.scan(str(event.id), "QR-T-1", scanner_user.pk)
    return event


@pytest.mark.django_db
class TestStats:
    """Tests for StatsService.stats."""

    def test_counts_for_event(self, stats, busy_event):
        result = stats.stats(str(busy_event.id))

        assert result.total == 100
        assert result.available == 77
        assert result.sold == 21
        assert result.used == 2
        assert result.bulk_sold == 19
        assert result.cashier_sold == 2
        assert result.revenue == Money(Decimal("29.75"))

    def test_user_count_is_active_users(self, stats, busy_event, make_user):
        make_user("banned", is_active=False)
        # alice, carol and sam from the fixtures
        assert stats.stats(str(busy_event.id)).user_count == 3

    def test_all_events(self, stats, busy_event, make_event, ticket_store, event_store, make_rows):
        other = make_event(name="Other Show", ticket_range=(1, 10))
        IngestionService(event_store, ticket_store).ingest(str(other.id), make_rows(1, 10, prefix="O"))
        result = stats.stats()
        assert result.total == 110
        assert result.available == 87

    def test_empty_event(self, stats, make_event):
        result = stats.stats(str(make_event().id))
        assert result.total == 0
        assert result.revenue == Money(Decimal("0"))

    def test_unknown_event(self, stats):
        with pytest.raises(EventNotFoundError):
            stats.stats("12345678-1234-5678-1234-567812345678")
