"""Tests for cache behavior.

Invalidation runs on transaction commit, so writes are wrapped in
``django_capture_on_commit_callbacks(execute=True)``.
Run with: pytest tests/test_cache.py -v
"""

from decimal import Decimal

import pytest
from django.core.cache import cache

from ticketing.cache import EVENTS_LIST_KEY, STATS_ALL_KEY, event_key, stats_key
from ticketing.domain import Buyer, PaymentMode
from ticketing.models import Event
from ticketing.services.allocation_service import AllocationService
from ticketing.services.ingestion_service import IngestionService
from ticketing.services.sale_service import SaleService


def prime(*keys):
    for key in keys:
        cache.set(key, {"stale": True})


@pytest.mark.django_db
class TestCacheInvalidation:
    """Tests for cache invalidation on ledger changes."""

    def test_event_save_invalidates_list_cache(self, make_event, django_capture_on_commit_callbacks):
        """Saving an event invalidates the events:list cache key."""
        event = make_event()
        prime(EVENTS_LIST_KEY)
        with django_capture_on_commit_callbacks(execute=True):
            Event.objects.get(pk=event.id.value).save()
        assert cache.get(EVENTS_LIST_KEY) is None

    def test_event_save_invalidates_detail_cache(self, make_event, django_capture_on_commit_callbacks):
        """Saving an event invalidates the events:{id} cache key."""
        event = make_event()
        prime(event_key(event.id))
        with django_capture_on_commit_callbacks(execute=True):
            Event.objects.get(pk=event.id.value).save()
        assert cache.get(event_key(event.id)) is None

    def test_bulk_allocation_invalidates_event(
        self, event_store, make_event, buyer, django_capture_on_commit_callbacks
    ):
        event = make_event()
        prime(EVENTS_LIST_KEY, event_key(event.id))
        with django_capture_on_commit_callbacks(execute=True):
            AllocationService(event_store).propose_bulk_allocation(str(event.id), 1, 10, buyer)
        assert cache.get(EVENTS_LIST_KEY) is None
        assert cache.get(event_key(event.id)) is None

    def test_ingestion_invalidates_stats(
        self, event_store, ticket_store, make_event, make_rows, django_capture_on_commit_callbacks
    ):
        event = make_event()
        prime(STATS_ALL_KEY, stats_key(event.id))
        with django_capture_on_commit_callbacks(execute=True):
            IngestionService(event_store, ticket_store).ingest(str(event.id), make_rows(1, 10))
        assert cache.get(STATS_ALL_KEY) is None
        assert cache.get(stats_key(event.id)) is None

    def test_sale_invalidates_stats(
        self,
        event_store,
        ticket_store,
        sale_store,
        make_event,
        make_rows,
        cashier_user,
        django_capture_on_commit_callbacks,
    ):
        event = make_event()
        IngestionService(event_store, ticket_store).ingest(str(event.id), make_rows(1, 10))
        prime(STATS_ALL_KEY, stats_key(event.id))
        with django_capture_on_commit_callbacks(execute=True):
            SaleService(event_store, ticket_store, sale_store).sell(
                str(event.id), 3, Buyer("Jane"), Decimal("5"), PaymentMode.CASH, cashier_user.pk
            )
        assert cache.get(STATS_ALL_KEY) is None
        assert cache.get(stats_key(event.id)) is None

    def test_other_event_cache_survives(
        self, event_store, make_event, buyer, django_capture_on_commit_callbacks
    ):
        event = make_event()
        other = make_event(name="Other Show")
        prime(event_key(other.id))
        with django_capture_on_commit_callbacks(execute=True):
            AllocationService(event_store).propose_bulk_allocation(str(event.id), 1, 10, buyer)
        assert cache.get(event_key(other.id)) == {"stale": True}

    def test_invalidation_waits_for_commit(self, event_store, make_event, buyer):
        """Without a commit no invalidation runs."""
        event = make_event()
        prime(event_key(event.id))
        AllocationService(event_store).propose_bulk_allocation(str(event.id), 1, 10, buyer)
        assert cache.get(event_key(event.id)) == {"stale": True}
