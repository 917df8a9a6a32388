"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timezone
from uuid import uuid4

import pytest
from rest_framework.test import APIClient

from ticketing.domain import Buyer, Event, EventId, Interval, TicketRow
from ticketing.handlers.permissions import ADMIN, CASHIER, SCANNER
from ticketing.services.event_service import EventService
from ticketing.stores.django_store import DjangoEventStore, DjangoSaleStore, DjangoTicketStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(django_user_model):
    """Create an active user, optionally placed in role groups."""
    from django.contrib.auth.models import Group

    def _make(username: str, *roles: str, **extra):
        user = django_user_model.objects.create_user(username=username, password="pw", **extra)
        for role in roles:
            group, _ = Group.objects.get_or_create(name=role)
            user.groups.add(group)
        return user

    return _make


@pytest.fixture
def admin_member(make_user):
    return make_user("alice", ADMIN)


@pytest.fixture
def cashier_user(make_user):
    return make_user("carol", CASHIER)


@pytest.fixture
def scanner_user(make_user):
    return make_user("sam", SCANNER)


@pytest.fixture
def event_store() -> DjangoEventStore:
    return DjangoEventStore()


@pytest.fixture
def ticket_store() -> DjangoTicketStore:
    return DjangoTicketStore()


@pytest.fixture
def sale_store() -> DjangoSaleStore:
    return DjangoSaleStore()


@pytest.fixture
def make_event(event_store, admin_member):
    """Create a persisted event through EventService."""

    def _make(
        ticket_range: tuple[int, int] | None = (1, 1000),
        bulk_range: tuple[int, int] | None = None,
        bulk_buyer: Buyer | None = None,
        name: str = "Summer Concert",
    ) -> Event:
        return EventService(event_store).create_event(
            name=name,
            event_date=date(2026, 7, 1),
            actor=admin_member.pk,
            ticket_range=ticket_range,
            bulk_range=bulk_range,
            bulk_buyer=bulk_buyer,
        )

    return _make


@pytest.fixture
def make_rows():
    """Build ingestion rows for ticket numbers ``start..end``."""

    def _make(start: int, end: int, prefix: str = "T") -> list[TicketRow]:
        return [
            TicketRow(number=n, code=f"{prefix}{n:04d}", qr_payload=f"QR-{prefix}-{n}")
            for n in range(start, end + 1)
        ]

    return _make


@pytest.fixture
def domain_event():
    """Build an unsaved domain Event for pure allocation tests."""

    def _make(
        range_start: int = 1,
        range_end: int = 1000,
        bulk_range: tuple[int, int] | None = None,
        bulk_buyer: Buyer | None = None,
    ) -> Event:
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        return Event(
            id=EventId(uuid4()),
            name="Summer Concert",
            event_date=date(2026, 7, 1),
            range_start=range_start,
            range_end=range_end,
            bulk_range=Interval(*bulk_range) if bulk_range else None,
            bulk_buyer=bulk_buyer,
            created_by=None,
            created_at=now,
            updated_at=now,
        )

    return _make


@pytest.fixture
def buyer() -> Buyer:
    return Buyer("Acme Corp", "events@acme.test", "555-0100")
