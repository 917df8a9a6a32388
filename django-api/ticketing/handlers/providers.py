"""Wire services to the Django-backed stores."""

from django.contrib.auth import get_user_model

from ticketing.services.admission_service import AdmissionService
from ticketing.services.allocation_service import AllocationService
from ticketing.services.event_service import EventService
from ticketing.services.ingestion_service import IngestionService
from ticketing.services.sale_service import SaleService
from ticketing.services.stats_service import StatsService
from ticketing.stores.django_store import DjangoEventStore, DjangoSaleStore, DjangoTicketStore


def active_user_count() -> int:
    return get_user_model().objects.filter(is_active=True).count()


def event_service() -> EventService:
    return EventService(DjangoEventStore())


def allocation_service() -> AllocationService:
    return AllocationService(DjangoEventStore())


def ingestion_service() -> IngestionService:
    return IngestionService(DjangoEventStore(), DjangoTicketStore())


def sale_service() -> SaleService:
    return SaleService(DjangoEventStore(), DjangoTicketStore(), DjangoSaleStore())


def admission_service() -> AdmissionService:
    return AdmissionService(DjangoEventStore(), DjangoTicketStore())


def stats_service() -> StatsService:
    return StatsService(
        DjangoEventStore(), DjangoTicketStore(), DjangoSaleStore(), user_count=active_user_count
    )
