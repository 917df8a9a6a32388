"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.core.cache import cache
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.cache import EVENTS_LIST_KEY, event_key, stats_key
from ticketing.conf import get_setting
from ticketing.domain import PaymentMode
from ticketing.domain.errors import DomainError, ErrorCode
from ticketing.handlers import providers
from ticketing.handlers.permissions import IsAdmin, IsCashier, IsScanner
from ticketing.handlers.serializers import (
    BulkAllocationSerializer,
    EventCreateSerializer,
    EventSerializer,
    IngestionResultSerializer,
    IngestionSerializer,
    SaleSerializer,
    ScanSerializer,
    ScanVerdictSerializer,
    TicketSerializer,
    TicketStatsSerializer,
    buyer_from,
    rows_from,
)
from ticketing.services.event_service import parse_event_id

ERROR_STATUS = {
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.OUT_OF_BOUNDS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.OUT_OF_EVENT_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_INTERVAL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EMPTY_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.BULK_BUYER_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DISCONTINUOUS_RANGE: status.HTTP_409_CONFLICT,
    ErrorCode.BULK_CASHIER_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_AWAITING_INGESTION: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.IN_BULK_RANGE: status.HTTP_409_CONFLICT,
    ErrorCode.BULK_TICKET_NOT_INDIVIDUALLY_SELLABLE: status.HTTP_409_CONFLICT,
    ErrorCode.NO_INVENTORY: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_SOLD: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_USED: status.HTTP_409_CONFLICT,
    ErrorCode.CONCURRENT_SALE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.TICKET_WRITE_FAILED: status.HTTP_409_CONFLICT,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(exc: DomainError) -> Response:
    body = {"code": exc.code.value, "message": exc.message, **exc.details()}
    if exc.retryable:
        body["retryable"] = True
    return Response({"error": body}, status=ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST))


class DomainAPIView(APIView):
    """APIView that renders domain errors instead of raising them."""

    permission_classes = [IsAuthenticated]

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            return error_response(exc)
        return super().handle_exception(exc)


class EventListView(DomainAPIView):
    """Handler for GET/POST /api/events"""

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdmin()]
        return super().get_permissions()

    def get(self, request: Request) -> Response:
        data = cache.get(EVENTS_LIST_KEY)
        if data is None:
            events = providers.event_service().list_events()
            data = EventSerializer(events, many=True).data
            cache.set(EVENTS_LIST_KEY, data, get_setting("EVENTS_CACHE_TTL"))
        return Response(data)

    def post(self, request: Request) -> Response:
        serializer = EventCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ticket_range = None
        if "range_start" in data:
            ticket_range = (data["range_start"], data["range_end"])
        bulk_range = None
        if "bulk_range_start" in data:
            bulk_range = (data["bulk_range_start"], data["bulk_range_end"])
        event = providers.event_service().create_event(
            name=data["name"],
            event_date=data["event_date"],
            actor=request.user.pk,
            ticket_range=ticket_range,
            bulk_range=bulk_range,
            bulk_buyer=buyer_from(data.get("bulk_buyer")),
        )
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(DomainAPIView):
    """Handler for GET /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        data = cache.get(event_key(parse_event_id(event_id)))
        if data is None:
            event = providers.event_service().get_event(event_id)
            data = EventSerializer(event).data
            cache.set(event_key(event.id), data, get_setting("EVENTS_CACHE_TTL"))
        return Response(data)


class BulkAllocationView(DomainAPIView):
    """Handler for POST /api/events/{event_id}/bulk-allocations"""

    permission_classes = [IsAdmin]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = BulkAllocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        event = providers.allocation_service().propose_bulk_allocation(
            event_id,
            data["start"],
            data["end"],
            buyer_from(data["buyer"]),
            actor=request.user.pk,
        )
        return Response(EventSerializer(event).data)


class IngestionView(DomainAPIView):
    """Handler for POST /api/events/{event_id}/ingestions"""

    permission_classes = [IsAdmin]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = IngestionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        bulk_range = None
        if "bulk_range_start" in data:
            bulk_range = (data["bulk_range_start"], data["bulk_range_end"])
        result = providers.ingestion_service().ingest(
            event_id,
            rows_from(data["rows"]),
            actor=request.user.pk,
            bulk_buyer=buyer_from(data.get("bulk_buyer")),
            bulk_range=bulk_range,
        )
        return Response(IngestionResultSerializer(result).data, status=status.HTTP_201_CREATED)


class SaleView(DomainAPIView):
    """Handler for POST /api/events/{event_id}/sales"""

    permission_classes = [IsCashier]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = SaleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ticket = providers.sale_service().sell(
            event_id,
            data["ticket_number"],
            buyer_from(data["buyer"]),
            data["amount"],
            PaymentMode(data["payment_mode"]),
            actor=request.user.pk,
        )
        return Response(TicketSerializer(ticket).data, status=status.HTTP_201_CREATED)


class ScanView(DomainAPIView):
    """Handler for POST /api/events/{event_id}/scans"""

    permission_classes = [IsScanner]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = ScanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        verdict = providers.admission_service().scan(
            event_id, serializer.validated_data["payload"], actor=request.user.pk
        )
        return Response(ScanVerdictSerializer(verdict).data)


class StatsView(DomainAPIView):
    """Handler for GET /api/stats"""

    permission_classes = [IsAdmin]

    def get(self, request: Request) -> Response:
        event_id = request.query_params.get("event") or None
        if event_id is not None:
            event_id = parse_event_id(event_id)
        key = stats_key(event_id)
        data = cache.get(key)
        if data is None:
            stats = providers.stats_service().stats(event_id)
            data = TicketStatsSerializer(stats).data
            cache.set(key, data, get_setting("STATS_CACHE_TTL"))
        return Response(data)
