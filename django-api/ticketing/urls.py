from django.urls import path

from ticketing.handlers import (
    BulkAllocationView,
    EventDetailView,
    EventListView,
    IngestionView,
    SaleView,
    ScanView,
    StatsView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/bulk-allocations",
        BulkAllocationView.as_view(),
        name="bulk-allocation",
    ),
    path("events/<str:event_id>/ingestions", IngestionView.as_view(), name="ingestion"),
    path("events/<str:event_id>/sales", SaleView.as_view(), name="sale"),
    path("events/<str:event_id>/scans", ScanView.as_view(), name="scan"),
    path("stats", StatsView.as_view(), name="stats"),
]
