from ticketing.handlers.views import (
    BulkAllocationView,
    EventDetailView,
    EventListView,
    IngestionView,
    SaleView,
    ScanView,
    StatsView,
)

__all__ = [
    "BulkAllocationView",
    "EventDetailView",
    "EventListView",
    "IngestionView",
    "SaleView",
    "ScanView",
    "StatsView",
]
