"""Dashboard counts derived from the ledger. Read-only."""

from collections.abc import Callable

from ticketing.domain import EventId, Money, SaleType, TicketStats, TicketStatus
from ticketing.services.event_service import parse_event_id, require_event
from ticketing.stores.interfaces import EventStore, SaleStore, TicketStore


class StatsService:
    def __init__(
        self,
        events: EventStore,
        tickets: TicketStore,
        sales: SaleStore,
        user_count: Callable[[], int] = lambda: 0,
    ) -> None:
        self._events = events
        self._tickets = tickets
        self._sales = sales
        self._user_count = user_count

    def stats(self, event_id: str | EventId | None = None) -> TicketStats:
        """Counts for one event, or across all events when ``event_id`` is None.

        ``bulk_sold`` always counts sold bulk tickets; the event's declared
        bulk range may be larger than what has actually been ingested.
        """
        scope = None
        if event_id is not None:
            scope = parse_event_id(event_id)
            require_event(self._events, scope)

        counts = self._tickets.count_by_state(scope)

        def count(status: TicketStatus | None = None, sale_type: SaleType | None = None) -> int:
            return sum(
                n
                for (row_status, row_type), n in counts.items()
                if (status is None or row_status is status)
                and (sale_type is None or row_type is sale_type)
            )

        return TicketStats(
            total=count(),
            available=count(TicketStatus.AVAILABLE, SaleType.CASHIER),
            sold=count(TicketStatus.SOLD),
            used=count(TicketStatus.USED),
            bulk_sold=count(TicketStatus.SOLD, SaleType.BULK),
            cashier_sold=count(TicketStatus.SOLD, SaleType.CASHIER),
            revenue=Money(self._sales.total_revenue(scope)),
            user_count=self._user_count(),
        )
