"""Event service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from datetime import date

from ticketing.domain import Buyer, Event, EventId
from ticketing.domain.allocation import merge_bulk_allocation
from ticketing.domain.errors import EventNotFoundError, InvalidEventIdError, InvalidIntervalError
from ticketing.stores.interfaces import EventStore

logger = logging.getLogger(__name__)


def parse_event_id(event_id: str | EventId) -> EventId:
    """Raises InvalidEventIdError if ``event_id`` is not a valid UUID."""
    if isinstance(event_id, EventId):
        return event_id
    try:
        return EventId.from_string(str(event_id))
    except ValueError:
        raise InvalidEventIdError() from None


def require_event(store: EventStore, event_id: str | EventId) -> Event:
    """Return the event, raising InvalidEventIdError or EventNotFoundError."""
    parsed = parse_event_id(event_id)
    event = store.get_event(parsed)
    if event is None:
        raise EventNotFoundError(str(parsed))
    return event


class EventService:
    """Service for event catalog operations."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def list_events(self) -> list[Event]:
        """Return all events, most recent event date first."""
        return self._store.list_events()

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        return require_event(self._store, event_id)

    def create_event(
        self,
        name: str,
        event_date: date,
        actor: int | None,
        ticket_range: tuple[int, int] | None = None,
        bulk_range: tuple[int, int] | None = None,
        bulk_buyer: Buyer | None = None,
    ) -> Event:
        """Create an event, optionally with a known range and a declared bulk block.

        Without ``ticket_range`` the event awaits its first ingestion, which
        fixes the range from the uploaded ticket numbers.

        Raises:
            InvalidIntervalError: If ``ticket_range`` is inverted or not positive.
            OutOfBoundsError: If ``bulk_range`` leaves ``ticket_range``.
        """
        range_start, range_end = 0, 0
        if ticket_range is not None:
            range_start, range_end = ticket_range
            if range_start < 1 or range_start > range_end:
                raise InvalidIntervalError(range_start, range_end)

        with self._store.atomic():
            event = self._store.create_event(
                name=name.strip(),
                event_date=event_date,
                created_by=actor,
                range_start=range_start,
                range_end=range_end,
            )
            if bulk_range is not None:
                event = merge_bulk_allocation(event, bulk_range[0], bulk_range[1], bulk_buyer)
                event = self._store.save_allocation(event)

        logger.info(
            "Created event %s (%s) range=%s bulk=%s",
            event.id,
            event.name,
            event.full_range or "pending",
            event.bulk_range,
        )
        return event
