"""Range allocator: bulk allocations against an event's ticket range."""

import logging

from ticketing.domain import Buyer, Event, Interval
from ticketing.domain.allocation import available_range, available_segments, merge_bulk_allocation
from ticketing.domain.errors import DomainError, EventNotFoundError
from ticketing.services.event_service import parse_event_id, require_event
from ticketing.stores.interfaces import EventStore

logger = logging.getLogger(__name__)


class AllocationService:
    """Owns the bulk/available partition of each event's number space."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def propose_bulk_allocation(
        self, event_id: str, start: int, end: int, buyer: Buyer, actor: int | None = None
    ) -> Event:
        """Merge ``[start, end]`` into the event's bulk range.

        The read-validate-write runs under an exclusive lock on the event
        row, so a concurrent proposal sees this one's merged bounds.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            OutOfBoundsError: If the interval leaves the event range.
            InvalidIntervalError: If ``start > end``.
            DiscontinuousRangeError: If a gap would remain against the
                existing bulk range.
        """
        parsed = parse_event_id(event_id)
        try:
            with self._store.lock_event(parsed) as event:
                if event is None:
                    raise EventNotFoundError(str(parsed))
                merged = merge_bulk_allocation(event, start, end, buyer)
                saved = self._store.save_allocation(merged)
        except DomainError as exc:
            logger.warning(
                "Rejected bulk allocation %s-%s for event %s: %s", start, end, parsed, exc
            )
            raise

        logger.info(
            "Bulk allocation %s-%s for event %s accepted by actor %s, bulk range now %s",
            start,
            end,
            parsed,
            actor,
            saved.bulk_range,
        )
        return saved

    def available_range(self, event_id: str) -> Interval | None:
        return available_range(require_event(self._store, event_id))

    def available_segments(self, event_id: str) -> tuple[Interval, ...]:
        return available_segments(require_event(self._store, event_id))
