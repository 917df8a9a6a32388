"""Bulk/cashier partition of an event's ticket-number space.

An event's numbers split into at most one contiguous bulk interval and the
free segments on either side of it. Everything here is pure: callers pass an
Event snapshot and get a new one back.
"""

from dataclasses import replace

from ticketing.domain.errors import (
    DiscontinuousRangeError,
    InvalidIntervalError,
    OutOfBoundsError,
)
from ticketing.domain.models import Event
from ticketing.domain.value_objects import Buyer, Interval


def is_in_bulk_range(event: Event, number: int) -> bool:
    return event.bulk_range is not None and number in event.bulk_range


def available_segments(event: Event) -> tuple[Interval, ...]:
    """Free segments before and after the bulk range, in ascending order."""
    full = event.full_range
    if full is None:
        return ()
    bulk = event.bulk_range
    if bulk is None:
        return (full,)
    segments = []
    if full.start < bulk.start:
        segments.append(Interval(full.start, bulk.start - 1))
    if bulk.end < full.end:
        segments.append(Interval(bulk.end + 1, full.end))
    return tuple(segments)


def available_range(event: Event) -> Interval | None:
    """The single segment a cashier should sell from.

    When free numbers exist on both sides of the bulk range the larger
    segment wins; on a tie the segment before the bulk range wins.
    """
    segments = available_segments(event)
    if not segments:
        return None
    return max(segments, key=len)


def merge_bulk_allocation(event: Event, start: int, end: int, buyer: Buyer | None) -> Event:
    """Return ``event`` with ``[start, end]`` merged into its bulk range.

    The buyer name is replaced by ``buyer``; email and phone are only
    replaced when ``buyer`` supplies them. A ``buyer`` of None leaves the
    stored buyer untouched.

    Raises:
        OutOfBoundsError: If the interval leaves the event range, or starts
            below 1 while the event range is still unknown.
        InvalidIntervalError: If ``start > end``.
        DiscontinuousRangeError: If a gap would separate the new interval
            from the existing bulk range.
    """
    full = event.full_range
    if full is None:
        if start < 1:
            raise OutOfBoundsError(_loose_interval(start, end), None)
    elif start < full.start or end > full.end:
        raise OutOfBoundsError(_loose_interval(start, end), full)

    if start > end:
        raise InvalidIntervalError(start, end)

    requested = Interval(start, end)
    current = event.bulk_range
    if current is None:
        return replace(event, bulk_range=requested, bulk_buyer=buyer or event.bulk_buyer)

    if not current.touches(requested):
        raise DiscontinuousRangeError(requested, current, current.gap_to(requested))

    merged_buyer = event.bulk_buyer
    if buyer is not None:
        merged_buyer = merged_buyer.merged_with(buyer) if merged_buyer else buyer
    return replace(event, bulk_range=current.union(requested), bulk_buyer=merged_buyer)


def learn_range(event: Event, numbers: list[int]) -> Event:
    """Fix an unknown event range from the first ingested ticket numbers.

    A bulk range declared before the range was known must fit inside it.
    """
    if not event.awaiting_ingestion or not numbers:
        return event
    learned = Interval(min(numbers), max(numbers))
    bulk = event.bulk_range
    if bulk is not None and (bulk.start < learned.start or bulk.end > learned.end):
        raise OutOfBoundsError(bulk, learned)
    return replace(event, range_start=learned.start, range_end=learned.end)


def _loose_interval(start: int, end: int) -> Interval:
    # Error reporting only; the caller's bounds may be inverted.
    return Interval(min(start, end), max(start, end))
