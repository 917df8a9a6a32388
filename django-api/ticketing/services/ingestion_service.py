"""Ingestion pipeline: parsed ticket rows into the ledger.

Rows are partitioned by the event's declared bulk range. Bulk rows become
sold bulk tickets, the rest become available cashier tickets. Bulk writes
happen under the same event lock as bulk allocations, so the bounds they
were partitioned against cannot move underneath them.
"""

import logging
from collections.abc import Callable, Sequence

from django.utils import timezone

from ticketing.conf import get_setting
from ticketing.domain import Buyer, Event, IngestionResult, TicketRow
from ticketing.domain.allocation import is_in_bulk_range, learn_range, merge_bulk_allocation
from ticketing.domain.errors import (
    BulkBuyerRequiredError,
    BulkCashierConflictError,
    EmptyInputError,
    EventNotFoundError,
    TicketWriteError,
)
from ticketing.services.event_service import parse_event_id
from ticketing.stores.interfaces import EventStore, TicketStore

logger = logging.getLogger(__name__)


class IngestionService:
    """Splits an uploaded ticket list into bulk-sold and cashier-available tickets."""

    def __init__(
        self, events: EventStore, tickets: TicketStore, batch_size: int | None = None
    ) -> None:
        self._events = events
        self._tickets = tickets
        self._batch_size = batch_size or get_setting("INGEST_BATCH_SIZE")

    def ingest(
        self,
        event_id: str,
        rows: Sequence[TicketRow],
        actor: int | None = None,
        bulk_buyer: Buyer | None = None,
        bulk_range: tuple[int, int] | None = None,
    ) -> IngestionResult:
        """Write ``rows`` for one event.

        The first ingestion of an event fixes its range from the row numbers.
        ``bulk_range`` merges a new bulk allocation before partitioning.
        Individual rows that cannot be written are reported in the result
        without aborting the rest.

        Raises:
            EmptyInputError: If no usable rows were supplied.
            InvalidEventIdError / EventNotFoundError: For a bad event.
            OutOfBoundsError / InvalidIntervalError / DiscontinuousRangeError:
                If the bulk allocation is rejected.
            BulkBuyerRequiredError: If bulk rows exist but no buyer is known.
            BulkCashierConflictError: If cashier-sold tickets occupy bulk
                numbers. Nothing is written in that case.
        """
        accepted, errors = self._screen(rows)
        if not accepted:
            raise EmptyInputError()
        parsed = parse_event_id(event_id)

        with self._events.lock_event(parsed) as event:
            if event is None:
                raise EventNotFoundError(str(parsed))
            ranged = learn_range(event, [row.number for row in accepted])
            allocated = ranged
            if bulk_range is not None:
                allocated = merge_bulk_allocation(ranged, bulk_range[0], bulk_range[1], bulk_buyer)
            if allocated != event:
                allocated = self._events.save_allocation(allocated)

            in_range = []
            full = allocated.full_range
            for row in accepted:
                if row.number in full:
                    in_range.append(row)
                else:
                    errors.append(f"{row.code}: ticket {row.number} is outside event range {full}")

            bulk_rows = [row for row in in_range if is_in_bulk_range(allocated, row.number)]
            cashier_rows = [row for row in in_range if not is_in_bulk_range(allocated, row.number)]

            bulk_ok = 0
            if bulk_rows:
                bulk_ok = self._write_bulk(allocated, bulk_rows, bulk_buyer, actor, errors)
                if bulk_ok == 0 and bulk_range is not None:
                    logger.warning(
                        "No bulk tickets written for event %s, keeping bulk range %s",
                        parsed,
                        ranged.bulk_range,
                    )
                    self._events.save_allocation(ranged)

        cashier_ok = self._write_batches(
            cashier_rows,
            lambda batch: self._tickets.insert_available_tickets(parsed, batch),
            errors,
        )

        result = IngestionResult(
            bulk_succeeded=bulk_ok,
            cashier_succeeded=cashier_ok,
            failed=len(errors),
            errors=tuple(errors),
        )
        logger.info(
            "Ingested %d rows for event %s: %d bulk sold, %d available, %d failed",
            len(rows),
            parsed,
            result.bulk_succeeded,
            result.cashier_succeeded,
            result.failed,
        )
        return result

    def _write_bulk(
        self,
        event: Event,
        rows: list[TicketRow],
        bulk_buyer: Buyer | None,
        actor: int | None,
        errors: list[str],
    ) -> int:
        buyer = bulk_buyer or event.bulk_buyer
        if buyer is None:
            raise BulkBuyerRequiredError()
        conflicts = self._tickets.consumed_cashier_numbers(event.id, [row.number for row in rows])
        if conflicts:
            logger.warning(
                "Bulk ingestion for event %s collides with %d cashier tickets",
                event.id,
                len(conflicts),
            )
            raise BulkCashierConflictError(conflicts)
        sold_at = timezone.now()
        try:
            return self._write_batches(
                rows,
                lambda batch: self._tickets.upsert_bulk_tickets(event.id, batch, buyer, actor, sold_at),
                errors,
            )
        except BulkCashierConflictError as exc:
            logger.warning(
                "Bulk ingestion for event %s raced cashier sales of %s", event.id, exc.numbers
            )
            raise

    def _write_batches(
        self,
        rows: list[TicketRow],
        write: Callable[[list[TicketRow]], int],
        errors: list[str],
    ) -> int:
        """Write in fixed-size batches, retrying a failed batch row by row."""
        written = 0
        for start in range(0, len(rows), self._batch_size):
            batch = rows[start : start + self._batch_size]
            try:
                written += write(batch)
            except TicketWriteError as exc:
                logger.warning(
                    "Batch of %d tickets failed (%s), retrying row by row", len(batch), exc.message
                )
                for row in batch:
                    try:
                        written += write([row])
                    except TicketWriteError as row_exc:
                        errors.append(f"{row.code}: {row_exc.message}")
        return written

    @staticmethod
    def _screen(rows: Sequence[TicketRow]) -> tuple[list[TicketRow], list[str]]:
        """Drop rows with unusable numbers or repeated numbers/codes."""
        accepted: list[TicketRow] = []
        errors: list[str] = []
        seen_numbers: set[int] = set()
        seen_codes: set[str] = set()
        for row in rows:
            if row.number < 1:
                errors.append(f"{row.code}: invalid ticket number {row.number}")
            elif row.number in seen_numbers:
                errors.append(f"{row.code}: duplicate ticket number {row.number} in input")
            elif row.code in seen_codes:
                errors.append(f"{row.code}: duplicate ticket code in input")
            else:
                seen_numbers.add(row.number)
                seen_codes.add(row.code)
                accepted.append(row)
        return accepted, errors
