"""Admission validator: the gate-scan state machine.

A ticket is admitted once. ``available`` tickets are refused, ``used``
tickets are reported as duplicates, and a ``sold`` ticket is admitted only
when its sale channel agrees with the event's current bulk bounds.
"""

import logging

from django.utils import timezone

from ticketing.domain import Event, SaleType, ScanVerdict, Ticket, TicketStatus, Verdict
from ticketing.domain.allocation import is_in_bulk_range
from ticketing.services.event_service import require_event
from ticketing.stores.interfaces import EventStore, TicketStore

logger = logging.getLogger(__name__)

NOT_FOUND = "not found"
OUTSIDE_EVENT_RANGE = "outside event range"
NOT_SOLD_YET = "not sold yet"
ALREADY_USED = "already used"
BULK_OUTSIDE_BULK_RANGE = "bulk ticket outside bulk range"
CASHIER_INSIDE_BULK_RANGE = "cashier ticket inside bulk range - invalid"
ACCESS_GRANTED = "access granted"


def check_admission(event: Event, ticket: Ticket) -> tuple[Verdict, str] | None:
    """Return a refusal for ``ticket``, or None if it may be admitted."""
    full = event.full_range
    if full is None or ticket.number not in full:
        return Verdict.INVALID, OUTSIDE_EVENT_RANGE
    if ticket.status is TicketStatus.AVAILABLE:
        return Verdict.INVALID, NOT_SOLD_YET
    if ticket.status is TicketStatus.USED:
        return Verdict.DUPLICATE, ALREADY_USED
    in_bulk = is_in_bulk_range(event, ticket.number)
    if ticket.sale_type is SaleType.BULK and not in_bulk:
        return Verdict.INVALID, BULK_OUTSIDE_BULK_RANGE
    if ticket.sale_type is SaleType.CASHIER and in_bulk:
        return Verdict.INVALID, CASHIER_INSIDE_BULK_RANGE
    return None


class AdmissionService:
    """Validates scanned tickets at the gate."""

    def __init__(self, events: EventStore, tickets: TicketStore) -> None:
        self._events = events
        self._tickets = tickets

    def scan(self, event_id: str, payload: str, actor: int | None) -> ScanVerdict:
        """Check ``payload`` (QR payload or ticket code) and admit its ticket.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = require_event(self._events, event_id)
        payload = payload.strip()
        ticket = self._tickets.find_for_scan(event.id, payload)
        if ticket is None:
            return self._verdict(event, payload, None, Verdict.INVALID, NOT_FOUND)

        refusal = check_admission(event, ticket)
        if refusal is not None:
            verdict, reason = refusal
            return self._verdict(event, payload, ticket, verdict, reason)

        scanned_at = timezone.now()
        if not self._tickets.mark_used(ticket, actor, scanned_at):
            # Another scanner admitted this ticket first.
            current = self._tickets.get_ticket(ticket.id) or ticket
            return self._verdict(event, payload, current, Verdict.DUPLICATE, ALREADY_USED)

        admitted = self._tickets.get_ticket(ticket.id) or ticket
        return self._verdict(event, payload, admitted, Verdict.ACCEPTED, ACCESS_GRANTED, actor)

    @staticmethod
    def _verdict(
        event: Event,
        payload: str,
        ticket: Ticket | None,
        verdict: Verdict,
        reason: str,
        actor: int | None = None,
    ) -> ScanVerdict:
        if verdict is Verdict.ACCEPTED:
            logger.info("Admitted ticket %s for event %s (scanner %s)", ticket.number, event.id, actor)
        else:
            logger.warning("Scan %s for event %s: %s (%s)", payload, event.id, verdict.value, reason)
        if ticket is None:
            return ScanVerdict(verdict=verdict, reason=reason, payload=payload, event_name=event.name)
        return ScanVerdict(
            verdict=verdict,
            reason=reason,
            payload=payload,
            ticket_number=ticket.number,
            ticket_code=ticket.code,
            buyer_name=ticket.buyer.name if ticket.buyer else None,
            sale_type=ticket.sale_type,
            event_name=event.name,
            scanned_at=ticket.scanned_at,
        )
