"""Django signals for cache invalidation.

Model saves and deletes are covered by post_save/post_delete. Stores send
``ledger_changed`` after queryset-level writes (bulk inserts, conditional
status updates) that bypass model signals. Invalidation runs on commit so a
reader cannot re-cache data from a transaction that later rolls back.
"""

from functools import partial

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from ticketing.cache import invalidate_event, invalidate_stats
from ticketing.models import Event, Sale, Ticket

# Sent with ``event_id`` whenever tickets or sales of that event change.
ledger_changed = Signal()


def _invalidate_ledger(event_id: object | None) -> None:
    if event_id is not None:
        invalidate_event(event_id)
    invalidate_stats(event_id)


@receiver(ledger_changed)
def invalidate_after_ledger_write(sender, event_id, **kwargs):
    """Invalidate event and stats caches after a store-level ledger write."""
    transaction.on_commit(partial(_invalidate_ledger, event_id))


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    transaction.on_commit(partial(invalidate_event, instance.pk))


@receiver([post_save, post_delete], sender=Ticket)
def invalidate_ticket_cache(sender, instance, **kwargs):
    """Invalidate caches when a ticket is saved or deleted."""
    transaction.on_commit(partial(_invalidate_ledger, instance.event_id))


@receiver([post_save, post_delete], sender=Sale)
def invalidate_sale_cache(sender, instance, **kwargs):
    """Invalidate stats when a sale is saved or deleted."""
    event_id = (
        Ticket.objects.filter(pk=instance.ticket_id).values_list("event_id", flat=True).first()
    )
    transaction.on_commit(partial(invalidate_stats, event_id))
