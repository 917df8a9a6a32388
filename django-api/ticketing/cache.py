"""Cache keys for API responses and their invalidation."""

from django.core.cache import cache

EVENTS_LIST_KEY = "events:list"
STATS_ALL_KEY = "stats:all"


def event_key(event_id: object) -> str:
    return f"events:{event_id}"


def stats_key(event_id: object | None = None) -> str:
    if event_id is None:
        return STATS_ALL_KEY
    return f"stats:{event_id}"


def invalidate_event(event_id: object) -> None:
    cache.delete_many([EVENTS_LIST_KEY, event_key(event_id)])


def invalidate_stats(event_id: object | None = None) -> None:
    keys = [STATS_ALL_KEY]
    if event_id is not None:
        keys.append(stats_key(event_id))
    cache.delete_many(keys)
