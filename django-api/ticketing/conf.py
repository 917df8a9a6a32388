"""App settings, read from ``settings.TICKETING`` with defaults."""

from django.conf import settings

DEFAULTS = {
    "INGEST_BATCH_SIZE": 100,
    "STORE_TIMEOUT_MS": 5000,
    "STATS_CACHE_TTL": 120,
    "EVENTS_CACHE_TTL": 300,
}


def get_setting(name: str):
    overrides = getattr(settings, "TICKETING", {})
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
