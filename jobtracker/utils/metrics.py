"""Prometheus metrics exported on /metrics."""

from prometheus_client import Counter, Gauge

EVENTS_PUBLISHED = Counter(
    "jobtracker_events_published_total",
    "Change events published to live observers",
    ["event_type"],
)

OBSERVERS_DROPPED = Counter(
    "jobtracker_observers_dropped_total",
    "Live observers dropped after a failed or slow delivery",
)

LIVE_OBSERVERS = Gauge(
    "jobtracker_live_observers",
    "Currently registered live observers",
)

SYNC_ADMITTED = Counter(
    "jobtracker_sync_admitted_total",
    "Client records admitted into the store by sync",
)
