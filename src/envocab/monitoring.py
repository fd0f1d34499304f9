"""Monitoring configuration for the reviewer."""
from prometheus_client import Counter, Gauge, start_http_server

# Review metrics
reviews_graded = Counter(
    "envocab_reviews_graded_total",
    "Total number of graded reviews",
    ["outcome"],
)

review_sessions = Counter(
    "envocab_review_sessions_total",
    "Total number of review sessions started",
)

requeued_words = Counter(
    "envocab_requeued_words_total",
    "Total number of forgotten words appended back to the session queue",
)

queue_remaining = Gauge(
    "envocab_queue_remaining",
    "Number of words left in the current review session",
)

# Persistence metrics
snapshot_saves = Counter(
    "envocab_snapshot_saves_total",
    "Total number of snapshot save attempts",
    ["result"],
)

snapshot_imports = Counter(
    "envocab_snapshot_imports_total",
    "Total number of snapshot import attempts",
    ["result"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
