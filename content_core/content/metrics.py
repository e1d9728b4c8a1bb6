"""Prometheus metrics for fetch cycles and page renders."""

from prometheus_client import Counter, Histogram

FETCH_CYCLES_TOTAL = Counter(
    "content_fetch_cycles_total",
    "Total number of fetch cycles",
    labelnames=["outcome"],
)

ITEMS_RESOLVED_TOTAL = Counter(
    "content_items_resolved_total",
    "Total number of items resolved",
    labelnames=["source"],
)

ITEMS_UNRESOLVED_TOTAL = Counter(
    "content_items_unresolved_total",
    "Total number of items no content store could supply",
)

PAGES_RENDERED_TOTAL = Counter(
    "content_pages_rendered_total",
    "Total number of page renders",
    labelnames=["outcome"],
)

RENDER_DURATION_SECONDS = Histogram(
    "content_render_duration_seconds",
    "Time spent building a rendered page",
)
