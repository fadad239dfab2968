"""
Prometheus instruments shared by the engine and API layers.

Exposed through the ``/metrics`` ASGI mount in ``resourcehub.api.main``.
"""

from prometheus_client import Counter, Histogram

OVER_ALLOCATION_CHECKS = Counter(
    "resourcehub_over_allocation_checks_total",
    "Single-allocation over-allocation checks performed",
)

OVER_ALLOCATION_WARNINGS = Counter(
    "resourcehub_over_allocation_warnings_total",
    "Over-allocation warnings raised",
    ["severity"],
)

HEATMAP_BUILD_SECONDS = Histogram(
    "resourcehub_heatmap_build_seconds",
    "Time spent aggregating capacity records into a heat map",
    ["granularity"],
)
