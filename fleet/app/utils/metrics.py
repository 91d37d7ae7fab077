"""Prometheus metrics for tenancy resolution and maintenance policies."""

from prometheus_client import Counter, Histogram

context_resolutions_total = Counter(
    "fleet_context_resolutions_total",
    "Franchise context resolutions by outcome",
    ["outcome"],
)

context_resolution_latency_ms = Histogram(
    "fleet_context_resolution_latency_ms",
    "Franchise context resolution latency in milliseconds",
    ["outcome"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000],
)

policy_rows_updated_total = Counter(
    "fleet_policy_rows_updated_total",
    "Scheduled maintenance rows filled from policy defaults",
)

policy_types_seeded_total = Counter(
    "fleet_policy_types_seeded_total",
    "Maintenance types submitted to policy seeding",
)


class PrometheusTenancyMetrics:
    """Prometheus-based tenancy metrics implementation."""

    def record_resolution(self, outcome: str, latency_ms: float) -> None:
        """Record a context resolution outcome and its latency."""
        context_resolutions_total.labels(outcome=outcome).inc()
        context_resolution_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def inc_rows_updated(self, count: int) -> None:
        """Increment the applied-rows counter."""
        if count:
            policy_rows_updated_total.inc(count)

    def inc_types_seeded(self, count: int) -> None:
        """Increment the seeded-types counter."""
        if count:
            policy_types_seeded_total.inc(count)
