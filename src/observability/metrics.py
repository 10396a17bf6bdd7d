"""
Prometheus metrics for the feed service.

Defines and exposes metrics for:
- Feed requests and whole-feed cache outcomes
- Per-channel cache hits and misses
- Upstream platform calls, errors and latency
- Twitch token exchanges

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


def _label(platform) -> str:
    return getattr(platform, "value", platform)


class MetricsCollector:
    """
    Prometheus metrics collector for the stream-feed service.

    Usage:
        metrics = MetricsCollector()
        metrics.start_server()

        metrics.record_feed_request(cache_hit=True)
        metrics.record_upstream_call("youtube", "success", 0.21)
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """Initialize Prometheus metrics."""
        registry = registry or REGISTRY

        self.feed_requests = Counter(
            "stream_feed_requests_total",
            "Feed requests by whole-feed cache outcome",
            ["cache"],  # cache: hit, miss
            registry=registry,
        )

        self.feed_build_latency = Histogram(
            "stream_feed_build_seconds",
            "Time to rebuild a feed on whole-feed cache miss",
            buckets=LATENCY_BUCKETS,
            registry=registry,
        )

        self.feed_errors = Counter(
            "stream_feed_source_errors_total",
            "Sources that contributed an error entry to a feed",
            ["platform"],
            registry=registry,
        )

        self.channel_cache = Counter(
            "stream_feed_channel_cache_total",
            "Per-channel cache lookups",
            ["platform", "result"],  # result: hit, miss
            registry=registry,
        )

        self.upstream_calls = Counter(
            "stream_feed_upstream_calls_total",
            "Adapter calls to upstream platforms",
            ["platform", "outcome"],  # outcome: success, error
            registry=registry,
        )

        self.upstream_latency = Histogram(
            "stream_feed_upstream_seconds",
            "Adapter call latency per platform",
            ["platform"],
            buckets=LATENCY_BUCKETS,
            registry=registry,
        )

        self.token_exchanges = Counter(
            "stream_feed_token_exchanges_total",
            "Twitch client-credentials exchanges",
            ["outcome"],
            registry=registry,
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to listen on (defaults to settings.metrics_port)
        """
        port = port or get_settings().metrics_port
        start_http_server(port)
        logger.info(f"Metrics server started on port {port}")

    def record_feed_request(self, cache_hit: bool) -> None:
        self.feed_requests.labels(cache="hit" if cache_hit else "miss").inc()

    def record_feed_build(self, latency: float) -> None:
        self.feed_build_latency.observe(latency)

    def record_feed_error(self, platform) -> None:
        self.feed_errors.labels(platform=_label(platform)).inc()

    def record_channel_cache(self, platform, hit: bool) -> None:
        self.channel_cache.labels(
            platform=_label(platform), result="hit" if hit else "miss"
        ).inc()

    def record_upstream_call(
        self,
        platform,
        outcome: str,
        latency: float | None = None,
    ) -> None:
        """
        Record one adapter call.

        Args:
            platform: Upstream platform
            outcome: "success" or "error"
            latency: Call duration in seconds
        """
        label = _label(platform)
        self.upstream_calls.labels(platform=label, outcome=outcome).inc()
        if latency is not None:
            self.upstream_latency.labels(platform=label).observe(latency)

    def record_token_exchange(self, outcome: str) -> None:
        self.token_exchanges.labels(outcome=outcome).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
