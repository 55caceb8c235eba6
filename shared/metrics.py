"""
Shared self-instrumentation for the Gitea probe exporter.

These metrics describe the exporter process itself (HTTP traffic, probe
outcomes) and live in a registry owned by the service. They are never mixed
into the per-probe registries that carry Gitea data.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest
from typing import Dict, Any, Optional


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None, version: str = "1.0.0"):
        self.service_name = service_name
        self.version = version
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
        self._metrics["service_info"] = Info(
            "service",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": self.version
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        # Probe metrics
        self._metrics["probes_total"] = Counter(
            "probes_total",
            "Total probe requests of configured targets by result",
            ["target", "result"],
            registry=self.registry
        )

        # Caller-supplied names are not used as labels
        self._metrics["invalid_target_probes_total"] = Counter(
            "invalid_target_probes_total",
            "Total probe requests rejected for a missing or unknown target",
            registry=self.registry
        )

        self._metrics["probe_remote_errors_total"] = Counter(
            "probe_remote_errors_total",
            "Total failed Gitea API calls across all probes",
            ["target"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_probe(self, target: str, result: str, remote_errors: int = 0):
        """Record the outcome of one probe."""
        self._metrics["probes_total"].labels(target=target, result=result).inc()
        if remote_errors:
            self._metrics["probe_remote_errors_total"].labels(target=target).inc(remote_errors)

    def record_invalid_target(self):
        """Record a probe rejected before any target was resolved."""
        self._metrics["invalid_target_probes_total"].inc()

    def render(self) -> bytes:
        """Render this collector's registry in the text exposition format."""
        return generate_latest(self.registry)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
