"""
Per-probe Gitea metrics.

A ProbeMetrics owns a brand-new CollectorRegistry, so every scrape renders
only the series written during that scrape. Instances must not be reused.
"""

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Gauge, generate_latest

NAMESPACE = "gitea"


@dataclass
class ProbeMetrics:
    """Named gauge handles for one probe."""
    registry: CollectorRegistry
    organizations: Gauge
    organization_members: Gauge
    repositories: Gauge
    pull_requests: Gauge
    pull_request_created_at: Gauge
    remote_errors: Gauge
    probe_duration: Gauge

    @classmethod
    def create(cls) -> "ProbeMetrics":
        registry = CollectorRegistry(auto_describe=True)
        return cls(
            registry=registry,
            organizations=Gauge(
                "organizations_total",
                "Gives the total number of orgs in the gitea instance",
                ["target"],
                namespace=NAMESPACE,
                registry=registry,
            ),
            organization_members=Gauge(
                "organization_members_total",
                "Gives the total number of members in each organization",
                ["target", "organization"],
                namespace=NAMESPACE,
                registry=registry,
            ),
            repositories=Gauge(
                "repositories_total",
                "Gives the total number of repos in the gitea instance per org",
                ["target", "organization"],
                namespace=NAMESPACE,
                registry=registry,
            ),
            pull_requests=Gauge(
                "pull_requests_total",
                "Gives the total number of open pull requests per repository",
                ["target", "organization", "repository"],
                namespace=NAMESPACE,
                registry=registry,
            ),
            pull_request_created_at=Gauge(
                "pull_request_created_at_seconds",
                "Gives the creation time of open pull requests in seconds since epoch",
                ["target", "organization", "repository", "pull_request_id", "poster_username"],
                namespace=NAMESPACE,
                registry=registry,
            ),
            remote_errors=Gauge(
                "probe_remote_errors",
                "Number of Gitea API calls that failed during this probe",
                ["target"],
                namespace=NAMESPACE,
                registry=registry,
            ),
            probe_duration=Gauge(
                "probe_duration_seconds",
                "Time taken by the probe in seconds",
                ["target"],
                namespace=NAMESPACE,
                registry=registry,
            ),
        )

    def render(self) -> bytes:
        return generate_latest(self.registry)
