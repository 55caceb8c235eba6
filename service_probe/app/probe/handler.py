"""
Probe orchestration.

One probe walks organizations -> members/repositories -> open pull requests
for a single target, sequentially, writing every count into a ProbeMetrics
created for that probe alone.
"""

import time
from typing import Callable, Iterable, List, Optional, Tuple

from prometheus_client import CONTENT_TYPE_LATEST

from shared.config import ServiceConfig
from shared.logging import get_logger, set_target_context
from shared.errors import TargetError
from shared.metrics import MetricsCollector

from ..gitea.client import GiteaClient
from ..gitea.models import Organization, Repository
from ..targets.registry import Target, TargetRegistry
from .metrics import ProbeMetrics

ClientFactory = Callable[[Target], GiteaClient]


def filter_organizations(orgs: Iterable[Organization], excluded: Iterable[str]) -> List[Organization]:
    """Drop every organization whose login name is excluded, keeping order."""
    excluded_names = frozenset(excluded)
    return [org for org in orgs if org.login_name not in excluded_names]


class ProbeHandler:
    """Runs probes against configured Gitea targets."""

    def __init__(
        self,
        targets: TargetRegistry,
        config: Optional[ServiceConfig] = None,
        collector: Optional[MetricsCollector] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.targets = targets
        self.config = config
        self.collector = collector
        self.client_factory = client_factory or self._default_client_factory
        self.logger = get_logger("probe.handler")

    def _default_client_factory(self, target: Target) -> GiteaClient:
        if self.config is None:
            return GiteaClient(target)
        return GiteaClient(
            target,
            timeout=self.config.http_timeout_seconds,
            user_agent=self.config.user_agent,
        )

    def resolve(self, target_name: Optional[str]) -> Target:
        """Look up the requested target or raise TargetError."""
        if not target_name:
            if self.collector:
                self.collector.record_invalid_target()
            raise TargetError("Target parameter missing")

        target = self.targets.get(target_name)
        if target is None:
            if self.collector:
                self.collector.record_invalid_target()
            raise TargetError(f"Invalid target: {target_name}", details={"target": target_name})
        return target

    async def probe(self, target_name: Optional[str]) -> ProbeMetrics:
        """Resolve ``target_name`` and collect a fresh set of metrics for it."""
        target = self.resolve(target_name)
        set_target_context(target.name)

        metrics = ProbeMetrics.create()
        start = time.monotonic()

        async with self.client_factory(target) as client:
            await self._collect(client, target, metrics)
            remote_errors = client.error_count

        metrics.remote_errors.labels(target.name).set(remote_errors)
        duration = max(0.0, time.monotonic() - start)
        metrics.probe_duration.labels(target.name).set(duration)

        self.logger.info(
            "Probe finished",
            target=target.name,
            duration_seconds=round(duration, 3),
            remote_errors=remote_errors
        )
        if self.collector:
            self.collector.record_probe(target.name, "success", remote_errors)
        return metrics

    async def render(self, target_name: Optional[str]) -> Tuple[bytes, str]:
        """Probe and serialize in the Prometheus text exposition format."""
        metrics = await self.probe(target_name)
        return metrics.render(), CONTENT_TYPE_LATEST

    async def _collect(self, client: GiteaClient, target: Target, metrics: ProbeMetrics):
        orgs = filter_organizations(await client.list_organizations(), target.excluded_orgs)
        metrics.organizations.labels(target.name).set(len(orgs))

        for org in orgs:
            org_name = org.login_name

            members = await client.list_organization_members(org_name)
            metrics.organization_members.labels(target.name, org_name).set(len(members))

            repos = await client.list_repositories(org_name)
            metrics.repositories.labels(target.name, org_name).set(len(repos))

            for repo in repos:
                await self._collect_pull_requests(client, target, org_name, repo, metrics)

    async def _collect_pull_requests(
        self,
        client: GiteaClient,
        target: Target,
        org_name: str,
        repo: Repository,
        metrics: ProbeMetrics,
    ):
        pull_requests = await client.list_open_pull_requests(org_name, repo.name)
        metrics.pull_requests.labels(target.name, org_name, repo.name).set(len(pull_requests))
        self.logger.info(
            "Open pull requests",
            organization=org_name,
            repository=repo.name,
            pull_requests=len(pull_requests)
        )

        for pr in pull_requests:
            metrics.pull_request_created_at.labels(
                target.name,
                org_name,
                repo.name,
                str(pr.id),
                pr.poster_username,
            ).set(pr.created_at_seconds)
