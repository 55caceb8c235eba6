"""
Integration tests for the probe flow: targets file -> HTTP probe -> exposition.
"""

import pytest
from fastapi.testclient import TestClient
from prometheus_client.parser import text_string_to_metric_families

from service_probe.app.gitea.client import GiteaClient
from service_probe.app.main import ProbeService
from shared.config import get_config
from shared.test_helpers import FakeGiteaAPI, TestDataFactory


TARGETS_YAML = """
t1:
  url: https://gitea.example.com/
  token: static-token
  tokenEnvName: T1_GITEA_TOKEN
  excludeOrgs: ["secret"]
t2:
  url: https://other.example.com
"""


def _samples(text):
    samples = {}
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            samples[(sample.name, tuple(sorted(sample.labels.items())))] = sample.value
    return samples


class TestProbeFlow:
    """Integration tests for the probe flow."""

    @pytest.fixture
    def api(self):
        """Fake Gitea server for target t1."""
        return FakeGiteaAPI({
            "/orgs": [TestDataFactory.organization("secret"), TestDataFactory.organization("public")],
            "/orgs/public/members": [TestDataFactory.user("alice", 1), TestDataFactory.user("bob", 2)],
            "/orgs/public/repos": [TestDataFactory.repository("r1", "public")],
            "/repos/public/r1/pulls": [
                TestDataFactory.pull_request(5, "2024-01-15T10:00:00Z", "alice"),
                TestDataFactory.pull_request(7, "2024-01-15T11:00:00Z", "bob"),
            ],
        })

    @pytest.fixture
    def client(self, tmp_path, monkeypatch, api):
        """Start the service from a targets file."""
        monkeypatch.setenv("T1_GITEA_TOKEN", "env-token")
        path = tmp_path / "targets.yaml"
        path.write_text(TARGETS_YAML)

        service = ProbeService(get_config("probe", env="test", config_file=str(path)))
        service.handler.client_factory = lambda t: GiteaClient(t, transport=api.transport())
        return TestClient(service.app)

    def test_scrape_scenario(self, client, api):
        """Exclusion, counts and pull request timestamps end to end."""
        response = client.get("/probe", params={"target": "t1"})
        assert response.status_code == 200

        samples = _samples(response.text)
        assert samples[("gitea_organizations_total", (("target", "t1"),))] == 1
        assert samples[("gitea_organization_members_total", (("organization", "public"), ("target", "t1")))] == 2
        assert samples[("gitea_repositories_total", (("organization", "public"), ("target", "t1")))] == 1
        assert samples[("gitea_pull_requests_total", (("organization", "public"), ("repository", "r1"), ("target", "t1")))] == 2

        created = {
            dict(labels)["pull_request_id"]: value
            for (name, labels), value in samples.items()
            if name == "gitea_pull_request_created_at_seconds"
        }
        assert created == {"5": 1705312800, "7": 1705316400}
        assert samples[("gitea_probe_remote_errors", (("target", "t1"),))] == 0
        assert samples[("gitea_probe_duration_seconds", (("target", "t1"),))] >= 0

    def test_env_token_is_sent(self, client, api):
        """The environment token overrides the static one."""
        client.get("/probe", params={"target": "t1"})

        assert api.requests
        assert all(r.headers["Authorization"] == "Bearer env-token" for r in api.requests)
        assert all(r.url.host == "gitea.example.com" for r in api.requests)

    def test_repository_outage(self, client, api):
        """A 500 from the repository listing still scrapes successfully."""
        api.add("/orgs/public/repos", (500, {"message": "internal"}))

        response = client.get("/probe", params={"target": "t1"})

        assert response.status_code == 200
        samples = _samples(response.text)
        assert samples[("gitea_repositories_total", (("organization", "public"), ("target", "t1")))] == 0
        assert samples[("gitea_probe_remote_errors", (("target", "t1"),))] == 1
        assert not any(name == "gitea_pull_requests_total" for name, _ in samples)

    def test_unknown_target(self, client):
        """Unknown targets are rejected with 400."""
        response = client.get("/probe", params={"target": "t3"})
        assert response.status_code == 400
        assert response.text == "Invalid target: t3"

        metrics = client.get("/metrics").text
        assert "invalid_target_probes_total 1.0" in metrics
        assert 'target="t3"' not in metrics
