"""
Unit tests for the target registry.
"""

import pytest

from service_probe.app.targets.registry import Target, TargetRegistry, load_targets, parse_targets
from shared.errors import ConfigurationError


CONFIG_YAML = """
production:
  url: https://gitea.example.com/
  token: static-token
  tokenEnvName: GITEA_PRODUCTION_TOKEN
  excludeOrgs:
    - secret
    - archived
    - secret
staging:
  url: http://staging.local:3000
"""


class TestLoadTargets:
    """Test cases for loading targets from YAML."""

    @pytest.fixture
    def config_file(self, tmp_path):
        """Write a targets file."""
        path = tmp_path / "config.yaml"
        path.write_text(CONFIG_YAML)
        return str(path)

    def test_load_targets(self, config_file):
        """Targets are keyed by name with normalized fields."""
        registry = load_targets(config_file, environ={})

        assert len(registry) == 2
        assert "production" in registry
        assert registry.names() == ["production", "staging"]

        production = registry.get("production")
        assert production == Target(
            name="production",
            url="https://gitea.example.com",
            token="static-token",
            excluded_orgs=frozenset({"secret", "archived"}),
        )

        staging = registry.get("staging")
        assert staging.token == ""
        assert staging.excluded_orgs == frozenset()

    def test_unknown_target(self, config_file):
        """Unknown names resolve to None."""
        registry = load_targets(config_file, environ={})
        assert registry.get("missing") is None
        assert "missing" not in registry

    def test_names_sorted_regardless_of_insertion_order(self):
        """Target names come back as a sorted list."""
        registry = TargetRegistry({
            "zeta": Target(name="zeta", url="https://z.example.com"),
            "alpha": Target(name="alpha", url="https://a.example.com"),
        })
        assert registry.names() == ["alpha", "zeta"]
        assert TargetRegistry({}).names() == []

    def test_env_token_overrides_static_token(self, config_file):
        """A non-empty token environment variable wins."""
        registry = load_targets(config_file, environ={"GITEA_PRODUCTION_TOKEN": "env-token"})
        assert registry.get("production").token == "env-token"

    def test_empty_env_token_keeps_static_token(self, config_file):
        """An empty environment variable is ignored."""
        registry = load_targets(config_file, environ={"GITEA_PRODUCTION_TOKEN": ""})
        assert registry.get("production").token == "static-token"

    def test_env_override_uses_process_environment(self, config_file, monkeypatch):
        """Without an explicit mapping the process environment is consulted."""
        monkeypatch.setenv("GITEA_PRODUCTION_TOKEN", "from-os")
        registry = load_targets(config_file)
        assert registry.get("production").token == "from-os"

    def test_missing_file(self, tmp_path):
        """A missing file is a configuration error."""
        with pytest.raises(ConfigurationError) as excinfo:
            load_targets(str(tmp_path / "absent.yaml"))
        assert excinfo.value.details["path"].endswith("absent.yaml")

    def test_malformed_yaml(self, tmp_path):
        """Invalid YAML is a configuration error."""
        path = tmp_path / "config.yaml"
        path.write_text("production: [unclosed")
        with pytest.raises(ConfigurationError):
            load_targets(str(path))

    def test_empty_file(self, tmp_path):
        """An empty file yields no targets."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert len(load_targets(str(path))) == 0


class TestParseTargets:
    """Test cases for validating decoded documents."""

    def test_document_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            parse_targets(["production"], environ={})

    def test_entry_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            parse_targets({"production": "https://gitea.example.com"}, environ={})

    def test_url_required(self):
        with pytest.raises(ConfigurationError) as excinfo:
            parse_targets({"production": {"token": "x"}}, environ={})
        assert excinfo.value.details == {"target": "production"}

    def test_exclude_orgs_must_be_list(self):
        with pytest.raises(ConfigurationError):
            parse_targets({"production": {"url": "http://x", "excludeOrgs": "secret"}}, environ={})


class TestTarget:
    """Test cases for Target."""

    def test_registry_iterates_names(self):
        registry = TargetRegistry({"a": Target("a", "http://a"), "b": Target("b", "http://b")})
        assert sorted(registry) == ["a", "b"]
