"""
Probe target registry.

Targets are read once at startup from a YAML file mapping target names to
Gitea connection details::

    production:
      url: https://gitea.example.com
      token: static-token
      tokenEnvName: GITEA_PRODUCTION_TOKEN
      excludeOrgs:
        - archived

When ``tokenEnvName`` names a non-empty environment variable, its value
replaces ``token``. The override is resolved at load time only.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional

import yaml

from shared.logging import get_logger
from shared.errors import ConfigurationError

logger = get_logger("probe.targets")


@dataclass(frozen=True)
class Target:
    """A configured Gitea server."""
    name: str
    url: str
    token: str = ""
    excluded_orgs: FrozenSet[str] = field(default_factory=frozenset)


class TargetRegistry:
    """Read-only mapping of target name to Target."""

    def __init__(self, targets: Mapping[str, Target]):
        self._targets: Dict[str, Target] = dict(targets)

    def get(self, name: str) -> Optional[Target]:
        return self._targets.get(name)

    def names(self) -> List[str]:
        """Configured target names in sorted order."""
        return sorted(self._targets)

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    def __iter__(self) -> Iterator[str]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)


def _resolve_token(name: str, entry: Mapping[str, Any], environ: Mapping[str, str]) -> str:
    token = entry.get("token") or ""
    env_name = entry.get("tokenEnvName")
    if env_name:
        env_token = environ.get(str(env_name), "")
        if env_token:
            logger.info("Using token from environment", target=name, env_var=env_name)
            return env_token
    return str(token)


def _build_target(name: Any, entry: Any, environ: Mapping[str, str]) -> Target:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(
            f"Target {name!r} must be a mapping",
            details={"target": str(name)}
        )

    url = entry.get("url")
    if not isinstance(url, str) or not url.strip():
        raise ConfigurationError(
            f"Target {name!r} has no url",
            details={"target": str(name)}
        )

    exclude = entry.get("excludeOrgs") or []
    if isinstance(exclude, str) or not isinstance(exclude, (list, tuple, set)):
        raise ConfigurationError(
            f"Target {name!r}: excludeOrgs must be a list",
            details={"target": str(name)}
        )

    return Target(
        name=str(name),
        url=url.strip().rstrip("/"),
        token=_resolve_token(str(name), entry, environ),
        excluded_orgs=frozenset(str(org) for org in exclude),
    )


def parse_targets(document: Any, environ: Optional[Mapping[str, str]] = None) -> TargetRegistry:
    """Build a TargetRegistry from an already-decoded YAML document."""
    if environ is None:
        environ = os.environ

    if document is None:
        document = {}
    if not isinstance(document, Mapping):
        raise ConfigurationError("Targets file must contain a mapping of target names")

    targets = {}
    for name, entry in document.items():
        target = _build_target(name, entry, environ)
        targets[target.name] = target
    return TargetRegistry(targets)


def load_targets(path: str, environ: Optional[Mapping[str, str]] = None) -> TargetRegistry:
    """Load targets from a YAML file. Raises ConfigurationError on any problem."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read targets file: {e}",
            details={"path": path}
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Malformed targets file: {e}",
            details={"path": path}
        )

    registry = parse_targets(document, environ)
    logger.info("Targets loaded", path=path, targets=registry.names())
    return registry
