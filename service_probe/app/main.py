"""
Probe service for the Gitea exporter.

Serves ``GET <probe_path>?target=<name>`` in the Prometheus multi-target
exporter style: every request probes one configured Gitea server and
answers with freshly collected metrics.
"""

import argparse
import sys
from typing import List, Optional

from fastapi import Query, Response

from shared.base_service import BaseService
from shared.config import LOG_LEVELS, ServiceConfig, get_config, parse_listen_address
from shared.errors import ConfigurationError
from shared.logging import configure_logging, get_logger

from .probe.handler import ProbeHandler
from .targets.registry import TargetRegistry, load_targets


class ProbeService(BaseService):
    """Probe service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None, targets: Optional[TargetRegistry] = None, handler: Optional[ProbeHandler] = None):
        config = config or get_config("probe")
        self.targets = targets if targets is not None else load_targets(config.config_file)
        super().__init__("probe", config)

        self.handler = handler or ProbeHandler(self.targets, config=self.config, collector=self.metrics)

        self._setup_probe_routes()

    def _setup_probe_routes(self):
        """Set up probe-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": self.service_name,
                "message": "Gitea probe exporter",
                "probe_path": self.config.probe_path,
                "targets": self.targets.names()
            }

        @self.app.get(self.config.probe_path)
        async def probe(target: Optional[str] = Query(None, description="Configured target name")):
            """Probe one Gitea target."""
            body, content_type = await self.handler.render(target)
            return Response(content=body, media_type=content_type)

    async def _check_dependencies(self):
        """Report configured targets."""
        return {"targets": len(self.targets)}

    def run(self):
        self.logger.info(
            "Starting Gitea probe exporter",
            host=self.config.host,
            port=self.config.port,
            path=self.config.probe_path,
            config_file=self.config.config_file
        )
        super().run()


def create_app(config: Optional[ServiceConfig] = None):
    """Create probe service application."""
    service = ProbeService(config)
    return service.app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Prometheus probe exporter for Gitea servers")
    parser.add_argument("--config", dest="config_file", default=None,
                        help="File path to the targets config (default: config.yaml)")
    parser.add_argument("--server", dest="listen_address", default=None,
                        help="Address the server is listening on (default: :9115)")
    parser.add_argument("--probe", dest="probe_path", default=None,
                        help="Path for the probe (default: /probe)")
    parser.add_argument("--log-level", dest="log_level", default=None,
                        type=str.lower, choices=LOG_LEVELS,
                        help="Log level (default: info)")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServiceConfig:
    overrides = {
        "config_file": args.config_file,
        "probe_path": args.probe_path,
        "log_level": args.log_level,
    }
    if args.listen_address:
        host, port = parse_listen_address(args.listen_address)
        overrides["host"] = host
        overrides["port"] = port
    return get_config("probe", **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = build_config(parse_args(argv))
    except ValueError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        return 2

    configure_logging("probe", config.log_level)
    logger = get_logger("probe")

    try:
        service = ProbeService(config)
    except ConfigurationError as e:
        logger.error("Cannot start exporter", error=e.message, **e.details)
        return 1

    service.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
