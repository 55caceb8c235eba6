"""
Shared utilities for the Gitea probe exporter.

This package aggregates common building blocks consumed by the services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request/target correlation
- metrics: Prometheus self-instrumentation of the exporter process
- errors: Canonical error types and responses
- base_service: FastAPI application scaffolding

Do not import from service_* packages into shared/.
"""
