"""Probe orchestration and per-probe metrics."""
