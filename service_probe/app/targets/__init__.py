"""Probe target configuration."""
