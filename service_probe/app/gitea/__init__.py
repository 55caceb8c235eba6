"""Gitea REST API client and record models."""
