"""
Probe Service package.

Exposes the probe endpoint that queries a configured Gitea server on every
scrape and answers with Prometheus metrics built for that scrape alone.
"""
