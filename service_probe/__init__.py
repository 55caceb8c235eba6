"""
Gitea probe exporter service.
"""
