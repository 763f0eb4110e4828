"""
Hosting-provider clients normalizing their listings into ``RemoteRepo`` records.
"""
from .aggregate import build_fetchers, fetch_all
from .base import RemoteRepo, RepositoryFetcher
from .github import GitHubFetcher
from .gitlab import GitLabFetcher

__all__ = [
    "GitHubFetcher",
    "GitLabFetcher",
    "RemoteRepo",
    "RepositoryFetcher",
    "build_fetchers",
    "fetch_all",
]
