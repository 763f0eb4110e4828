"""
Parallel fan-out over the configured provider fetchers.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

import requests

from ..logger import get_logger
from ..settings import AppSettings
from .base import RemoteRepo, RepositoryFetcher
from .github import GitHubFetcher
from .gitlab import GitLabFetcher

log = get_logger(__name__)


def build_fetchers(
    settings: AppSettings,
    session: Optional[requests.Session] = None,
) -> List[RepositoryFetcher]:
    """Instantiate one fetcher per supported provider, GitHub first."""
    return [
        GitHubFetcher(
            settings.github_token,
            settings.github_api_url,
            timeout=settings.request_timeout,
            session=session,
        ),
        GitLabFetcher(
            settings.gitlab_token,
            settings.gitlab_api_url,
            timeout=settings.request_timeout,
            session=session,
        ),
    ]


def _safe_fetch(fetcher: RepositoryFetcher) -> List[RemoteRepo]:
    try:
        return list(fetcher.fetch())
    except Exception as exc:
        log.error("provider_fetch_crashed", provider=fetcher.name, error=str(exc), exc_info=True)
        return []


def fetch_all(fetchers: Sequence[RepositoryFetcher]) -> List[RemoteRepo]:
    """
    Run every fetcher on its own thread and concatenate results in fetcher order.

    A failing provider contributes an empty list; the others are unaffected.
    """
    if not fetchers:
        return []
    log.info("fetching_remote_repositories", providers=[f.name for f in fetchers])
    with ThreadPoolExecutor(max_workers=len(fetchers), thread_name_prefix="fetch") as executor:
        results = list(executor.map(_safe_fetch, fetchers))

    repos: List[RemoteRepo] = []
    for fetcher, found in zip(fetchers, results):
        log.info("provider_fetched", provider=fetcher.name, count=len(found))
        repos.extend(found)
    return repos
