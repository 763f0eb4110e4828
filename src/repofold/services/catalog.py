"""
Source of candidate repositories: the cache when it has data, the providers otherwise.
"""
from __future__ import annotations

from typing import List, Sequence

from ..logger import get_logger
from ..providers.aggregate import fetch_all
from ..providers.base import RemoteRepo, RepositoryFetcher
from ..storage.cache import RepositoryCache

log = get_logger(__name__)


class RepositoryCatalog:
    def __init__(self, cache: RepositoryCache, fetchers: Sequence[RepositoryFetcher]) -> None:
        self.cache = cache
        self.fetchers = list(fetchers)

    def get_repositories(self, refresh: bool = False) -> List[RemoteRepo]:
        """
        Return the candidate repositories.

        A non-empty cache is authoritative unless ``refresh`` is set, in which
        case the providers are queried and the cache rewritten.
        """
        if not refresh:
            cached = self.cache.load()
            if cached:
                return cached
        else:
            log.info("cache_refresh_forced")

        repos = fetch_all(self.fetchers)
        self.cache.save(repos)
        return repos
