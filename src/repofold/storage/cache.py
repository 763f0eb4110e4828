"""
Local cache of the repositories advertised by the hosting providers.

The cache is a plain JSON array rewritten wholesale after every fetch. It has
no TTL: it stays authoritative until ``clear`` is called or the file is
removed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Sequence

from ..logger import get_logger
from ..providers.base import RemoteRepo

log = get_logger(__name__)


class RepositoryCache:
    """JSON-backed store for ``RemoteRepo`` lists."""

    def __init__(self, cache_path: Path) -> None:
        self.cache_path = cache_path

    def load(self) -> Optional[List[RemoteRepo]]:
        """Return cached repositories, or ``None`` when there is nothing usable."""
        if not self.cache_path.exists():
            return None
        try:
            data = json.loads(self.cache_path.read_text(encoding="utf-8"))
            repos = [RemoteRepo.from_dict(item) for item in data]
        except (OSError, ValueError, TypeError, KeyError) as exc:
            log.warning("cache_load_failed", path=str(self.cache_path), error=str(exc))
            return None
        if not repos:
            return None
        log.info("cache_loaded", path=str(self.cache_path), count=len(repos))
        return repos

    def save(self, repos: Sequence[RemoteRepo]) -> bool:
        """Persist ``repos``; a failure is logged as a warning and reported as ``False``."""
        payload = [repo.to_dict() for repo in repos]
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            self.cache_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            log.warning("cache_save_failed", path=str(self.cache_path), error=str(exc))
            return False
        log.debug("cache_persisted", count=len(payload))
        return True

    def clear(self) -> bool:
        """Delete the cache file. Returns ``True`` if a file was removed."""
        if not self.cache_path.exists():
            return False
        self.cache_path.unlink()
        log.info("cache_cleared", path=str(self.cache_path))
        return True
