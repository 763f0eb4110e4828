"""
Persistence helpers: the provider cache and the local-scan report.
"""

from .cache import RepositoryCache
from .reports import write_local_scan

__all__ = ["RepositoryCache", "write_local_scan"]
