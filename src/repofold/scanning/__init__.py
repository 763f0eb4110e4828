"""
Filesystem discovery of local repositories.
"""
from .scanner import LocalRepoRecord, LocalScanner

__all__ = ["LocalRepoRecord", "LocalScanner"]
