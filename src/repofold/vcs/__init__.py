"""
Version-control collaborator: the capability protocol and its ``git`` backend.
"""
from .base import Identity, VersionControl
from .git import GitCLI

__all__ = ["GitCLI", "Identity", "VersionControl"]
