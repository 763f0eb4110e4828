"""
Capability interface over the version-control tool.

Every component that touches a repository goes through this protocol so the
workflow can run against ``git`` or against an in-memory double.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence


@dataclass(frozen=True)
class Identity:
    """Committer identity written into repositories created by repofold."""

    name: str = "Monorepo"
    email: str = "monorepo@example.com"


class VersionControl(Protocol):
    """Operations repofold needs from the version-control collaborator.

    Query methods never raise. Mutating methods raise
    :class:`~repofold.errors.GitCommandError` on failure.
    """

    def is_repo(self, path: Path) -> bool:
        """True when ``path`` is inside an active working tree."""
        ...

    def is_repo_root(self, path: Path) -> bool:
        """True when ``path`` is the top level of a working tree."""
        ...

    def current_branch(self, path: Path) -> str:
        ...

    def last_commit(self, path: Path) -> str:
        ...

    def is_clean(self, path: Path) -> bool:
        ...

    def init(self, path: Path, branch: str, identity: Identity) -> None:
        ...

    def checkout_branch(self, path: Path, branch: str) -> None:
        """Create or reset ``branch`` at HEAD and switch to it."""
        ...

    def commit(self, path: Path, message: str, paths: Optional[Sequence[str]] = None) -> None:
        """Commit staged changes, staging ``paths`` first when given."""
        ...

    def add_submodule(self, root: Path, url: str, branch: str, prefix: str) -> None:
        ...

    def add_subtree(self, root: Path, url: str, branch: str, prefix: str, squash: bool = True) -> None:
        ...

    def pull_subtree(self, root: Path, url: str, branch: str, prefix: str, squash: bool = True) -> None:
        ...

    def push_subtree(self, root: Path, url: str, branch: str, prefix: str) -> None:
        ...
