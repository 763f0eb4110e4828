"""
Subtree synchronization: pull upstream changes in, push local changes out.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Sequence

from ..errors import GitCommandError, SyncFailure
from ..logger import get_logger
from ..providers.base import RemoteRepo
from ..vcs.base import VersionControl
from .monorepo import repo_prefix

log = get_logger(__name__)


@dataclass
class SyncReport:
    operation: str
    succeeded: List[str] = field(default_factory=list)
    failures: List[SyncFailure] = field(default_factory=list)

    @property
    def failed(self) -> List[str]:
        return [failure.repo for failure in self.failures]


class SyncEngine:
    """Runs ``git subtree pull``/``push`` once per repository, without retries."""

    def __init__(self, vcs: VersionControl, root: Path) -> None:
        self.vcs = vcs
        self.root = Path(root)

    def pull(self, selected: Sequence[RemoteRepo]) -> SyncReport:
        return self._run(
            "pull",
            selected,
            lambda repo: self.vcs.pull_subtree(
                self.root, repo.clone_url, repo.default_branch, repo_prefix(repo.name), squash=True
            ),
        )

    def push(self, selected: Sequence[RemoteRepo]) -> SyncReport:
        return self._run(
            "push",
            selected,
            lambda repo: self.vcs.push_subtree(
                self.root, repo.clone_url, repo.default_branch, repo_prefix(repo.name)
            ),
        )

    def _run(
        self,
        operation: str,
        selected: Sequence[RemoteRepo],
        action: Callable[[RemoteRepo], None],
    ) -> SyncReport:
        report = SyncReport(operation=operation)
        for repo in selected:
            log.info("subtree_sync", operation=operation, repo=repo.name)
            try:
                action(repo)
            except GitCommandError as exc:
                log.error(
                    "subtree_sync_failed",
                    operation=operation,
                    repo=repo.name,
                    command=exc.command,
                    stdout=exc.stdout,
                    stderr=exc.stderr,
                )
                report.failures.append(SyncFailure(repo.name, operation, exc))
                continue
            report.succeeded.append(repo.name)
        log.info(
            "subtree_sync_complete",
            operation=operation,
            succeeded=len(report.succeeded),
            failed=len(report.failures),
        )
        return report
