"""
Integration of selected repositories into the monorepo.

Each repository is added independently: one failing add never stops the
batch. Failures get exactly one retry after the first pass, and everything
that made it in is recorded by a single commit.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..credentials import redact_url
from ..errors import CommitError, GitCommandError, IntegrationFailure
from ..logger import get_logger
from ..providers.base import RemoteRepo
from ..vcs.base import VersionControl
from .monorepo import REPOS_DIR, ensure_clean, repo_prefix

log = get_logger(__name__)

ALREADY_EXISTS = "already exists"


class IntegrationMode(str, enum.Enum):
    SUBMODULE = "submodule"
    SUBTREE = "subtree"


class OutcomeStatus(str, enum.Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class IntegrationOutcome:
    repo: RemoteRepo
    status: OutcomeStatus
    reason: str = ""
    failure: Optional[IntegrationFailure] = None

    @classmethod
    def skipped(cls, repo: RemoteRepo, reason: str) -> "IntegrationOutcome":
        return cls(repo=repo, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def succeeded(cls, repo: RemoteRepo) -> "IntegrationOutcome":
        return cls(repo=repo, status=OutcomeStatus.SUCCEEDED)

    @classmethod
    def failed(cls, repo: RemoteRepo, failure: IntegrationFailure) -> "IntegrationOutcome":
        return cls(repo=repo, status=OutcomeStatus.FAILED, reason=str(failure.cause), failure=failure)


@dataclass
class IntegrationReport:
    successes: List[RemoteRepo] = field(default_factory=list)
    failures: List[IntegrationOutcome] = field(default_factory=list)
    skipped: List[IntegrationOutcome] = field(default_factory=list)
    committed: bool = False

    @property
    def failed_names(self) -> List[str]:
        return [outcome.repo.name for outcome in self.failures]


class Integrator:
    """Adds repositories under ``{root}/repos`` as submodules or subtrees."""

    def __init__(
        self,
        vcs: VersionControl,
        root: Path,
        mode: IntegrationMode = IntegrationMode.SUBMODULE,
        commit_message: str = "Add selected repos",
        on_outcome: Optional[Callable[[IntegrationOutcome], None]] = None,
    ) -> None:
        self.vcs = vcs
        self.root = Path(root)
        self.mode = IntegrationMode(mode)
        self.commit_message = commit_message
        self.on_outcome = on_outcome

    def target(self, repo: RemoteRepo) -> Path:
        return self.root / REPOS_DIR / repo.name

    def integrate(self, selected: Sequence[RemoteRepo]) -> IntegrationReport:
        """
        Add every repository in ``selected``, in order, then commit once.

        Raises
        ------
        DirtyWorkingTreeError
            If the working tree is dirty before the first add.
        CommitError
            If the final commit fails.
        """
        ensure_clean(self.vcs, self.root)
        report = IntegrationReport()

        failed: List[IntegrationOutcome] = []
        for repo in selected:
            outcome = self._attempt(repo)
            self._record(report, outcome, failed)

        if failed:
            log.info("retrying_failed_repositories", repos=[o.repo.name for o in failed])
            for previous in failed:
                if self.target(previous.repo).exists():
                    # partially added; retrying would only hit "already exists"
                    report.failures.append(previous)
                    continue
                outcome = self._attempt(previous.repo)
                self._record(report, outcome, report.failures)

        self._commit(report)
        return report

    def _record(
        self,
        report: IntegrationReport,
        outcome: IntegrationOutcome,
        failed: List[IntegrationOutcome],
    ) -> None:
        if outcome.status is OutcomeStatus.SUCCEEDED:
            report.successes.append(outcome.repo)
        elif outcome.status is OutcomeStatus.SKIPPED:
            report.skipped.append(outcome)
        else:
            failed.append(outcome)
        if self.on_outcome:
            self.on_outcome(outcome)

    def _attempt(self, repo: RemoteRepo) -> IntegrationOutcome:
        if self.target(repo).exists():
            log.info("repository_skipped", repo=repo.name, reason=ALREADY_EXISTS)
            return IntegrationOutcome.skipped(repo, ALREADY_EXISTS)

        prefix = repo_prefix(repo.name)
        log.info(
            "repository_adding",
            repo=repo.name,
            mode=self.mode.value,
            url=redact_url(repo.clone_url),
        )
        try:
            if self.mode is IntegrationMode.SUBTREE:
                self.vcs.add_subtree(self.root, repo.clone_url, repo.default_branch, prefix, squash=True)
            else:
                self.vcs.add_submodule(self.root, repo.clone_url, repo.default_branch, prefix)
        except GitCommandError as exc:
            log.error(
                "repository_add_failed",
                repo=repo.name,
                command=exc.command,
                returncode=exc.returncode,
                stdout=exc.stdout,
                stderr=exc.stderr,
            )
            return IntegrationOutcome.failed(repo, IntegrationFailure(repo.name, exc))

        log.info("repository_added", repo=repo.name)
        return IntegrationOutcome.succeeded(repo)

    def _commit(self, report: IntegrationReport) -> None:
        if not report.successes:
            log.info("no_repositories_added")
            return
        if self.vcs.is_clean(self.root):
            # subtree adds record their own commits
            log.info("nothing_to_commit", repos=[repo.name for repo in report.successes])
            return
        try:
            self.vcs.commit(self.root, self.commit_message)
        except GitCommandError as exc:
            log.error("commit_failed", command=exc.command, stdout=exc.stdout, stderr=exc.stderr)
            raise CommitError(f"Error committing added repositories: {exc}") from exc
        report.committed = True
        log.info("repositories_committed", repos=[repo.name for repo in report.successes])
