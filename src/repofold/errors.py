"""
Error taxonomy shared by every repofold component.

Fatal errors (configuration, initialization, dirty tree, final commit) stop
the run. Per-provider and per-repository errors are recovered by the
component that raises them and surface only in reports and logs.
"""
from __future__ import annotations

from typing import Optional, Sequence


class RepofoldError(Exception):
    """Base class for all errors raised by repofold."""


class ConfigError(RepofoldError):
    """Configuration could not be loaded or is inconsistent."""


class ScanError(RepofoldError):
    """The local base directory could not be walked."""


class FetchError(RepofoldError):
    """A provider request failed at the transport or HTTP level."""

    def __init__(self, provider: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status = status


class InitError(RepofoldError):
    """The monorepo root could not be prepared for integration."""


class DirtyWorkingTreeError(InitError):
    """The monorepo working tree has staged or unstaged changes."""

    def __init__(self, root: str) -> None:
        super().__init__(
            f"Working tree at {root} is dirty. Please commit or stash changes before continuing."
        )
        self.root = root


class CommitError(RepofoldError):
    """The commit recording newly integrated repositories failed."""


class GitCommandError(RepofoldError):
    """A git invocation exited with a non-zero status or timed out.

    ``args`` is already redacted and safe to print.
    """

    def __init__(
        self,
        args: Sequence[str],
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = " ".join(args)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        status = "timed out" if returncode is None else f"exited with status {returncode}"
        super().__init__(f"`{self.command}` {status}")


class IntegrationFailure(RepofoldError):
    """A single repository could not be added to the monorepo."""

    def __init__(self, repo: str, cause: GitCommandError) -> None:
        super().__init__(f"{repo}: {cause}")
        self.repo = repo
        self.cause = cause


class SyncFailure(RepofoldError):
    """A subtree pull or push failed for a single repository."""

    def __init__(self, repo: str, operation: str, cause: GitCommandError) -> None:
        super().__init__(f"{operation} {repo}: {cause}")
        self.repo = repo
        self.operation = operation
        self.cause = cause
