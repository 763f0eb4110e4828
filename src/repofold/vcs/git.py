"""
``git`` command-line implementation of the version-control capability.
"""
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from ..credentials import redact_args, redact_text
from ..errors import GitCommandError
from ..logger import get_logger
from .base import Identity

log = get_logger(__name__)


class GitCLI:
    """Shells out to ``git`` with captured output and a fixed working directory."""

    def __init__(self, executable: str = "git", timeout: Optional[float] = 600.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def _run(self, cwd: Path, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        command: List[str] = [self.executable, *args]
        display = redact_args(command)
        log.debug("git_command", cwd=str(cwd), command=" ".join(display))
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            # not chained: TimeoutExpired keeps the unredacted argv
            raise GitCommandError(
                display, None, redact_text(_as_text(exc.stdout)), redact_text(_as_text(exc.stderr))
            ) from None
        except OSError as exc:
            raise GitCommandError(display, -1, "", redact_text(str(exc))) from exc
        if check and result.returncode != 0:
            raise GitCommandError(
                display, result.returncode, redact_text(result.stdout), redact_text(result.stderr)
            )
        return result

    def _query(self, cwd: Path, *args: str) -> Optional[str]:
        try:
            result = self._run(cwd, *args)
        except GitCommandError:
            return None
        return result.stdout.strip()

    # Queries -----------------------------------------------------------------

    def is_repo(self, path: Path) -> bool:
        return self._query(path, "rev-parse", "--is-inside-work-tree") == "true"

    def is_repo_root(self, path: Path) -> bool:
        toplevel = self._query(path, "rev-parse", "--show-toplevel")
        if not toplevel:
            return False
        return Path(toplevel).resolve() == path.resolve()

    def current_branch(self, path: Path) -> str:
        return self._query(path, "branch", "--show-current") or ""

    def last_commit(self, path: Path) -> str:
        return self._query(path, "rev-parse", "HEAD") or ""

    def is_clean(self, path: Path) -> bool:
        status = self._query(path, "status", "--porcelain")
        return status == ""

    # Mutations ---------------------------------------------------------------

    def init(self, path: Path, branch: str, identity: Identity) -> None:
        self._run(path, "init", "-b", branch)
        self._run(path, "config", "user.email", identity.email)
        self._run(path, "config", "user.name", identity.name)

    def checkout_branch(self, path: Path, branch: str) -> None:
        self._run(path, "checkout", "-B", branch)

    def commit(self, path: Path, message: str, paths: Optional[Sequence[str]] = None) -> None:
        if paths:
            self._run(path, "add", "--", *paths)
        self._run(path, "commit", "-m", message)

    def add_submodule(self, root: Path, url: str, branch: str, prefix: str) -> None:
        self._run(root, "submodule", "add", "-b", branch, url, prefix)

    def add_subtree(self, root: Path, url: str, branch: str, prefix: str, squash: bool = True) -> None:
        args = ["subtree", "add", "--prefix", prefix, url, branch]
        if squash:
            args.append("--squash")
        self._run(root, *args)

    def pull_subtree(self, root: Path, url: str, branch: str, prefix: str, squash: bool = True) -> None:
        args = ["subtree", "pull", "--prefix", prefix, url, branch]
        if squash:
            args.append("--squash")
        self._run(root, *args)

    def push_subtree(self, root: Path, url: str, branch: str, prefix: str) -> None:
        self._run(root, "subtree", "push", "--prefix", prefix, url, branch)


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)
