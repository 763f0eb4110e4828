"""
Preparation of the monorepo root before any repository is integrated.
"""
from __future__ import annotations

from pathlib import Path

from ..errors import DirtyWorkingTreeError, GitCommandError, InitError
from ..logger import get_logger
from ..vcs.base import Identity, VersionControl

log = get_logger(__name__)

REPOS_DIR = "repos"
PLACEHOLDER_FILE = ".gitkeep"
PLACEHOLDER_CONTENT = "initial"
INITIAL_COMMIT_MESSAGE = "Initial commit"


def repo_prefix(name: str) -> str:
    """Path of an integrated repository relative to the monorepo root."""
    return f"{REPOS_DIR}/{name}"


def ensure_clean(vcs: VersionControl, root: Path) -> None:
    if not vcs.is_clean(root):
        log.error("working_tree_dirty", root=str(root))
        raise DirtyWorkingTreeError(str(root))


class MonorepoInitializer:
    """Creates the root layout and history, then checks the working tree."""

    def __init__(
        self,
        vcs: VersionControl,
        default_branch: str = "main",
        identity: Identity = Identity(),
    ) -> None:
        self.vcs = vcs
        self.default_branch = default_branch
        self.identity = identity

    def init(self, root: Path) -> Path:
        """
        Prepare ``root`` for integration and return its absolute path.

        The steps run in order and the clean-tree check comes last so that
        nothing done here can be blamed for a pre-existing dirty state.

        Raises
        ------
        InitError
            When a directory, git command or placeholder write fails.
        DirtyWorkingTreeError
            When the working tree has uncommitted changes afterwards.
        """
        root = Path(root).resolve()
        try:
            (root / REPOS_DIR).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InitError(f"Error creating monorepo directories under {root}: {exc}") from exc

        try:
            if not self.vcs.is_repo_root(root):
                self._create_history(root)
            else:
                self._ensure_branch(root)
        except GitCommandError as exc:
            log.error(
                "monorepo_git_failed",
                root=str(root),
                command=exc.command,
                stdout=exc.stdout,
                stderr=exc.stderr,
            )
            raise InitError(f"Error initializing monorepo at {root}: {exc}") from exc

        ensure_clean(self.vcs, root)
        log.info("monorepo_ready", root=str(root))
        return root

    def _create_history(self, root: Path) -> None:
        log.info("monorepo_initializing", root=str(root), branch=self.default_branch)
        self.vcs.init(root, self.default_branch, self.identity)
        try:
            (root / PLACEHOLDER_FILE).write_text(PLACEHOLDER_CONTENT, encoding="utf-8")
        except OSError as exc:
            raise InitError(f"Error creating initial file in {root}: {exc}") from exc
        self.vcs.commit(root, INITIAL_COMMIT_MESSAGE, paths=[PLACEHOLDER_FILE])

    def _ensure_branch(self, root: Path) -> None:
        branch = self.vcs.current_branch(root)
        if branch:
            log.debug("monorepo_branch", branch=branch)
            return
        log.info("monorepo_branch_created", branch=self.default_branch)
        self.vcs.checkout_branch(root, self.default_branch)
