"""
Local repository discovery.

Walks a base directory and classifies every directory below it. Directories
that are not yet under version control are initialized in place, so a scan
is a side-effecting step and not a read-only listing.
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List

from ..errors import GitCommandError, ScanError
from ..logger import get_logger
from ..vcs.base import Identity, VersionControl

log = get_logger(__name__)

METADATA_DIR = ".git"


@dataclass
class LocalRepoRecord:
    """Directory found under the scanned base directory."""

    path: str
    name: str
    is_git_repo: bool
    is_in_monorepo_subtree: bool
    default_branch: str = ""
    last_commit_hash: str = ""

    @property
    def status(self) -> str:
        if not self.is_git_repo:
            return "Not a Git repo"
        if self.is_in_monorepo_subtree:
            return "In monorepo"
        return f"Git repo (branch: {self.default_branch})"

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class LocalScanner:
    """Depth-first classifier for the directories below a base directory."""

    def __init__(
        self,
        vcs: VersionControl,
        default_branch: str = "main",
        identity: Identity = Identity(),
    ) -> None:
        self.vcs = vcs
        self.default_branch = default_branch
        self.identity = identity

    def scan(self, base_dir: Path, monorepo_path: Path) -> List[LocalRepoRecord]:
        base = Path(base_dir)
        if not base.is_dir():
            raise ScanError(f"Base directory is not a directory: {base}")
        monorepo_root = Path(monorepo_path).resolve()
        log.info("local_scan_started", base_dir=str(base), monorepo=str(monorepo_root))

        def _raise(exc: OSError) -> None:
            raise ScanError(f"Error walking {exc.filename}: {exc.strerror or exc}") from exc

        records: List[LocalRepoRecord] = []
        for current, dirnames, _ in os.walk(base, onerror=_raise):
            kept: List[str] = []
            for name in sorted(dirnames):
                child = Path(current) / name
                if self._should_skip(child, monorepo_root):
                    continue
                records.append(self._classify(child, monorepo_root))
                kept.append(name)
            # Prune in place so os.walk only descends into classified directories.
            dirnames[:] = kept

        log.info("local_scan_completed", count=len(records))
        return records

    def _should_skip(self, path: Path, monorepo_root: Path) -> bool:
        if path.is_symlink():
            return True
        if path.resolve() == monorepo_root:
            log.debug("skip_monorepo_root", path=str(path))
            return True
        if path.name == METADATA_DIR and not self.vcs.is_repo(path):
            return True
        return False

    def _classify(self, path: Path, monorepo_root: Path) -> LocalRepoRecord:
        resolved = path.resolve()
        record = LocalRepoRecord(
            path=str(resolved),
            name=path.name,
            is_git_repo=self.vcs.is_repo(path),
            is_in_monorepo_subtree=monorepo_root in resolved.parents,
        )

        if record.is_git_repo:
            record.default_branch = self.vcs.current_branch(path)
            record.last_commit_hash = self.vcs.last_commit(path)
            return record

        try:
            self.vcs.init(path, self.default_branch, self.identity)
        except GitCommandError as exc:
            log.warning("local_init_failed", path=str(path), command=exc.command, stderr=exc.stderr)
            return record

        log.info("local_repo_initialized", path=str(path), branch=self.default_branch)
        record.is_git_repo = True
        record.default_branch = self.default_branch
        return record
