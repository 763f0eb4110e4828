from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from repofold.errors import GitCommandError
from repofold.providers.base import RemoteRepo
from repofold.settings import AppSettings
from repofold.vcs.base import Identity


@dataclass
class FakeRepo:
    branch: str = "main"
    commits: List[str] = field(default_factory=list)
    staged: Set[str] = field(default_factory=set)
    dirty: bool = False


class FakeVersionControl:
    """In-memory stand-in for ``GitCLI`` operating on real temporary directories."""

    def __init__(self) -> None:
        self.repos: Dict[Path, FakeRepo] = {}
        self.calls: List[Tuple] = []
        self.commit_log: List[Tuple[str, List[str]]] = []
        self.add_failures: Dict[str, int] = {}
        self.sync_failures: Set[str] = set()
        self.init_failures: Set[Path] = set()
        self.fail_commit = False
        self.create_on_failure = False

    # helpers ---------------------------------------------------------------

    def add_repo(self, path: Path, branch: str = "main", commit: str = "") -> FakeRepo:
        path.mkdir(parents=True, exist_ok=True)
        (path / ".git").mkdir(exist_ok=True)
        repo = FakeRepo(branch=branch, commits=[commit] if commit else [])
        self.repos[path.resolve()] = repo
        return repo

    def repo(self, path: Path) -> FakeRepo:
        return self.repos[path.resolve()]

    def calls_named(self, name: str) -> List[Tuple]:
        return [call for call in self.calls if call[0] == name]

    def _find(self, path: Path) -> Optional[FakeRepo]:
        resolved = path.resolve()
        if ".git" in resolved.parts:
            return None
        for candidate in (resolved, *resolved.parents):
            if candidate in self.repos:
                return self.repos[candidate]
        return None

    def _error(self, *args: str, stderr: str = "fatal: simulated failure") -> GitCommandError:
        return GitCommandError(["git", *args], 128, "", stderr)

    # queries ---------------------------------------------------------------

    def is_repo(self, path: Path) -> bool:
        return self._find(path) is not None

    def is_repo_root(self, path: Path) -> bool:
        return path.resolve() in self.repos

    def current_branch(self, path: Path) -> str:
        repo = self._find(path)
        return repo.branch if repo else ""

    def last_commit(self, path: Path) -> str:
        repo = self._find(path)
        return repo.commits[-1] if repo and repo.commits else ""

    def is_clean(self, path: Path) -> bool:
        repo = self._find(path)
        return repo is not None and not repo.staged and not repo.dirty

    # mutations -------------------------------------------------------------

    def init(self, path: Path, branch: str, identity: Identity) -> None:
        self.calls.append(("init", path.resolve(), branch, identity))
        if path.resolve() in self.init_failures:
            raise self._error("init", "-b", branch)
        (path / ".git").mkdir(exist_ok=True)
        self.repos[path.resolve()] = FakeRepo(branch=branch)

    def checkout_branch(self, path: Path, branch: str) -> None:
        self.calls.append(("checkout_branch", path.resolve(), branch))
        self.repo(path).branch = branch

    def commit(self, path: Path, message: str, paths: Optional[Sequence[str]] = None) -> None:
        self.calls.append(("commit", path.resolve(), message, list(paths or [])))
        repo = self.repo(path)
        if paths:
            repo.staged.update(paths)
        if self.fail_commit or not repo.staged:
            raise self._error("commit", "-m", message, stderr="nothing to commit")
        self.commit_log.append((message, sorted(repo.staged)))
        repo.commits.append(f"{len(repo.commits) + 1:040x}")
        repo.staged.clear()

    def _add(self, kind: str, root: Path, url: str, branch: str, prefix: str) -> str:
        name = prefix.rsplit("/", 1)[-1]
        if self.add_failures.get(name, 0) > 0:
            self.add_failures[name] -= 1
            if self.create_on_failure:
                (root / prefix).mkdir(parents=True, exist_ok=True)
            raise self._error(kind, "add", url, stderr=f"fatal: could not read from {name}")
        (root / prefix).mkdir(parents=True, exist_ok=True)
        return name

    def add_submodule(self, root: Path, url: str, branch: str, prefix: str) -> None:
        self.calls.append(("add_submodule", root.resolve(), url, branch, prefix))
        self._add("submodule", root, url, branch, prefix)
        self.repo(root).staged.update({".gitmodules", prefix})

    def add_subtree(self, root: Path, url: str, branch: str, prefix: str, squash: bool = True) -> None:
        self.calls.append(("add_subtree", root.resolve(), url, branch, prefix, squash))
        name = self._add("subtree", root, url, branch, prefix)
        repo = self.repo(root)
        repo.commits.append(f"subtree-{name}")

    def pull_subtree(self, root: Path, url: str, branch: str, prefix: str, squash: bool = True) -> None:
        self.calls.append(("pull_subtree", root.resolve(), url, branch, prefix, squash))
        if prefix.rsplit("/", 1)[-1] in self.sync_failures:
            raise self._error("subtree", "pull", "--prefix", prefix, url, branch)

    def push_subtree(self, root: Path, url: str, branch: str, prefix: str) -> None:
        self.calls.append(("push_subtree", root.resolve(), url, branch, prefix))
        if prefix.rsplit("/", 1)[-1] in self.sync_failures:
            raise self._error("subtree", "push", "--prefix", prefix, url, branch)


class StubFetcher:
    def __init__(self, name: str, repos: Sequence[RemoteRepo] = (), error: Optional[Exception] = None) -> None:
        self.name = name
        self.repos = list(repos)
        self.error = error
        self.calls = 0

    def fetch(self) -> List[RemoteRepo]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.repos)


def make_repo(name: str, branch: str = "main") -> RemoteRepo:
    return RemoteRepo(name=name, clone_url=f"git@github.com:octo/{name}.git", default_branch=branch)


@pytest.fixture
def fake_vcs() -> FakeVersionControl:
    return FakeVersionControl()


@pytest.fixture
def monorepo_root(tmp_path: Path, fake_vcs: FakeVersionControl) -> Path:
    root = tmp_path / "monorepo"
    fake_vcs.add_repo(root)
    (root / "repos").mkdir()
    return root.resolve()


@pytest.fixture
def app_settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        monorepo_path=tmp_path / "monorepo",
        cache_path=tmp_path / "repo_cache.json",
        local_scan_output=tmp_path / "local_repos.json",
        auto_mode=True,
    )
