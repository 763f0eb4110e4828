from pathlib import Path

from conftest import make_repo
from repofold.services import SyncEngine


def test_pull_attempts_every_repository_once(monorepo_root: Path, fake_vcs) -> None:
    repos = [make_repo("a"), make_repo("b"), make_repo("c")]
    fake_vcs.sync_failures.add("b")

    report = SyncEngine(fake_vcs, monorepo_root).pull(repos)

    assert report.operation == "pull"
    assert report.succeeded == ["a", "c"]
    assert report.failed == ["b"]
    assert report.failures[0].operation == "pull"
    pulls = fake_vcs.calls_named("pull_subtree")
    assert [call[4] for call in pulls] == ["repos/a", "repos/b", "repos/c"]
    assert all(call[5] is True for call in pulls)


def test_push_has_no_squash_and_no_retry(monorepo_root: Path, fake_vcs) -> None:
    repo = make_repo("tool", branch="trunk")
    fake_vcs.sync_failures.add("tool")

    report = SyncEngine(fake_vcs, monorepo_root).push([repo])

    assert report.failed == ["tool"]
    assert fake_vcs.calls_named("push_subtree") == [
        ("push_subtree", monorepo_root, repo.clone_url, "trunk", "repos/tool")
    ]
