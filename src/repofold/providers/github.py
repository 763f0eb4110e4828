"""
GitHub fetcher: repositories owned by the token's identity plus those of
every organization it belongs to.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List

from ..errors import FetchError
from ..logger import get_logger
from .base import PAGE_SIZE, HTTPFetcher, RemoteRepo

log = get_logger(__name__)


class GitHubFetcher(HTTPFetcher):
    name = "github"

    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github+json",
        }

    def fetch(self) -> List[RemoteRepo]:
        if not self.token:
            log.warning("github_token_missing")
            return []
        repos = self.fetch_user_repos() + self.fetch_org_repos()
        log.info("github_repos_fetched", count=len(repos))
        return repos

    def fetch_user_repos(self) -> List[RemoteRepo]:
        return self._fetch_repo_list(f"/user/repos?per_page={PAGE_SIZE}")

    def fetch_org_repos(self) -> List[RemoteRepo]:
        try:
            orgs = self.get_json_list("/user/orgs")
        except FetchError as exc:
            log.error("github_orgs_fetch_failed", error=str(exc))
            return []

        repos: List[RemoteRepo] = []
        for org in orgs:
            login = org.get("login")
            if not isinstance(login, str) or not login:
                continue
            repos.extend(self._fetch_repo_list(f"/orgs/{login}/repos?per_page={PAGE_SIZE}"))
        return repos

    def _fetch_repo_list(self, path: str) -> List[RemoteRepo]:
        try:
            payload = self.get_json_list(path)
        except FetchError as exc:
            log.error("github_api_error", path=path, status=exc.status, error=str(exc))
            return []
        return list(_normalize(payload))


def _normalize(payload: Iterable[Dict[str, Any]]) -> Iterable[RemoteRepo]:
    for item in payload:
        name, url = item.get("name"), item.get("ssh_url")
        if not isinstance(name, str) or not isinstance(url, str):
            log.warning("github_repo_incomplete", repo=name)
            continue
        yield RemoteRepo(name=name, clone_url=url, default_branch=item.get("default_branch") or "")
