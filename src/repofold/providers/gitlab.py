"""
GitLab fetcher: projects the token's identity is a member of (first page only).
"""
from __future__ import annotations

from typing import Dict, List

from ..credentials import inject_credential, redact_url
from ..errors import FetchError
from ..logger import get_logger
from .base import PAGE_SIZE, HTTPFetcher, RemoteRepo

log = get_logger(__name__)


class GitLabFetcher(HTTPFetcher):
    name = "gitlab"

    def headers(self) -> Dict[str, str]:
        return {"PRIVATE-TOKEN": self.token}

    def fetch(self) -> List[RemoteRepo]:
        if not self.token:
            log.warning("gitlab_token_missing")
            return []

        try:
            projects = self.get_json_list(f"/projects?membership=true&per_page={PAGE_SIZE}")
        except FetchError as exc:
            log.error("gitlab_api_error", status=exc.status, error=str(exc))
            return []

        log.info("gitlab_projects_found", count=len(projects))
        repos: List[RemoteRepo] = []
        for project in projects:
            name = project.get("name")
            http_url = project.get("http_url_to_repo")
            if not isinstance(name, str) or not isinstance(http_url, str):
                log.warning("gitlab_project_without_http_url", repo=name)
                continue
            clone_url = inject_credential(http_url, self.token)
            branch = project.get("default_branch") or ""
            log.info("gitlab_repo_added", repo=name, branch=branch, url=redact_url(clone_url))
            repos.append(RemoteRepo(name=name, clone_url=clone_url, default_branch=branch))
        return repos
