"""
Shared types and HTTP plumbing for hosting-provider fetchers.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol

import requests

from ..errors import FetchError

DEFAULT_TIMEOUT = 10.0
PAGE_SIZE = 100


@dataclass(frozen=True)
class RemoteRepo:
    """Repository advertised by a hosting provider."""

    name: str
    clone_url: str
    default_branch: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RemoteRepo":
        return cls(
            name=str(payload["name"]),
            clone_url=str(payload["clone_url"]),
            default_branch=str(payload.get("default_branch") or ""),
        )


class RepositoryFetcher(Protocol):
    """Pluggable provider client returning normalized repositories."""

    name: str

    def fetch(self) -> List[RemoteRepo]:
        """Return the provider's repositories, or ``[]`` on any failure."""
        ...


class HTTPFetcher:
    """Base class wiring a ``requests`` session with a bounded timeout."""

    name = "provider"

    def __init__(
        self,
        token: Optional[str],
        api_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.token = token or ""
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def headers(self) -> Dict[str, str]:
        return {}

    def get_json_list(self, path: str) -> List[Dict[str, Any]]:
        """GET ``path`` and return its JSON array body, raising FetchError otherwise."""
        url = f"{self.api_url}{path}"
        try:
            response = self.session.get(url, headers=self.headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(self.name, f"request to {url} failed: {exc}") from exc

        if response.status_code != 200:
            raise FetchError(
                self.name,
                f"{url} returned status {response.status_code}: {response.text[:500]}",
                status=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(self.name, f"{url} returned invalid JSON: {exc}") from exc
        if not isinstance(payload, list):
            raise FetchError(self.name, f"{url} returned {type(payload).__name__}, expected a list")
        return [item for item in payload if isinstance(item, dict)]
