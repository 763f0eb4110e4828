"""
Centralized run settings.

Settings are assembled once per invocation from a TOML (or legacy flat JSON)
file plus ``REPOFOLD_*`` environment variables, then passed explicitly to
every component.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore[attr-defined]

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError


class AppSettings(BaseSettings):
    """Project-wide settings loaded from env or configuration files."""

    model_config = SettingsConfigDict(
        env_prefix="REPOFOLD_",
        extra="ignore",
    )

    github_token: Optional[str] = None
    gitlab_token: Optional[str] = None
    github_api_url: str = "https://api.github.com"
    gitlab_api_url: str = "https://gitlab.com/api/v4"
    request_timeout: float = 10.0

    use_subtree: bool = False
    auto_mode: bool = False
    update_mode: bool = False
    push_mode: bool = False
    commit_message: str = "Add selected repos"

    scan_local: bool = False
    base_dir: Optional[Path] = None
    local_scan_output: Path = Path("local_repos.json")

    monorepo_path: Path = Path("monorepo")
    default_branch: str = "main"
    committer_name: str = "Monorepo"
    committer_email: str = "monorepo@example.com"

    cache_path: Path = Path("repo_cache.json")

    git_executable: str = "git"
    git_timeout: float = 600.0

    @property
    def integration_mode(self) -> str:
        return "subtree" if self.use_subtree else "submodule"

    @property
    def effective_git_timeout(self) -> Optional[float]:
        return self.git_timeout if self.git_timeout > 0 else None


_CONFIG_ENV_VAR = "REPOFOLD_CONFIG_PATH"
_DEFAULT_CONFIG_FILES = (Path("repofold.toml"), Path("config.json"))

# TOML section -> {key in section: AppSettings field}
_SECTION_FIELDS: Dict[str, Dict[str, str]] = {
    "providers": {
        "github_token": "github_token",
        "gitlab_token": "gitlab_token",
        "github_api_url": "github_api_url",
        "gitlab_api_url": "gitlab_api_url",
        "request_timeout": "request_timeout",
    },
    "integration": {
        "use_subtree": "use_subtree",
        "auto_mode": "auto_mode",
        "update_mode": "update_mode",
        "push_mode": "push_mode",
        "commit_message": "commit_message",
    },
    "local": {
        "scan": "scan_local",
        "base_dir": "base_dir",
        "output": "local_scan_output",
    },
    "monorepo": {
        "path": "monorepo_path",
        "default_branch": "default_branch",
        "committer_name": "committer_name",
        "committer_email": "committer_email",
    },
    "cache": {
        "path": "cache_path",
    },
    "git": {
        "executable": "git_executable",
        "timeout": "git_timeout",
    },
}

_OPTIONAL_FIELDS = {"github_token", "gitlab_token", "base_dir"}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _candidate_files(config_path: Optional[Path]) -> List[Path]:
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Configuration file not found: {config_path}")
        return [config_path]
    override = os.getenv(_CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        if not path.is_file():
            raise ConfigError(f"Configuration file not found: {path} (from {_CONFIG_ENV_VAR})")
        return [path]
    return [path for path in _DEFAULT_CONFIG_FILES if path.is_file()]


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        else:
            with path.open("rb") as handle:
                data = tomllib.load(handle)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Could not read configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a table/object at top level")
    return data


def _flatten_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Translate grouped TOML sections, or flat JSON keys, into AppSettings kwargs."""
    data: Dict[str, Any] = {}
    known = set(AppSettings.model_fields)

    # Flat layout of the legacy config.json.
    for key, value in raw.items():
        if key in known and not isinstance(value, dict):
            data[key] = value

    for section, mapping in _SECTION_FIELDS.items():
        table = raw.get(section, {})
        if not isinstance(table, dict):
            raise ConfigError(f"Configuration section [{section}] must be a table")
        for key, field_name in mapping.items():
            if key in table:
                data[field_name] = table[key]

    for field_name in _OPTIONAL_FIELDS:
        if field_name in data:
            data[field_name] = _blank_to_none(data[field_name])
    return data


def load_settings(config_path: Optional[Path] = None, **overrides: Any) -> AppSettings:
    """
    Build settings from the first configuration file found plus environment.

    ``overrides`` (typically CLI flags) win over both.
    """
    data: Dict[str, Any] = {}
    for candidate in _candidate_files(config_path):
        data = _flatten_config(_read_file(candidate))
        break
    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return AppSettings(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
