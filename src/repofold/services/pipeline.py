"""
End-to-end run: local scan, fetch, selection, initialization, integration, sync.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..errors import ConfigError
from ..logger import get_logger
from ..providers.aggregate import build_fetchers
from ..providers.base import RemoteRepo, RepositoryFetcher
from ..scanning import LocalRepoRecord, LocalScanner
from ..selection import SelectionStrategy, select
from ..settings import AppSettings
from ..storage import RepositoryCache, write_local_scan
from ..vcs import GitCLI, Identity, VersionControl
from .catalog import RepositoryCatalog
from .integrator import IntegrationMode, IntegrationOutcome, IntegrationReport, Integrator
from .monorepo import MonorepoInitializer
from .sync import SyncEngine, SyncReport

log = get_logger(__name__)


@dataclass
class PipelineCallbacks:
    stage: Optional[Callable[[str], None]] = None
    local_scan: Optional[Callable[[List[LocalRepoRecord]], None]] = None
    choose_mode: Optional[Callable[[IntegrationMode], IntegrationMode]] = None
    outcome: Optional[Callable[[IntegrationOutcome], None]] = None


@dataclass
class RunReport:
    local_repos: List[LocalRepoRecord] = field(default_factory=list)
    candidates: List[RemoteRepo] = field(default_factory=list)
    selected: List[RemoteRepo] = field(default_factory=list)
    mode: IntegrationMode = IntegrationMode.SUBMODULE
    integration: Optional[IntegrationReport] = None
    pull: Optional[SyncReport] = None
    push: Optional[SyncReport] = None


class MonorepoPipeline:
    """Wires the components together from a single ``AppSettings`` value."""

    def __init__(
        self,
        settings: AppSettings,
        vcs: Optional[VersionControl] = None,
        fetchers: Optional[Sequence[RepositoryFetcher]] = None,
        cache: Optional[RepositoryCache] = None,
        selector: Optional[SelectionStrategy] = None,
    ) -> None:
        self.settings = settings
        self.vcs = vcs or GitCLI(settings.git_executable, timeout=settings.effective_git_timeout)
        self.identity = Identity(settings.committer_name, settings.committer_email)
        self.catalog = RepositoryCatalog(
            cache or RepositoryCache(settings.cache_path),
            fetchers if fetchers is not None else build_fetchers(settings),
        )
        self.selector = selector
        self.mode = IntegrationMode(settings.integration_mode)

    @property
    def root(self) -> Path:
        return Path(self.settings.monorepo_path).resolve()

    def scan_local(self) -> List[LocalRepoRecord]:
        """Scan ``base_dir`` and write the report. Raises ScanError or ConfigError."""
        if self.settings.base_dir is None:
            raise ConfigError("'base_dir' and 'monorepo_path' must be set when local scanning is enabled")
        scanner = LocalScanner(self.vcs, self.settings.default_branch, self.identity)
        records = scanner.scan(self.settings.base_dir, self.settings.monorepo_path)
        write_local_scan(records, self.settings.local_scan_output)
        return records

    def collect(self, refresh: bool = False) -> List[RemoteRepo]:
        return self.catalog.get_repositories(refresh=refresh)

    def initialize(self) -> Path:
        initializer = MonorepoInitializer(self.vcs, self.settings.default_branch, self.identity)
        return initializer.init(self.root)

    def integrate(
        self,
        selected: Sequence[RemoteRepo],
        on_outcome: Optional[Callable[[IntegrationOutcome], None]] = None,
    ) -> IntegrationReport:
        integrator = Integrator(
            self.vcs,
            self.root,
            mode=self.mode,
            commit_message=self.settings.commit_message,
            on_outcome=on_outcome,
        )
        return integrator.integrate(selected)

    def sync(
        self,
        selected: Sequence[RemoteRepo],
        pull: bool,
        push: bool,
    ) -> tuple[Optional[SyncReport], Optional[SyncReport]]:
        if self.mode is not IntegrationMode.SUBTREE:
            if pull or push:
                log.warning("sync_requires_subtree", mode=self.mode.value)
            return None, None
        engine = SyncEngine(self.vcs, self.root)
        pull_report = engine.pull(selected) if pull else None
        push_report = engine.push(selected) if push else None
        return pull_report, push_report

    def run(self, refresh: bool = False, callbacks: Optional[PipelineCallbacks] = None) -> RunReport:
        """
        Execute a full run.

        Fatal errors (ConfigError, ScanError, InitError, CommitError) propagate;
        per-provider and per-repository failures end up in the returned report.
        """
        cb = callbacks or PipelineCallbacks()
        report = RunReport(mode=self.mode)

        def stage(name: str) -> None:
            log.info("pipeline_stage", stage=name)
            if cb.stage:
                cb.stage(name)

        if self.settings.scan_local:
            stage("local_scan")
            report.local_repos = self.scan_local()
            if cb.local_scan:
                cb.local_scan(report.local_repos)

        stage("collect")
        report.candidates = self.collect(refresh=refresh)

        stage("select")
        report.selected = select(report.candidates, self.settings.auto_mode, self.selector)

        stage("initialize")
        self.initialize()

        if not self.settings.auto_mode and cb.choose_mode:
            self.mode = IntegrationMode(cb.choose_mode(self.mode))
        report.mode = self.mode

        stage("integrate")
        report.integration = self.integrate(report.selected, on_outcome=cb.outcome)

        if self.settings.update_mode or self.settings.push_mode:
            stage("sync")
            report.pull, report.push = self.sync(
                report.selected,
                pull=self.settings.update_mode,
                push=self.settings.push_mode,
            )
        return report
