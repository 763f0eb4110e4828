"""
Command line interface for repofold.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .credentials import redact_url
from .errors import RepofoldError
from .logger import configure_logging, get_logger, redirect_logging_to_file
from .scanning import LocalRepoRecord
from .selection import InteractiveSelection
from .services import (
    IntegrationMode,
    IntegrationOutcome,
    MonorepoPipeline,
    OutcomeStatus,
    PipelineCallbacks,
    RunReport,
)
from .services.monorepo import REPOS_DIR
from .settings import AppSettings, load_settings
from .storage import RepositoryCache
from .version import __version__

app = typer.Typer(name="repofold", help="Fold personal repositories into a single monorepo.")
cache_app = typer.Typer(help="Inspect or reset the provider cache.")
app.add_typer(cache_app, name="cache")

configure_logging(console_level=logging.WARNING)
log = get_logger(__name__)
console = Console()

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to a repofold.toml (or legacy config.json) file.",
)
LogOption = typer.Option(None, "--log", help="Write the detailed run log to this file.")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Show informational logs on stderr.")


def _setup_logging(log_file: Optional[Path], verbose: bool) -> None:
    if log_file:
        redirect_logging_to_file(log_file.resolve())
        typer.echo(f"Logging detailed output to {log_file.resolve()}")
    elif verbose:
        configure_logging(console_level=logging.INFO)


def _load(config: Optional[Path], **overrides: object) -> AppSettings:
    try:
        return load_settings(config, **overrides)
    except RepofoldError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _fail(exc: Exception) -> None:
    log.error("run_aborted", error=str(exc), error_type=type(exc).__name__)
    typer.echo(f"[ERROR] {exc}", err=True)
    raise typer.Exit(code=1)


def build_pipeline(settings: AppSettings, interactive: bool) -> MonorepoPipeline:
    selector = InteractiveSelection(prompt=_read_line, echo=typer.echo) if interactive else None
    return MonorepoPipeline(settings, selector=selector)


def _read_line(text: str) -> str:
    try:
        return typer.prompt(text, default="", show_default=False)
    except typer.Abort:
        raise EOFError from None


def _prompt_mode(current: IntegrationMode) -> IntegrationMode:
    default = "2" if current is IntegrationMode.SUBTREE else "1"
    choice = typer.prompt("Choose integration method: [1] Submodule, [2] Subtree", default=default)
    return IntegrationMode.SUBTREE if choice.strip() == "2" else IntegrationMode.SUBMODULE


def _render_local_repos(records: List[LocalRepoRecord]) -> None:
    table = Table(title="Found repositories")
    table.add_column("Name")
    table.add_column("Path")
    table.add_column("Status")
    table.add_column("Last commit")
    for record in records:
        table.add_row(record.name, record.path, record.status, record.last_commit_hash[:12])
    console.print(table)


def _echo_outcome(outcome: IntegrationOutcome) -> None:
    name = outcome.repo.name
    if outcome.status is OutcomeStatus.SUCCEEDED:
        typer.echo(f"Successfully added {name}")
    elif outcome.status is OutcomeStatus.SKIPPED:
        typer.echo(f"Skipping {name}: {outcome.reason}")
    else:
        typer.echo(f"Error adding repository {name}: {outcome.reason}")


def _echo_sync(report: RunReport) -> None:
    for sync_report in (report.pull, report.push):
        if sync_report is None:
            continue
        typer.echo(
            f"Subtree {sync_report.operation}: {len(sync_report.succeeded)} succeeded, "
            f"{len(sync_report.failures)} failed."
        )
        for failure in sync_report.failures:
            typer.echo(f"  FAILED {failure.repo}: {failure.cause}")


def _echo_summary(report: RunReport) -> None:
    integration = report.integration
    if integration is None:
        return
    typer.echo(
        f"\nIntegrated {len(integration.successes)} repositories ({report.mode.value}); "
        f"skipped {len(integration.skipped)}; failed {len(integration.failures)}."
    )
    if not integration.successes:
        typer.echo("No repositories were successfully added.")
    for outcome in integration.failures:
        failure = outcome.failure
        typer.echo(f"  FAILED {outcome.repo.name}: {outcome.reason}")
        if failure is not None and failure.cause.stderr.strip():
            typer.echo(f"    {failure.cause.stderr.strip()}")
    _echo_sync(report)


@app.command()
def run(
    config: Optional[Path] = ConfigOption,
    auto: Optional[bool] = typer.Option(
        None,
        "--auto/--interactive",
        help="Integrate every repository without prompting (overrides auto_mode).",
    ),
    mode: Optional[IntegrationMode] = typer.Option(
        None, "--mode", "-m", help="Integration method (overrides use_subtree)."
    ),
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the cache and query providers."),
    log_file: Optional[Path] = LogOption,
    verbose: bool = VerboseOption,
) -> None:
    """Scan, fetch, select and integrate repositories into the monorepo."""
    _setup_logging(log_file, verbose)
    overrides = {"auto_mode": auto}
    if mode is not None:
        overrides["use_subtree"] = mode is IntegrationMode.SUBTREE
    settings = _load(config, **overrides)

    pipeline = build_pipeline(settings, interactive=not settings.auto_mode)

    def on_local_scan(records: List[LocalRepoRecord]) -> None:
        _render_local_repos(records)
        typer.echo(f"Local repository data saved to {settings.local_scan_output}")
        if not settings.auto_mode:
            typer.confirm("Continue with remote repository scanning?", default=True, abort=True)

    callbacks = PipelineCallbacks(
        local_scan=on_local_scan,
        choose_mode=_prompt_mode if mode is None else None,
        outcome=_echo_outcome,
    )
    try:
        report = pipeline.run(refresh=refresh, callbacks=callbacks)
    except RepofoldError as exc:
        _fail(exc)
        return
    _echo_summary(report)


@app.command()
def scan(
    config: Optional[Path] = ConfigOption,
    base_dir: Optional[Path] = typer.Option(None, "--base-dir", help="Directory to scan."),
    monorepo: Optional[Path] = typer.Option(None, "--monorepo", help="Monorepo root to exclude."),
    log_file: Optional[Path] = LogOption,
    verbose: bool = VerboseOption,
) -> None:
    """Scan a directory tree for repositories, initializing plain directories."""
    _setup_logging(log_file, verbose)
    settings = _load(config, base_dir=base_dir, monorepo_path=monorepo)
    pipeline = build_pipeline(settings, interactive=False)
    try:
        records = pipeline.scan_local()
    except RepofoldError as exc:
        _fail(exc)
        return
    _render_local_repos(records)
    typer.echo(f"Local repository data saved to {settings.local_scan_output}")


@app.command()
def fetch(
    config: Optional[Path] = ConfigOption,
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the cache and query providers."),
    verbose: bool = VerboseOption,
) -> None:
    """List candidate repositories from the cache or the providers."""
    _setup_logging(None, verbose)
    settings = _load(config)
    repos = build_pipeline(settings, interactive=False).collect(refresh=refresh)
    for index, repo in enumerate(repos):
        typer.echo(f"[{index}] {repo.name} (default branch: {repo.default_branch}) {redact_url(repo.clone_url)}")
    typer.echo(f"{len(repos)} repositories")


@app.command()
def init(
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Create or verify the monorepo root."""
    _setup_logging(None, verbose)
    settings = _load(config)
    try:
        root = build_pipeline(settings, interactive=False).initialize()
    except RepofoldError as exc:
        _fail(exc)
        return
    typer.echo(f"Monorepo ready at {root}")


@app.command()
def sync(
    config: Optional[Path] = ConfigOption,
    pull: Optional[bool] = typer.Option(None, "--pull/--no-pull", help="Pull upstream changes (overrides update_mode)."),
    push: Optional[bool] = typer.Option(None, "--push/--no-push", help="Push local changes (overrides push_mode)."),
    log_file: Optional[Path] = LogOption,
    verbose: bool = VerboseOption,
) -> None:
    """Pull and/or push every subtree already present in the monorepo."""
    _setup_logging(log_file, verbose)
    settings = _load(config, update_mode=pull, push_mode=push)
    pipeline = build_pipeline(settings, interactive=False)
    if pipeline.mode is not IntegrationMode.SUBTREE:
        _fail(RepofoldError("Subtree sync requires use_subtree = true"))
        return
    integrated = [
        repo for repo in pipeline.collect() if (pipeline.root / REPOS_DIR / repo.name).exists()
    ]
    report = RunReport(mode=pipeline.mode, selected=integrated)
    report.pull, report.push = pipeline.sync(integrated, pull=settings.update_mode, push=settings.push_mode)
    _echo_sync(report)


@cache_app.command("clear")
def cache_clear(config: Optional[Path] = ConfigOption) -> None:
    """Delete the provider cache so the next run queries the providers."""
    settings = _load(config)
    if RepositoryCache(settings.cache_path).clear():
        typer.echo(f"Removed {settings.cache_path}")
    else:
        typer.echo(f"No cache at {settings.cache_path}")


@app.command()
def version() -> None:
    """Print the installed repofold version."""
    typer.echo(__version__)


if __name__ == "__main__":  # pragma: no cover
    app()
