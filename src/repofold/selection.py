"""
Selection strategies reducing the candidate repositories to the ones to integrate.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Protocol, Sequence

from .logger import get_logger
from .providers.base import RemoteRepo

log = get_logger(__name__)

PromptFn = Callable[[str], str]
EchoFn = Callable[[str], None]


class SelectionStrategy(Protocol):
    def choose(self, candidates: Sequence[RemoteRepo]) -> List[RemoteRepo]:
        ...


class AutomaticSelection:
    """Select every candidate."""

    def choose(self, candidates: Sequence[RemoteRepo]) -> List[RemoteRepo]:
        return list(candidates)


class InteractiveSelection:
    """
    Line-oriented picker.

    Candidates are listed with their index and default branch; the operator
    then types repository names (case-insensitive) one per line and ends the
    selection with an empty line or end-of-input.
    """

    def __init__(self, prompt: PromptFn, echo: EchoFn = print) -> None:
        self.prompt = prompt
        self.echo = echo

    def choose(self, candidates: Sequence[RemoteRepo]) -> List[RemoteRepo]:
        self.echo("Select repositories to include (type name, enter empty to finish):")
        for index, repo in enumerate(candidates):
            self.echo(f"[{index}] {repo.name} (default branch: {repo.default_branch})")

        by_name = {}
        for repo in candidates:
            by_name.setdefault(repo.name.lower(), repo)

        selected: List[RemoteRepo] = []
        while True:
            try:
                answer = self.prompt("Repo name (or enter to finish)")
            except EOFError:
                break
            answer = (answer or "").strip()
            if not answer:
                break
            match = by_name.get(answer.lower())
            if match is None:
                log.warning("selection_not_found", name=answer)
                self.echo(f"No repository named '{answer}'")
                continue
            if match in selected:
                continue
            selected.append(match)
        return selected


def select(
    candidates: Sequence[RemoteRepo],
    auto_mode: bool,
    strategy: Optional[SelectionStrategy] = None,
) -> List[RemoteRepo]:
    """
    Return the repositories to integrate.

    Automatic mode returns ``candidates`` unchanged. Otherwise ``strategy``
    picks a subset; an empty pick falls back to every candidate.
    """
    if auto_mode or strategy is None:
        return list(candidates)

    chosen = strategy.choose(candidates)
    if not chosen:
        log.info("selection_empty_fallback_all", count=len(candidates))
        return list(candidates)
    log.info("selection_made", repos=[repo.name for repo in chosen])
    return chosen
