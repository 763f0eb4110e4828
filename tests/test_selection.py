from typing import Iterable, List

from structlog.testing import capture_logs

from conftest import make_repo
from repofold.selection import AutomaticSelection, InteractiveSelection, select


class ScriptedPrompt:
    def __init__(self, answers: Iterable[str]) -> None:
        self.answers = list(answers)
        self.prompts: List[str] = []

    def __call__(self, text: str) -> str:
        self.prompts.append(text)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


CANDIDATES = [make_repo("alpha"), make_repo("Beta", branch="develop"), make_repo("gamma")]


def test_auto_mode_returns_everything_unchanged() -> None:
    strategy = InteractiveSelection(prompt=ScriptedPrompt([]), echo=lambda _: None)

    assert select(CANDIDATES, auto_mode=True, strategy=strategy) == CANDIDATES
    assert AutomaticSelection().choose(CANDIDATES) == CANDIDATES


def test_interactive_selection_keeps_chosen_order() -> None:
    echoed: List[str] = []
    prompt = ScriptedPrompt(["GAMMA", "nope", "beta", "gamma", ""])
    strategy = InteractiveSelection(prompt=prompt, echo=echoed.append)

    chosen = select(CANDIDATES, auto_mode=False, strategy=strategy)

    assert [repo.name for repo in chosen] == ["gamma", "Beta"]
    assert "[1] Beta (default branch: develop)" in echoed
    assert "No repository named 'nope'" in echoed
    assert len(prompt.prompts) == 5


def test_empty_selection_falls_back_to_all_candidates() -> None:
    strategy = InteractiveSelection(prompt=ScriptedPrompt([""]), echo=lambda _: None)

    with capture_logs() as logs:
        chosen = select(CANDIDATES, auto_mode=False, strategy=strategy)

    assert chosen == CANDIDATES
    assert any(entry["event"] == "selection_empty_fallback_all" for entry in logs)


def test_end_of_input_finishes_selection() -> None:
    strategy = InteractiveSelection(prompt=ScriptedPrompt(["alpha"]), echo=lambda _: None)

    with capture_logs() as logs:
        chosen = select(CANDIDATES, auto_mode=False, strategy=strategy)

    assert [repo.name for repo in chosen] == ["alpha"]
    assert not any(entry["event"] == "selection_empty_fallback_all" for entry in logs)
