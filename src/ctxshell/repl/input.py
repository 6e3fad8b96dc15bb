"""Prompt session, history and completion for the shell loop."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, DynamicCompleter, NestedCompleter
from prompt_toolkit.history import FileHistory, History, InMemoryHistory


def ensure_history_file(path: str) -> Path:
    """Ensure the history file's directory exists and return the path."""
    history_file = Path(path).expanduser()
    history_file.parent.mkdir(parents=True, exist_ok=True)
    return history_file


def build_completer(tree: dict[str, Any]) -> NestedCompleter:
    """Turn a nested ``{word: subtree-or-None}`` mapping into a completer."""
    return NestedCompleter.from_nested_dict(tree)


class PromptLineReader:
    """prompt_toolkit-backed reader used by ``Engine.run``.

    The prompt session is created on first read so readers can be built
    and inspected without a terminal.
    """

    def __init__(self, history_file: str | None = None, *, history: History | None = None) -> None:
        if history is None:
            if history_file:
                history = FileHistory(str(ensure_history_file(history_file)))
            else:
                history = InMemoryHistory()
        self._history = history
        self._completer: Completer = build_completer({})
        self._session: PromptSession | None = None

    @property
    def completer(self) -> Completer:
        return self._completer

    def _prompt_session(self) -> PromptSession:
        if self._session is None:
            self._session = PromptSession(
                history=self._history,
                completer=DynamicCompleter(lambda: self._completer),
                complete_while_typing=False,
            )
        return self._session

    def read(self, prompt: str) -> str:
        """Read one line; raises EOFError on Ctrl-D and KeyboardInterrupt on Ctrl-C."""
        return self._prompt_session().prompt(prompt)

    def set_completions(self, tree: dict[str, Any]) -> None:
        self._completer = build_completer(tree)

    def history_entries(self) -> list[str]:
        """Return stored history lines, oldest first."""
        return list(reversed(list(self._history.load_history_strings())))
