"""Input sources: batch scripts/pipes and the interactive prompt."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Iterable, Iterator

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import NestedCompleter
from prompt_toolkit.history import FileHistory
from prompt_toolkit.shortcuts import confirm

from ledger_shell.cli.errors import ExecutionError, ShellIOError
from ledger_shell.cli.parser import is_comment
from ledger_shell.cli.registry import HELP, CommandRegistry

_SECRET_RE = re.compile(r"(^|\s)(key|seed|export_key|rekey)=")

logger = logging.getLogger(__name__)


class ScriptSource:
    """Sequential lines from a file or pipe; comments and blank lines are skipped."""

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines: Iterator[str] = iter(lines)
        self.line_number = 0

    @classmethod
    def from_path(cls, path: str | Path) -> "ScriptSource":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ShellIOError(f"Can't read script file {path}: {exc.strerror or exc}") from exc
        return cls(text.splitlines())

    def next_line(self) -> str | None:
        for line in self._lines:
            self.line_number += 1
            stripped = line.strip()
            if not stripped or is_comment(stripped):
                continue
            logger.debug("script line %d: %s", self.line_number, stripped)
            return stripped
        return None


class SecretFilteringHistory(FileHistory):
    """File history that never records lines carrying a secret value."""

    def append_string(self, string: str) -> None:
        if _SECRET_RE.search(string):
            return
        super().append_string(string)


def build_completer(registry: CommandRegistry) -> NestedCompleter:
    tree: dict = {}
    for spec in registry.commands(None):
        tree[spec.name] = {f"{param.name}=" for param in spec.params} or None
    tree[HELP] = {group.name: None for group in registry.groups()}
    for group in registry.groups():
        commands: dict = {HELP: None}
        for spec in registry.commands(group.name):
            commands[spec.name] = {f"{param.name}=" for param in spec.params} or None
        tree[group.name] = commands
    return NestedCompleter.from_nested_dict(tree)


class InteractiveSource:
    """One line per call; the prompt is re-rendered before each read."""

    def __init__(
        self,
        prompt: Callable[[], str],
        *,
        registry: CommandRegistry | None = None,
        history_path: Path | None = None,
        session: PromptSession | None = None,
    ) -> None:
        self._prompt = prompt
        if session is None:
            history = None
            if history_path is not None:
                history_path.parent.mkdir(parents=True, exist_ok=True)
                history = SecretFilteringHistory(str(history_path))
            completer = build_completer(registry) if registry is not None else None
            session = PromptSession(history=history, completer=completer)
        self.session = session

    def next_line(self) -> str | None:
        try:
            return self.session.prompt(self._prompt())
        except KeyboardInterrupt:
            return ""
        except EOFError:
            return None


def prompt_secret(name: str) -> str:
    session: PromptSession = PromptSession()
    try:
        return session.prompt(f"Enter value for {name}: ", is_password=True)
    except (KeyboardInterrupt, EOFError):
        raise ExecutionError(f"No value entered for \"{name}\"") from None


def prompt_confirm(question: str) -> bool:
    try:
        return confirm(question)
    except (KeyboardInterrupt, EOFError):
        return False
