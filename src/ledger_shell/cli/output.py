"""Rendering of command results, help screens and errors."""

from __future__ import annotations

import json
import re
import sys
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from rich.console import Console
from rich.table import Table as RichTable

from ledger_shell.cli.registry import CommandRegistry, CommandSpec, GroupSpec

PIPE_WIDTH = 200

_SENSITIVE_FIELDS = ("export_key", "rekey", "key", "seed")


@dataclass(frozen=True)
class Message:
    text: str
    style: str = "green"


@dataclass(frozen=True)
class Notice:
    text: str
    style: str = "yellow"


@dataclass(frozen=True)
class Table:
    columns: Sequence[tuple[str, str]]
    rows: Sequence[dict[str, Any]]
    empty: str = "There are no entries"


@dataclass(frozen=True)
class JsonBlock:
    payload: Any
    title: str | None = None


@dataclass(frozen=True)
class Help:
    title: str
    lines: list[tuple[str, str]] = field(default_factory=list)
    usage: str | None = None
    details: str = ""
    examples: tuple[str, ...] = ()


def _sanitize_error_text(value: str) -> str:
    redacted = value
    for name in _SENSITIVE_FIELDS:
        redacted = re.sub(
            rf"(?i)(?<![\w])({name}\s*[=:]\s*)([^,\s]+)",
            r"\1[REDACTED]",
            redacted,
        )
    return redacted


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


class ShellOutput:
    def __init__(self, stdout=sys.stdout, stderr=sys.stderr) -> None:
        self.stdout = stdout
        self.stderr = stderr
        isatty = getattr(stdout, "isatty", None)
        width = None if isatty is not None and isatty() else PIPE_WIDTH
        self.console = Console(file=stdout, highlight=False, width=width, soft_wrap=True)

    def render(self, payload: Any) -> None:
        if payload is None:
            return
        if isinstance(payload, (list, tuple)):
            for item in payload:
                self.render(item)
            return
        if isinstance(payload, str):
            self.console.print(payload, markup=False)
        elif isinstance(payload, (Message, Notice)):
            self.console.print(payload.text, style=payload.style, markup=False)
        elif isinstance(payload, Table):
            self._render_table(payload)
        elif isinstance(payload, JsonBlock):
            if payload.title:
                self.console.print(payload.title, markup=False)
            self.console.print(json.dumps(payload.payload, indent=2, sort_keys=True), markup=False)
        elif isinstance(payload, Help):
            self._render_help(payload)
        else:
            self.console.print(str(payload), markup=False)

    def _render_table(self, table: Table) -> None:
        if not table.rows:
            self.console.print(table.empty, markup=False)
            return
        rendered = RichTable(show_lines=False)
        for _, title in table.columns:
            rendered.add_column(title, overflow="fold")
        for row in table.rows:
            rendered.add_row(*(_cell(row.get(key)) for key, _ in table.columns))
        self.console.print(rendered)

    def _render_help(self, help: Help) -> None:
        self.console.print(help.title, style="bold", markup=False)
        if help.usage:
            self.console.print(f"\nUsage:\n    {help.usage}", markup=False)
        if help.details:
            self.console.print(f"\n{help.details}", markup=False)
        if help.lines:
            width = max(len(name) for name, _ in help.lines) + 2
            self.console.print("", markup=False)
            for name, text in help.lines:
                self.console.print(f"    {name.ljust(width)}{text}", markup=False)
        if help.examples:
            self.console.print("\nExamples:", markup=False)
            for example in help.examples:
                self.console.print(f"    {example}", markup=False)

    def error(self, prefix: str, message: str) -> None:
        print(f"{prefix}: {_sanitize_error_text(message)}", file=self.stderr)


def _param_usage(spec: CommandSpec) -> str:
    parts = [spec.path]
    for param in spec.params:
        if param.main:
            text = f"<{param.name}-value>"
        elif param.deferred:
            text = f"{param.name}[=<{param.name}-value>]"
        else:
            text = f"{param.name}=<{param.name}-value>"
        parts.append(text if param.required else f"[{text}]")
    return " ".join(parts)


def general_help(registry: CommandRegistry) -> Help:
    lines = [(spec.name, spec.help) for spec in registry.commands(None)]
    lines.extend((group.name, group.help) for group in registry.groups())
    return Help(
        title="Ledger shell. Type \"help <group>\" or \"<group> <command> help\" for details.",
        lines=lines,
    )


def group_help(registry: CommandRegistry, group: GroupSpec) -> Help:
    return Help(
        title=f"Group: {group.name}. {group.help}",
        lines=[(spec.name, spec.help) for spec in registry.commands(group.name)],
    )


def command_help(spec: CommandSpec) -> Help:
    lines = []
    for param in spec.params:
        notes: list[str] = []
        if param.required:
            notes.append("required")
        if param.default is not None:
            notes.append(f"default {param.default}")
        suffix = f" ({', '.join(notes)})" if notes else ""
        lines.append((param.name, f"{param.help}{suffix}"))
    return Help(
        title=f"Command: {spec.path}. {spec.help}",
        usage=_param_usage(spec),
        details=spec.details,
        lines=lines,
        examples=spec.examples,
    )


def iter_examples(registry: CommandRegistry) -> Iterable[tuple[CommandSpec, str]]:
    for spec in registry.help():
        for example in spec.examples:
            yield spec, example
