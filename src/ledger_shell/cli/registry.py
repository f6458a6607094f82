"""Static catalog of command groups, commands and their parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from ledger_shell.cli.errors import DuplicateCommand, RegistryError, UnknownCommand, UnknownGroup

HELP = "help"


class Shape(str, Enum):
    STRING = "string"
    BOOL = "boolean"
    INT = "integer"
    JSON = "JSON"
    LIST = "comma-separated list"


class Requirement(str, Enum):
    WALLET = "wallet"
    POOL = "pool"
    DID = "did"


@dataclass(frozen=True)
class ParamSpec:
    name: str
    help: str = ""
    main: bool = False
    required: bool = False
    default: str | None = None
    shape: Shape = Shape.STRING
    deferred: bool = False


Handler = Callable[[Any, Any, dict[str, Any]], Any]


@dataclass(frozen=True)
class CommandSpec:
    group: str | None
    name: str
    help: str
    params: tuple[ParamSpec, ...] = ()
    details: str = ""
    examples: tuple[str, ...] = ()
    handler: Handler | None = field(default=None, compare=False, repr=False)
    requires: frozenset[Requirement] = frozenset()
    variadic: bool = False

    def __post_init__(self) -> None:
        names = [param.name for param in self.params]
        if len(set(names)) != len(names):
            raise RegistryError(f"{self.path}: parameter names must be unique")
        if sum(1 for param in self.params if param.main) > 1:
            raise RegistryError(f"{self.path}: at most one main parameter is allowed")

    @property
    def path(self) -> str:
        return f"{self.group} {self.name}" if self.group else self.name

    @property
    def main_param(self) -> ParamSpec | None:
        for param in self.params:
            if param.main:
                return param
        return None

    def param(self, name: str) -> ParamSpec | None:
        for param in self.params:
            if param.name == name:
                return param
        return None


@dataclass(frozen=True)
class GroupSpec:
    name: str
    help: str


class CommandRegistry:
    """Registration happens once at startup; lookups only afterwards."""

    def __init__(self) -> None:
        self._groups: dict[str, GroupSpec] = {}
        self._commands: dict[tuple[str | None, str], CommandSpec] = {}

    def add_group(self, name: str, help: str) -> GroupSpec:
        if name == HELP or name in self._groups or (None, name) in self._commands:
            raise RegistryError(f"Group \"{name}\" clashes with an existing name")
        group = GroupSpec(name=name, help=help)
        self._groups[name] = group
        return group

    def register(self, spec: CommandSpec) -> CommandSpec:
        if spec.group is not None:
            if spec.group not in self._groups:
                raise UnknownGroup(spec.group)
            if spec.name == HELP:
                raise RegistryError(f"\"{HELP}\" is reserved inside group \"{spec.group}\"")
        elif spec.name in self._groups:
            raise RegistryError(f"Command \"{spec.name}\" clashes with a group name")
        key = (spec.group, spec.name)
        if key in self._commands:
            raise DuplicateCommand(spec.path)
        self._commands[key] = spec
        return spec

    def is_group(self, name: str) -> bool:
        return name in self._groups

    def group(self, name: str) -> GroupSpec:
        try:
            return self._groups[name]
        except KeyError:
            raise UnknownGroup(name) from None

    def groups(self) -> list[GroupSpec]:
        return [self._groups[name] for name in sorted(self._groups)]

    def lookup(self, group: str | None, command: str) -> CommandSpec:
        if group is not None:
            self.group(group)
        spec = self._commands.get((group, command))
        if spec is None:
            raise UnknownCommand(command, group)
        return spec

    def commands(self, group: str | None = None) -> list[CommandSpec]:
        if group is not None:
            self.group(group)
        return sorted(
            (spec for (owner, _), spec in self._commands.items() if owner == group),
            key=lambda spec: spec.name,
        )

    def help(self, group: str | None = None) -> list[CommandSpec]:
        """Specs for a help screen: top-level commands, then groups alphabetically."""
        if group is not None:
            return self.commands(group)
        ordered = self.commands(None)
        for item in self.groups():
            ordered.extend(self.commands(item.name))
        return ordered
