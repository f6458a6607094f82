"""Resolve parsed lines against the registry, validate and invoke handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from ledger_shell.cli.context import SessionContext
from ledger_shell.cli.errors import (
    EmptyLine,
    ExecutionError,
    MissingRequiredParam,
    ShellError,
    ShellIOError,
    UnknownCommand,
    UnknownParameter,
)
from ledger_shell.cli.output import ShellOutput
from ledger_shell.cli.parser import Binding, bind_params, coerce, is_ignored, parse_line
from ledger_shell.cli.registry import HELP, CommandRegistry, CommandSpec, Requirement
from ledger_shell.errors import LedgerSDKError

EXIT_SUCCESS = 0
EXIT_BATCH_ABORTED = 1
EXIT_STARTUP_ERROR = 2

SecretReader = Callable[[str], str]

logger = logging.getLogger(__name__)


class InputSource(Protocol):
    def next_line(self) -> str | None: ...


@dataclass
class Invocation:
    command: CommandSpec
    binding: Binding
    ignore_result: bool = False


@dataclass
class CommandResult:
    ok: bool
    payload: Any = None
    error: ShellError | None = None
    ignore_result: bool = False


@dataclass
class Dispatcher:
    registry: CommandRegistry
    context: SessionContext
    output: ShellOutput
    read_secret: SecretReader | None = None
    _help: CommandSpec | None = field(default=None, init=False, repr=False)

    @property
    def sdk(self) -> Any:
        return self.context.sdk

    def _help_spec(self) -> CommandSpec:
        if self._help is None:
            self._help = self.registry.lookup(None, HELP)
        return self._help

    def _help_invocation(self, group: str | None, command: str | None, ignore: bool) -> Invocation:
        values = {}
        if group is not None:
            values["group"] = group
        if command is not None:
            values["command"] = command
        return Invocation(self._help_spec(), Binding(values=values), ignore)

    def resolve(self, line: str) -> Invocation:
        parsed = parse_line(line)
        words = list(parsed.words)
        ignore = parsed.ignore_result
        head = words[0]

        if self.registry.is_group(head):
            if len(words) == 1 or words[1] == HELP:
                return self._help_invocation(head, None, ignore)
            spec = self.registry.lookup(head, words[1])
            rest = words[2:]
        elif head == HELP:
            if len(words) > 1:
                self.registry.group(words[1])
            if len(words) > 3:
                raise UnknownCommand(" ".join(words[1:]))
            return self._help_invocation(
                words[1] if len(words) > 1 else None,
                words[2] if len(words) > 2 else None,
                ignore,
            )
        else:
            spec = self.registry.lookup(None, head)
            rest = words[1:]

        if rest == [HELP]:
            return self._help_invocation(spec.group, spec.name, ignore)
        return Invocation(spec, bind_params(spec, rest), ignore)

    def validate(self, invocation: Invocation) -> dict[str, Any]:
        spec = invocation.command
        binding = invocation.binding
        if not spec.variadic:
            unknown = [name for name in binding.values if spec.param(name) is None]
            if unknown:
                raise UnknownParameter(unknown, spec.path)

        params: dict[str, Any] = {}
        for param in spec.params:
            if param.name in binding.values:
                params[param.name] = coerce(param.name, param.shape, binding.values[param.name])
            elif param.name in binding.deferred:
                continue
            elif param.default is not None:
                params[param.name] = coerce(param.name, param.shape, param.default)
            elif param.required:
                raise MissingRequiredParam(param.name, spec.path)
        if spec.variadic:
            for name, raw in binding.values.items():
                params.setdefault(name, raw)
        return params

    def check_preconditions(self, spec: CommandSpec) -> None:
        if Requirement.WALLET in spec.requires:
            self.context.ensure_wallet()
        if Requirement.DID in spec.requires:
            self.context.ensure_did()
        if Requirement.POOL in spec.requires:
            self.context.ensure_pool()

    def _read_deferred(self, invocation: Invocation, params: dict[str, Any]) -> None:
        spec = invocation.command
        for name in invocation.binding.deferred:
            if self.read_secret is None:
                raise MissingRequiredParam(name, spec.path)
            param = spec.param(name)
            params[name] = coerce(name, param.shape, self.read_secret(name))

    def execute(self, invocation: Invocation) -> CommandResult:
        spec = invocation.command
        logger.debug("execute >> %s", spec.path)
        params = self.validate(invocation)
        self.check_preconditions(spec)
        self._read_deferred(invocation, params)
        try:
            payload = spec.handler(self.context, self.sdk, params)
        except ShellError:
            raise
        except (LedgerSDKError, ValueError) as exc:
            raise ExecutionError(str(exc)) from exc
        except OSError as exc:
            raise ShellIOError(str(exc)) from exc
        logger.debug("execute << %s", spec.path)
        return CommandResult(ok=True, payload=payload, ignore_result=invocation.ignore_result)

    def run_line(self, line: str) -> CommandResult | None:
        """Execute one raw line and render its outcome; `None` for blank lines."""
        try:
            result = self.execute(self.resolve(line))
        except EmptyLine:
            return None
        except ShellError as exc:
            logger.debug("command failed (%s): %s", type(exc).__name__, exc)
            self.output.error(exc.prefix, str(exc))
            return CommandResult(ok=False, error=exc, ignore_result=is_ignored(line))
        self.output.render(result.payload)
        return result

    def run(self, source: InputSource, *, batch: bool) -> int:
        while not self.context.exit_requested:
            line = source.next_line()
            if line is None:
                break
            result = self.run_line(line)
            if result is None or result.ok:
                continue
            if batch and not result.ignore_result:
                logger.info("batch aborted: %s", result.error)
                return EXIT_BATCH_ABORTED
        return EXIT_SUCCESS
