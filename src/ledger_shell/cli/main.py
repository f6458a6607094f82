"""Command-line entry point for ledger-shell."""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from typing import Sequence

from ledger_shell.cli.commands import common, did, ledger, pool, wallet
from ledger_shell.cli.config import ConfigError, history_path, load_shell_config
from ledger_shell.cli.context import SessionContext
from ledger_shell.cli.dispatcher import (
    EXIT_STARTUP_ERROR,
    Dispatcher,
    InputSource,
    SecretReader,
)
from ledger_shell.cli.errors import ShellIOError
from ledger_shell.cli.logger import LoggerConfigError, init_logger
from ledger_shell.cli.output import ShellOutput, _sanitize_error_text
from ledger_shell.cli.registry import CommandRegistry
from ledger_shell.cli.sources import (
    InteractiveSource,
    ScriptSource,
    prompt_confirm,
    prompt_secret,
)
from ledger_shell.sdk.local import LocalLedgerSDK

logger = logging.getLogger(__name__)


def _shell_version() -> str:
    try:
        return pkg_version("ledger-shell")
    except PackageNotFoundError:
        return "0.0.0+local"


def build_registry() -> CommandRegistry:
    registry = CommandRegistry()
    for module in (common, wallet, pool, did, ledger):
        module.register(registry)
    return registry


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-shell",
        description="Interactive and batch command shell for ledger clients.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ledger-shell {_shell_version()}",
    )
    parser.add_argument(
        "script",
        nargs="?",
        default=None,
        help="Batch script to execute; read commands interactively when omitted",
    )
    parser.add_argument("--config", default=None, help="Path to JSON shell config")
    parser.add_argument(
        "--logger-config",
        default=None,
        help="Path to logging config (.json dictConfig or fileConfig INI)",
    )
    parser.add_argument(
        "--plugins",
        default=None,
        help="Deprecated: plugins are not supported and the value is ignored",
    )
    return parser


def _print_error(stderr, prefix: str, message: str, *, code: int) -> int:
    print(f"{prefix}: {_sanitize_error_text(message)}", file=stderr)
    return code


def _is_tty(stream) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty is not None and isatty())


def main(
    argv: Sequence[str] | None = None,
    *,
    stdout=sys.stdout,
    stderr=sys.stderr,
    stdin=sys.stdin,
    sdk=None,
    read_secret: SecretReader | None = None,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_shell_config(args.config)
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_STARTUP_ERROR)

    logger_config = args.logger_config or config.logger_config
    if logger_config:
        try:
            init_logger(logger_config)
        except LoggerConfigError as exc:
            return _print_error(stderr, "logger error", str(exc), code=EXIT_STARTUP_ERROR)

    if args.plugins is not None:
        print("warning: --plugins is deprecated and ignored", file=stderr)

    registry = build_registry()
    batch = args.script is not None or not _is_tty(stdin)
    source: InputSource | None = None
    if args.script is not None:
        try:
            source = ScriptSource.from_path(args.script)
        except ShellIOError as exc:
            return _print_error(stderr, exc.prefix, str(exc), code=EXIT_STARTUP_ERROR)
    elif batch:
        source = ScriptSource(stdin)

    if sdk is None:
        sdk = LocalLedgerSDK()
    context = SessionContext(sdk, taa_mechanism=config.taa_acceptance_mechanism)
    if source is None:
        source = InteractiveSource(
            context.prompt,
            registry=registry,
            history_path=history_path(),
        )
        context.confirm = prompt_confirm
    # A piped script is stdin itself, so there is no terminal to ask.
    if read_secret is None and _is_tty(stdin):
        read_secret = prompt_secret

    dispatcher = Dispatcher(
        registry=registry,
        context=context,
        output=ShellOutput(stdout=stdout, stderr=stderr),
        read_secret=read_secret,
    )
    logger.debug("starting %s session", "batch" if batch else "interactive")
    try:
        return dispatcher.run(source, batch=batch)
    finally:
        context.teardown()


if __name__ == "__main__":
    raise SystemExit(main())
