#!/usr/bin/env python3
from __future__ import annotations

import argparse
import io
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ledger_shell.cli.context import SessionContext  # noqa: E402
from ledger_shell.cli.dispatcher import Dispatcher  # noqa: E402
from ledger_shell.cli.errors import ShellError  # noqa: E402
from ledger_shell.cli.main import build_registry  # noqa: E402
from ledger_shell.cli.output import ShellOutput, iter_examples  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Check that every example registered in command help parses and binds"
    )
    parser.add_argument("--verbose", action="store_true", help="Print every checked example")
    args = parser.parse_args()

    registry = build_registry()
    dispatcher = Dispatcher(
        registry=registry,
        context=SessionContext(sdk=None),
        output=ShellOutput(stdout=io.StringIO(), stderr=io.StringIO()),
    )
    errors: list[str] = []
    checked = 0

    for spec, example in iter_examples(registry):
        checked += 1
        try:
            invocation = dispatcher.resolve(example)
            dispatcher.validate(invocation)
        except ShellError as exc:
            errors.append(f"{spec.path}: invalid example: {example} ({exc.prefix}: {exc})")
            continue
        if invocation.command is not spec and spec.name != "help":
            errors.append(f"{spec.path}: example resolves to {invocation.command.path}: {example}")
        elif args.verbose:
            print(f"ok {example}")

    if errors:
        print("example validation failed:")
        for item in errors:
            print(f"- {item}")
        return 1

    print(f"example validation passed ({checked} examples)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
