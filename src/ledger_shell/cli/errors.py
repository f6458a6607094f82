"""Interpreter error taxonomy."""

from __future__ import annotations


class ShellError(Exception):
    """Base interpreter error; `prefix` is shown before the message."""

    prefix = "error"


class RegistryError(ShellError):
    prefix = "registry error"


class DuplicateCommand(RegistryError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Command \"{path}\" is already registered")
        self.path = path


class ParseError(ShellError):
    prefix = "parse error"


class EmptyLine(ParseError):
    def __init__(self) -> None:
        super().__init__("empty line")


class UnterminatedJson(ParseError):
    def __init__(self, token: str) -> None:
        super().__init__(f"Unterminated JSON value: {token}")
        self.token = token


class UnterminatedQuote(ParseError):
    def __init__(self, token: str) -> None:
        super().__init__(f"Unterminated quoted value: {token}")
        self.token = token


class UnexpectedPositionalArgument(ParseError):
    def __init__(self, token: str) -> None:
        super().__init__(f"Unexpected positional argument \"{token}\"")
        self.token = token


class UnknownGroup(ShellError):
    prefix = "unknown group"

    def __init__(self, name: str) -> None:
        super().__init__(f"Group \"{name}\" not found")
        self.name = name


class UnknownCommand(ShellError):
    prefix = "unknown command"

    def __init__(self, name: str, group: str | None = None) -> None:
        path = f"{group} {name}" if group else name
        super().__init__(f"Command \"{path}\" not found")
        self.name = name
        self.group = group


class UnknownParameter(ShellError):
    prefix = "invalid parameters"

    def __init__(self, names: list[str], command: str) -> None:
        listed = ", ".join(f"\"{name}\"" for name in names)
        super().__init__(f"Unknown parameter(s) {listed} for command \"{command}\"")
        self.names = names


class MissingRequiredParam(ShellError):
    prefix = "invalid parameters"

    def __init__(self, name: str, command: str) -> None:
        super().__init__(f"No required \"{name}\" parameter present for command \"{command}\"")
        self.name = name


class InvalidParamValue(ShellError):
    prefix = "invalid parameters"

    def __init__(self, name: str, expected_shape: str, value: str | None = None) -> None:
        super().__init__(f"Invalid \"{name}\" parameter: {expected_shape} value expected")
        self.name = name
        self.expected_shape = expected_shape
        self.value = value


class PreconditionError(ShellError):
    prefix = "error"
    default_message = "precondition failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NoOpenWallet(PreconditionError):
    default_message = "There is no opened wallet now"


class NoPoolConnection(PreconditionError):
    default_message = "There is no opened pool now"


class NoActiveIdentity(PreconditionError):
    default_message = "There is no active did"


class NoStoredTransaction(PreconditionError):
    default_message = (
        "There is no transaction stored into context. Pass txn=, load one with "
        "`ledger load-transaction`, or build one with send=false or endorser="
    )


class ExecutionError(ShellError):
    """Command failed; the message is the collaborator's own diagnostic."""

    prefix = "error"


class ShellIOError(ShellError):
    prefix = "io error"
