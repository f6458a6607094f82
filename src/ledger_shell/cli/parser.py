"""Line grammar: `[-][<group>] <command> [[<main>=]<value>] [<name>=<value>]...`

Tokens are whitespace separated except inside `{...}` / `[...]` JSON values
and double-quoted segments. A token is named when the text before its first
`=` is non-empty and contains no quote or bracket; every other token is
positional. A leading `-` marks the line as ignore-on-failure.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ledger_shell.cli.errors import (
    EmptyLine,
    InvalidParamValue,
    ParseError,
    UnexpectedPositionalArgument,
    UnterminatedJson,
    UnterminatedQuote,
)
from ledger_shell.cli.registry import CommandSpec, Shape

IGNORE_PREFIX = "-"
COMMENT_PREFIX = "#"

_OPENERS = "{["
_CLOSERS = "}]"


@dataclass(frozen=True)
class ParsedLine:
    words: tuple[str, ...]
    ignore_result: bool = False


@dataclass(frozen=True)
class Binding:
    values: dict[str, str]
    deferred: tuple[str, ...] = ()


def is_ignored(line: str) -> bool:
    return line.lstrip().startswith(IGNORE_PREFIX)


def is_comment(line: str) -> bool:
    return line.lstrip().startswith(COMMENT_PREFIX)


def split_line(line: str) -> list[str]:
    tokens: list[str] = []
    current: list[str] = []
    depth = 0
    in_quote = False
    escaped = False

    for char in line:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if in_quote:
            current.append(char)
            if char == "\\":
                escaped = True
            elif char == '"':
                in_quote = False
            continue
        if char == '"':
            in_quote = True
            current.append(char)
        elif char in _OPENERS:
            depth += 1
            current.append(char)
        elif char in _CLOSERS and depth > 0:
            depth -= 1
            current.append(char)
        elif char.isspace() and depth == 0:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    token = "".join(current)
    if depth > 0:
        raise UnterminatedJson(token)
    if in_quote:
        raise UnterminatedQuote(token)
    if token:
        tokens.append(token)
    return tokens


def parse_line(line: str) -> ParsedLine:
    text = line.strip()
    ignore = text.startswith(IGNORE_PREFIX)
    if ignore:
        text = text[len(IGNORE_PREFIX):].lstrip()
    if not text:
        raise EmptyLine()
    return ParsedLine(words=tuple(split_line(text)), ignore_result=ignore)


def unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1].replace('\\"', '"')
    return value


def split_named(token: str) -> tuple[str, str] | None:
    name, sep, value = token.partition("=")
    if not sep or not name:
        return None
    if any(char in name for char in '"{}[]'):
        return None
    return name, unquote(value)


def bind_params(spec: CommandSpec, tokens: list[str] | tuple[str, ...]) -> Binding:
    """Bind raw tokens to parameter names without validating them."""
    values: dict[str, str] = {}
    positional: list[str] = []
    for token in tokens:
        named = split_named(token)
        if named is None:
            positional.append(unquote(token))
            continue
        name, value = named
        if name in values:
            raise ParseError(f"Parameter \"{name}\" is specified more than once")
        values[name] = value

    deferred: list[str] = []
    main = spec.main_param
    for token in positional:
        if main is not None and main.name not in values:
            values[main.name] = token
            continue
        param = spec.param(token)
        if param is not None and param.deferred and token not in values and token not in deferred:
            deferred.append(token)
            continue
        raise UnexpectedPositionalArgument(token)
    return Binding(values=values, deferred=tuple(deferred))


def coerce(name: str, shape: Shape, raw: str) -> Any:
    if shape is Shape.STRING:
        return raw
    if shape is Shape.BOOL:
        lowered = raw.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise InvalidParamValue(name, shape.value, raw)
    if shape is Shape.INT:
        try:
            return int(raw)
        except ValueError:
            raise InvalidParamValue(name, shape.value, raw) from None
    if shape is Shape.JSON:
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise InvalidParamValue(name, shape.value, raw) from None
    if shape is Shape.LIST:
        if not raw.strip():
            return []
        return [item.strip() for item in raw.split(",")]
    raise InvalidParamValue(name, str(shape), raw)
