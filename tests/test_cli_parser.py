from __future__ import annotations

import pytest

from ledger_shell.cli.errors import (
    EmptyLine,
    InvalidParamValue,
    ParseError,
    UnexpectedPositionalArgument,
    UnterminatedJson,
    UnterminatedQuote,
)
from ledger_shell.cli.parser import bind_params, coerce, parse_line, split_line, split_named
from ledger_shell.cli.registry import CommandSpec, ParamSpec, Shape


def _spec(*params: ParamSpec) -> CommandSpec:
    return CommandSpec("wallet", "open", "Open wallet", params=params)


def test_split_keeps_json_values_with_spaces_together() -> None:
    tokens = split_line('ledger attrib did=V4 raw={"endpoint": {"ha": "127.0.0.1:5555"}}')
    assert tokens == ["ledger", "attrib", "did=V4", 'raw={"endpoint": {"ha": "127.0.0.1:5555"}}']


def test_split_keeps_quoted_values_together() -> None:
    tokens = split_line('ledger txn-author-agreement text="Some agreement text" version=1')
    assert tokens == ["ledger", "txn-author-agreement", 'text="Some agreement text"', "version=1"]


def test_split_handles_escaped_quote_inside_quotes() -> None:
    tokens = split_line('prompt "say \\"hi\\" now"')
    assert tokens == ["prompt", '"say \\"hi\\" now"']


def test_split_rejects_unterminated_json() -> None:
    with pytest.raises(UnterminatedJson):
        split_line('ledger custom {"reqId": 1')


def test_split_rejects_unterminated_quote() -> None:
    with pytest.raises(UnterminatedQuote):
        split_line('prompt "abc')


def test_parse_line_strips_ignore_prefix() -> None:
    parsed = parse_line("  -wallet close")
    assert parsed.words == ("wallet", "close")
    assert parsed.ignore_result is True


def test_parse_line_without_prefix_does_not_ignore() -> None:
    parsed = parse_line("wallet list")
    assert parsed.ignore_result is False


@pytest.mark.parametrize("line", ["", "   ", "-", "  -  "])
def test_parse_line_rejects_empty(line: str) -> None:
    with pytest.raises(EmptyLine):
        parse_line(line)


def test_split_named_splits_on_first_equals() -> None:
    assert split_named("raw=a=b") == ("raw", "a=b")
    assert split_named("role=") == ("role", "")
    assert split_named("=value") is None
    assert split_named('{"a"=1}') is None


def test_bind_main_param_from_first_positional() -> None:
    spec = _spec(ParamSpec("name", main=True, required=True), ParamSpec("key", deferred=True))
    binding = bind_params(spec, ["wallet1", "key=secret"])
    assert binding.values == {"name": "wallet1", "key": "secret"}
    assert binding.deferred == ()


def test_bind_named_main_param() -> None:
    spec = _spec(ParamSpec("name", main=True, required=True))
    binding = bind_params(spec, ["name=wallet1"])
    assert binding.values == {"name": "wallet1"}


def test_bare_deferred_name_requests_secret_after_main_is_bound() -> None:
    spec = _spec(
        ParamSpec("name", main=True, required=True),
        ParamSpec("key", required=True, deferred=True),
        ParamSpec("rekey", deferred=True),
    )
    binding = bind_params(spec, ["wallet1", "key", "rekey"])
    assert binding.values == {"name": "wallet1"}
    assert binding.deferred == ("key", "rekey")


def test_first_bare_token_binds_main_even_if_named_like_deferred() -> None:
    spec = _spec(
        ParamSpec("name", main=True, required=True),
        ParamSpec("key", required=True, deferred=True),
    )
    binding = bind_params(spec, ["key", "key"])
    assert binding.values == {"name": "key"}
    assert binding.deferred == ("key",)


def test_extra_positional_raises() -> None:
    spec = _spec(ParamSpec("name", main=True, required=True))
    with pytest.raises(UnexpectedPositionalArgument) as exc:
        bind_params(spec, ["wallet1", "wallet2"])
    assert exc.value.token == "wallet2"


def test_positional_without_main_param_raises() -> None:
    spec = _spec(ParamSpec("key", deferred=True))
    with pytest.raises(UnexpectedPositionalArgument):
        bind_params(spec, ["other"])


def test_duplicate_named_param_raises() -> None:
    spec = _spec(ParamSpec("name", main=True))
    with pytest.raises(ParseError):
        bind_params(spec, ["name=a", "name=b"])


def test_quoted_values_are_unquoted() -> None:
    spec = _spec(ParamSpec("text"))
    binding = bind_params(spec, ['text="hello world"'])
    assert binding.values == {"text": "hello world"}


@pytest.mark.parametrize(("raw", "expected"), [("true", True), ("FALSE", False), (" True ", True)])
def test_coerce_bool(raw: str, expected: bool) -> None:
    assert coerce("send", Shape.BOOL, raw) is expected


@pytest.mark.parametrize("raw", ["yes", "1", ""])
def test_coerce_bool_rejects_other_values(raw: str) -> None:
    with pytest.raises(InvalidParamValue) as exc:
        coerce("send", Shape.BOOL, raw)
    assert exc.value.name == "send"
    assert exc.value.expected_shape == "boolean"


def test_coerce_int_and_json_and_list() -> None:
    assert coerce("timeout", Shape.INT, "15") == 15
    assert coerce("raw", Shape.JSON, '{"a": [1, 2]}') == {"a": [1, 2]}
    assert coerce("nodes", Shape.LIST, "Node1, Node2") == ["Node1", "Node2"]


def test_coerce_empty_list_has_no_items() -> None:
    assert coerce("nodes", Shape.LIST, "") == []
    assert coerce("nodes", Shape.LIST, "  ") == []


def test_coerce_int_and_json_errors_name_the_parameter() -> None:
    with pytest.raises(InvalidParamValue, match="timeout"):
        coerce("timeout", Shape.INT, "soon")
    with pytest.raises(InvalidParamValue, match="JSON"):
        coerce("raw", Shape.JSON, "{broken")
