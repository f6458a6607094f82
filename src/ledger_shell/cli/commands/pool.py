"""Pool group: create, connect, refresh, set-protocol-version, disconnect, list, delete, show-taa."""

from __future__ import annotations

from pathlib import Path

from ledger_shell.cli.commands.support import accept_author_agreement, fetch_author_agreement
from ledger_shell.cli.errors import ExecutionError
from ledger_shell.cli.output import Message, Notice, Table
from ledger_shell.cli.registry import CommandRegistry, CommandSpec, ParamSpec, Requirement, Shape
from ledger_shell.sdk.base import PoolOptions

GROUP = "pool"
PROTOCOL_VERSIONS = (1, 2)


def _name(help: str = "The name of pool") -> ParamSpec:
    return ParamSpec("name", help, main=True, required=True)


def _check_protocol_version(value: int) -> int:
    if value not in PROTOCOL_VERSIONS:
        raise ExecutionError(f"Unexpected Pool protocol version \"{value}\".")
    return value


def _agreement_lines(agreement) -> list:
    lines: list = ["Transaction Author Agreement", f"Version: {agreement.version}"]
    if agreement.digest:
        lines.append(f"Digest: {agreement.digest}")
    lines.append(f"Content:\n{agreement.text}")
    return lines


def _asked_to_accept(ctx, agreement) -> bool:
    if ctx.confirm is None:
        return False
    question = "\n".join(_agreement_lines(agreement))
    return ctx.confirm(f"{question}\nWould you like to accept it?")


def _create(ctx, sdk, params):
    sdk.create_pool(
        params["name"],
        Path(params["gen_txn_file"]).expanduser(),
        gateway=params.get("gateway"),
    )
    return Message(f"Pool config \"{params['name']}\" has been created")


def _connect(ctx, sdk, params):
    name = params["name"]
    protocol_version = _check_protocol_version(
        params.get("protocol-version", ctx.protocol_version)
    )
    options = PoolOptions(
        protocol_version=protocol_version,
        timeout=params.get("timeout"),
        extended_timeout=params.get("extended-timeout"),
        pre_ordered_nodes=list(params.get("pre-ordered-nodes") or []),
        number_read_nodes=params.get("number-read-nodes"),
    )
    replies: list = []
    if ctx.pool is not None:
        replies.append(Message(f"Pool \"{ctx.pool.name}\" has been disconnected"))
    ctx.connect_pool(name, lambda: sdk.open_pool(name, options))
    ctx.protocol_version = protocol_version
    replies.append(Message(f"Pool \"{name}\" has been connected"))

    agreement = fetch_author_agreement(ctx, sdk)
    if agreement is not None:
        ctx.agreement = agreement
        if _asked_to_accept(ctx, agreement):
            accept_author_agreement(ctx, agreement)
            replies.append(Message("Transaction Author Agreement has been accepted."))
            return replies
        replies.append(
            Notice(
                "There is a Transaction Author Agreement set on the connected Pool. "
                "You should read and accept it to be able to send transactions to the Pool: "
                "use `pool show-taa` to read it and `pool show-taa accept=true` to accept it."
            )
        )
    return replies


def _refresh(ctx, sdk, params):
    pool = ctx.ensure_pool()
    sdk.refresh_pool(pool.handle)
    return Message(f"Pool \"{pool.name}\" has been refreshed")


def _set_protocol_version(ctx, sdk, params):
    ctx.protocol_version = _check_protocol_version(params["protocol-version"])
    return Message(f"Protocol Version has been set to \"{ctx.protocol_version}\".")


def _disconnect(ctx, sdk, params):
    pool = ctx.disconnect_pool()
    return Message(f"Pool \"{pool.name}\" has been disconnected")


def _list(ctx, sdk, params):
    rows = [{"name": info.name, "gateway": info.gateway} for info in sdk.list_pools()]
    replies: list = [
        Table(columns=(("name", "Pool"), ("gateway", "Gateway")), rows=rows, empty="There are no pools")
    ]
    if ctx.pool is not None:
        replies.append(Message(f"Current pool \"{ctx.pool.name}\""))
    return replies


def _delete(ctx, sdk, params):
    name = params["name"]
    if ctx.pool is not None and ctx.pool.name == name:
        raise ExecutionError(f"Pool \"{name}\" is connected. Disconnect it first")
    sdk.delete_pool(name)
    return Message(f"Pool \"{name}\" has been deleted.")


def _show_taa(ctx, sdk, params):
    agreement = fetch_author_agreement(ctx, sdk)
    if agreement is None:
        ctx.agreement = None
        return "There is no transaction agreement set on the Pool."
    replies = _agreement_lines(agreement)
    if params.get("accept"):
        accept_author_agreement(ctx, agreement)
        replies.append(Message("Transaction Author Agreement has been accepted."))
        return replies
    current = ctx.agreement
    unchanged = (
        current is not None
        and current.text == agreement.text
        and current.version == agreement.version
    )
    if not unchanged:
        ctx.agreement = agreement
    if not ctx.agreement.accepted and _asked_to_accept(ctx, agreement):
        accept_author_agreement(ctx, agreement)
        return [Message("Transaction Author Agreement has been accepted.")]
    if not ctx.agreement.accepted:
        replies.append(
            Notice(
                "The Transaction Author Agreement has NOT been Accepted. "
                "Use `pool show-taa accept=true` to accept the Agreement."
            )
        )
    return replies


def register(registry: CommandRegistry) -> None:
    registry.add_group(GROUP, "Pool management commands")
    registry.register(
        CommandSpec(
            GROUP,
            "create",
            "Create new pool ledger config with specified name",
            params=(
                _name(),
                ParamSpec(
                    "gen_txn_file",
                    "The path to the pool genesis transactions file",
                    required=True,
                ),
                ParamSpec("gateway", "Base URL of the HTTP ledger gateway for this pool"),
            ),
            examples=(
                "pool create sandbox gen_txn_file=/etc/ledger/sandbox.txn",
                "pool create sandbox gen_txn_file=sandbox.txn gateway=http://127.0.0.1:9702",
            ),
            handler=_create,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "connect",
            "Connect to pool with specified name. Also disconnect from previously connected",
            params=(
                _name(),
                ParamSpec(
                    "protocol-version",
                    "Pool protocol version will be used for requests. One of: 1, 2",
                    shape=Shape.INT,
                ),
                ParamSpec("timeout", "Timeout for network request (in sec)", shape=Shape.INT),
                ParamSpec(
                    "extended-timeout",
                    "Extended timeout for network request (in sec)",
                    shape=Shape.INT,
                ),
                ParamSpec(
                    "pre-ordered-nodes",
                    "Names of nodes which will have a priority during request sending",
                    shape=Shape.LIST,
                ),
                ParamSpec(
                    "number-read-nodes",
                    "The number of nodes to send read requests",
                    shape=Shape.INT,
                ),
            ),
            examples=(
                "pool connect pool1",
                "pool connect pool1 protocol-version=2",
                "pool connect pool1 protocol-version=2 timeout=100",
                "pool connect pool1 protocol-version=2 extended-timeout=100",
                "pool connect pool1 protocol-version=2 pre-ordered-nodes=Node2,Node1",
            ),
            handler=_connect,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "refresh",
            "Refresh a local copy of a pool ledger and update pool nodes connections",
            handler=_refresh,
            requires=frozenset({Requirement.POOL}),
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "set-protocol-version",
            "Set protocol version that will be used for ledger requests",
            params=(
                ParamSpec(
                    "protocol-version",
                    "Protocol version to use. One of: 1, 2",
                    main=True,
                    required=True,
                    shape=Shape.INT,
                ),
            ),
            examples=("pool set-protocol-version 2",),
            handler=_set_protocol_version,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "disconnect",
            "Disconnect from current pool",
            handler=_disconnect,
            requires=frozenset({Requirement.POOL}),
        )
    )
    registry.register(CommandSpec(GROUP, "list", "List existing pool configs", handler=_list))
    registry.register(
        CommandSpec(
            GROUP,
            "delete",
            "Delete pool config with specified name",
            params=(_name(),),
            examples=("pool delete pool1",),
            handler=_delete,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "show-taa",
            "Show transaction author agreement set on Ledger",
            params=(
                ParamSpec(
                    "accept",
                    "Accept the agreement for this session",
                    default="false",
                    shape=Shape.BOOL,
                ),
            ),
            examples=("pool show-taa", "pool show-taa accept=true"),
            handler=_show_taa,
            requires=frozenset({Requirement.POOL}),
        )
    )
