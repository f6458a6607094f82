"""Wallet group: create, attach, open, close, delete, detach, list, export, import."""

from __future__ import annotations

from pathlib import Path

from ledger_shell.cli.errors import ExecutionError
from ledger_shell.cli.output import Message, Table
from ledger_shell.cli.registry import CommandRegistry, CommandSpec, ParamSpec, Requirement, Shape

GROUP = "wallet"

_KDF_HELP = (
    "Algorithm to use for wallet key derivation. One of: ARGON2I_MOD (default), "
    "ARGON2I_INT, RAW"
)


def _name(help: str = "Identifier of the wallet") -> ParamSpec:
    return ParamSpec("name", help, main=True, required=True)


def _key(help: str = "Key or passphrase used for wallet key derivation") -> ParamSpec:
    return ParamSpec("key", help, required=True, deferred=True)


_STORAGE_TYPE = ParamSpec("storage_type", "Type of the wallet storage")
_STORAGE_CONFIG = ParamSpec(
    "storage_config", "JSON object of settings defined by the storage type", shape=Shape.JSON
)
_STORAGE_CREDENTIALS = ParamSpec(
    "storage_credentials", "JSON object of credentials defined by the storage type", shape=Shape.JSON
)


def _refuse_if_open(ctx, name: str) -> None:
    if ctx.wallet is not None and ctx.wallet.name == name:
        raise ExecutionError(f"Wallet \"{name}\" is opened")


def _create(ctx, sdk, params):
    sdk.create_wallet(
        params["name"],
        params["key"],
        key_derivation_method=params.get("key_derivation_method"),
        storage_type=params.get("storage_type"),
        storage_config=params.get("storage_config"),
        storage_credentials=params.get("storage_credentials"),
    )
    return Message(f"Wallet \"{params['name']}\" has been created")


def _attach(ctx, sdk, params):
    sdk.attach_wallet(
        params["name"],
        storage_type=params.get("storage_type"),
        storage_config=params.get("storage_config"),
    )
    return Message(f"Wallet \"{params['name']}\" has been attached")


def _open(ctx, sdk, params):
    name = params["name"]
    if ctx.wallet is not None and ctx.wallet.name == name:
        raise ExecutionError(f"Wallet \"{name}\" already opened.")
    replies = []
    if ctx.wallet is not None:
        replies.append(Message(f"Wallet \"{ctx.wallet.name}\" has been closed"))
    ctx.open_wallet(
        name,
        lambda: sdk.open_wallet(
            name,
            params["key"],
            key_derivation_method=params.get("key_derivation_method"),
            rekey=params.get("rekey"),
            rekey_derivation_method=params.get("rekey_derivation_method"),
            storage_credentials=params.get("storage_credentials"),
        ),
    )
    replies.append(Message(f"Wallet \"{name}\" has been opened"))
    return replies


def _close(ctx, sdk, params):
    closed = ctx.close_wallet()
    return Message(f"Wallet \"{closed.name}\" has been closed")


def _delete(ctx, sdk, params):
    _refuse_if_open(ctx, params["name"])
    sdk.delete_wallet(
        params["name"],
        params["key"],
        key_derivation_method=params.get("key_derivation_method"),
        storage_credentials=params.get("storage_credentials"),
    )
    return Message(f"Wallet \"{params['name']}\" has been deleted")


def _detach(ctx, sdk, params):
    _refuse_if_open(ctx, params["name"])
    sdk.detach_wallet(params["name"])
    return Message(f"Wallet \"{params['name']}\" has been detached")


def _list(ctx, sdk, params):
    rows = [
        {"name": info.name, "storage_type": info.storage_type} for info in sdk.list_wallets()
    ]
    replies: list = [
        Table(
            columns=(("name", "Name"), ("storage_type", "Type")),
            rows=rows,
            empty="There are no wallets",
        )
    ]
    if ctx.wallet is not None:
        replies.append(Message(f"Current wallet \"{ctx.wallet.name}\""))
    return replies


def _export(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    path = Path(params["export_path"]).expanduser()
    sdk.export_wallet(
        wallet.handle,
        path,
        params["export_key"],
        key_derivation_method=params.get("export_key_derivation_method"),
    )
    return Message(f"Wallet \"{wallet.name}\" has been exported to the file \"{path}\"")


def _import(ctx, sdk, params):
    path = Path(params["export_path"]).expanduser()
    sdk.import_wallet(
        params["name"],
        params["key"],
        path,
        params["export_key"],
        key_derivation_method=params.get("key_derivation_method"),
        storage_type=params.get("storage_type"),
        storage_config=params.get("storage_config"),
        storage_credentials=params.get("storage_credentials"),
    )
    return Message(f"Wallet \"{params['name']}\" has been created")


def register(registry: CommandRegistry) -> None:
    registry.add_group(GROUP, "Wallet management commands")
    registry.register(
        CommandSpec(
            GROUP,
            "create",
            "Create new wallet and attach it to the shell",
            params=(
                _name(),
                _key(),
                ParamSpec("key_derivation_method", _KDF_HELP),
                _STORAGE_TYPE,
                _STORAGE_CONFIG,
                _STORAGE_CREDENTIALS,
            ),
            examples=(
                "wallet create wallet1 key",
                "wallet create wallet1 key storage_config={\"path\":\"/tmp/wallets\"}",
                "wallet create wallet1 key=secret key_derivation_method=ARGON2I_INT",
            ),
            handler=_create,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "attach",
            "Attach existing wallet to the shell",
            params=(_name(), _STORAGE_TYPE, _STORAGE_CONFIG),
            examples=(
                "wallet attach wallet1",
                "wallet attach wallet1 storage_config={\"path\":\"/tmp/wallets\"}",
            ),
            handler=_attach,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "open",
            "Open wallet. Also close previously opened",
            params=(
                _name(),
                _key(),
                ParamSpec("key_derivation_method", _KDF_HELP),
                ParamSpec(
                    "rekey",
                    "New key or passphrase used for wallet key derivation (will replace previous one)",
                    deferred=True,
                ),
                ParamSpec("rekey_derivation_method", _KDF_HELP),
                _STORAGE_CREDENTIALS,
            ),
            examples=(
                "wallet open wallet1 key",
                "wallet open wallet1 key rekey",
                "wallet open wallet1 key=secret rekey=new_secret rekey_derivation_method=ARGON2I_INT",
            ),
            handler=_open,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "close",
            "Close opened wallet",
            handler=_close,
            requires=frozenset({Requirement.WALLET}),
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "delete",
            "Delete wallet",
            params=(
                _name(),
                _key(),
                ParamSpec("key_derivation_method", _KDF_HELP),
                _STORAGE_CREDENTIALS,
            ),
            examples=("wallet delete wallet1 key",),
            handler=_delete,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "detach",
            "Detach wallet from the shell",
            params=(_name(),),
            examples=("wallet detach wallet1",),
            handler=_detach,
        )
    )
    registry.register(CommandSpec(GROUP, "list", "List attached wallets", handler=_list))
    registry.register(
        CommandSpec(
            GROUP,
            "export",
            "Export opened wallet to the file",
            params=(
                ParamSpec("export_path", "Path to the export file", required=True),
                ParamSpec(
                    "export_key",
                    "Key or passphrase used for export wallet key derivation",
                    required=True,
                    deferred=True,
                ),
                ParamSpec("export_key_derivation_method", _KDF_HELP),
            ),
            examples=("wallet export export_path=/home/indy/export_wallet export_key",),
            handler=_export,
            requires=frozenset({Requirement.WALLET}),
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "import",
            "Create new wallet, attach it to the shell and import content from the file",
            params=(
                _name("The name of new wallet"),
                _key(),
                ParamSpec("key_derivation_method", _KDF_HELP),
                _STORAGE_TYPE,
                _STORAGE_CONFIG,
                _STORAGE_CREDENTIALS,
                ParamSpec(
                    "export_path",
                    "Path to the file that contains exported wallet content",
                    required=True,
                ),
                ParamSpec(
                    "export_key",
                    "Key used for export of the wallet",
                    required=True,
                    deferred=True,
                ),
            ),
            examples=(
                "wallet import wallet1 key export_path=/home/indy/export_wallet export_key",
            ),
            handler=_import,
        )
    )
