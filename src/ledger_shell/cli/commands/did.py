"""DID group: new, import, use, list, rotate-key, qualify, set-metadata."""

from __future__ import annotations

import json
from pathlib import Path

from ledger_shell.cli.commands.support import check_reply, submit, with_author_agreement
from ledger_shell.cli.errors import ExecutionError, ShellIOError
from ledger_shell.cli.output import Message, Notice, Table
from ledger_shell.cli.registry import CommandRegistry, CommandSpec, ParamSpec, Requirement, Shape
from ledger_shell.crypto.did import abbreviate_verkey, full_verkey
from ledger_shell.requests import build_get_nym_request, build_nym_request

GROUP = "did"
IMPORT_CONFIG_VERSION = 1

_WALLET = frozenset({Requirement.WALLET})
_WALLET_AND_DID = frozenset({Requirement.WALLET, Requirement.DID})


def _created(did: str, verkey: str) -> Message:
    return Message(f"Did \"{did}\" has been created with \"{abbreviate_verkey(did, verkey)}\" verkey")


def _new(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    info = sdk.create_did(
        wallet.handle,
        did=params.get("did"),
        seed=params.get("seed"),
        method=params.get("method"),
        metadata=params.get("metadata"),
    )
    return _created(info.did, info.verkey)


def _read_import_config(path: Path) -> list[dict]:
    try:
        config = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ShellIOError("Unable to read DID import config from the provided file") from exc
    except json.JSONDecodeError as exc:
        raise ExecutionError("Unable to read DID import config from the provided file") from exc
    if not isinstance(config, dict) or not isinstance(config.get("dids"), list):
        raise ExecutionError("Unable to read DID import config from the provided file")
    if config.get("version") != IMPORT_CONFIG_VERSION:
        raise ExecutionError("Unsupported DID import config version")
    entries = config["dids"]
    for entry in entries:
        if not isinstance(entry, dict) or not isinstance(entry.get("seed"), str):
            raise ExecutionError("Every imported DID needs a seed")
    return entries


def _import(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    entries = _read_import_config(Path(params["file"]).expanduser())
    replies: list = []
    for entry in entries:
        info = sdk.create_did(wallet.handle, did=entry.get("did"), seed=entry["seed"])
        replies.append(_created(info.did, info.verkey))
    replies.append(Message("DIDs import finished"))
    return replies


def _use(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    did = params["did"]
    sdk.get_did(wallet.handle, did)
    ctx.did = did
    return Message(f"Did \"{did}\" has been set as active")


def _list(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    rows = [
        {
            "did": info.did,
            "verkey": abbreviate_verkey(info.did, info.verkey),
            "metadata": info.metadata,
        }
        for info in sdk.list_dids(wallet.handle)
    ]
    replies: list = [
        Table(
            columns=(("did", "Did"), ("verkey", "Verkey"), ("metadata", "Metadata")),
            rows=rows,
            empty="There are no dids",
        )
    ]
    if ctx.did is not None:
        replies.append(Message(f"Current did \"{ctx.did}\""))
    return replies


def _ledger_verkey(ctx, sdk, did: str) -> str | None:
    request = build_get_nym_request(
        submitter_did=did, target_did=did, protocol_version=ctx.protocol_version
    )
    result = submit(ctx, sdk, request)
    data = result.get("data")
    if not data:
        return None
    if isinstance(data, str):
        data = json.loads(data)
    verkey = data.get("verkey")
    return full_verkey(did, verkey) if verkey else None


def _rotate_key(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    did = ctx.ensure_did()
    ledger_verkey = _ledger_verkey(ctx, sdk, did) if ctx.pool is not None else None
    replies: list = []

    if params.get("resume"):
        info = sdk.get_did(wallet.handle, did)
        if not info.next_verkey:
            raise ExecutionError("Unable to resume, have you already run rotate-key?")
        new_verkey = info.next_verkey
        if ledger_verkey is None:
            replies.append(Notice("DID is not registered on the ledger"))
            update_ledger = False
        else:
            replies.append(Message(f"Verkey on ledger: {ledger_verkey}"))
            replies.append(Message(f"Current verkey in wallet: {info.verkey}"))
            replies.append(Message(f"Temp verkey in wallet: {new_verkey}"))
            if ledger_verkey == new_verkey:
                update_ledger = False
            elif ledger_verkey == info.verkey:
                update_ledger = True
            else:
                raise ExecutionError(
                    "Unable to resume, verkey on ledger is completely different from verkey in wallet"
                )
    else:
        new_verkey = sdk.start_key_rotation(wallet.handle, did, params.get("seed"))
        update_ledger = True

    if update_ledger and ledger_verkey is not None:
        request = build_nym_request(
            submitter_did=did,
            target_did=did,
            verkey=new_verkey,
            protocol_version=ctx.protocol_version,
        )
        request = sdk.sign_request(wallet.handle, did, with_author_agreement(ctx, request))
        pool = ctx.ensure_pool()
        check_reply(sdk.submit_request(pool.handle, request))

    updated = sdk.apply_key_rotation(wallet.handle, did)
    replies.append(
        Message(
            f"Verkey for did \"{did}\" has been updated. "
            f"New verkey: \"{abbreviate_verkey(did, updated.verkey)}\""
        )
    )
    return replies


def _qualify(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    did = params["did"]
    qualified = sdk.qualify_did(wallet.handle, did, params["method"])
    replies: list = [Message(f"Fully qualified DID \"{qualified}\"")]
    if ctx.did == did:
        ctx.did = qualified
        replies.append(Message("Target DID is the same as the active one. Active DID has been updated"))
    return replies


def _set_metadata(ctx, sdk, params):
    wallet = ctx.ensure_wallet()
    did = params.get("did") or ctx.ensure_did()
    sdk.set_did_metadata(wallet.handle, did, params["metadata"])
    return Message("DID Metadata updated")


def register(registry: CommandRegistry) -> None:
    registry.add_group(GROUP, "Identity management commands")
    registry.register(
        CommandSpec(
            GROUP,
            "new",
            "Create new DID",
            params=(
                ParamSpec("did", "Known DID for new wallet instance"),
                ParamSpec(
                    "seed",
                    "Seed for creating DID key-pair (UTF-8, base64 or hex)",
                    deferred=True,
                ),
                ParamSpec("method", "Method name to create fully qualified DID"),
                ParamSpec("metadata", "DID metadata"),
            ),
            examples=(
                "did new",
                "did new did=VsKV7grR1BUE29mG2Fm2kX",
                "did new did=VsKV7grR1BUE29mG2Fm2kX method=indy",
                "did new seed",
                "did new seed=00000000000000000000000000000My1 metadata=did_metadata",
            ),
            handler=_new,
            requires=_WALLET,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "import",
            "Import DIDs entities from file to the current wallet",
            params=(ParamSpec("file", "Path to file with DIDs", main=True, required=True),),
            details=(
                'File format: {"version": 1, "dids": [{"did": "<did>", '
                '"seed": "<UTF-8, base64 or hex string>"}]}'
            ),
            examples=("did import /home/dids.json",),
            handler=_import,
            requires=_WALLET,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "use",
            "Use DID",
            params=(ParamSpec("did", "Did stored in wallet", main=True, required=True),),
            examples=("did use VsKV7grR1BUE29mG2Fm2kX",),
            handler=_use,
            requires=_WALLET,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "list",
            "List my DIDs stored in the opened wallet",
            handler=_list,
            requires=_WALLET,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "rotate-key",
            "Rotate keys for active did",
            params=(
                ParamSpec(
                    "seed",
                    "If not provided then a random one will be created (UTF-8, base64 or hex)",
                    deferred=True,
                ),
                ParamSpec(
                    "resume",
                    "Resume interrupted operation",
                    default="false",
                    shape=Shape.BOOL,
                ),
            ),
            examples=(
                "did rotate-key",
                "did rotate-key seed=00000000000000000000000000000My2",
                "did rotate-key resume=true",
            ),
            handler=_rotate_key,
            requires=_WALLET_AND_DID,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "qualify",
            "Update DID stored in the wallet to make fully qualified, or to do other DID maintenance",
            params=(
                ParamSpec("did", "Did stored in wallet", main=True, required=True),
                ParamSpec("method", "Method to apply to the DID", required=True),
            ),
            examples=("did qualify VsKV7grR1BUE29mG2Fm2kX method=did:peer",),
            handler=_qualify,
            requires=_WALLET,
        )
    )
    registry.register(
        CommandSpec(
            GROUP,
            "set-metadata",
            "Update metadata for a DID in the wallet",
            params=(
                ParamSpec("did", "Did stored in wallet (the active did by default)"),
                ParamSpec("metadata", "Metadata to set", required=True),
            ),
            examples=(
                'did set-metadata did=VsKV7grR1BUE29mG2Fm2kX metadata={"label":"Main"}',
            ),
            handler=_set_metadata,
            requires=_WALLET,
        )
    )
