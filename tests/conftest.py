from __future__ import annotations

import io
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from ledger_shell.cli.context import SessionContext
from ledger_shell.cli.dispatcher import Dispatcher
from ledger_shell.cli.main import build_registry
from ledger_shell.cli.output import ShellOutput
from ledger_shell.cli.sources import ScriptSource
from ledger_shell.crypto.did import b58_encode, derive_did, keypair_from_seed, qualify_did
from ledger_shell.errors import (
    DidError,
    WalletAccessError,
    WalletAlreadyExistsError,
    WalletNotFoundError,
)
from ledger_shell.sdk.base import DidInfo, PoolInfo, WalletInfo

TRUSTEE_SEED = "000000000000000000000000Trustee1"
STEWARD_SEED = "000000000000000000000000Steward1"


@dataclass
class FakeHandle:
    name: str
    dids: dict[str, DidInfo] = field(default_factory=dict)


class FakeSDK:
    """In-memory SDK collaborator recording every call the shell makes."""

    def __init__(self) -> None:
        self.wallets: dict[str, str] = {}
        self.pools: dict[str, PoolInfo] = {}
        self.calls: list[tuple[str, Any]] = []
        self.submitted: list[dict] = []
        self.actions: list[tuple[dict, Any, Any]] = []
        self.responses: list[dict] = []
        self.action_replies: dict[str, Any] = {}
        self.stored_dids: dict[str, dict[str, DidInfo]] = {}

    # wallets

    def create_wallet(self, name, key, **kwargs) -> None:
        if name in self.wallets:
            raise WalletAlreadyExistsError(f"Wallet \"{name}\" already exists")
        self.calls.append(("create_wallet", name))
        self.wallets[name] = key
        self.stored_dids[name] = {}

    def attach_wallet(self, name, **kwargs) -> None:
        self.calls.append(("attach_wallet", name))
        self.wallets.setdefault(name, "")

    def detach_wallet(self, name) -> None:
        self.calls.append(("detach_wallet", name))
        self.wallets.pop(name)

    def list_wallets(self) -> list[WalletInfo]:
        return [WalletInfo(name=name) for name in sorted(self.wallets)]

    def open_wallet(self, name, key, **kwargs) -> FakeHandle:
        if name not in self.wallets:
            raise WalletNotFoundError(f"Wallet \"{name}\" isn't attached to CLI")
        if self.wallets[name] != key:
            raise WalletAccessError("Invalid wallet key")
        self.calls.append(("open_wallet", name))
        return FakeHandle(name=name, dids=self.stored_dids.setdefault(name, {}))

    def close_wallet(self, handle) -> None:
        self.calls.append(("close_wallet", handle.name))

    def delete_wallet(self, name, key, **kwargs) -> None:
        self.calls.append(("delete_wallet", name))
        self.wallets.pop(name)

    def export_wallet(self, handle, path, export_key, **kwargs) -> None:
        self.calls.append(("export_wallet", str(path)))

    def import_wallet(self, name, key, path, export_key, **kwargs) -> None:
        self.calls.append(("import_wallet", name))
        self.wallets[name] = key

    # DIDs

    def create_did(self, handle, *, did=None, seed=None, method=None, metadata=None) -> DidInfo:
        private = keypair_from_seed(seed)
        verkey_bytes = private.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        value = did or derive_did(verkey_bytes)
        if method:
            value = qualify_did(value, method)
        info = DidInfo(did=value, verkey=b58_encode(verkey_bytes), method=method, metadata=metadata)
        handle.dids[value] = info
        return info

    def list_dids(self, handle) -> list[DidInfo]:
        return [handle.dids[did] for did in sorted(handle.dids)]

    def get_did(self, handle, did) -> DidInfo:
        if did not in handle.dids:
            raise DidError(f"DID {did} does not exist in the wallet.")
        return handle.dids[did]

    def set_did_metadata(self, handle, did, metadata) -> None:
        info = self.get_did(handle, did)
        handle.dids[did] = DidInfo(did=info.did, verkey=info.verkey, metadata=metadata)

    def qualify_did(self, handle, did, method) -> str:
        info = handle.dids.pop(did)
        qualified = qualify_did(did, method)
        handle.dids[qualified] = DidInfo(did=qualified, verkey=info.verkey, method=method)
        return qualified

    def start_key_rotation(self, handle, did, seed=None) -> str:
        info = self.get_did(handle, did)
        private = keypair_from_seed(seed)
        verkey = b58_encode(private.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw))
        handle.dids[did] = DidInfo(did=did, verkey=info.verkey, next_verkey=verkey)
        return verkey

    def apply_key_rotation(self, handle, did) -> DidInfo:
        info = self.get_did(handle, did)
        handle.dids[did] = DidInfo(did=did, verkey=info.next_verkey)
        return handle.dids[did]

    def sign_request(self, handle, did, request) -> dict:
        signed = dict(request)
        signed.setdefault("identifier", did)
        signed["signature"] = f"sig-{did}"
        return signed

    def multi_sign_request(self, handle, did, request) -> dict:
        signed = dict(request)
        signatures = dict(signed.get("signatures") or {})
        signatures[did] = f"sig-{did}"
        signed["signatures"] = signatures
        return signed

    # pools

    def create_pool(self, name, genesis_path, *, gateway=None) -> PoolInfo:
        info = PoolInfo(name=name, genesis_path=str(genesis_path), gateway=gateway)
        self.pools[name] = info
        return info

    def delete_pool(self, name) -> None:
        self.pools.pop(name)

    def list_pools(self) -> list[PoolInfo]:
        return [self.pools[name] for name in sorted(self.pools)]

    def open_pool(self, name, options) -> FakeHandle:
        self.calls.append(("open_pool", name))
        return FakeHandle(name=name)

    def close_pool(self, handle) -> None:
        self.calls.append(("close_pool", handle.name))

    def refresh_pool(self, handle) -> None:
        self.calls.append(("refresh_pool", handle.name))

    def submit_request(self, handle, request) -> dict:
        self.submitted.append(request)
        if self.responses:
            return self.responses.pop(0)
        return reply({"data": None})

    def submit_action(self, handle, request, *, nodes=None, timeout=None) -> dict:
        self.actions.append((request, nodes, timeout))
        return self.action_replies


def reply(result: dict) -> dict:
    return {"op": "REPLY", "result": result}


@dataclass
class Shell:
    sdk: FakeSDK
    context: SessionContext
    dispatcher: Dispatcher
    stdout: io.StringIO
    stderr: io.StringIO
    secrets: dict[str, str]

    def run(self, *lines: str):
        result = None
        for line in lines:
            result = self.dispatcher.run_line(line)
        return result

    def batch(self, text: str) -> int:
        return self.dispatcher.run(ScriptSource(text.splitlines()), batch=True)

    def out(self) -> str:
        return self.stdout.getvalue()

    def err(self) -> str:
        return self.stderr.getvalue()


@pytest.fixture
def shell() -> Shell:
    sdk = FakeSDK()
    secrets: dict[str, str] = {}
    stdout = io.StringIO()
    stderr = io.StringIO()
    context = SessionContext(sdk)
    dispatcher = Dispatcher(
        registry=build_registry(),
        context=context,
        output=ShellOutput(stdout=stdout, stderr=stderr),
        read_secret=lambda name: secrets[name],
    )
    return Shell(sdk, context, dispatcher, stdout, stderr, secrets)


@pytest.fixture
def ready_shell(shell: Shell) -> Shell:
    """Shell with an open wallet, an active trustee DID and a connected pool."""
    shell.sdk.create_wallet("w1", "k1")
    shell.run(
        "wallet open w1 key=k1",
        f"did new seed={TRUSTEE_SEED}",
    )
    did = next(iter(shell.sdk.stored_dids["w1"]))
    shell.run(f"did use {did}")
    shell.sdk.responses.append(reply({"data": None}))
    shell.run("pool connect sandbox")
    shell.stdout.seek(0)
    shell.stdout.truncate()
    return shell


def write_genesis(path: Path, aliases=("Node1", "Node2", "Node3", "Node4")) -> Path:
    lines = []
    for number, alias in enumerate(aliases, start=1):
        txn = {
            "reqSignature": {},
            "txn": {
                "data": {
                    "data": {
                        "alias": alias,
                        "client_ip": "127.0.0.1",
                        "client_port": 9700 + number * 2,
                        "node_ip": "127.0.0.1",
                        "node_port": 9699 + number * 2,
                        "services": ["VALIDATOR"],
                    },
                    "dest": f"Node{number}Dest",
                },
                "metadata": {"from": "Th7MpTaRZVRYnPiabds81Y"},
                "type": "0",
            },
            "txnMetadata": {"seqNo": number, "txnId": f"id{number}"},
            "ver": "1",
        }
        lines.append(json.dumps(txn))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
