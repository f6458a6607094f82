"""Capability interface between the command shell and the ledger SDK."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

DEFAULT_STORAGE_TYPE = "default"
DEFAULT_KEY_DERIVATION_METHOD = "ARGON2I_MOD"
KEY_DERIVATION_METHODS = ("ARGON2I_MOD", "ARGON2I_INT", "RAW")


@dataclass(frozen=True)
class WalletInfo:
    name: str
    storage_type: str = DEFAULT_STORAGE_TYPE
    storage_config: dict | None = None


@dataclass(frozen=True)
class DidInfo:
    did: str
    verkey: str
    method: str | None = None
    metadata: str | None = None
    next_verkey: str | None = None


@dataclass(frozen=True)
class PoolInfo:
    name: str
    genesis_path: str
    gateway: str | None = None


@dataclass(frozen=True)
class PoolOptions:
    protocol_version: int = 2
    timeout: int | None = None
    extended_timeout: int | None = None
    pre_ordered_nodes: list[str] = field(default_factory=list)
    number_read_nodes: int | None = None


class WalletHandle(Protocol):
    name: str


class PoolHandle(Protocol):
    name: str


class LedgerSDK(Protocol):
    """Operations the command handlers need from the SDK collaborator."""

    # wallets
    def create_wallet(
        self,
        name: str,
        key: str,
        *,
        key_derivation_method: str | None = None,
        storage_type: str | None = None,
        storage_config: dict | None = None,
        storage_credentials: dict | None = None,
    ) -> WalletInfo: ...

    def attach_wallet(
        self,
        name: str,
        *,
        storage_type: str | None = None,
        storage_config: dict | None = None,
    ) -> WalletInfo: ...

    def detach_wallet(self, name: str) -> None: ...

    def list_wallets(self) -> list[WalletInfo]: ...

    def open_wallet(
        self,
        name: str,
        key: str,
        *,
        key_derivation_method: str | None = None,
        rekey: str | None = None,
        rekey_derivation_method: str | None = None,
        storage_credentials: dict | None = None,
    ) -> WalletHandle: ...

    def close_wallet(self, handle: WalletHandle) -> None: ...

    def delete_wallet(
        self,
        name: str,
        key: str,
        *,
        key_derivation_method: str | None = None,
        storage_credentials: dict | None = None,
    ) -> None: ...

    def export_wallet(
        self,
        handle: WalletHandle,
        path: Path,
        export_key: str,
        *,
        key_derivation_method: str | None = None,
    ) -> None: ...

    def import_wallet(
        self,
        name: str,
        key: str,
        path: Path,
        export_key: str,
        *,
        key_derivation_method: str | None = None,
        storage_type: str | None = None,
        storage_config: dict | None = None,
        storage_credentials: dict | None = None,
    ) -> WalletInfo: ...

    # DIDs
    def create_did(
        self,
        handle: WalletHandle,
        *,
        did: str | None = None,
        seed: str | None = None,
        method: str | None = None,
        metadata: str | None = None,
    ) -> DidInfo: ...

    def list_dids(self, handle: WalletHandle) -> list[DidInfo]: ...

    def get_did(self, handle: WalletHandle, did: str) -> DidInfo: ...

    def set_did_metadata(self, handle: WalletHandle, did: str, metadata: str) -> None: ...

    def qualify_did(self, handle: WalletHandle, did: str, method: str) -> str: ...

    def start_key_rotation(self, handle: WalletHandle, did: str, seed: str | None = None) -> str: ...

    def apply_key_rotation(self, handle: WalletHandle, did: str) -> DidInfo: ...

    def sign_request(self, handle: WalletHandle, did: str, request: dict) -> dict: ...

    def multi_sign_request(self, handle: WalletHandle, did: str, request: dict) -> dict: ...

    # pools
    def create_pool(self, name: str, genesis_path: Path, *, gateway: str | None = None) -> PoolInfo: ...

    def delete_pool(self, name: str) -> None: ...

    def list_pools(self) -> list[PoolInfo]: ...

    def open_pool(self, name: str, options: PoolOptions) -> PoolHandle: ...

    def close_pool(self, handle: PoolHandle) -> None: ...

    def refresh_pool(self, handle: PoolHandle) -> None: ...

    def submit_request(self, handle: PoolHandle, request: dict) -> dict[str, Any]: ...

    def submit_action(
        self,
        handle: PoolHandle,
        request: dict,
        *,
        nodes: list[str] | None = None,
        timeout: int | None = None,
    ) -> dict[str, Any]: ...
