"""Local filesystem implementation of the ledger SDK capability interface."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from ledger_shell.crypto.did import b58_encode
from ledger_shell.errors import PoolError, WalletError
from ledger_shell.requests import build_request_to_sign
from ledger_shell.sdk.base import DidInfo, PoolInfo, PoolOptions, WalletInfo
from ledger_shell.sdk.pool import LocalPoolStore, PoolConnection
from ledger_shell.sdk.wallet import LocalWallet, LocalWalletStore

HOME_ENV_VAR = "LEDGER_SHELL_HOME"
DEFAULT_HOME = Path.home() / ".ledger_shell"

logger = logging.getLogger(__name__)


def default_home() -> Path:
    env_home = os.getenv(HOME_ENV_VAR)
    return Path(env_home.strip()) if env_home and env_home.strip() else DEFAULT_HOME


class LocalLedgerSDK:
    def __init__(self, home: Path | None = None) -> None:
        self.home = home or default_home()
        self.wallets = LocalWalletStore(self.home / "wallets")
        self.pools = LocalPoolStore(self.home / "pools")

    @staticmethod
    def _wallet(handle: object) -> LocalWallet:
        if not isinstance(handle, LocalWallet):
            raise WalletError("invalid wallet handle")
        return handle

    @staticmethod
    def _pool(handle: object) -> PoolConnection:
        if not isinstance(handle, PoolConnection):
            raise PoolError("invalid pool handle")
        return handle

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
    ) -> WalletInfo:
        return self.wallets.create(
            name,
            key,
            key_derivation_method=key_derivation_method,
            storage_type=storage_type,
            storage_config=storage_config,
        )

    def attach_wallet(
        self,
        name: str,
        *,
        storage_type: str | None = None,
        storage_config: dict | None = None,
    ) -> WalletInfo:
        return self.wallets.attach(name, storage_type=storage_type, storage_config=storage_config)

    def detach_wallet(self, name: str) -> None:
        self.wallets.detach(name)

    def list_wallets(self) -> list[WalletInfo]:
        return self.wallets.list()

    def open_wallet(
        self,
        name: str,
        key: str,
        *,
        key_derivation_method: str | None = None,
        rekey: str | None = None,
        rekey_derivation_method: str | None = None,
        storage_credentials: dict | None = None,
    ) -> LocalWallet:
        wallet = self.wallets.open(name, key, key_derivation_method=key_derivation_method)
        if rekey is not None:
            try:
                wallet.rekey(rekey, rekey_derivation_method)
            except Exception:
                wallet.close()
                raise
        logger.debug("opened wallet %s", name)
        return wallet

    def close_wallet(self, handle: object) -> None:
        self._wallet(handle).close()

    def delete_wallet(
        self,
        name: str,
        key: str,
        *,
        key_derivation_method: str | None = None,
        storage_credentials: dict | None = None,
    ) -> None:
        self.wallets.delete(name, key, key_derivation_method=key_derivation_method)

    def export_wallet(
        self,
        handle: object,
        path: Path,
        export_key: str,
        *,
        key_derivation_method: str | None = None,
    ) -> None:
        self.wallets.export(
            self._wallet(handle),
            path,
            export_key,
            key_derivation_method=key_derivation_method,
        )

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
    ) -> WalletInfo:
        content = self.wallets.read_export(path, export_key)
        return self.wallets.create(
            name,
            key,
            key_derivation_method=key_derivation_method,
            storage_type=storage_type,
            storage_config=storage_config,
            content=content,
        )

    # DIDs

    def create_did(
        self,
        handle: object,
        *,
        did: str | None = None,
        seed: str | None = None,
        method: str | None = None,
        metadata: str | None = None,
    ) -> DidInfo:
        return self._wallet(handle).create_did(did=did, seed=seed, method=method, metadata=metadata)

    def list_dids(self, handle: object) -> list[DidInfo]:
        return self._wallet(handle).list_dids()

    def get_did(self, handle: object, did: str) -> DidInfo:
        return self._wallet(handle).get_did(did)

    def set_did_metadata(self, handle: object, did: str, metadata: str) -> None:
        self._wallet(handle).set_metadata(did, metadata)

    def qualify_did(self, handle: object, did: str, method: str) -> str:
        return self._wallet(handle).qualify(did, method)

    def start_key_rotation(self, handle: object, did: str, seed: str | None = None) -> str:
        return self._wallet(handle).start_rotation(did, seed)

    def apply_key_rotation(self, handle: object, did: str) -> DidInfo:
        return self._wallet(handle).apply_rotation(did)

    def _signature(self, handle: object, did: str, request: dict) -> str:
        key = self._wallet(handle).signing_key(did)
        return b58_encode(key.sign(build_request_to_sign(request)))

    def sign_request(self, handle: object, did: str, request: dict) -> dict:
        signed = dict(request)
        signed.setdefault("identifier", did)
        signed["signature"] = self._signature(handle, did, signed)
        return signed

    def multi_sign_request(self, handle: object, did: str, request: dict) -> dict:
        signed = dict(request)
        signatures = dict(signed.get("signatures") or {})
        single = signed.pop("signature", None)
        if single is not None and signed.get("identifier"):
            signatures[signed["identifier"]] = single
        signatures[did] = self._signature(handle, did, signed)
        signed["signatures"] = signatures
        return signed

    # pools

    def create_pool(self, name: str, genesis_path: Path, *, gateway: str | None = None) -> PoolInfo:
        return self.pools.create(name, genesis_path, gateway=gateway)

    def delete_pool(self, name: str) -> None:
        self.pools.delete(name)

    def list_pools(self) -> list[PoolInfo]:
        return self.pools.list()

    def open_pool(self, name: str, options: PoolOptions) -> PoolConnection:
        return self.pools.open(name, options)

    def close_pool(self, handle: object) -> None:
        self._pool(handle).close()

    def refresh_pool(self, handle: object) -> None:
        self._pool(handle).refresh()

    def submit_request(self, handle: object, request: dict) -> dict[str, Any]:
        return self._pool(handle).submit(request)

    def submit_action(
        self,
        handle: object,
        request: dict,
        *,
        nodes: list[str] | None = None,
        timeout: int | None = None,
    ) -> dict[str, Any]:
        return self._pool(handle).submit_action(request, nodes=nodes, timeout=timeout)
