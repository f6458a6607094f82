"""Encrypted local wallet storage."""

from __future__ import annotations

import base64
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ledger_shell.crypto.did import (
    b58_decode,
    b58_encode,
    derive_did,
    did_method,
    is_valid_did,
    keypair_from_seed,
    qualify_did,
)
from ledger_shell.errors import (
    DidError,
    WalletAccessError,
    WalletAlreadyExistsError,
    WalletError,
    WalletNotFoundError,
)
from ledger_shell.sdk.base import (
    DEFAULT_KEY_DERIVATION_METHOD,
    DEFAULT_STORAGE_TYPE,
    KEY_DERIVATION_METHODS,
    DidInfo,
    WalletInfo,
)

ENVELOPE_VERSION = 1
_SCRYPT_COST = {"ARGON2I_MOD": 2**15, "ARGON2I_INT": 2**12}

logger = logging.getLogger(__name__)


def _chmod_owner_only(path: Path) -> None:
    if os.name != "posix":
        return
    path.chmod(0o600)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _normalize_method(method: str | None) -> str:
    value = (method or DEFAULT_KEY_DERIVATION_METHOD).strip().upper()
    if value not in KEY_DERIVATION_METHODS:
        raise WalletError(
            "key_derivation_method must be one of: " + ", ".join(KEY_DERIVATION_METHODS)
        )
    return value


def derive_wallet_key(passphrase: str, method: str, salt: bytes) -> bytes:
    if method == "RAW":
        try:
            raw = b58_decode(passphrase)
        except ValueError as exc:
            raise WalletAccessError("RAW wallet key must be base58 encoded") from exc
        if len(raw) != 32:
            raise WalletAccessError("RAW wallet key must decode to 32 bytes")
        return raw
    kdf = Scrypt(salt=salt, length=32, n=_SCRYPT_COST[method], r=8, p=1)
    return kdf.derive(passphrase.encode("utf-8"))


def seal(content: dict, passphrase: str, method: str) -> dict:
    salt = os.urandom(16)
    key = derive_wallet_key(passphrase, method, salt)
    return _seal_with_key(content, key, method, salt)


def _seal_with_key(content: dict, key: bytes, method: str, salt: bytes) -> dict:
    nonce = os.urandom(12)
    plaintext = json.dumps(content, sort_keys=True).encode("utf-8")
    ciphertext = AESGCM(key).encrypt(nonce, plaintext, None)
    return {
        "version": ENVELOPE_VERSION,
        "kdf": method,
        "salt": _b64(salt),
        "nonce": _b64(nonce),
        "ciphertext": _b64(ciphertext),
    }


def unseal(envelope: dict, passphrase: str, method: str | None) -> tuple[dict, bytes, bytes]:
    """Decrypt an envelope, returning (content, derived key, salt)."""
    try:
        stored_method = str(envelope["kdf"])
        salt = base64.b64decode(envelope["salt"])
        nonce = base64.b64decode(envelope["nonce"])
        ciphertext = base64.b64decode(envelope["ciphertext"])
    except Exception as exc:
        raise WalletError("wallet storage is corrupted") from exc
    if method is not None and _normalize_method(method) != stored_method:
        raise WalletAccessError("Invalid wallet key")
    key = derive_wallet_key(passphrase, stored_method, salt)
    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as exc:
        raise WalletAccessError("Invalid wallet key") from exc
    return json.loads(plaintext.decode("utf-8")), key, salt


def _empty_content() -> dict:
    return {"dids": {}, "keys": {}}


@dataclass
class LocalWallet:
    """An opened wallet; content stays decrypted in memory until closed."""

    name: str
    path: Path
    method: str
    _key: bytes = field(repr=False)
    _salt: bytes = field(repr=False)
    content: dict[str, Any] = field(repr=False, default_factory=_empty_content)
    closed: bool = False

    def _ensure_open(self) -> None:
        if self.closed:
            raise WalletError(f"wallet \"{self.name}\" is closed")

    def save(self) -> None:
        self._ensure_open()
        envelope = _seal_with_key(self.content, self._key, self.method, self._salt)
        self.path.write_text(json.dumps(envelope, indent=2) + "\n", encoding="utf-8")
        _chmod_owner_only(self.path)

    def rekey(self, passphrase: str, method: str | None) -> None:
        self._ensure_open()
        self.method = _normalize_method(method)
        self._salt = os.urandom(16)
        self._key = derive_wallet_key(passphrase, self.method, self._salt)
        self.save()

    def close(self) -> None:
        self.content = _empty_content()
        self._key = b""
        self.closed = True

    # DID records

    def _did_record(self, did: str) -> dict:
        self._ensure_open()
        record = self.content["dids"].get(did)
        if record is None:
            raise DidError(f"DID {did} does not exist in the wallet.")
        return record

    def _store_key(self, private: Ed25519PrivateKey) -> str:
        private_bytes = private.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
        public_bytes = private.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        verkey = b58_encode(public_bytes)
        self.content["keys"][verkey] = _b64(private_bytes)
        return verkey

    def create_did(
        self,
        *,
        did: str | None = None,
        seed: str | None = None,
        method: str | None = None,
        metadata: str | None = None,
    ) -> DidInfo:
        self._ensure_open()
        try:
            private = keypair_from_seed(seed)
        except ValueError as exc:
            raise DidError("Invalid seed provided.") from exc
        if did is not None and not is_valid_did(did):
            raise DidError(f"Invalid DID {did} provided.")
        public_bytes = private.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        value = did or derive_did(public_bytes)
        if method:
            value = qualify_did(value, method)
        if value in self.content["dids"]:
            raise DidError("DID already present in the wallet!")
        verkey = self._store_key(private)
        record = {
            "did": value,
            "verkey": verkey,
            "method": method,
            "metadata": metadata,
            "next_verkey": None,
        }
        self.content["dids"][value] = record
        self.save()
        logger.info("stored DID %s in wallet %s", value, self.name)
        return DidInfo(**record)

    def list_dids(self) -> list[DidInfo]:
        self._ensure_open()
        return [DidInfo(**record) for _, record in sorted(self.content["dids"].items())]

    def get_did(self, did: str) -> DidInfo:
        return DidInfo(**self._did_record(did))

    def set_metadata(self, did: str, metadata: str) -> None:
        self._did_record(did)["metadata"] = metadata
        self.save()

    def qualify(self, did: str, method: str) -> str:
        record = self._did_record(did)
        try:
            qualified = qualify_did(did, method)
        except ValueError as exc:
            raise DidError(str(exc)) from exc
        if qualified != did and qualified in self.content["dids"]:
            raise DidError("DID already present in the wallet!")
        del self.content["dids"][did]
        record = dict(record, did=qualified, method=did_method(qualified))
        self.content["dids"][qualified] = record
        self.save()
        return qualified

    def start_rotation(self, did: str, seed: str | None) -> str:
        record = self._did_record(did)
        try:
            private = keypair_from_seed(seed)
        except ValueError as exc:
            raise DidError("Invalid seed provided.") from exc
        record["next_verkey"] = self._store_key(private)
        self.save()
        return record["next_verkey"]

    def apply_rotation(self, did: str) -> DidInfo:
        record = self._did_record(did)
        if not record.get("next_verkey"):
            raise DidError(f"Next key is not set for the DID {did}.")
        record["verkey"] = record["next_verkey"]
        record["next_verkey"] = None
        self.save()
        return DidInfo(**record)

    def signing_key(self, did: str) -> Ed25519PrivateKey:
        record = self._did_record(did)
        encoded = self.content["keys"].get(record["verkey"])
        if encoded is None:
            raise DidError(f"Key for DID {did} does not exist in the wallet!")
        return Ed25519PrivateKey.from_private_bytes(base64.b64decode(encoded))


class LocalWalletStore:
    """Attached wallet configs and their encrypted data files under one directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _config_path(self, name: str) -> Path:
        return self.root / f"{name}.json"

    def _data_path(self, info: WalletInfo) -> Path:
        config = info.storage_config or {}
        if config.get("path"):
            return Path(str(config["path"])) / f"{info.name}.wallet"
        return self.root / f"{info.name}.wallet"

    def _check_storage(self, storage_type: str | None, storage_config: dict | None) -> WalletInfo:
        kind = storage_type or DEFAULT_STORAGE_TYPE
        if kind != DEFAULT_STORAGE_TYPE:
            raise WalletError(f"Unknown wallet storage type: {kind}")
        if storage_config is not None and not isinstance(storage_config, dict):
            raise WalletError("storage_config must be a JSON object")
        return WalletInfo(name="", storage_type=kind, storage_config=storage_config)

    def info(self, name: str) -> WalletInfo:
        path = self._config_path(name)
        if not path.exists():
            raise WalletNotFoundError(f"Wallet \"{name}\" isn't attached to CLI")
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except Exception as exc:
            raise WalletError(f"invalid wallet config: {path}") from exc
        return WalletInfo(
            name=name,
            storage_type=str(payload.get("storage_type", DEFAULT_STORAGE_TYPE)),
            storage_config=payload.get("storage_config"),
        )

    def attach(
        self,
        name: str,
        *,
        storage_type: str | None = None,
        storage_config: dict | None = None,
        must_exist: bool = True,
    ) -> WalletInfo:
        if self._config_path(name).exists():
            raise WalletAlreadyExistsError(f"Wallet \"{name}\" is already attached to CLI")
        checked = self._check_storage(storage_type, storage_config)
        info = WalletInfo(
            name=name,
            storage_type=checked.storage_type,
            storage_config=checked.storage_config,
        )
        if must_exist and not self._data_path(info).exists():
            raise WalletNotFoundError(f"Wallet \"{name}\" storage not found")
        self.root.mkdir(parents=True, exist_ok=True)
        record = {"storage_type": info.storage_type, "storage_config": info.storage_config}
        self._config_path(name).write_text(
            json.dumps(record, sort_keys=True, indent=2) + "\n", encoding="utf-8"
        )
        return info

    def detach(self, name: str) -> None:
        path = self._config_path(name)
        if not path.exists():
            raise WalletNotFoundError(f"Wallet \"{name}\" isn't attached to CLI")
        path.unlink()

    def list(self) -> list[WalletInfo]:
        if not self.root.exists():
            return []
        return [self.info(path.stem) for path in sorted(self.root.glob("*.json"))]

    def create(
        self,
        name: str,
        key: str,
        *,
        key_derivation_method: str | None = None,
        storage_type: str | None = None,
        storage_config: dict | None = None,
        content: dict | None = None,
    ) -> WalletInfo:
        method = _normalize_method(key_derivation_method)
        if self._config_path(name).exists():
            raise WalletAlreadyExistsError(f"Wallet \"{name}\" already exists")
        checked = self._check_storage(storage_type, storage_config)
        info = WalletInfo(
            name=name,
            storage_type=checked.storage_type,
            storage_config=checked.storage_config,
        )
        data_path = self._data_path(info)
        if data_path.exists():
            raise WalletAlreadyExistsError(f"Wallet \"{name}\" storage already exists")
        data_path.parent.mkdir(parents=True, exist_ok=True)
        envelope = seal(content or _empty_content(), key, method)
        data_path.write_text(json.dumps(envelope, indent=2) + "\n", encoding="utf-8")
        _chmod_owner_only(data_path)
        self.attach(name, storage_type=storage_type, storage_config=storage_config)
        logger.info("created wallet %s at %s", name, data_path)
        return info

    def open(
        self,
        name: str,
        key: str,
        *,
        key_derivation_method: str | None = None,
    ) -> LocalWallet:
        info = self.info(name)
        data_path = self._data_path(info)
        if not data_path.exists():
            raise WalletNotFoundError(f"Wallet \"{name}\" storage not found")
        envelope = json.loads(data_path.read_text(encoding="utf-8"))
        content, derived, salt = unseal(envelope, key, key_derivation_method)
        return LocalWallet(
            name=name,
            path=data_path,
            method=str(envelope["kdf"]),
            _key=derived,
            _salt=salt,
            content=content,
        )

    def delete(self, name: str, key: str, *, key_derivation_method: str | None = None) -> None:
        wallet = self.open(name, key, key_derivation_method=key_derivation_method)
        wallet.close()
        wallet.path.unlink()
        self.detach(name)
        logger.info("deleted wallet %s", name)

    def export(
        self,
        wallet: LocalWallet,
        path: Path,
        export_key: str,
        *,
        key_derivation_method: str | None = None,
    ) -> None:
        if path.exists():
            raise WalletError(f"Export file already exists: {path}")
        method = _normalize_method(key_derivation_method)
        path.parent.mkdir(parents=True, exist_ok=True)
        envelope = seal(wallet.content, export_key, method)
        path.write_text(json.dumps(envelope, indent=2) + "\n", encoding="utf-8")
        _chmod_owner_only(path)

    def read_export(self, path: Path, export_key: str) -> dict:
        if not path.exists():
            raise WalletError(f"Export file not found: {path}")
        try:
            envelope = json.loads(path.read_text(encoding="utf-8"))
        except Exception as exc:
            raise WalletError(f"invalid export file: {path}") from exc
        content, _, _ = unseal(envelope, export_key, None)
        return content
