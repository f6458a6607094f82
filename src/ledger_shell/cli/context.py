"""Mutable session state shared by every command of one shell run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from ledger_shell.cli.errors import (
    NoActiveIdentity,
    NoOpenWallet,
    NoPoolConnection,
    NoStoredTransaction,
)
from ledger_shell.requests import DEFAULT_PROTOCOL_VERSION

DEFAULT_PROMPT = "ledger"
DEFAULT_TAA_MECHANISM = "for_session"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenedWallet:
    name: str
    handle: Any


@dataclass(frozen=True)
class ConnectedPool:
    name: str
    handle: Any


@dataclass(frozen=True)
class AuthorAgreement:
    text: str
    version: str
    digest: str | None = None
    accepted_at: int | None = None

    @property
    def accepted(self) -> bool:
        return self.accepted_at is not None


def abbreviate_did(did: str) -> str:
    if len(did) <= 6:
        return did
    return f"{did[:3]}...{did[-3:]}"


class SessionContext:
    """Owns the wallet and pool handles; replacing one releases the old one first."""

    def __init__(
        self,
        sdk: Any,
        *,
        base_prompt: str = DEFAULT_PROMPT,
        taa_mechanism: str = DEFAULT_TAA_MECHANISM,
    ) -> None:
        self.sdk = sdk
        self.base_prompt = base_prompt
        self.taa_mechanism = taa_mechanism
        self.protocol_version = DEFAULT_PROTOCOL_VERSION
        self.did: str | None = None
        self.transaction: str | None = None
        self.agreement: AuthorAgreement | None = None
        # Asks a yes/no question on the terminal; unset outside interactive sessions.
        self.confirm: Callable[[str], bool] | None = None
        self.exit_requested = False
        self._wallet: OpenedWallet | None = None
        self._pool: ConnectedPool | None = None

    @property
    def wallet(self) -> OpenedWallet | None:
        return self._wallet

    @property
    def pool(self) -> ConnectedPool | None:
        return self._pool

    # wallet slot

    def open_wallet(self, name: str, acquire: Callable[[], Any]) -> OpenedWallet:
        self.close_wallet()
        handle = acquire()
        self._wallet = OpenedWallet(name=name, handle=handle)
        logger.debug("wallet slot set to %s", name)
        return self._wallet

    def close_wallet(self) -> OpenedWallet | None:
        current = self._wallet
        if current is None:
            return None
        self._wallet = None
        self.did = None
        self.sdk.close_wallet(current.handle)
        logger.debug("released wallet %s", current.name)
        return current

    def ensure_wallet(self) -> OpenedWallet:
        if self._wallet is None:
            raise NoOpenWallet()
        return self._wallet

    # pool slot

    def connect_pool(self, name: str, acquire: Callable[[], Any]) -> ConnectedPool:
        self.disconnect_pool()
        handle = acquire()
        self._pool = ConnectedPool(name=name, handle=handle)
        logger.debug("pool slot set to %s", name)
        return self._pool

    def disconnect_pool(self) -> ConnectedPool | None:
        current = self._pool
        if current is None:
            return None
        self._pool = None
        self.agreement = None
        self.sdk.close_pool(current.handle)
        logger.debug("released pool %s", current.name)
        return current

    def ensure_pool(self) -> ConnectedPool:
        if self._pool is None:
            raise NoPoolConnection()
        return self._pool

    # identity and transaction

    def ensure_did(self) -> str:
        if self.did is None:
            raise NoActiveIdentity()
        return self.did

    def ensure_transaction(self) -> str:
        if self.transaction is None:
            raise NoStoredTransaction()
        return self.transaction

    def prompt(self) -> str:
        parts = []
        if self._pool is not None:
            parts.append(f"pool({self._pool.name})")
        if self._wallet is not None:
            parts.append(f"wallet({self._wallet.name})")
        if self.did is not None:
            parts.append(f"did({abbreviate_did(self.did)})")
        parts.append(self.base_prompt)
        return ":".join(parts) + "> "

    def teardown(self) -> None:
        """Release every open handle; errors from one release do not skip the other."""
        try:
            self.close_wallet()
        finally:
            self.disconnect_pool()
