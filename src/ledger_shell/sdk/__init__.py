from ledger_shell.sdk.base import (
    DidInfo,
    LedgerSDK,
    PoolHandle,
    PoolInfo,
    PoolOptions,
    WalletHandle,
    WalletInfo,
)
from ledger_shell.sdk.local import LocalLedgerSDK, default_home

__all__ = [
    "DidInfo",
    "LedgerSDK",
    "LocalLedgerSDK",
    "PoolHandle",
    "PoolInfo",
    "PoolOptions",
    "WalletHandle",
    "WalletInfo",
    "default_home",
]
