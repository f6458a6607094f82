"""Ledger shell public surface."""

import logging

from ledger_shell.client import GatewayClient
from ledger_shell.crypto.did import abbreviate_verkey, derive_did, qualify_did
from ledger_shell.errors import (
    DidError,
    GatewayUnavailableError,
    LedgerRequestError,
    LedgerSDKError,
    PoolError,
    TransactionRejectedError,
    WalletAccessError,
    WalletError,
)
from ledger_shell.requests import build_request_to_sign, canonical_json
from ledger_shell.sdk import LedgerSDK, LocalLedgerSDK
from ledger_shell.transactions import normalize_transaction, parse_response, parse_transaction

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "LedgerSDKError",
    "WalletError",
    "WalletAccessError",
    "DidError",
    "PoolError",
    "GatewayUnavailableError",
    "LedgerRequestError",
    "TransactionRejectedError",
    "GatewayClient",
    "LedgerSDK",
    "LocalLedgerSDK",
    "abbreviate_verkey",
    "derive_did",
    "qualify_did",
    "build_request_to_sign",
    "canonical_json",
    "normalize_transaction",
    "parse_response",
    "parse_transaction",
]
