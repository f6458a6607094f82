from ledger_shell.transactions.schemas import (
    REJECT,
    REPLY,
    REQNACK,
    LedgerResponse,
    StoredTransaction,
    normalize_transaction,
    parse_response,
    parse_transaction,
)

__all__ = [
    "REPLY",
    "REQNACK",
    "REJECT",
    "LedgerResponse",
    "StoredTransaction",
    "normalize_transaction",
    "parse_response",
    "parse_transaction",
]
