"""SDK error types."""

from __future__ import annotations


class LedgerSDKError(RuntimeError):
    """Base SDK error."""


class WalletError(LedgerSDKError):
    """Wallet storage operation failed."""


class WalletNotFoundError(WalletError):
    """Wallet is not attached or its storage is missing."""


class WalletAlreadyExistsError(WalletError):
    """Wallet with the same name is already attached."""


class WalletAccessError(WalletError):
    """Wallet key is invalid or wallet content cannot be decrypted."""


class DidError(LedgerSDKError):
    """DID operation failed."""


class PoolError(LedgerSDKError):
    """Pool operation failed."""


class PoolNotFoundError(PoolError):
    """Pool ledger config does not exist."""


class PoolAlreadyExistsError(PoolError):
    """Pool ledger config with the same name already exists."""


class GatewayUnavailableError(PoolError):
    """Ledger gateway could not be reached."""


class LedgerRequestError(GatewayUnavailableError):
    """Ledger gateway returned a structured HTTP error response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reason: object | None = None,
        body: object | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.body = body


class TransactionRejectedError(LedgerSDKError):
    """Ledger answered with REQNACK or REJECT."""

    def __init__(self, reason: str, *, op: str = "REJECT") -> None:
        super().__init__(f"Transaction has been rejected: {reason}")
        self.reason = reason
        self.op = op
