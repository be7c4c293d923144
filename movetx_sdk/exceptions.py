"""
Exceptions for the MoveTx SDK.
"""
from typing import Any, Optional


class MoveTxError(Exception):
    """Base exception for all MoveTx SDK errors."""
    pass


class TransactionBuildFailed(MoveTxError):
    """Raised when the sender's account or network state cannot be resolved."""
    pass


class SignerUnavailable(MoveTxError):
    """Raised when no signer is bound or the bound signer lacks address/public key."""
    pass


class InvalidKeyMaterial(MoveTxError, ValueError):
    """Raised when a normalized public key has the wrong length or encoding."""
    pass


class InvalidSignature(MoveTxError, ValueError):
    """Raised when a normalized signature has the wrong length or encoding."""
    pass


class NetworkError(MoveTxError):
    """Raised on transport failure talking to the ledger or a signing service."""
    pass


class ConfirmationTimeout(NetworkError):
    """Raised when a caller-imposed confirmation timeout elapses."""

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        self.transaction_hash = transaction_hash
        super().__init__(message)


class TransactionRejected(MoveTxError):
    """Raised when the ledger refuses a submitted transaction."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        vm_error_code: Optional[int] = None
    ):
        self.error_code = error_code
        self.vm_error_code = vm_error_code
        super().__init__(message)


class SponsorshipDenied(MoveTxError):
    """Raised when the sponsorship backend refuses without requesting a fallback."""

    def __init__(self, message: str, response: Optional[Any] = None):
        self.response = response
        super().__init__(message)


class ChainExecutionFailed(MoveTxError):
    """Raised when a transaction reached the ledger but its execution aborted."""

    def __init__(self, abort_reason: str, transaction_hash: Optional[str] = None):
        self.abort_reason = abort_reason
        self.transaction_hash = transaction_hash
        super().__init__(abort_reason)
