"""
MoveTx SDK - sponsored transaction execution for Move ledgers.
"""
from .client import TransactionClient, SubmissionAttempt, PipelineState
from .builder import TransactionBuilder, UnsignedTransaction
from .ledger import LedgerClient
from .confirmation import ConfirmationWaiter
from .sponsorship import SponsorshipClient
from .authenticator import assemble, SignatureScheme
from .encoding import compute_digest, normalize_public_key, normalize_signature
from .models import (
    CallIntent,
    ExecutionResult,
    RawSignature,
    SponsorshipAvailability,
    SponsorshipResponse,
    SponsorshipStatus,
    SubmissionOutcome,
)
from .signer import (
    CustodialSigner,
    LocalAccountSigner,
    NativeSigner,
    NativeSignResult,
    RemoteCustodialSigner,
    WalletSession,
)
from .exceptions import (
    MoveTxError,
    TransactionBuildFailed,
    SignerUnavailable,
    InvalidKeyMaterial,
    InvalidSignature,
    NetworkError,
    ConfirmationTimeout,
    TransactionRejected,
    SponsorshipDenied,
    ChainExecutionFailed,
)
from .version import __version__

__all__ = [
    "TransactionClient",
    "SubmissionAttempt",
    "PipelineState",
    "TransactionBuilder",
    "UnsignedTransaction",
    "LedgerClient",
    "ConfirmationWaiter",
    "SponsorshipClient",
    "assemble",
    "SignatureScheme",
    "compute_digest",
    "normalize_public_key",
    "normalize_signature",
    "CallIntent",
    "ExecutionResult",
    "RawSignature",
    "SponsorshipAvailability",
    "SponsorshipResponse",
    "SponsorshipStatus",
    "SubmissionOutcome",
    "CustodialSigner",
    "LocalAccountSigner",
    "NativeSigner",
    "NativeSignResult",
    "RemoteCustodialSigner",
    "WalletSession",
    "MoveTxError",
    "TransactionBuildFailed",
    "SignerUnavailable",
    "InvalidKeyMaterial",
    "InvalidSignature",
    "NetworkError",
    "ConfirmationTimeout",
    "TransactionRejected",
    "SponsorshipDenied",
    "ChainExecutionFailed",
    "__version__",
]
