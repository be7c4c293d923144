"""
Signer capabilities for the MoveTx SDK.
"""
from .base import CHAIN_TYPE, CustodialSigner, NativeSigner, NativeSignResult, sign_digest
from .local import LocalAccountSigner
from .remote import RemoteCustodialSigner
from .session import SignerKind, WalletSession

__all__ = [
    "CHAIN_TYPE",
    "CustodialSigner",
    "NativeSigner",
    "NativeSignResult",
    "sign_digest",
    "LocalAccountSigner",
    "RemoteCustodialSigner",
    "SignerKind",
    "WalletSession",
]
