"""
Wallet session: which signer capability is bound to the active wallet.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union

from ..encoding import normalize_address
from ..exceptions import SignerUnavailable
from .base import CustodialSigner, NativeSigner


class SignerKind(str, Enum):
    NATIVE = "native"
    CUSTODIAL = "custodial"


@dataclass
class WalletSession:
    """
    The active wallet and its bound signer.

    Exactly one of ``native_signer`` or ``custodial_signer`` may be bound.
    A custodial session also needs the wallet's public key, since the
    custodial service only returns raw signatures.

    Attributes:
        address: Wallet address
        native_signer: Signer that produces complete authenticators
        custodial_signer: Remote signer that produces raw signatures
        public_key: Hex public key of a custodial wallet
    """
    address: Optional[str] = None
    native_signer: Optional[NativeSigner] = None
    custodial_signer: Optional[CustodialSigner] = None
    public_key: Optional[str] = None

    def __post_init__(self):
        if self.native_signer is not None and self.custodial_signer is not None:
            raise ValueError("A wallet session binds either a native or a custodial signer, not both")
        if self.address is None and self.native_signer is not None:
            self.address = getattr(self.native_signer, "address", None)

    @classmethod
    def from_linked_accounts(
        cls,
        linked_accounts: Iterable[Dict[str, Any]],
        custodial_signer: CustodialSigner
    ) -> "WalletSession":
        """
        Bind a custodial signer to the user's embedded wallet.

        The wallet is the first linked account of type ``wallet`` on the
        ``aptos`` chain type that has both an address and a public key.

        Raises:
            SignerUnavailable: If the user has no usable embedded wallet
        """
        for account in linked_accounts or []:
            if account.get("type") != "wallet" or account.get("chainType") != "aptos":
                continue
            if account.get("address") and account.get("publicKey"):
                return cls(
                    address=account["address"],
                    custodial_signer=custodial_signer,
                    public_key=account["publicKey"],
                )
        raise SignerUnavailable("No embedded wallet with an address and public key is linked")

    def signer_kind(self) -> SignerKind:
        """
        Identify the bound signer capability.

        Raises:
            SignerUnavailable: If no signer is bound, or the bound signer is
                missing the address (or, for custodial wallets, the public key)
        """
        if self.native_signer is not None:
            if not self.address:
                raise SignerUnavailable("Native signer has no address")
            return SignerKind.NATIVE
        if self.custodial_signer is not None:
            if not self.address or not self.public_key:
                raise SignerUnavailable("Custodial wallet not properly connected: address and public key are required")
            return SignerKind.CUSTODIAL
        raise SignerUnavailable("Wallet not connected: no signer is bound")

    def bound_signer(self) -> Union[NativeSigner, CustodialSigner]:
        if self.signer_kind() is SignerKind.NATIVE:
            return self.native_signer
        return self.custodial_signer

    @property
    def normalized_address(self) -> str:
        if not self.address:
            raise SignerUnavailable("Wallet not connected: no address")
        return normalize_address(self.address)
