"""
Signer capability interfaces.

Two capability sets exist and they are deliberately not unified behind one
base class:

* ``NativeSigner`` owns its key material and returns a ready authenticator
  for a whole transaction.
* ``CustodialSigner`` only signs a supplied message and returns a raw
  signature; the caller assembles the authenticator with a separately known
  public key.
"""
from dataclasses import dataclass
from typing import Any, Dict, Protocol, runtime_checkable

from aptos_sdk.authenticator import AccountAuthenticator

from ..authenticator import signature_from_hex
from ..encoding import to_hex
from ..exceptions import InvalidSignature
from ..models import RawSignature

CHAIN_TYPE = "aptos"


@dataclass(frozen=True)
class NativeSignResult:
    """
    Result of a native signing request.

    Attributes:
        authenticator: Sender authenticator over the transaction's signing message
        raw_transaction: Wire encoding of the transaction that was signed
    """
    authenticator: AccountAuthenticator
    raw_transaction: bytes


@runtime_checkable
class NativeSigner(Protocol):
    """Signer co-located with the user's key material (e.g. a browser extension)"""
    address: str

    def sign_transaction(self, transaction: Any, as_fee_payer: bool = False) -> NativeSignResult:
        """Sign an UnsignedTransaction and return its authenticator"""
        ...


@runtime_checkable
class CustodialSigner(Protocol):
    """Signer whose keys live in a remote service"""

    def sign_raw_hash(self, address: str, chain_type: str, hash: str) -> Dict[str, str]:
        """Sign a 0x-prefixed hex message, returning ``{"signature": hex}``"""
        ...


def sign_digest(signer: CustodialSigner, address: str, digest: bytes) -> RawSignature:
    """
    Obtain a raw signature over a signing digest from a custodial signer.

    Args:
        signer: Custodial signer bound to the session
        address: Address of the custodial wallet
        digest: Signing message of the transaction

    Returns:
        RawSignature for exactly this digest

    Raises:
        InvalidSignature: If the signer returns no signature
    """
    response = signer.sign_raw_hash(address=address, chain_type=CHAIN_TYPE, hash=to_hex(digest))
    signature = response.get("signature") if isinstance(response, dict) else None
    if not signature:
        raise InvalidSignature(f"Custodial signer returned no signature: {response!r}")
    return signature_from_hex(address, signature)
