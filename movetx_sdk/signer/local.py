"""
Native signer backed by a locally held Ed25519 private key.
"""
import logging
from typing import Optional, Union

from aptos_sdk import ed25519
from aptos_sdk.account_address import AccountAddress
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from nacl.signing import VerifyKey

from ..authenticator import assemble
from ..encoding import normalize_address, strip_hex_prefix
from ..models import RawSignature
from .base import NativeSignResult

logger = logging.getLogger(__name__)


class LocalAccountSigner:
    """
    Native signer holding an Ed25519 key in process.

    The account address defaults to the one derived from the public key
    (single-key Ed25519 authentication key). Pass ``address`` explicitly for
    accounts whose key has been rotated.
    """

    def __init__(
        self,
        private_key: Union[str, bytes, Ed25519PrivateKey],
        address: Optional[str] = None
    ):
        if isinstance(private_key, Ed25519PrivateKey):
            self._private_key = private_key
        else:
            raw = bytes.fromhex(strip_hex_prefix(private_key)) if isinstance(private_key, str) else private_key
            self._private_key = Ed25519PrivateKey.from_private_bytes(raw)

        self.public_key_bytes = self._private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        if address is None:
            derived = AccountAddress.from_key(ed25519.PublicKey(VerifyKey(self.public_key_bytes)))
            address = "0x" + derived.address.hex()
        self.address = normalize_address(address)

    @classmethod
    def generate(cls) -> "LocalAccountSigner":
        """Create a signer for a freshly generated key pair"""
        signer = cls(Ed25519PrivateKey.generate())
        logger.info("Generated local signer %s…", signer.address[:10])
        return signer

    @property
    def public_key_hex(self) -> str:
        return "0x" + self.public_key_bytes.hex()

    def sign_message(self, message: bytes) -> RawSignature:
        return RawSignature(self.address, self._private_key.sign(message))

    def sign_transaction(self, transaction, as_fee_payer: bool = False) -> NativeSignResult:
        """
        Sign an unsigned transaction as its sender.

        Args:
            transaction: UnsignedTransaction to sign
            as_fee_payer: Sign in the fee payer role; this signer only acts as sender

        Returns:
            Authenticator over the transaction's signing message and its wire bytes
        """
        if as_fee_payer:
            raise ValueError("LocalAccountSigner only signs as the transaction sender")
        raw_signature = self.sign_message(transaction.signing_message())
        return NativeSignResult(
            authenticator=assemble(self.public_key_bytes, raw_signature),
            raw_transaction=transaction.to_bytes(),
        )
