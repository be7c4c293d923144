"""
Authenticator assembly: combine a public key and a raw signature into the
account authenticator the ledger verifies.
"""
from enum import Enum
from typing import Callable, Dict, Union

from aptos_sdk import ed25519
from aptos_sdk.authenticator import AccountAuthenticator, Ed25519Authenticator
from nacl.signing import VerifyKey

from .encoding import normalize_public_key, normalize_signature
from .exceptions import InvalidKeyMaterial, InvalidSignature
from .models import RawSignature

ED25519_PUBLIC_KEY_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64


class SignatureScheme(str, Enum):
    """Signature schemes an authenticator can be assembled for."""
    ED25519 = "ed25519"


def public_key_bytes(public_key: Union[str, bytes]) -> bytes:
    """
    Decode public key material, applying the 33-byte normalization for hex input.

    Raises:
        InvalidKeyMaterial: If the key is not hex or not 32 bytes long
    """
    if isinstance(public_key, str):
        try:
            key = bytes.fromhex(normalize_public_key(public_key))
        except ValueError as e:
            raise InvalidKeyMaterial(f"Public key is not valid hex: {e}") from e
    else:
        key = bytes(public_key)
    if len(key) != ED25519_PUBLIC_KEY_LENGTH:
        raise InvalidKeyMaterial(
            f"Ed25519 public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(key)}"
        )
    return key


def _assemble_ed25519(public_key: bytes, signature: bytes) -> AccountAuthenticator:
    if len(signature) != ED25519_SIGNATURE_LENGTH:
        raise InvalidSignature(
            f"Ed25519 signature must be {ED25519_SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )
    return AccountAuthenticator(
        Ed25519Authenticator(
            ed25519.PublicKey(VerifyKey(public_key)),
            ed25519.Signature(signature),
        )
    )


_ASSEMBLERS: Dict[SignatureScheme, Callable[[bytes, bytes], AccountAuthenticator]] = {
    SignatureScheme.ED25519: _assemble_ed25519,
}


def assemble(
    public_key: Union[str, bytes],
    raw_signature: RawSignature,
    scheme: SignatureScheme = SignatureScheme.ED25519
) -> AccountAuthenticator:
    """
    Wrap a public key and a signature into an account authenticator.

    Args:
        public_key: 32-byte key, or hex (64 chars, or 66 chars with a leading scheme byte)
        raw_signature: Signature produced over the transaction's signing message
        scheme: Signature scheme of the key pair

    Returns:
        AccountAuthenticator ready for submission or serialization

    Raises:
        InvalidKeyMaterial: If the public key has the wrong length
        InvalidSignature: If the signature has the wrong length
    """
    return _ASSEMBLERS[scheme](public_key_bytes(public_key), raw_signature.signature)


def verify(authenticator: AccountAuthenticator, signing_message: bytes) -> bool:
    """Check an authenticator against the exact signing message it should cover."""
    return authenticator.verify(signing_message)


def signature_from_hex(signer_address: str, signature_hex: str) -> RawSignature:
    return RawSignature(signer_address, normalize_signature(signature_hex))
