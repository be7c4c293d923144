"""
Canonical encoding helpers: signing digests, key/signature normalization and
BCS encoding of entry function arguments.

Everything in this module is pure and performs no network access.
"""
import re
from typing import Any, Callable, Dict, Tuple, Union

from aptos_sdk.account_address import AccountAddress
from aptos_sdk.bcs import Serializer
from aptos_sdk.transactions import RawTransaction
from aptos_sdk.type_tag import StructTag, TypeTag

from .exceptions import InvalidSignature, TransactionBuildFailed

HEX_CHARS = set("0123456789abcdefABCDEF")

STRING_TYPE = "0x1::string::String"
OPTION_TYPE = "0x1::option::Option"
OBJECT_TYPE = "0x1::object::Object"

_UINT_ENCODERS: Dict[str, Tuple[Callable[[Serializer, int], None], int]] = {
    "u8": (Serializer.u8, 8),
    "u16": (Serializer.u16, 16),
    "u32": (Serializer.u32, 32),
    "u64": (Serializer.u64, 64),
    "u128": (Serializer.u128, 128),
    "u256": (Serializer.u256, 256),
}

_ADDRESS_IN_TYPE = re.compile(r"0x[0-9a-fA-F]+(?=::)")


def strip_hex_prefix(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def to_hex(data: bytes) -> str:
    """Hex encode bytes with a 0x prefix."""
    return "0x" + data.hex()


def normalize_public_key(public_key_hex: str) -> str:
    """
    Normalize a hex encoded Ed25519 public key.

    Custodial wallets report keys in a 33-byte form with a leading scheme byte.
    When the input (after removing an optional 0x prefix) is 66 hex characters
    the first byte is dropped; anything else is returned unchanged.

    Args:
        public_key_hex: Public key, 64 or 66 hex characters, optionally 0x-prefixed

    Returns:
        Hex string without 0x prefix
    """
    clean = strip_hex_prefix(public_key_hex)
    if len(clean) == 66:
        clean = clean[2:]
    return clean


def normalize_signature(signature_hex: str) -> bytes:
    """
    Decode a hex signature, removing an optional 0x prefix.

    Raises:
        InvalidSignature: If the value is not valid hex
    """
    clean = strip_hex_prefix(signature_hex)
    try:
        return bytes.fromhex(clean)
    except ValueError as e:
        raise InvalidSignature(f"Signature is not valid hex: {e}") from e


def normalize_address(address: str) -> str:
    """
    Return the long (0x + 64 hex) form of an account address.

    Raises:
        ValueError: If the address is not hex or longer than 32 bytes
    """
    clean = strip_hex_prefix(address.strip()).lower()
    if not clean or not set(clean) <= HEX_CHARS or len(clean) > 64:
        raise ValueError(f"Invalid account address: {address}")
    return "0x" + clean.zfill(64)


def to_account_address(address: Union[str, AccountAddress]) -> AccountAddress:
    if isinstance(address, AccountAddress):
        return address
    return AccountAddress(bytes.fromhex(normalize_address(address)[2:]))


def compute_digest(transaction: Any) -> bytes:
    """
    Compute the signing message for an unsigned transaction.

    This is the domain-separated prehash followed by the BCS encoding of the
    transaction (or of its fee payer wrapper). Signatures are produced over
    exactly these bytes, so the result is a pure function of the transaction
    contents: identical transactions give identical digests, and flipping
    the fee payer flag changes the prehash and the encoded body.

    Args:
        transaction: An UnsignedTransaction

    Returns:
        Signing message bytes
    """
    return transaction.signing_payload().keyed()


def bcs_bytes(value: Any) -> bytes:
    ser = Serializer()
    ser.struct(value)
    return ser.output()


def serialize_simple_transaction(raw_transaction: RawTransaction) -> bytes:
    """
    Encode a raw transaction as a simple transaction with no fee payer attached.

    This is the form the sponsorship backend expects: the sponsor decides the
    fee payer address itself.
    """
    ser = Serializer()
    ser.struct(raw_transaction)
    ser.bool(False)
    return ser.output()


def to_type_tag(type_argument: str) -> TypeTag:
    """
    Parse a struct type argument such as ``0x1::aptos_coin::AptosCoin``.

    Raises:
        TransactionBuildFailed: If the type argument is not a struct tag
    """
    if "::" not in type_argument:
        raise TransactionBuildFailed(
            f"Unsupported type argument '{type_argument}': only struct types are supported"
        )
    long_form = _ADDRESS_IN_TYPE.sub(lambda m: normalize_address(m.group(0)), type_argument.strip())
    try:
        return TypeTag(StructTag.from_str(long_form))
    except Exception as e:
        raise TransactionBuildFailed(f"Invalid type argument '{type_argument}': {e}") from e


def split_generic(move_type: str) -> Tuple[str, str]:
    """Split ``base<inner>`` into its base and inner type; inner is empty if not generic."""
    move_type = move_type.strip()
    if move_type.endswith(">") and "<" in move_type:
        start = move_type.index("<")
        return move_type[:start], move_type[start + 1:-1].strip()
    return move_type, ""


def substitute_generics(move_type: str, type_arguments: Tuple[str, ...]) -> str:
    """Replace generic placeholders ``T0``..``Tn`` with concrete type arguments."""
    def _replace(match: "re.Match[str]") -> str:
        index = int(match.group(1))
        if index >= len(type_arguments):
            raise TransactionBuildFailed(f"Missing type argument for generic parameter T{index}")
        return type_arguments[index]
    # A T<n> after "::" is a concrete struct name, not a placeholder
    return re.sub(r"(?<!::)\bT(\d+)\b", _replace, move_type)


def encode_argument(move_type: str, value: Any) -> bytes:
    """
    BCS encode a single entry function argument for its Move parameter type.

    Raises:
        TransactionBuildFailed: If the type is unsupported or the value does not fit it
    """
    ser = Serializer()
    _encode_value(ser, move_type.strip(), value)
    return ser.output()


def _encode_value(ser: Serializer, move_type: str, value: Any) -> None:
    if move_type == "bool":
        ser.bool(_to_bool(value))
    elif move_type in _UINT_ENCODERS:
        encoder, bits = _UINT_ENCODERS[move_type]
        encoder(ser, _to_uint(value, bits, move_type))
    elif move_type == "address":
        ser.struct(_to_address_arg(value))
    elif move_type == STRING_TYPE:
        if not isinstance(value, str):
            raise TransactionBuildFailed(f"Expected a string for {STRING_TYPE}, got {type(value).__name__}")
        ser.str(value)
    else:
        base, inner = split_generic(move_type)
        if base == "vector" and inner == "u8":
            ser.to_bytes(_to_byte_vector(value))
        elif base == "vector" and inner:
            if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
                raise TransactionBuildFailed(f"Expected a list for {move_type}, got {type(value).__name__}")
            items = list(value)
            ser.uleb128(len(items))
            for item in items:
                _encode_value(ser, inner, item)
        elif base == OPTION_TYPE:
            if value is None:
                ser.uleb128(0)
            else:
                ser.uleb128(1)
                _encode_value(ser, inner, value)
        elif base == OBJECT_TYPE:
            ser.struct(_to_address_arg(value))
        else:
            raise TransactionBuildFailed(f"Unsupported argument type: {move_type}")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise TransactionBuildFailed(f"Expected a boolean, got {value!r}")


def _to_uint(value: Any, bits: int, move_type: str) -> int:
    # bool is an int subclass and floats truncate; neither may change the signed value
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise TransactionBuildFailed(f"Expected an integer for {move_type}, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise TransactionBuildFailed(f"Expected an integer for {move_type}, got {value!r}") from e
    if number < 0 or number >= 2 ** bits:
        raise TransactionBuildFailed(f"Value {number} out of range for {move_type}")
    return number


def _to_address_arg(value: Any) -> AccountAddress:
    try:
        return to_account_address(value)
    except (AttributeError, ValueError) as e:
        raise TransactionBuildFailed(f"Expected an account address, got {value!r}") from e


def _to_byte_vector(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        if value.startswith("0x"):
            try:
                return bytes.fromhex(value[2:])
            except ValueError as e:
                raise TransactionBuildFailed(f"Invalid hex for vector<u8>: {value}") from e
        return value.encode("utf-8")
    if isinstance(value, int):
        raise TransactionBuildFailed(f"Expected bytes for vector<u8>, got {value!r}")
    try:
        return bytes(value)
    except (TypeError, ValueError) as e:
        raise TransactionBuildFailed(f"Expected bytes for vector<u8>, got {value!r}") from e
