"""
Transaction builder: turns a CallIntent into an unsigned transaction.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from aptos_sdk.transactions import (
    EntryFunction,
    FeePayerRawTransaction,
    ModuleId,
    RawTransaction,
    TransactionPayload,
)
from cachetools import TTLCache

from .encoding import (
    compute_digest,
    encode_argument,
    normalize_address,
    serialize_simple_transaction,
    substitute_generics,
    to_account_address,
    to_type_tag,
)
from .exceptions import NetworkError, TransactionBuildFailed
from .ledger import LedgerClient
from .models import CallIntent

logger = logging.getLogger(__name__)

DEFAULT_MAX_GAS_AMOUNT = 200000
DEFAULT_GAS_UNIT_PRICE = 100
DEFAULT_EXPIRATION_SECS = 20

# Module ABIs shared by all builders, keyed by (fullnode, module address, module name)
_abi_cache: TTLCache = TTLCache(maxsize=256, ttl=600)
_abi_cache_lock = threading.RLock()


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    A built transaction awaiting a sender signature.

    Attributes:
        sender: Long-form sender address
        intent: The call this transaction encodes
        fee_payer_requested: Whether the transaction is shaped for a sponsor
        raw_transaction: BCS raw transaction with sequencing and expiration filled in
    """
    sender: str
    intent: CallIntent
    fee_payer_requested: bool
    raw_transaction: RawTransaction

    @property
    def sequence_number(self) -> int:
        return self.raw_transaction.sequence_number

    @property
    def expiration_timestamp_secs(self) -> int:
        return self.raw_transaction.expiration_timestamps_secs

    @property
    def chain_id(self) -> int:
        return self.raw_transaction.chain_id

    def signing_payload(self) -> Union[RawTransaction, FeePayerRawTransaction]:
        """The structure whose keyed encoding is signed by the sender."""
        if self.fee_payer_requested:
            # The sender signs with the fee payer left as 0x0; the sponsor fills it in
            return FeePayerRawTransaction(self.raw_transaction, [], None)
        return self.raw_transaction

    def signing_message(self) -> bytes:
        return compute_digest(self)

    def to_bytes(self) -> bytes:
        """Wire encoding used by the sponsorship backend."""
        return serialize_simple_transaction(self.raw_transaction)


class TransactionBuilder:
    """
    Builds unsigned transactions against a ledger.

    Sequence numbers, gas price and chain id are resolved from the network;
    entry function arguments are encoded from the module ABI unless the
    intent names its argument types explicitly.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        chain_id: Optional[int] = None,
        max_gas_amount: int = DEFAULT_MAX_GAS_AMOUNT,
        gas_unit_price: Optional[int] = None,
        expiration_secs: int = DEFAULT_EXPIRATION_SECS,
        logger: Optional[logging.Logger] = None
    ):
        self.ledger = ledger
        self.chain_id = chain_id
        self.max_gas_amount = max_gas_amount
        self.gas_unit_price = gas_unit_price
        self.expiration_secs = expiration_secs
        self.logger = logger or logging.getLogger(__name__)

    def build(
        self,
        intent: CallIntent,
        sender: str,
        fee_payer_requested: bool = False
    ) -> UnsignedTransaction:
        """
        Build an unsigned transaction for a call intent.

        Args:
            intent: The entry function call to encode
            sender: Sender account address
            fee_payer_requested: Shape the transaction for a fee payer

        Returns:
            A new UnsignedTransaction

        Raises:
            TransactionBuildFailed: If the sender's account state, the chain id
                or the function ABI cannot be resolved, or the arguments do not
                match the function's parameters
        """
        try:
            sender_address = normalize_address(sender)
        except ValueError as e:
            raise TransactionBuildFailed(str(e)) from e

        try:
            account = self.ledger.get_account(sender_address)
            if account is None:
                raise TransactionBuildFailed(
                    f"Account {sender_address} not found on chain; it may not be funded yet"
                )
            sequence_number = int(account["sequence_number"])
            chain_id = self.chain_id if self.chain_id is not None else self.ledger.get_chain_id()
            payload = self._build_payload(intent)
        except NetworkError as e:
            raise TransactionBuildFailed(f"Could not resolve network state: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise TransactionBuildFailed(f"Unexpected ledger response: {e}") from e

        raw_transaction = RawTransaction(
            to_account_address(sender_address),
            sequence_number,
            payload,
            self.max_gas_amount,
            self._gas_unit_price(),
            int(time.time()) + self.expiration_secs,
            chain_id,
        )
        self.logger.debug(
            f"Built {intent.function} for {sender_address} "
            f"(seq={sequence_number}, fee_payer={fee_payer_requested})"
        )
        return UnsignedTransaction(
            sender=sender_address,
            intent=intent,
            fee_payer_requested=fee_payer_requested,
            raw_transaction=raw_transaction,
        )

    def _gas_unit_price(self) -> int:
        if self.gas_unit_price is not None:
            return self.gas_unit_price
        try:
            return self.ledger.estimate_gas_price()
        except (NetworkError, KeyError, TypeError, ValueError) as e:
            self.logger.warning(f"Gas price estimation failed, using default: {DEFAULT_GAS_UNIT_PRICE}. Error: {e}")
            return DEFAULT_GAS_UNIT_PRICE

    def _build_payload(self, intent: CallIntent) -> TransactionPayload:
        param_types = self.resolve_parameter_types(intent)
        if len(param_types) != len(intent.function_arguments):
            raise TransactionBuildFailed(
                f"{intent.function} expects {len(param_types)} arguments, "
                f"got {len(intent.function_arguments)}"
            )
        args = [
            encode_argument(substitute_generics(move_type, intent.type_arguments), value)
            for move_type, value in zip(param_types, intent.function_arguments)
        ]
        type_args = [to_type_tag(t) for t in intent.type_arguments]
        module = ModuleId(to_account_address(intent.module_address), intent.module_name)
        return TransactionPayload(EntryFunction(module, intent.function_name, type_args, args))

    def resolve_parameter_types(self, intent: CallIntent) -> Tuple[str, ...]:
        """
        Determine the Move parameter types of the intent's function.

        Explicit ``argument_types`` win; otherwise the module ABI is fetched
        (and cached) and leading signer parameters are dropped.
        """
        if intent.argument_types is not None:
            return tuple(intent.argument_types)

        function_abi = self._function_abi(intent)
        if not function_abi.get("is_entry", False):
            raise TransactionBuildFailed(f"{intent.function} is not an entry function")
        params: List[str] = list(function_abi.get("params", []))
        while params and params[0] in ("signer", "&signer"):
            params.pop(0)
        return tuple(params)

    def _function_abi(self, intent: CallIntent) -> Dict[str, Any]:
        cache_key = (self.ledger.fullnode_url, normalize_address(intent.module_address), intent.module_name)
        with _abi_cache_lock:
            abi = _abi_cache.get(cache_key)
        if abi is None:
            abi = self.ledger.get_module_abi(intent.module_address, intent.module_name)
            if abi is None:
                raise TransactionBuildFailed(f"Module {intent.module_address}::{intent.module_name} not found")
            with _abi_cache_lock:
                _abi_cache[cache_key] = abi

        for function in abi.get("exposed_functions", []):
            if function.get("name") == intent.function_name:
                return function
        raise TransactionBuildFailed(f"Function {intent.function} not found in module ABI")


def clear_abi_cache() -> None:
    with _abi_cache_lock:
        _abi_cache.clear()
