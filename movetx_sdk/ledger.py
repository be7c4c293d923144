"""
REST client for the ledger's fullnode API.
"""
import logging
from typing import Any, Dict, Optional

import requests
from aptos_sdk.authenticator import AccountAuthenticator
from aptos_sdk.transactions import SignedTransaction

from ._http import create_session
from .encoding import normalize_address, strip_hex_prefix
from .exceptions import NetworkError, TransactionRejected

logger = logging.getLogger(__name__)


class LedgerClient:
    """
    Thin client over the fullnode REST API.

    Only the endpoints needed to build, submit and confirm transactions are
    covered: ledger info, account state, gas estimation, module ABIs,
    transaction submission and transaction lookup by hash.
    """

    SIGNED_TRANSACTION_CONTENT_TYPE = "application/x.aptos.signed_transaction+bcs"

    def __init__(
        self,
        fullnode_url: str,
        retry_count: int = 3,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the ledger client

        Args:
            fullnode_url: Fullnode REST endpoint including the version prefix
                (e.g., "https://testnet.movementnetwork.xyz/v1")
            retry_count: Number of retries for GET requests
            timeout: Timeout for HTTP requests in seconds
            session: Optional pre-configured requests session
            logger: Optional logger instance
        """
        self.fullnode_url = fullnode_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        # Submissions are never retried after reaching the node
        self.session = session or create_session(retry_count, allowed_methods=("GET",))

    def _get(self, path: str, allow_missing: bool = False) -> Optional[Any]:
        url = f"{self.fullnode_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"Ledger request failed: GET {path}: {e}")
            raise NetworkError(f"Ledger request failed: {e}") from e

        if response.status_code == 404 and allow_missing:
            return None
        if response.status_code >= 400:
            raise NetworkError(
                f"Ledger returned HTTP {response.status_code} for GET {path}: {response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from ledger for GET {path}: {e}") from e

    def get_ledger_info(self) -> Dict[str, Any]:
        return self._get("")

    def get_chain_id(self) -> int:
        return int(self.get_ledger_info()["chain_id"])

    def get_account(self, address: str) -> Optional[Dict[str, Any]]:
        """
        Fetch account state.

        Returns:
            Account resource with ``sequence_number``, or None if the account
            does not exist on chain (for example, it has never been funded)
        """
        return self._get(f"/accounts/{normalize_address(address)}", allow_missing=True)

    def estimate_gas_price(self) -> int:
        data = self._get("/estimate_gas_price")
        return int(data["gas_estimate"])

    def get_module_abi(self, module_address: str, module_name: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the ABI of a published module.

        Returns:
            The module's ``abi`` object, or None if the module does not exist
        """
        data = self._get(
            f"/accounts/{normalize_address(module_address)}/module/{module_name}",
            allow_missing=True
        )
        if data is None:
            return None
        return data.get("abi")

    def submit_transaction(self, transaction: Any, authenticator: AccountAuthenticator) -> str:
        """
        Submit a signed, self-paid transaction directly to the ledger.

        Args:
            transaction: UnsignedTransaction that the authenticator was produced for
            authenticator: Sender authenticator over the transaction's signing message

        Returns:
            Transaction hash reported by the ledger

        Raises:
            ValueError: If the transaction was built for a fee payer
            TransactionRejected: If the ledger refuses the transaction
            NetworkError: On transport failure
        """
        if transaction.fee_payer_requested:
            raise ValueError("Fee payer transactions must be submitted through a sponsor")
        signed = SignedTransaction(transaction.raw_transaction, authenticator)
        return self.submit_signed_bytes(signed.bytes())

    def submit_signed_bytes(self, signed_transaction: bytes) -> str:
        url = f"{self.fullnode_url}/transactions"
        try:
            response = self.session.post(
                url,
                data=signed_transaction,
                headers={"Content-Type": self.SIGNED_TRANSACTION_CONTENT_TYPE},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            self.logger.error(f"Transaction submission failed: {e}")
            raise NetworkError(f"Transaction submission failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 500:
            raise NetworkError(f"Ledger returned HTTP {response.status_code} on submission: {response.text[:200]}")
        if response.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            self.logger.warning(f"Ledger rejected transaction: {message or response.text[:200]}")
            raise TransactionRejected(
                message or response.text,
                error_code=data.get("error_code") if isinstance(data, dict) else None,
                vm_error_code=data.get("vm_error_code") if isinstance(data, dict) else None
            )

        tx_hash = data.get("hash") if isinstance(data, dict) else None
        if not tx_hash:
            raise NetworkError(f"Missing hash in submission response: {data}")
        self.logger.info(f"Transaction submitted: {tx_hash}")
        return tx_hash

    def get_transaction_by_hash(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        """
        Look up a transaction.

        Returns:
            Transaction object, or None if the ledger does not know the hash yet
        """
        return self._get(f"/transactions/by_hash/0x{strip_hex_prefix(transaction_hash)}", allow_missing=True)
