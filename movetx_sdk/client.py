"""
TransactionClient - executes call intents with optional gas sponsorship.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from aptos_sdk.authenticator import AccountAuthenticator

from ._rate_limited_log import rate_limited_log
from .authenticator import assemble, verify
from .builder import TransactionBuilder, UnsignedTransaction
from .config import SPONSORED_NETWORKS, NetworkConfig, validate_url
from .confirmation import ConfirmationWaiter
from .encoding import bcs_bytes, compute_digest, strip_hex_prefix
from .exceptions import ChainExecutionFailed, InvalidSignature, SponsorshipDenied
from .ledger import LedgerClient
from .models import (
    CallIntent,
    SponsorshipAvailability,
    SponsorshipResponse,
    SponsorshipStatus,
    SubmissionOutcome,
)
from .signer.base import sign_digest
from .signer.session import SignerKind, WalletSession
from .sponsorship import SponsorshipClient


class PipelineState(str, Enum):
    BUILDING = "building"
    DIGEST_READY = "digest_ready"
    SIGNED = "signed"
    SUBMITTING_SPONSORED = "submitting_sponsored"
    FALLBACK_TRIGGERED = "fallback_triggered"
    SUBMITTING_DIRECT = "submitting_direct"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class SubmissionAttempt:
    """
    One transaction together with the digest and authenticator produced for it.

    An authenticator is only ever submitted with the transaction it was
    produced for; a fallback builds a new attempt instead of touching this one.
    """
    transaction: UnsignedTransaction
    digest: bytes
    authenticator: AccountAuthenticator

    @property
    def sponsored(self) -> bool:
        return self.transaction.fee_payer_requested


class TransactionClient:
    """
    Client that submits entry function calls for the active wallet.

    For each call it:
    1. Builds a fee-payer transaction and submits it through the sponsorship
       backend, when sponsorship is preferred and a backend is configured
    2. If the sponsor asks for a fallback, rebuilds the call as a self-paid
       transaction, signs it again and submits it directly (at most once)
    3. Waits for the ledger to execute the transaction

    To use this client, you'll need:
    - A wallet session with either a native or a custodial signer bound
    - A network name ("testnet" or "mainnet") or explicit endpoints
    - For sponsorship: a sponsorship backend URL
    """

    def __init__(
        self,
        wallet: WalletSession,
        network: str = "testnet",
        fullnode_url: Optional[str] = None,
        sponsorship_url: Optional[str] = None,
        chain_id: Optional[int] = None,
        retry_count: int = 3,
        timeout: int = 30,
        sponsor_connect_retries: int = 2,
        confirmation_timeout: Optional[float] = None,
        ledger: Optional[LedgerClient] = None,
        sponsorship: Optional[SponsorshipClient] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the TransactionClient

        Args:
            wallet: Active wallet session with its bound signer
            network: Network name from the packaged network table
            fullnode_url: Override for the fullnode REST endpoint
            sponsorship_url: Override for the sponsorship backend URL
            chain_id: Override for the chain id (defaults to the network table)
            retry_count: Number of retries for idempotent HTTP requests
            timeout: Timeout for HTTP requests in seconds
            sponsor_connect_retries: Connection retries against the sponsor
            confirmation_timeout: Optional limit in seconds for confirmation waiting
            ledger: Pre-built ledger client (mainly for testing)
            sponsorship: Pre-built sponsorship client (mainly for testing)
            logger: Optional logger instance to use for debug/info logging

        Raises:
            ValueError: If the URLs don't use https (unless they're localhost/127.0.0.1),
                or a sponsorship backend is configured for a network it cannot serve
        """
        self.wallet = wallet
        self.network = network
        self.confirmation_timeout = confirmation_timeout
        self.logger = logger or logging.getLogger(__name__)

        if ledger is None:
            fullnode_url = NetworkConfig.get_fullnode_url(network, fullnode_url)
            validate_url("fullnode_url", fullnode_url)
            ledger = LedgerClient(fullnode_url, retry_count=retry_count, timeout=timeout, logger=self.logger)
        self.ledger = ledger

        if sponsorship is None:
            try:
                sponsorship_url = NetworkConfig.get_sponsorship_url(network, sponsorship_url)
            except ValueError as e:
                self.logger.info(f"Sponsorship disabled: {e}")
                sponsorship_url = None
            if sponsorship_url:
                validate_url("sponsorship_url", sponsorship_url)
                sponsorship = SponsorshipClient(
                    sponsorship_url,
                    connect_retries=sponsor_connect_retries,
                    retry_count=retry_count,
                    timeout=timeout,
                    logger=self.logger
                )
        if sponsorship is not None and network not in SPONSORED_NETWORKS:
            raise ValueError(
                f"Sponsorship is only available on {', '.join(SPONSORED_NETWORKS)}, got network: {network}"
            )
        self.sponsorship = sponsorship

        if chain_id is None and network in NetworkConfig.load_networks():
            chain_id = NetworkConfig.get_chain_id(network)
        self.builder = TransactionBuilder(self.ledger, chain_id=chain_id, logger=self.logger)
        self.waiter = ConfirmationWaiter(self.ledger, logger=self.logger)

    @property
    def address(self) -> str:
        """
        Get the active wallet address

        Raises:
            SignerUnavailable: If no wallet is connected
        """
        return self.wallet.normalized_address

    def execute_call(self, intent: CallIntent, prefer_sponsorship: bool = True) -> SubmissionOutcome:
        """
        Build, sign, submit and confirm a call for the active wallet.

        Args:
            intent: The entry function call to execute
            prefer_sponsorship: Try the sponsorship backend before paying gas

        Returns:
            SubmissionOutcome with the final transaction hash and whether gas
            was sponsored

        Raises:
            SignerUnavailable: If no usable signer is bound
            TransactionBuildFailed: If the transaction cannot be built
            SponsorshipDenied: If the sponsor refuses without asking for a fallback
            TransactionRejected: If the ledger refuses a direct submission
            NetworkError: On transport failure during direct submission or confirmation
            ChainExecutionFailed: If the transaction aborts on chain
        """
        kind = self.wallet.signer_kind()
        fallback_reason = None

        if prefer_sponsorship and self.sponsorship is None:
            self.logger.debug("No sponsorship backend configured; submitting directly")

        if prefer_sponsorship and self.sponsorship is not None:
            attempt = self._prepare(intent, kind, fee_payer=True)
            self._transition(PipelineState.SUBMITTING_SPONSORED, intent)
            response = self.sponsorship.submit_sponsored(
                attempt.transaction.to_bytes(),
                bcs_bytes(attempt.authenticator),
                attempt.transaction.sender,
                self.network
            )

            if response.success:
                if not response.transaction_hash:
                    raise SponsorshipDenied(
                        "Sponsorship backend reported success without a transaction hash",
                        response=response
                    )
                self._confirm(response.transaction_hash)
                return SubmissionOutcome(transaction_hash=response.transaction_hash, sponsored=True)

            if not response.fallback_required:
                raise SponsorshipDenied(response.failure_message, response=response)

            fallback_reason = response.reason or response.error or "sponsorship unavailable"
            self._transition(PipelineState.FALLBACK_TRIGGERED, intent)
            self._log_fallback(attempt.transaction.sender, response)

        # Self-paid path: always a freshly built transaction with its own signature
        attempt = self._prepare(intent, kind, fee_payer=False)
        self._transition(PipelineState.SUBMITTING_DIRECT, intent)
        tx_hash = self.ledger.submit_transaction(attempt.transaction, attempt.authenticator)
        self._confirm(tx_hash)
        return SubmissionOutcome(transaction_hash=tx_hash, sponsored=False, fallback_reason=fallback_reason)

    def _prepare(self, intent: CallIntent, kind: SignerKind, fee_payer: bool) -> SubmissionAttempt:
        self._transition(PipelineState.BUILDING, intent)
        transaction = self.builder.build(intent, self.address, fee_payer_requested=fee_payer)
        digest = compute_digest(transaction)
        self._transition(PipelineState.DIGEST_READY, intent)

        if kind is SignerKind.NATIVE:
            result = self.wallet.native_signer.sign_transaction(transaction, as_fee_payer=False)
            authenticator = result.authenticator
        else:
            raw_signature = sign_digest(self.wallet.custodial_signer, self.wallet.address, digest)
            authenticator = assemble(self.wallet.public_key, raw_signature)

        if not verify(authenticator, digest):
            raise InvalidSignature(
                f"Signature from the {kind.value} signer does not verify against the transaction"
            )
        self._transition(PipelineState.SIGNED, intent)
        return SubmissionAttempt(transaction=transaction, digest=digest, authenticator=authenticator)

    def _confirm(self, transaction_hash: str) -> None:
        result = self.waiter.wait_for_outcome(transaction_hash, timeout=self.confirmation_timeout)
        if not result.success:
            self.logger.error(f"Transaction {transaction_hash} failed on chain: {result.abort_reason}")
            raise ChainExecutionFailed(result.abort_reason, transaction_hash=transaction_hash)
        self.logger.info(f"Transaction {transaction_hash} confirmed")

    def _transition(self, state: PipelineState, intent: CallIntent) -> None:
        self.logger.debug(f"[{intent.function}] -> {state.value}")

    def _log_fallback(self, sender: str, response: SponsorshipResponse) -> None:
        usage = ""
        if response.daily_used is not None and response.daily_limit is not None:
            usage = f" ({response.daily_used}/{response.daily_limit} sponsored today)"
        rate_limited_log(
            f"Sponsorship unavailable for {sender[:10]}…: {response.failure_message}{usage}; "
            f"falling back to self-paid submission",
            level="warning",
            logger_instance=self.logger,
            key=f"fallback:{sender}:{response.failure_message}"
        )

    def sponsorship_status(self) -> Optional[SponsorshipStatus]:
        """
        Fetch the backend's sponsorship status for the active wallet.

        Returns:
            SponsorshipStatus, or None when no sponsorship backend is configured
        """
        if self.sponsorship is None:
            return None
        return self.sponsorship.get_status(self.address, self.network)

    def check_sponsorship_availability(self) -> SponsorshipAvailability:
        if self.sponsorship is None:
            return SponsorshipAvailability(available=False, daily_used=0, daily_limit=0)
        return self.sponsorship.check_availability(self.address, self.network)

    def tx_url(self, tx_hash) -> str:
        """
        Get the explorer URL for a transaction

        Args:
            tx_hash: Transaction hash as hex string (with or without 0x) or bytes

        Returns:
            Explorer URL for the transaction
        """
        if isinstance(tx_hash, (bytes, bytearray)):
            tx_hash = bytes(tx_hash).hex()
        tx_hash = "0x" + strip_hex_prefix(tx_hash)
        explorer = NetworkConfig.get_explorer_url(self.network)
        return f"{explorer}/txn/{tx_hash}?network={self.network}"
