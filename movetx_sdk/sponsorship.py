"""
Client for the gas sponsorship backend.

The backend pays network fees for fee-payer shaped transactions, subject to
a per-address daily limit that it tracks server-side. Usage counters are
only ever read from its responses.
"""
import logging
import urllib.parse
from typing import Any, Dict, Optional, Union

import requests
from pydantic import ValidationError

from ._http import create_session
from .config import SPONSORED_NETWORKS
from .encoding import to_hex
from .exceptions import NetworkError
from .models import SponsorshipAvailability, SponsorshipResponse, SponsorshipStatus

logger = logging.getLogger(__name__)

DEFAULT_DAILY_LIMIT = 50


class SponsorshipClient:
    """
    Client for ``POST /sponsor-transaction`` and ``GET /sponsorship-status``.

    Sponsored submissions are not retried once the request has reached the
    backend, since the backend may already have forwarded the transaction.
    """

    def __init__(
        self,
        base_url: str,
        connect_retries: int = 2,
        retry_count: int = 3,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the sponsorship client

        Args:
            base_url: Base URL of the sponsorship backend (e.g., "https://app.example.com/api")
            connect_retries: Retries when the connection cannot be established
            retry_count: Retries for status queries
            timeout: Timeout for HTTP requests in seconds
            logger: Optional logger instance
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.session = create_session(
            retry_count,
            allowed_methods=("GET",),
            connect_retries=connect_retries
        )

    @staticmethod
    def _check_network(network: str) -> None:
        if network not in SPONSORED_NETWORKS:
            raise ValueError(f"network must be one of {', '.join(SPONSORED_NETWORKS)}, got: {network}")

    def submit_sponsored(
        self,
        serialized_transaction: Union[bytes, str],
        serialized_authenticator: Union[bytes, str],
        sender_address: str,
        network: str
    ) -> SponsorshipResponse:
        """
        Ask the backend to pay for and submit a fee-payer transaction.

        Transport failures and unreadable responses never raise: they come
        back as ``success=False, fallback_required=True, error="network error"``
        so every sponsorship failure reaches the caller through the same
        fallback signal.

        Args:
            serialized_transaction: Wire bytes (or 0x hex) of the fee-payer transaction
            serialized_authenticator: Wire bytes (or 0x hex) of the sender authenticator
            sender_address: Sender account address
            network: "testnet" or "mainnet"

        Returns:
            The backend's SponsorshipResponse
        """
        self._check_network(network)
        payload = {
            "serializedTransaction": _as_hex(serialized_transaction),
            "senderSignature": _as_hex(serialized_authenticator),
            "senderAddress": sender_address,
            "network": network,
        }
        self.logger.debug(f"Submitting sponsored transaction: {self._sanitize_payload(payload)}")

        try:
            response = self.session.post(
                f"{self.base_url}/sponsor-transaction",
                json=payload,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            self.logger.error(f"Sponsorship request failed: {e}")
            return SponsorshipResponse.network_error()

        try:
            result = SponsorshipResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            self.logger.error(f"Invalid sponsorship response (HTTP {response.status_code}): {e}")
            return SponsorshipResponse.network_error()

        if result.success:
            self.logger.info(f"Sponsored transaction accepted: {result.transaction_hash}")
        else:
            self.logger.info(
                f"Sponsorship declined: {result.failure_message} "
                f"(fallback_required={result.fallback_required}, used={result.daily_used}/{result.daily_limit})"
            )
        return result

    def get_status(self, address: str, network: str) -> SponsorshipStatus:
        """
        Fetch the sponsorship status for an address.

        Raises:
            NetworkError: If the backend cannot be reached or answers with garbage
        """
        self._check_network(network)
        query = urllib.parse.urlencode({"address": address, "network": network})
        try:
            response = self.session.get(f"{self.base_url}/sponsorship-status?{query}", timeout=self.timeout)
            response.raise_for_status()
            return SponsorshipStatus.model_validate(response.json())
        except requests.RequestException as e:
            raise NetworkError(f"Sponsorship status request failed: {e}") from e
        except (ValueError, ValidationError) as e:
            raise NetworkError(f"Invalid sponsorship status response: {e}") from e

    def check_availability(self, address: str, network: str) -> SponsorshipAvailability:
        """
        Report whether sponsorship can currently be used for an address.

        Never raises for backend problems; an unreachable backend reports
        sponsorship as unavailable.
        """
        try:
            status = self.get_status(address, network)
        except NetworkError as e:
            self.logger.warning(f"Could not check sponsorship availability: {e}")
            return SponsorshipAvailability(available=False, daily_used=0, daily_limit=DEFAULT_DAILY_LIMIT)
        return SponsorshipAvailability(
            available=status.success and status.remaining > 0,
            daily_used=status.daily_used or 0,
            daily_limit=status.daily_limit or DEFAULT_DAILY_LIMIT,
        )

    @staticmethod
    def _sanitize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
        """Redact signatures and shorten transaction bytes for logging"""
        result = payload.copy()
        if "senderSignature" in result:
            result["senderSignature"] = f"[REDACTED - {len(str(result['senderSignature']))} chars]"
        if "serializedTransaction" in result:
            result["serializedTransaction"] = f"[{len(str(result['serializedTransaction']))} chars]"
        return result


def _as_hex(value: Union[bytes, str]) -> str:
    if isinstance(value, (bytes, bytearray)):
        return to_hex(bytes(value))
    return value if value.startswith("0x") else "0x" + value
