"""
Custodial signer that delegates to a remote signing service over HTTP.
"""
import logging
from typing import Dict, Optional

import requests

from .._http import create_session
from ..exceptions import NetworkError, SignerUnavailable

logger = logging.getLogger(__name__)


class RemoteCustodialSigner:
    """
    Remote custodial signer.

    Protocol (HTTP JSON):
    POST {url}/sign_raw_hash
    body: {"address": "0x...", "chainType": "aptos", "hash": "0x..."}
    response: {"signature": "0x..."}
    """

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        retry_count: int = 2,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the remote signer

        Args:
            url: Base URL of the signing service
            api_key: Optional bearer token for the service
            retry_count: Retries for connection failures
            timeout: Timeout for HTTP requests in seconds
            logger: Optional logger instance
        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.session = create_session(retry_count, allowed_methods=())
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    def sign_raw_hash(self, address: str, chain_type: str, hash: str) -> Dict[str, str]:
        """
        Ask the service to sign a message.

        Raises:
            SignerUnavailable: If the service refuses the wallet or the credentials
            NetworkError: On transport failure or server error
        """
        self.logger.debug(f"Requesting custodial signature for {address[:10]}…")
        try:
            response = self.session.post(
                f"{self.url}/sign_raw_hash",
                json={"address": address, "chainType": chain_type, "hash": hash},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            self.logger.error(f"Custodial signing request failed: {e}")
            raise NetworkError(f"Custodial signing request failed: {e}") from e

        if response.status_code in (401, 403, 404):
            raise SignerUnavailable(
                f"Signing service refused wallet {address}: HTTP {response.status_code}"
            )
        if response.status_code >= 400:
            raise NetworkError(f"Signing service returned HTTP {response.status_code}: {response.text[:200]}")
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from signing service: {e}") from e
