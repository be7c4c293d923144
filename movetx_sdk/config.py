"""
Network configuration for the MoveTx SDK.

Networks are described in the packaged ``networks.json`` file. Any URL can be
overridden per call or through ``{NETWORK}_FULLNODE_URL`` /
``{NETWORK}_SPONSORSHIP_URL`` environment variables.
"""
import json
import logging
import os
import threading
import urllib.parse
from importlib import resources
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SPONSORED_NETWORKS = ("testnet", "mainnet")


class NetworkConfig:
    """Lookup helpers for the packaged network table."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None
    _cache_lock = threading.RLock()

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network definitions, caching them after the first read.

        Returns:
            Mapping of network name to its configuration dictionary
        """
        with cls._cache_lock:
            if cls._networks_cache is None:
                data = resources.files("movetx_sdk").joinpath("networks.json").read_text(encoding="utf-8")
                cls._networks_cache = json.loads(data)
                logger.debug(f"Loaded {len(cls._networks_cache)} network definitions")
            return cls._networks_cache

    @classmethod
    def get_network(cls, network_name: str) -> Dict[str, Any]:
        """
        Get the configuration for a named network.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network_name not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{network_name}'. Available networks: {available}")
        return networks[network_name]

    @classmethod
    def _env_override(cls, network_name: str, suffix: str) -> Optional[str]:
        env_name = f"{network_name.upper().replace('-', '_')}_{suffix}"
        return os.environ.get(env_name)

    @classmethod
    def get_fullnode_url(cls, network_name: str, override: Optional[str] = None) -> str:
        """
        Resolve the fullnode REST endpoint for a network.

        Precedence: explicit override, then ``{NETWORK}_FULLNODE_URL``, then the
        packaged configuration.
        """
        if override:
            return override
        env_url = cls._env_override(network_name, "FULLNODE_URL")
        if env_url:
            return env_url
        return cls.get_network(network_name)["fullnode"]

    @classmethod
    def get_sponsorship_url(cls, network_name: str, override: Optional[str] = None) -> str:
        """
        Resolve the sponsorship backend base URL for a network.

        Raises:
            ValueError: If no sponsorship backend is configured for the network
        """
        if override:
            return override
        env_url = cls._env_override(network_name, "SPONSORSHIP_URL")
        if env_url:
            return env_url
        url = cls.get_network(network_name).get("sponsorship")
        if not url:
            raise ValueError(
                f"No sponsorship backend configured for '{network_name}'. "
                f"Pass sponsorship_url or set {network_name.upper()}_SPONSORSHIP_URL"
            )
        return url

    @classmethod
    def get_chain_id(cls, network_name: str) -> int:
        return int(cls.get_network(network_name)["chainId"])

    @classmethod
    def get_explorer_url(cls, network_name: str) -> str:
        return cls.get_network(network_name)["explorer"].rstrip("/")


def validate_url(url_name: str, url: str) -> None:
    """
    Require https for remote endpoints.

    Plain http is only accepted for localhost and 127.0.0.1.

    Raises:
        ValueError: If the URL is not secure
    """
    parsed = urllib.parse.urlparse(url)
    host = parsed.hostname or ""
    is_local = host in ("localhost", "127.0.0.1")
    if parsed.scheme != "https" and not is_local:
        raise ValueError(f"{url_name} must use https:// for security (got: {parsed.scheme}://)")
