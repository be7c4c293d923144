"""
Shared HTTP session setup.
"""
from typing import Optional, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .version import USER_AGENT


def create_session(
    retry_count: int = 3,
    allowed_methods: Sequence[str] = ("GET",),
    connect_retries: Optional[int] = None
) -> requests.Session:
    """
    Create a requests session with retries mounted for http and https.

    Read and status retries only apply to ``allowed_methods``; connection
    failures are retried for every method since the request never reached
    the server.

    Args:
        retry_count: Number of retries for idempotent requests
        allowed_methods: HTTP methods that may be retried after a response
        connect_retries: Retries for connection failures (defaults to retry_count)

    Returns:
        Configured session
    """
    if connect_retries is None:
        connect_retries = retry_count
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    retries = Retry(
        total=max(retry_count, connect_retries),
        backoff_factor=0.5,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=list(allowed_methods),
        raise_on_status=False,
        connect=connect_retries,
        read=retry_count,
        other=0
    )
    session.mount("http://", HTTPAdapter(max_retries=retries))
    session.mount("https://", HTTPAdapter(max_retries=retries))
    return session
