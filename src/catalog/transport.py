"""Single point where HTTP traffic leaves the client.

Both the session (login, registration, ping) and the request pipeline send
through send() and decode(), so network failures and undecodable bodies are
mapped to typed errors in exactly one place.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .exceptions import RemoteError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def create_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Create the shared async HTTP client.

    Args:
        timeout: Connect/write timeout in seconds; reads get twice as long
            for large library listings
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=timeout,
            read=timeout * 2,
            write=timeout,
            pool=5.0,
        ),
        limits=httpx.Limits(
            max_connections=100,
            max_keepalive_connections=20,
            keepalive_expiry=5.0,
        ),
        follow_redirects=True,
    )


async def send(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    """Send one request and wait for the full response.

    Raises:
        TransportError: If the request could not be completed
    """
    try:
        return await http.request(method, url, params=params, json=json, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"{method} {url} failed: {e}")
        raise TransportError(f"Request to {url} failed: {e}") from e


def decode(response: httpx.Response) -> Any:
    """Parse a JSON response body.

    Raises:
        TransportError: If the body is not JSON and the HTTP status is an error
        RemoteError: If a successful HTTP response carries a non-JSON body
    """
    try:
        return response.json()
    except ValueError:
        if response.is_error:
            logger.error(f"Server answered HTTP {response.status_code}")
            raise TransportError(
                f"HTTP {response.status_code} from server", status_code=response.status_code
            )
        raise RemoteError("Malformed response body")


def check_status(response: httpx.Response) -> None:
    """Reject an HTTP error status once the envelope has been read.

    Raises:
        TransportError: For 4xx/5xx responses
    """
    if response.is_error:
        logger.error(f"Server answered HTTP {response.status_code}")
        raise TransportError(
            f"HTTP {response.status_code} from server", status_code=response.status_code
        )
