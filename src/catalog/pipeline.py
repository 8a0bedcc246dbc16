"""Request pipeline: the single choke point for catalog calls."""

import logging
from enum import Enum
from typing import Any, Dict

import httpx

from . import transport
from .protocols import Operation, ProtocolAdapter
from .session import Session
from .urls import ResourceUrls

logger = logging.getLogger(__name__)


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, Enum):
        return value.value
    return value


class RequestPipeline:
    """Sends catalog operations and returns their unwrapped payloads.

    For every call the pipeline:
        1. Reads the server address and credential from the session
        2. Injects authentication (header or query parameters, per dialect)
        3. Sends the request and waits for the full response
        4. Unwraps the envelope, raising a typed error on failure
        5. Returns the operation's payload node

    Attributes:
        session: Session supplying the server and credential
        adapter: Protocol adapter for the server's dialect
        http: Shared httpx.AsyncClient
    """

    def __init__(self, session: Session, adapter: ProtocolAdapter, http: httpx.AsyncClient):
        self.session = session
        self.adapter = adapter
        self.http = http

    def build_params(self, operation: Operation, **args: Any) -> Dict[str, Any]:
        """Combine authentication and operation parameters, dropping None."""
        params = dict(self.adapter.auth_params(self.session))
        params.update(self.adapter.params_for(operation, **args))
        return {key: _query_value(value) for key, value in params.items() if value is not None}

    async def call(self, operation: Operation, **args: Any) -> Any:
        """Perform one catalog operation.

        Args:
            operation: Operation to perform
            **args: Operation arguments, translated by the adapter

        Returns:
            The operation's payload node (None when the server omitted it)

        Raises:
            UnsupportedOperationError: If the dialect lacks the operation
            AuthError: If no server address is configured
            RemoteError: If the server reported a failure
            TransportError: For network or HTTP errors
        """
        endpoint = self.adapter.endpoint_for(operation)
        url = self.session.endpoint_url(endpoint)
        params = self.build_params(operation, **args)
        headers = self.adapter.auth_headers(self.session)

        logger.debug(f"Calling {endpoint} on {self.session.server_address}")
        response = await transport.send(self.http, "GET", url, params=params, headers=headers)
        payload = self.adapter.unwrap(transport.decode(response))
        transport.check_status(response)

        return self.adapter.extract(operation, payload)

    def resource_urls(self) -> ResourceUrls:
        """URL builder bound to the current server and credential."""
        return ResourceUrls(
            self.session.server_address, self.adapter.resource_params(self.session)
        )
