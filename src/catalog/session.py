"""Session state: server address, account, credential and login events.

The session is the only shared mutable state in the client. The request
pipeline reads its fields at the start of every call; only login, probe and
logout change them.
"""

import logging
from typing import Callable, List, Optional

import httpx

from . import transport
from .config import ClientConfig
from .exceptions import AuthError, RemoteError
from .protocols import Credentials, Operation, ProtocolAdapter
from .storage import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)

# Persisted keys
SERVER_KEY = "server"
ACCOUNT_KEY = "account"
CREDENTIAL_KEY = "credential"
SALT_KEY = "salt"

SessionListener = Callable[["Session"], None]


class Session:
    """Authentication state for one server.

    Attributes:
        server_address: Base URL of the server ("" when unknown)
        account_id: Account identifier ("" when logged out)
        credential: Bearer token or Subsonic token ("" when logged out)
        salt: Salt of the Subsonic token, None for bearer tokens
        authenticated: True once the server has accepted the credential

    Example:
        >>> session = Session(config, adapter, JsonFileStore(path), http)
        >>> session.on_login(lambda s: print(f"Welcome {s.account_id}"))
        >>> await session.login("alice", "secret", remember=True)
    """

    def __init__(
        self,
        config: ClientConfig,
        adapter: ProtocolAdapter,
        store: Optional[KeyValueStore] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.adapter = adapter
        self.store = store if store is not None else MemoryStore()
        self.http = http

        self.server_address = config.server_url or self.store.get(SERVER_KEY) or ""
        self.account_id = self.store.get(ACCOUNT_KEY) or ""
        self.credential = self.store.get(CREDENTIAL_KEY) or ""
        self.salt = self.store.get(SALT_KEY)
        self.authenticated = False

        self._registered = False
        self._login_listeners: List[SessionListener] = []
        self._logout_listeners: List[SessionListener] = []

    def on_login(self, callback: SessionListener) -> None:
        """Register a callable invoked with the session after each login."""
        self._login_listeners.append(callback)

    def on_logout(self, callback: SessionListener) -> None:
        """Register a callable invoked with the session after logout."""
        self._logout_listeners.append(callback)

    def set_server_address(self, address: str) -> None:
        """Point the session at another server.

        Raises:
            ValueError: If the address is fixed by configuration or not HTTP(S)
        """
        if self.config.server_fixed:
            raise ValueError("Server address is fixed by configuration")
        if not address.startswith(("http://", "https://")):
            raise ValueError("Server address must be a valid HTTP/HTTPS URL")
        self.server_address = address.rstrip("/")

    def endpoint_url(self, endpoint: str) -> str:
        """Build the URL of an endpoint on the current server.

        Raises:
            AuthError: If no server address is known
        """
        if not self.server_address:
            raise AuthError("No server address configured")
        return f"{self.server_address.rstrip('/')}/rest/{endpoint}"

    def _require_http(self) -> httpx.AsyncClient:
        if self.http is None:
            self.http = transport.create_http_client(self.config.timeout)
        return self.http

    async def login(self, account_id: str, password: str, remember: bool = False) -> None:
        """Log in with an account id and password.

        Args:
            account_id: Account identifier (email or username)
            password: Plaintext password; never stored
            remember: Persist server, account and credential for later runs

        Raises:
            AuthError: If the server rejected the credentials
            TransportError: If the server could not be reached
        """
        request = self.adapter.login_request(account_id, password)
        url = self.endpoint_url(request.endpoint)

        logger.debug(f"Logging in to {self.server_address} as {account_id}")
        response = await transport.send(
            self._require_http(), request.method, url, params=request.params, json=request.json
        )
        body = transport.decode(response)
        credentials = self.adapter.accept_login(body, request)

        self._apply(credentials)
        if remember:
            self._save()

        logger.info(f"Logged in as {account_id}")
        for callback in self._login_listeners:
            callback(self)

    async def register(self, name: str, account_id: str, password: str) -> None:
        """Create an account on the server.

        Raises:
            RegistrationError: If the server rejected the registration
            UnsupportedOperationError: If the dialect has no registration
            TransportError: If the server could not be reached
        """
        request = self.adapter.register_request(name, account_id, password)
        url = self.endpoint_url(request.endpoint)

        logger.debug(f"Registering {account_id} on {self.server_address}")
        response = await transport.send(
            self._require_http(), request.method, url, params=request.params, json=request.json
        )
        self.adapter.accept_registration(transport.decode(response))

        self._registered = True
        logger.info(f"Registered account {account_id}")

    def consume_registration_flag(self) -> bool:
        """Return True once after a successful registration, then False."""
        registered, self._registered = self._registered, False
        return registered

    async def probe_session_validity(self) -> bool:
        """Check whether the stored credential is still accepted.

        Issues the protocol's ping with the stored credential. An accepted
        ping marks the session authenticated; a rejected one returns False
        and leaves the stored fields alone.

        Raises:
            TransportError: If the server could not be reached
        """
        if not self.credential or not self.server_address:
            return False

        url = self.endpoint_url(self.adapter.endpoint_for(Operation.PING))
        response = await transport.send(
            self._require_http(),
            "GET",
            url,
            params=_drop_none(self.adapter.auth_params(self)),
            headers=self.adapter.auth_headers(self),
        )
        try:
            self.adapter.unwrap(transport.decode(response))
        except RemoteError as e:
            logger.info(f"Stored credential rejected: {e.message}")
            self.authenticated = False
            return False

        self.authenticated = True
        logger.info(f"Stored credential for {self.account_id} is valid")
        return True

    def logout(self) -> None:
        """Forget every in-memory and persisted session field."""
        self.store.clear()
        if not self.config.server_fixed:
            self.server_address = ""
        self.account_id = ""
        self.credential = ""
        self.salt = None
        self.authenticated = False
        self._registered = False

        logger.info("Logged out")
        for callback in self._logout_listeners:
            callback(self)

    def _apply(self, credentials: Credentials) -> None:
        self.account_id = credentials.account_id
        self.credential = credentials.credential
        self.salt = credentials.salt
        self.authenticated = True

    def _save(self) -> None:
        if not self.config.server_fixed:
            self.store.set(SERVER_KEY, self.server_address)
        self.store.set(ACCOUNT_KEY, self.account_id)
        self.store.set(CREDENTIAL_KEY, self.credential)
        if self.salt:
            self.store.set(SALT_KEY, self.salt)
        else:
            self.store.delete(SALT_KEY)


def _drop_none(params: dict) -> dict:
    return {key: value for key, value in params.items() if value is not None}
