"""Stub server and envelope builders shared by the catalog tests."""

from typing import Any, Callable, Dict, List, Optional, Union

import httpx

from catalog.client import CatalogClient
from catalog.config import ClientConfig
from catalog.protocols import create_adapter
from catalog.session import Session
from catalog.storage import MemoryStore

SERVER_URL = "https://music.example.com"

Route = Union[Dict[str, Any], httpx.Response, Callable[[httpx.Request], Any]]


def subsonic_ok(namespace: str = "subsonic", **payload: Any) -> Dict[str, Any]:
    """Successful Subsonic-style envelope."""
    return {f"{namespace}-response": {"status": "ok", "version": "1.16.1", **payload}}


def subsonic_failed(message: str, code: int = 0, namespace: str = "subsonic") -> Dict[str, Any]:
    """Failed Subsonic-style envelope."""
    return {
        f"{namespace}-response": {
            "status": "failed",
            "version": "1.16.1",
            "error": {"code": code, "message": message},
        }
    }


def rest_ok(**payload: Any) -> Dict[str, Any]:
    """Successful Generic-REST envelope."""
    return {"success": True, **payload}


def rest_failed(message: str) -> Dict[str, Any]:
    """Failed Generic-REST envelope."""
    return {"success": False, "error": {"message": message}}


class StubServer:
    """In-process server answering by endpoint name.

    Routes map an endpoint name ("getAlbum", "login", ...) to a JSON body,
    an httpx.Response, or a callable taking the request and returning
    either. Unknown endpoints answer 404 with a non-JSON body.

    Attributes:
        routes: Endpoint name -> route
        requests: Every request received, in order
    """

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]

        route = self.routes.get(endpoint)
        if route is None:
            return httpx.Response(404, text="Not Found")
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    def http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def endpoints(self) -> List[str]:
        """Endpoint names requested so far."""
        return [request.url.path.rsplit("/", 1)[-1] for request in self.requests]

    def params(self, index: int = -1) -> Dict[str, str]:
        """Query parameters of a recorded request."""
        return dict(self.requests[index].url.params)


def make_session(
    server: StubServer,
    protocol: str = "subsonic",
    store: Optional[MemoryStore] = None,
    server_url: Optional[str] = SERVER_URL,
    logged_in: bool = True,
) -> Session:
    """Session bound to a stub server, optionally already logged in."""
    config = ClientConfig(server_url=server_url, protocol=protocol, client_name="test-client")
    adapter = create_adapter(protocol, client_name=config.client_name)
    session = Session(config, adapter, store if store is not None else MemoryStore(), server.http())

    if logged_in:
        session.account_id = "alice"
        session.credential = "abc123token"
        session.salt = "c19b2d" if protocol == "subsonic" else None
        session.authenticated = True
    return session


def make_client(server: StubServer, protocol: str = "subsonic", **kwargs: Any) -> CatalogClient:
    """CatalogClient wired to a stub server."""
    session = make_session(server, protocol=protocol, **kwargs)
    return CatalogClient(session)
