"""Tests for catalog.session.Session."""

import json

import httpx
import pytest

from catalog.config import ClientConfig
from catalog.exceptions import AuthError, RegistrationError, TransportError, UnsupportedOperationError
from catalog.protocols import create_adapter
from catalog.session import Session
from catalog.storage import MemoryStore

from tests.helpers import (
    SERVER_URL,
    StubServer,
    make_session,
    rest_failed,
    rest_ok,
    subsonic_failed,
    subsonic_ok,
)


class TestSessionInitialization:
    """Tests for loading persisted state."""

    def test_restores_persisted_fields(self):
        store = MemoryStore(
            {
                "server": "https://saved.example.com",
                "account": "alice",
                "credential": "tok",
                "salt": "s1",
            }
        )
        config = ClientConfig(protocol="subsonic")

        session = Session(config, create_adapter("subsonic"), store)

        assert session.server_address == "https://saved.example.com"
        assert session.account_id == "alice"
        assert session.credential == "tok"
        assert session.salt == "s1"
        # Restored credentials are unverified until probed
        assert session.authenticated is False

    def test_fixed_server_wins_over_store(self):
        store = MemoryStore({"server": "https://saved.example.com"})
        config = ClientConfig(server_url=SERVER_URL)

        session = Session(config, create_adapter("subsonic"), store)

        assert session.server_address == SERVER_URL

    def test_empty_store(self):
        session = Session(ClientConfig(), create_adapter("rest"), MemoryStore())

        assert session.server_address == ""
        assert session.account_id == ""
        assert session.credential == ""


class TestServerAddress:
    def test_set_server_address(self):
        session = Session(ClientConfig(), create_adapter("rest"))

        session.set_server_address("https://other.example.com/")

        assert session.server_address == "https://other.example.com"
        assert session.endpoint_url("getAlbum") == "https://other.example.com/rest/getAlbum"

    def test_fixed_server_cannot_change(self):
        session = Session(ClientConfig(server_url=SERVER_URL), create_adapter("rest"))

        with pytest.raises(ValueError, match="fixed"):
            session.set_server_address("https://other.example.com")

    def test_rejects_non_http_address(self):
        session = Session(ClientConfig(), create_adapter("rest"))

        with pytest.raises(ValueError):
            session.set_server_address("music.example.com")

    def test_endpoint_url_without_server(self):
        session = Session(ClientConfig(), create_adapter("rest"))

        with pytest.raises(AuthError, match="No server address"):
            session.endpoint_url("ping")


class TestRestLogin:
    """Tests for Session.login() against a Generic-REST server."""

    @pytest.mark.asyncio
    async def test_successful_login(self):
        server = StubServer({"login": rest_ok(access_token="jwt-1")})
        session = make_session(server, protocol="rest", logged_in=False)

        await session.login("a@example.com", "pw")

        assert session.authenticated is True
        assert session.account_id == "a@example.com"
        assert session.credential == "jwt-1"
        assert session.salt is None

        request = server.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/rest/login"
        assert json.loads(request.content) == {"email": "a@example.com", "password": "pw"}

    @pytest.mark.asyncio
    async def test_rejected_login(self):
        """Test that the server's message surfaces and nothing changes."""
        server = StubServer({"login": rest_failed("bad creds")})
        store = MemoryStore()
        session = make_session(server, protocol="rest", store=store, logged_in=False)

        with pytest.raises(AuthError) as exc_info:
            await session.login("a@example.com", "wrong", remember=True)

        assert exc_info.value.message == "bad creds"
        assert session.authenticated is False
        assert session.credential == ""
        assert store.data == {}

    @pytest.mark.asyncio
    async def test_remember_persists_fields(self):
        server = StubServer({"login": rest_ok(access_token="jwt-1")})
        store = MemoryStore()
        session = make_session(
            server, protocol="rest", store=store, server_url=None, logged_in=False
        )
        session.set_server_address(SERVER_URL)

        await session.login("a@example.com", "pw", remember=True)

        assert store.data == {
            "server": SERVER_URL,
            "account": "a@example.com",
            "credential": "jwt-1",
        }

    @pytest.mark.asyncio
    async def test_fixed_server_is_not_persisted(self):
        server = StubServer({"login": rest_ok(access_token="jwt-1")})
        store = MemoryStore()
        session = make_session(server, protocol="rest", store=store, logged_in=False)

        await session.login("a@example.com", "pw", remember=True)

        assert "server" not in store.data
        assert store.data["credential"] == "jwt-1"

    @pytest.mark.asyncio
    async def test_without_remember_nothing_is_persisted(self):
        server = StubServer({"login": rest_ok(access_token="jwt-1")})
        store = MemoryStore()
        session = make_session(server, protocol="rest", store=store, logged_in=False)

        await session.login("a@example.com", "pw")

        assert store.data == {}
        assert session.authenticated is True

    @pytest.mark.asyncio
    async def test_login_without_server(self):
        server = StubServer()
        session = make_session(server, protocol="rest", server_url=None, logged_in=False)

        with pytest.raises(AuthError, match="No server address"):
            await session.login("a@example.com", "pw")

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_unreachable_server(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        server = StubServer({"login": refuse})
        session = make_session(server, protocol="rest", logged_in=False)

        with pytest.raises(TransportError):
            await session.login("a@example.com", "pw")

        assert session.authenticated is False


class TestSubsonicLogin:
    """Tests for Session.login() against a Subsonic-style server."""

    @pytest.mark.asyncio
    async def test_successful_login_sends_token_not_password(self):
        server = StubServer({"ping": subsonic_ok()})
        session = make_session(server, logged_in=False)

        await session.login("alice", "sesame")

        params = server.params(0)
        assert server.endpoints() == ["ping"]
        assert "p" not in params
        assert "sesame" not in str(server.requests[0].url)
        assert params["u"] == "alice"
        assert params["c"] == "test-client"
        assert session.credential == params["t"]
        assert session.salt == params["s"]
        assert session.authenticated is True

    @pytest.mark.asyncio
    async def test_remember_persists_salt(self):
        server = StubServer({"ping": subsonic_ok()})
        store = MemoryStore()
        session = make_session(server, store=store, logged_in=False)

        await session.login("alice", "sesame", remember=True)

        assert store.data["account"] == "alice"
        assert store.data["credential"] == session.credential
        assert store.data["salt"] == session.salt

    @pytest.mark.asyncio
    async def test_rejected_login(self):
        server = StubServer({"ping": subsonic_failed("Wrong username or password", 40)})
        session = make_session(server, logged_in=False)

        with pytest.raises(AuthError) as exc_info:
            await session.login("alice", "wrong")

        assert exc_info.value.message == "Wrong username or password"
        assert exc_info.value.code == 40
        assert session.authenticated is False

    @pytest.mark.asyncio
    async def test_login_listeners_are_notified(self):
        server = StubServer({"ping": subsonic_ok()})
        session = make_session(server, logged_in=False)
        seen = []
        session.on_login(lambda s: seen.append(s.account_id))

        await session.login("alice", "sesame")

        assert seen == ["alice"]


class TestRegistration:
    @pytest.mark.asyncio
    async def test_registration_sets_flag_once(self):
        server = StubServer({"register": rest_ok()})
        session = make_session(server, protocol="rest", logged_in=False)

        await session.register("Alice", "a@example.com", "pw")

        assert session.consume_registration_flag() is True
        assert session.consume_registration_flag() is False
        assert session.authenticated is False

    @pytest.mark.asyncio
    async def test_rejected_registration(self):
        server = StubServer({"register": rest_failed("Email already used")})
        session = make_session(server, protocol="rest", logged_in=False)

        with pytest.raises(RegistrationError, match="Email already used"):
            await session.register("Alice", "a@example.com", "pw")

        assert session.consume_registration_flag() is False

    @pytest.mark.asyncio
    async def test_subsonic_registration_unsupported(self):
        server = StubServer()
        session = make_session(server, logged_in=False)

        with pytest.raises(UnsupportedOperationError):
            await session.register("Alice", "alice", "pw")

        assert server.requests == []


class TestProbeSessionValidity:
    """Tests for Session.probe_session_validity()."""

    @pytest.mark.asyncio
    async def test_no_credential_returns_false_without_request(self):
        server = StubServer()
        session = make_session(server, logged_in=False)

        assert await session.probe_session_validity() is False
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_no_server_returns_false_without_request(self):
        server = StubServer()
        session = make_session(server, server_url=None)

        assert await session.probe_session_validity() is False
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_accepted_credential(self):
        server = StubServer({"ping": subsonic_ok()})
        session = make_session(server)
        session.authenticated = False

        assert await session.probe_session_validity() is True

        assert session.authenticated is True
        assert server.params()["t"] == "abc123token"

    @pytest.mark.asyncio
    async def test_rest_probe_sends_bearer_header(self):
        server = StubServer({"ping": rest_ok()})
        session = make_session(server, protocol="rest")

        assert await session.probe_session_validity() is True

        assert server.requests[0].headers["Authorization"] == "Bearer abc123token"

    @pytest.mark.asyncio
    async def test_rejected_credential_keeps_fields(self):
        server = StubServer({"ping": subsonic_failed("Wrong username or password", 40)})
        store = MemoryStore({"credential": "abc123token"})
        session = make_session(server, store=store)

        assert await session.probe_session_validity() is False

        assert session.authenticated is False
        assert session.credential == "abc123token"
        assert store.data == {"credential": "abc123token"}

    @pytest.mark.asyncio
    async def test_transport_failure_propagates(self):
        server = StubServer({"ping": httpx.Response(503, text="Service Unavailable")})
        session = make_session(server)

        with pytest.raises(TransportError) as exc_info:
            await session.probe_session_validity()

        assert exc_info.value.status_code == 503


class TestLogout:
    """Tests for Session.logout()."""

    def test_clears_memory_and_store(self):
        server = StubServer()
        store = MemoryStore({"account": "alice", "credential": "abc123token", "salt": "c19b2d"})
        session = make_session(server, store=store, server_url=None)
        session.server_address = "https://saved.example.com"

        session.logout()

        assert store.data == {}
        assert session.server_address == ""
        assert session.account_id == ""
        assert session.credential == ""
        assert session.salt is None
        assert session.authenticated is False

    def test_fixed_server_survives_logout(self):
        session = make_session(StubServer())

        session.logout()

        assert session.server_address == SERVER_URL
        assert session.credential == ""

    def test_logout_is_idempotent(self):
        session = make_session(StubServer())
        seen = []
        session.on_logout(lambda s: seen.append(s.authenticated))

        session.logout()
        session.logout()

        assert seen == [False, False]
        assert session.credential == ""
