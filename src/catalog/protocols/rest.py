"""Generic-REST dialect.

Envelope:
    {"success": true, ...payload}  or  {"success": true, "data": {...} | [...]}
    {"success": false, "error": {"message": "..."}}

Requests carry a bearer token; payload lists are flat ("albums", "songs").
Artist biographies, podcasts and library scans are not offered.
"""

import logging
from typing import Any, Dict, Optional

from ..exceptions import AuthError, RegistrationError, RemoteError, remote_error_for
from .base import AuthRequest, Credentials, Operation, ProtocolAdapter

logger = logging.getLogger(__name__)


def _failure(body: Dict[str, Any]) -> tuple:
    """Extract (message, code) from a failed envelope."""
    error = body.get("error")
    code: Optional[int] = None
    message = None
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(error.get("code"), int):
            code = error["code"]
    elif isinstance(error, str):
        message = error
    message = message or body.get("message") or body.get("status") or "Unknown error"
    return str(message), code


class RestAdapter(ProtocolAdapter):
    """Adapter for servers answering with a boolean success envelope."""

    name = "rest"

    endpoints = {
        Operation.PING: "ping",
        Operation.GENRES: "getGenres",
        Operation.ALBUMS: "getAlbumList",
        Operation.ALBUMS_BY_GENRE: "getAlbumList",
        Operation.TRACKS_BY_GENRE: "getSongsByGenre",
        Operation.ARTISTS: "getArtists",
        Operation.ARTIST: "getArtist",
        Operation.ALBUM: "getAlbum",
        Operation.TRACK: "getSong",
        Operation.PLAYLISTS: "getPlaylists",
        Operation.PLAYLIST: "getPlaylist",
        Operation.CREATE_PLAYLIST: "createPlaylist",
        Operation.UPDATE_PLAYLIST: "updatePlaylist",
        Operation.DELETE_PLAYLIST: "deletePlaylist",
        Operation.RANDOM_TRACKS: "getRandomSongs",
        Operation.STARRED: "getStarred",
        Operation.STAR: "star",
        Operation.UNSTAR: "unstar",
        Operation.SEARCH: "search3",
        Operation.SCROBBLE: "scrobble",
    }

    payload_paths = {
        Operation.GENRES: ("genres",),
        Operation.ALBUMS: ("albums",),
        Operation.ALBUMS_BY_GENRE: ("albums",),
        Operation.TRACKS_BY_GENRE: ("songs",),
        Operation.ARTISTS: ("artists", "index"),
        Operation.ARTIST: ("artist",),
        Operation.ALBUM: ("album",),
        Operation.TRACK: ("song",),
        Operation.PLAYLISTS: ("playlists",),
        Operation.PLAYLIST: ("playlist",),
        Operation.RANDOM_TRACKS: ("randomSongs",),
        Operation.STARRED: ("starred",),
        Operation.SEARCH: ("searchResult3",),
    }

    def auth_headers(self, session) -> Dict[str, str]:
        if not session.credential:
            return {}
        return {"Authorization": f"Bearer {session.credential}"}

    def auth_params(self, session) -> Dict[str, str]:
        return {}

    def resource_params(self, session) -> Dict[str, str]:
        # Media elements cannot send headers, so the token travels in the URL
        if not session.credential:
            return {}
        return {"access_token": session.credential}

    def unwrap(self, body: Any) -> Any:
        if not isinstance(body, dict):
            raise RemoteError("Malformed response envelope")

        if body.get("success") is not True:
            message, code = _failure(body)
            logger.error(f"Server reported failure: {message}")
            raise remote_error_for(message, code)

        # "data" may hold an object or the flat list itself
        data = body.get("data")
        return body if data is None else data

    def login_request(self, account_id: str, password: str) -> AuthRequest:
        return AuthRequest(
            method="POST",
            endpoint="login",
            json={"email": account_id, "password": password},
        )

    def accept_login(self, body: Any, request: AuthRequest) -> Credentials:
        try:
            payload = self.unwrap(body)
        except RemoteError as e:
            raise AuthError(e.message, e.code) from e

        token = body.get("access_token")
        if isinstance(payload, dict):
            token = payload.get("access_token") or token
        if not token:
            raise AuthError("Login response did not include an access token")

        return Credentials(account_id=request.json["email"], credential=str(token))

    def register_request(self, name: str, account_id: str, password: str) -> AuthRequest:
        return AuthRequest(
            method="POST",
            endpoint="register",
            json={"name": name, "email": account_id, "password": password},
        )

    def accept_registration(self, body: Any) -> None:
        try:
            self.unwrap(body)
        except RemoteError as e:
            raise RegistrationError(e.message, e.code) from e
