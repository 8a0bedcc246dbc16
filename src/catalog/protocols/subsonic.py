"""Subsonic-style dialect (Subsonic API v1.16.1 and compatible servers).

Envelope:
    {"subsonic-response": {"status": "ok", "version": "1.16.1", ...payload}}
    {"subsonic-response": {"status": "failed", "error": {"code": 70, "message": "..."}}}

Some servers use a different namespace (e.g. "navidrome-response"), so any
top-level key ending in "-response" is accepted. Authentication is carried in
query parameters (u, t, s, v, c, f) and payloads are nested one level under a
per-call key ("albumList2", "searchResult3", ...).
"""

import logging
from typing import Any, Dict

from ..auth import create_auth_params, generate_token
from ..exceptions import AuthError, RemoteError, remote_error_for
from .base import AuthRequest, Credentials, Operation, ProtocolAdapter

logger = logging.getLogger(__name__)

SEARCH_RESULT_COUNTS = {"artistCount": 20, "albumCount": 20, "songCount": 50}


class SubsonicAdapter(ProtocolAdapter):
    """Adapter for Subsonic API compatible servers."""

    name = "subsonic"

    endpoints = {
        Operation.PING: "ping",
        Operation.GENRES: "getGenres",
        Operation.ALBUMS: "getAlbumList2",
        Operation.ALBUMS_BY_GENRE: "getAlbumList2",
        Operation.TRACKS_BY_GENRE: "getSongsByGenre",
        Operation.ARTISTS: "getArtists",
        Operation.ARTIST: "getArtist",
        Operation.ARTIST_INFO: "getArtistInfo2",
        Operation.ALBUM: "getAlbum",
        Operation.TRACK: "getSong",
        Operation.PLAYLISTS: "getPlaylists",
        Operation.PLAYLIST: "getPlaylist",
        Operation.CREATE_PLAYLIST: "createPlaylist",
        Operation.UPDATE_PLAYLIST: "updatePlaylist",
        Operation.DELETE_PLAYLIST: "deletePlaylist",
        Operation.RANDOM_TRACKS: "getRandomSongs",
        Operation.STARRED: "getStarred2",
        Operation.STAR: "star",
        Operation.UNSTAR: "unstar",
        Operation.SEARCH: "search3",
        Operation.SCROBBLE: "scrobble",
        Operation.PODCASTS: "getPodcasts",
        Operation.START_SCAN: "startScan",
        Operation.SCAN_STATUS: "getScanStatus",
    }

    payload_paths = {
        Operation.GENRES: ("genres", "genre"),
        Operation.ALBUMS: ("albumList2", "album"),
        Operation.ALBUMS_BY_GENRE: ("albumList2", "album"),
        Operation.TRACKS_BY_GENRE: ("songsByGenre", "song"),
        Operation.ARTISTS: ("artists", "index"),
        Operation.ARTIST: ("artist",),
        Operation.ARTIST_INFO: ("artistInfo2",),
        Operation.ALBUM: ("album",),
        Operation.TRACK: ("song",),
        Operation.PLAYLISTS: ("playlists", "playlist"),
        Operation.PLAYLIST: ("playlist",),
        Operation.RANDOM_TRACKS: ("randomSongs", "song"),
        Operation.STARRED: ("starred2",),
        Operation.SEARCH: ("searchResult3",),
        Operation.PODCASTS: ("podcasts", "channel"),
        Operation.START_SCAN: ("scanStatus",),
        Operation.SCAN_STATUS: ("scanStatus",),
    }

    detail_fetches = {
        Operation.ARTIST: (Operation.ARTIST, Operation.ARTIST_INFO),
    }

    def params_for(self, operation: Operation, **args: Any) -> Dict[str, Any]:
        if operation == Operation.SEARCH:
            return {"query": args["query"], **SEARCH_RESULT_COUNTS}
        if operation == Operation.SCROBBLE:
            return {"id": args["id"], "submission": args.get("submission", True)}
        if operation == Operation.PODCASTS:
            return {"includeEpisodes": True}
        return super().params_for(operation, **args)

    def _query_auth(self, session) -> Dict[str, str]:
        if not session.credential:
            return {
                "u": session.account_id,
                "v": self.api_version,
                "c": self.client_name,
                "f": "json",
            }
        return create_auth_params(
            session.account_id,
            session.credential,
            session.salt or "",
            api_version=self.api_version,
            client_name=self.client_name,
        )

    def auth_headers(self, session) -> Dict[str, str]:
        return {}

    def auth_params(self, session) -> Dict[str, str]:
        return self._query_auth(session)

    def resource_params(self, session) -> Dict[str, str]:
        return self._query_auth(session)

    def unwrap(self, body: Any) -> Dict[str, Any]:
        envelope = None
        if isinstance(body, dict):
            envelope = next(
                (value for key, value in body.items() if key.endswith("-response")), None
            )
        if not isinstance(envelope, dict):
            raise RemoteError("Malformed response envelope")

        status = envelope.get("status")
        if status != "ok":
            error = envelope.get("error")
            error = error if isinstance(error, dict) else {}
            code = error.get("code") if isinstance(error.get("code"), int) else None
            message = error.get("message") or status or "Unknown error"

            logger.error(f"Subsonic API error {code}: {message}")
            raise remote_error_for(str(message), code)

        return envelope

    def login_request(self, account_id: str, password: str) -> AuthRequest:
        token, salt = generate_token(password)
        return AuthRequest(
            method="GET",
            endpoint="ping",
            params=create_auth_params(
                account_id,
                token,
                salt,
                api_version=self.api_version,
                client_name=self.client_name,
            ),
            credentials=Credentials(account_id=account_id, credential=token, salt=salt),
        )

    def accept_login(self, body: Any, request: AuthRequest) -> Credentials:
        try:
            self.unwrap(body)
        except RemoteError as e:
            raise AuthError(e.message, e.code) from e
        return request.credentials
