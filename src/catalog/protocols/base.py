"""Protocol adapter interface shared by both server dialects.

An adapter knows three things about a server family: the shape of its
response envelope, the endpoint name of each catalog operation, and the query
parameter conventions. It never performs I/O; the request pipeline and the
session send what the adapter describes.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..exceptions import UnsupportedOperationError
from ..models import AlbumSort, StarKind

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    """Catalog operations an adapter may map to an endpoint."""

    PING = "ping"
    GENRES = "genres"
    ALBUMS = "albums"
    ALBUMS_BY_GENRE = "albums_by_genre"
    TRACKS_BY_GENRE = "tracks_by_genre"
    ARTISTS = "artists"
    ARTIST = "artist"
    ARTIST_INFO = "artist_info"
    ALBUM = "album"
    TRACK = "track"
    PLAYLISTS = "playlists"
    PLAYLIST = "playlist"
    CREATE_PLAYLIST = "create_playlist"
    UPDATE_PLAYLIST = "update_playlist"
    DELETE_PLAYLIST = "delete_playlist"
    RANDOM_TRACKS = "random_tracks"
    STARRED = "starred"
    STAR = "star"
    UNSTAR = "unstar"
    SEARCH = "search"
    SCROBBLE = "scrobble"
    PODCASTS = "podcasts"
    START_SCAN = "start_scan"
    SCAN_STATUS = "scan_status"


@dataclass
class Credentials:
    """Credential accepted by the server at login.

    Attributes:
        account_id: Account identifier used to log in
        credential: Bearer token, or the Subsonic MD5 token
        salt: Salt the Subsonic token was built with (None for bearer tokens)
    """

    account_id: str
    credential: str
    salt: Optional[str] = None


@dataclass
class AuthRequest:
    """Login or registration request described by an adapter.

    Attributes:
        method: HTTP method
        endpoint: Endpoint name under /rest/
        params: Query parameters
        json: JSON body
        credentials: Credentials that become valid if the server accepts
            the request (Subsonic-style logins compute them up front)
    """

    method: str
    endpoint: str
    params: Dict[str, str] = field(default_factory=dict)
    json: Optional[Dict[str, str]] = None
    credentials: Optional[Credentials] = None


ALBUM_SORT_TOKENS = {
    AlbumSort.A_Z: "alphabeticalByName",
    AlbumSort.RECENTLY_ADDED: "newest",
    AlbumSort.RECENTLY_PLAYED: "recent",
    AlbumSort.MOST_PLAYED: "frequent",
    AlbumSort.RANDOM: "random",
}

STAR_PARAMS = {
    StarKind.TRACK: "id",
    StarKind.ALBUM: "albumId",
    StarKind.ARTIST: "artistId",
}


class ProtocolAdapter(ABC):
    """Strategy describing one server dialect.

    Subclasses fill in the class-level tables and implement the envelope and
    authentication hooks.

    Attributes:
        name: Dialect name used by create_adapter()
        endpoints: Operation -> endpoint name; missing entries are unsupported
        payload_paths: Operation -> keys leading from the unwrapped envelope to
            the operation's payload
        detail_fetches: Operation -> operations fetched concurrently and
            merged to build a detailed record
    """

    name = ""
    endpoints: Dict[Operation, str] = {}
    payload_paths: Dict[Operation, Tuple[str, ...]] = {}
    detail_fetches: Dict[Operation, Tuple[Operation, ...]] = {}

    def __init__(self, client_name: str = "catalog-client", api_version: str = "1.16.1"):
        self.client_name = client_name
        self.api_version = api_version

    def endpoint_for(self, operation: Operation) -> str:
        """Return the endpoint name for an operation.

        Raises:
            UnsupportedOperationError: If this dialect has no such endpoint
        """
        try:
            return self.endpoints[operation]
        except KeyError:
            raise UnsupportedOperationError(
                f"'{operation.value}' is not supported by the {self.name} protocol"
            )

    def supports(self, operation: Operation) -> bool:
        return operation in self.endpoints

    def detail_operations(self, operation: Operation) -> Tuple[Operation, ...]:
        """Operations whose payloads are merged into one detailed record."""
        return self.detail_fetches.get(operation, (operation,))

    def album_sort_token(self, sort: Any) -> str:
        """Map an AlbumSort (or its string value) to the server's list type.

        Raises:
            ValueError: If sort is not a known ordering
        """
        return ALBUM_SORT_TOKENS[AlbumSort(sort)]

    def params_for(self, operation: Operation, **args: Any) -> Dict[str, Any]:
        """Translate facade arguments into query parameters for an operation.

        Values of None are left in place; the pipeline drops them.
        """
        if operation == Operation.ALBUMS:
            return {
                "type": self.album_sort_token(args["sort"]),
                "size": args.get("size"),
                "offset": args.get("offset"),
            }
        if operation == Operation.ALBUMS_BY_GENRE:
            return {
                "type": "byGenre",
                "genre": args["genre"],
                "size": args.get("size"),
                "offset": args.get("offset"),
            }
        if operation == Operation.TRACKS_BY_GENRE:
            return {
                "genre": args["genre"],
                "count": args.get("size"),
                "offset": args.get("offset"),
            }
        if operation == Operation.UPDATE_PLAYLIST:
            return {
                "playlistId": args["playlist_id"],
                "name": args.get("name"),
                "songIdToAdd": args.get("track_id"),
                "songIndexToRemove": args.get("index"),
            }
        if operation in (Operation.STAR, Operation.UNSTAR):
            # Exactly one of id / albumId / artistId is sent
            param_name = STAR_PARAMS[StarKind(args["kind"])]
            return {param_name: args["id"]}
        if operation == Operation.SEARCH:
            return {"query": args["query"]}
        if operation == Operation.SCROBBLE:
            return {"id": args["id"]}
        if operation == Operation.RANDOM_TRACKS:
            return {"size": args.get("size")}
        if operation == Operation.CREATE_PLAYLIST:
            return {"name": args["name"]}
        return dict(args)

    def extract(self, operation: Operation, payload: Any) -> Any:
        """Walk payload_paths to the operation's payload.

        A payload that is already a list is returned as is. Returns None
        when any key along the path is missing.
        """
        if isinstance(payload, list):
            return payload
        node: Any = payload
        for key in self.payload_paths.get(operation, ()):
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node

    @abstractmethod
    def auth_headers(self, session) -> Dict[str, str]:
        """Headers authenticating a catalog request."""

    @abstractmethod
    def auth_params(self, session) -> Dict[str, str]:
        """Query parameters authenticating a catalog request."""

    @abstractmethod
    def resource_params(self, session) -> Dict[str, str]:
        """Query parameters that make a synthesized URL fetchable on its own."""

    @abstractmethod
    def unwrap(self, body: Any) -> Any:
        """Validate an envelope and return its payload.

        Raises:
            RemoteError: If the envelope reports failure or is malformed
        """

    @abstractmethod
    def login_request(self, account_id: str, password: str) -> AuthRequest:
        """Describe the login request for these credentials."""

    @abstractmethod
    def accept_login(self, body: Any, request: AuthRequest) -> Credentials:
        """Judge a login response.

        Raises:
            AuthError: If the server rejected the login
        """

    def register_request(self, name: str, account_id: str, password: str) -> AuthRequest:
        raise UnsupportedOperationError(
            f"Registration is not supported by the {self.name} protocol"
        )

    def accept_registration(self, body: Any) -> None:
        raise UnsupportedOperationError(
            f"Registration is not supported by the {self.name} protocol"
        )
