"""Catalog client: one coroutine per catalog operation."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from . import transport
from .config import ClientConfig
from .models import (
    Album,
    AlbumSort,
    Artist,
    Genre,
    Playlist,
    Podcast,
    ScanStatus,
    SearchResult,
    StarredItems,
    Track,
)
from .normalize import (
    as_list,
    normalize_album,
    normalize_artist,
    normalize_genre,
    normalize_playlist,
    normalize_podcast,
    normalize_scan_status,
    normalize_track,
)
from .pipeline import RequestPipeline
from .protocols import Operation, ProtocolAdapter, create_adapter
from .session import Session
from .storage import JsonFileStore, KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)

RANDOM_PLAYLIST_ID = "random"
RANDOM_PLAYLIST_NAME = "Random"
RANDOM_TRACK_COUNT = 200


class CatalogClient:
    """Async client for browsing and managing a remote music catalog.

    The client composes a Session (server and credential), a RequestPipeline
    (authentication and envelope handling) and a ProtocolAdapter (dialect).
    Errors raised below are never caught here; they reach the caller as
    AuthError, RemoteError, TransportError or UnsupportedOperationError.

    Attributes:
        session: Session shared with the pipeline
        adapter: Protocol adapter chosen at construction
        pipeline: RequestPipeline sending every call

    Example:
        >>> config = ClientConfig(server_url="https://music.example.com")
        >>> async with CatalogClient.from_config(config) as client:
        ...     await client.session.login("john", "secret")
        ...     albums = await client.list_albums("recently-added", size=20)
        ...     print(f"Found {len(albums)} albums")
    """

    def __init__(
        self,
        session: Session,
        adapter: Optional[ProtocolAdapter] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            session: Session to read the server and credential from
            adapter: Protocol adapter (default: the session's adapter)
            http: Shared HTTP client (default: a new client owned by this one)
        """
        self.session = session
        self.adapter = adapter or session.adapter
        self._owns_http = http is None and session.http is None
        self.http = http or session.http or transport.create_http_client(session.config.timeout)
        if session.http is None:
            session.http = self.http
        self.pipeline = RequestPipeline(session, self.adapter, self.http)

        logger.info(f"Initialized catalog client ({self.adapter.name} protocol)")

    @classmethod
    def from_config(
        cls, config: ClientConfig, store: Optional[KeyValueStore] = None
    ) -> "CatalogClient":
        """Build a client, its adapter, session and HTTP client from config.

        Args:
            config: Client configuration
            store: Session persistence (default: config.state_file as a
                JsonFileStore, or an in-memory store)
        """
        if store is None:
            store = JsonFileStore(config.state_file) if config.state_file else MemoryStore()
        adapter = create_adapter(
            config.protocol, client_name=config.client_name, api_version=config.api_version
        )
        http = transport.create_http_client(config.timeout)
        session = Session(config, adapter, store, http)

        client = cls(session, adapter, http)
        client._owns_http = True
        return client

    async def aclose(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http:
            await self.http.aclose()
            logger.info("Closed catalog client")

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # Browsing

    async def list_genres(self) -> List[Genre]:
        """Fetch all genres, most albums first.

        Genres with equal album counts keep the server's order.
        """
        items = await self.pipeline.call(Operation.GENRES)
        genres = [normalize_genre(item) for item in as_list(items)]
        genres.sort(key=lambda genre: genre.album_count, reverse=True)

        logger.info(f"Retrieved {len(genres)} genres")
        return genres

    async def list_albums(self, sort: Any, size: int = 50, offset: int = 0) -> List[Album]:
        """Fetch a page of albums.

        Args:
            sort: AlbumSort or one of "a-z", "recently-added",
                "recently-played", "most-played", "random"
            size: Maximum number of albums to return
            offset: Starting position in the list

        Raises:
            ValueError: If sort is not a known ordering
        """
        sort = AlbumSort(sort)
        items = await self.pipeline.call(Operation.ALBUMS, sort=sort, size=size, offset=offset)
        urls = self.pipeline.resource_urls()
        albums = [normalize_album(item, urls) for item in as_list(items)]

        logger.info(f"Retrieved {len(albums)} albums ({sort.value}, offset={offset})")
        return albums

    async def list_albums_by_genre(
        self, genre_id: str, size: int = 50, offset: int = 0
    ) -> List[Album]:
        items = await self.pipeline.call(
            Operation.ALBUMS_BY_GENRE, genre=genre_id, size=size, offset=offset
        )
        urls = self.pipeline.resource_urls()
        return [normalize_album(item, urls) for item in as_list(items)]

    async def list_tracks_by_genre(
        self, genre_id: str, size: int = 50, offset: int = 0
    ) -> List[Track]:
        items = await self.pipeline.call(
            Operation.TRACKS_BY_GENRE, genre=genre_id, size=size, offset=offset
        )
        urls = self.pipeline.resource_urls()
        return [normalize_track(item, urls) for item in as_list(items)]

    async def list_artists(self) -> List[Artist]:
        """Fetch all artists, flattening the server's alphabetical index."""
        buckets = await self.pipeline.call(Operation.ARTISTS)
        urls = self.pipeline.resource_urls()

        artists = []
        for bucket in as_list(buckets):
            if "artist" in bucket:
                artists.extend(normalize_artist(item, urls) for item in as_list(bucket["artist"]))
            elif "id" in bucket:
                # Flat list: the entry is the artist itself
                artists.append(normalize_artist(bucket, urls))

        logger.info(f"Retrieved {len(artists)} artists")
        return artists

    async def get_artist_details(self, artist_id: str) -> Artist:
        """Fetch an artist with albums and, where offered, biography.

        Dialects that keep biography and similar artists on a separate
        endpoint are queried concurrently and the records merged. If any
        request fails the whole call fails; nothing partial is returned.

        Raises:
            RemoteError: If the artist does not exist
        """
        operations = self.adapter.detail_operations(Operation.ARTIST)
        logger.debug(f"Fetching artist {artist_id} ({len(operations)} requests)")

        tasks = [
            asyncio.ensure_future(self.pipeline.call(operation, id=artist_id))
            for operation in operations
        ]
        try:
            parts = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            # Retrieve sibling outcomes so none is reported as unhandled
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        merged: Dict[str, Any] = {}
        for part in parts:
            if isinstance(part, dict):
                merged.update(part)

        artist = normalize_artist(merged, self.pipeline.resource_urls())
        logger.info(f"Retrieved artist {artist_id} with {len(artist.albums)} albums")
        return artist

    async def get_album_details(self, album_id: str) -> Album:
        item = await self.pipeline.call(Operation.ALBUM, id=album_id)
        album = normalize_album(item or {}, self.pipeline.resource_urls())

        logger.info(f"Retrieved album {album_id} with {len(album.tracks)} tracks")
        return album

    async def get_track(self, track_id: str) -> Track:
        item = await self.pipeline.call(Operation.TRACK, id=track_id)
        return normalize_track(item or {}, self.pipeline.resource_urls())

    async def get_random_tracks(self, size: int = RANDOM_TRACK_COUNT) -> List[Track]:
        items = await self.pipeline.call(Operation.RANDOM_TRACKS, size=size)
        urls = self.pipeline.resource_urls()
        return [normalize_track(item, urls) for item in as_list(items)]

    # Playlists

    async def list_playlists(self) -> List[Playlist]:
        items = await self.pipeline.call(Operation.PLAYLISTS)
        urls = self.pipeline.resource_urls()
        playlists = [normalize_playlist(item, urls) for item in as_list(items)]

        logger.info(f"Retrieved {len(playlists)} playlists")
        return playlists

    async def get_playlist(self, playlist_id: str) -> Playlist:
        """Fetch a playlist with its tracks.

        The id "random" is not a server playlist: it yields a synthetic
        playlist named "Random" built from a random-track fetch.
        """
        if playlist_id == RANDOM_PLAYLIST_ID:
            tracks = await self.get_random_tracks()
            return Playlist(
                id=RANDOM_PLAYLIST_ID,
                name=RANDOM_PLAYLIST_NAME,
                track_count=len(tracks),
                tracks=tracks,
            )

        item = await self.pipeline.call(Operation.PLAYLIST, id=playlist_id)
        return normalize_playlist(item or {"id": playlist_id}, self.pipeline.resource_urls())

    async def create_playlist(self, name: str) -> List[Playlist]:
        """Create a playlist and return the refreshed playlist list."""
        await self.pipeline.call(Operation.CREATE_PLAYLIST, name=name)
        logger.info(f"Created playlist {name}")
        return await self.list_playlists()

    async def edit_playlist(self, playlist_id: str, name: str) -> List[Playlist]:
        """Rename a playlist and return the refreshed playlist list."""
        await self.pipeline.call(Operation.UPDATE_PLAYLIST, playlist_id=playlist_id, name=name)
        logger.info(f"Renamed playlist {playlist_id} to {name}")
        return await self.list_playlists()

    async def delete_playlist(self, playlist_id: str) -> bool:
        await self.pipeline.call(Operation.DELETE_PLAYLIST, id=playlist_id)
        logger.info(f"Deleted playlist {playlist_id}")
        return True

    async def add_to_playlist(self, playlist_id: str, track_id: str) -> bool:
        await self.pipeline.call(
            Operation.UPDATE_PLAYLIST, playlist_id=playlist_id, track_id=track_id
        )
        logger.info(f"Added track {track_id} to playlist {playlist_id}")
        return True

    async def remove_from_playlist(self, playlist_id: str, index: int) -> bool:
        """Remove the entry at a zero-based position from a playlist."""
        await self.pipeline.call(Operation.UPDATE_PLAYLIST, playlist_id=playlist_id, index=index)
        logger.info(f"Removed entry {index} from playlist {playlist_id}")
        return True

    # Favorites

    async def get_starred(self) -> StarredItems:
        """Fetch starred artists, albums and tracks in one request."""
        starred = await self.pipeline.call(Operation.STARRED) or {}
        urls = self.pipeline.resource_urls()

        result = StarredItems(
            artists=[normalize_artist(item, urls) for item in as_list(starred.get("artist"))],
            albums=[normalize_album(item, urls) for item in as_list(starred.get("album"))],
            tracks=[normalize_track(item, urls) for item in as_list(starred.get("song"))],
        )
        logger.info(
            f"Retrieved {len(result.artists)} starred artists, "
            f"{len(result.albums)} albums, {len(result.tracks)} tracks"
        )
        return result

    async def star(self, kind: str, item_id: str) -> bool:
        """Star (favorite) a track, album or artist.

        Args:
            kind: "track", "album" or "artist"
            item_id: ID of the item

        Raises:
            ValueError: If kind is not a starrable type
        """
        await self.pipeline.call(Operation.STAR, kind=kind, id=item_id)
        logger.info(f"Successfully starred {kind} {item_id}")
        return True

    async def unstar(self, kind: str, item_id: str) -> bool:
        """Remove a track, album or artist from favorites."""
        await self.pipeline.call(Operation.UNSTAR, kind=kind, id=item_id)
        logger.info(f"Successfully unstarred {kind} {item_id}")
        return True

    async def star_album(self, album_id: str) -> bool:
        return await self.star("album", album_id)

    async def unstar_album(self, album_id: str) -> bool:
        return await self.unstar("album", album_id)

    # Search, playback, library

    async def search(self, query: str) -> SearchResult:
        """Search artists, albums and tracks."""
        found = await self.pipeline.call(Operation.SEARCH, query=query) or {}
        urls = self.pipeline.resource_urls()

        return SearchResult(
            artists=[normalize_artist(item, urls) for item in as_list(found.get("artist"))],
            albums=[normalize_album(item, urls) for item in as_list(found.get("album"))],
            tracks=[normalize_track(item, urls) for item in as_list(found.get("song"))],
        )

    async def scrobble(self, track_id: str, submission: bool = True) -> bool:
        """Report a playback event.

        Args:
            track_id: ID of the track that was played
            submission: False to only update "now playing", where supported
        """
        await self.pipeline.call(Operation.SCROBBLE, id=track_id, submission=submission)
        logger.debug(f"Scrobbled track {track_id}")
        return True

    async def list_podcasts(self) -> List[Podcast]:
        """Fetch podcast channels with their episodes.

        Raises:
            UnsupportedOperationError: On dialects without podcasts
        """
        channels = await self.pipeline.call(Operation.PODCASTS)
        urls = self.pipeline.resource_urls()
        return [normalize_podcast(item, urls) for item in as_list(channels)]

    async def start_library_scan(self) -> ScanStatus:
        """Ask the server to rescan its media library.

        Raises:
            UnsupportedOperationError: On dialects without library scans
        """
        status = await self.pipeline.call(Operation.START_SCAN)
        logger.info("Library scan started")
        return normalize_scan_status(status)

    async def get_scan_status(self) -> ScanStatus:
        status = await self.pipeline.call(Operation.SCAN_STATUS)
        return normalize_scan_status(status)

    def get_download_url(self, item_id: str) -> str:
        """Build a download URL for a track; no request is made."""
        return self.pipeline.resource_urls().download(item_id)
