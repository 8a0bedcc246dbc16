"""Domain models returned by the catalog client.

Instances are produced by the functions in catalog.normalize; callers never
build them from raw server payloads themselves. Identifiers are opaque
strings owned by the server.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class AlbumSort(str, Enum):
    """Album list orderings understood by list_albums()."""

    A_Z = "a-z"
    RECENTLY_ADDED = "recently-added"
    RECENTLY_PLAYED = "recently-played"
    MOST_PLAYED = "most-played"
    RANDOM = "random"


class StarKind(str, Enum):
    """Item types that can be starred."""

    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"


@dataclass
class Track:
    """A playable track.

    Attributes:
        id: Track identifier
        title: Track title
        duration: Duration in seconds
        starred: True if favorited
        track_number: Position on the album (optional)
        album_id: Album ID (optional)
        album_name: Album name (optional)
        artist_id: Artist ID (optional)
        artist_name: Artist name (optional)
        genre: Genre name (optional)
        year: Release year (optional)
        cover_art_url: Fetchable cover art URL (optional)
        stream_url: Fetchable audio stream URL (optional)
    """

    id: str
    title: str
    duration: int = 0
    starred: bool = False
    track_number: Optional[int] = None
    album_id: Optional[str] = None
    album_name: Optional[str] = None
    artist_id: Optional[str] = None
    artist_name: Optional[str] = None
    genre: Optional[str] = None
    year: Optional[int] = None
    cover_art_url: Optional[str] = None
    stream_url: Optional[str] = None


@dataclass
class PodcastEpisode(Track):
    """Podcast episode, shaped like a track.

    Attributes:
        description: Episode description
        playable: True once the server has finished downloading the episode
    """

    description: Optional[str] = None
    playable: bool = False


@dataclass
class Album:
    """Album with its tracks in server order."""

    id: str
    name: str
    artist_id: Optional[str] = None
    artist_name: Optional[str] = None
    year: int = 0
    starred: bool = False
    genre_id: Optional[str] = None
    cover_art_url: Optional[str] = None
    track_count: Optional[int] = None
    tracks: List[Track] = field(default_factory=list)


@dataclass
class Artist:
    """Artist with albums (newest first) and similar artists."""

    id: str
    name: str
    album_count: int = 0
    description: Optional[str] = None
    starred: bool = False
    image_url: Optional[str] = None
    lastfm_url: Optional[str] = None
    musicbrainz_url: Optional[str] = None
    albums: List[Album] = field(default_factory=list)
    similar_artists: List["Artist"] = field(default_factory=list)


@dataclass
class Playlist:
    """User playlist."""

    id: str
    name: str
    cover_art_url: Optional[str] = None
    track_count: int = 0
    comment: Optional[str] = None
    tracks: List[Track] = field(default_factory=list)


@dataclass
class Genre:
    id: str
    name: str
    album_count: int = 0
    track_count: int = 0


@dataclass
class Podcast:
    """Podcast channel with its episodes, newest first."""

    id: str
    name: str
    description: Optional[str] = None
    cover_art_url: Optional[str] = None
    url: Optional[str] = None
    episodes: List[PodcastEpisode] = field(default_factory=list)


@dataclass
class SearchResult:
    artists: List[Artist] = field(default_factory=list)
    albums: List[Album] = field(default_factory=list)
    tracks: List[Track] = field(default_factory=list)


@dataclass
class StarredItems:
    artists: List[Artist] = field(default_factory=list)
    albums: List[Album] = field(default_factory=list)
    tracks: List[Track] = field(default_factory=list)


@dataclass
class ScanStatus:
    """Library scan progress.

    Attributes:
        scanning: True while a scan is running
        count: Number of items scanned so far
    """

    scanning: bool = False
    count: int = 0
