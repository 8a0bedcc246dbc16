"""Async client for remote music catalogs (Generic-REST and Subsonic-style servers)."""

__version__ = "1.0.0"

from .client import CatalogClient
from .config import ClientConfig
from .exceptions import (
    AuthError,
    CatalogError,
    CredentialsRejectedError,
    MissingParameterError,
    NotFoundError,
    PermissionDeniedError,
    RegistrationError,
    RemoteError,
    TransportError,
    UnsupportedOperationError,
    VersionMismatchError,
)
from .models import (
    Album,
    AlbumSort,
    Artist,
    Genre,
    Playlist,
    Podcast,
    PodcastEpisode,
    ScanStatus,
    SearchResult,
    StarKind,
    StarredItems,
    Track,
)
from .protocols import RestAdapter, SubsonicAdapter, create_adapter
from .session import Session
from .storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    # Client
    "CatalogClient",
    "ClientConfig",
    "Session",
    # Protocols
    "RestAdapter",
    "SubsonicAdapter",
    "create_adapter",
    # Storage
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    # Models
    "Album",
    "AlbumSort",
    "Artist",
    "Genre",
    "Playlist",
    "Podcast",
    "PodcastEpisode",
    "ScanStatus",
    "SearchResult",
    "StarKind",
    "StarredItems",
    "Track",
    # Exceptions
    "CatalogError",
    "AuthError",
    "RegistrationError",
    "RemoteError",
    "MissingParameterError",
    "VersionMismatchError",
    "CredentialsRejectedError",
    "PermissionDeniedError",
    "NotFoundError",
    "TransportError",
    "UnsupportedOperationError",
]
