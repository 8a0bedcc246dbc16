"""Normalize raw server payloads into catalog domain models.

Every function is pure: it reads a raw dictionary, never mutates it, and
never raises for missing optional fields. URLs are built with the
ResourceUrls passed in, so the functions stay independent of the dialect.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from .models import (
    Album,
    Artist,
    Genre,
    Playlist,
    Podcast,
    PodcastEpisode,
    ScanStatus,
    Track,
)
from .urls import ResourceUrls

logger = logging.getLogger(__name__)

UNNAMED_PLAYLIST = "(Unnamed)"
MUSICBRAINZ_ARTIST_URL = "https://musicbrainz.org/artist/{}"

# <a ...>...</a>, shortest match, any attributes, any case, across lines
ANCHOR_PATTERN = re.compile(r"<a\b[^>]*>.*?</a\s*>", re.IGNORECASE | re.DOTALL)


def as_list(value: Any) -> List[Dict[str, Any]]:
    """Coerce a payload node to a list of dictionaries.

    Servers omit empty lists and some return a lone object where a list is
    expected.

    Examples:
        >>> as_list(None)
        []
        >>> as_list({"id": "1"})
        [{'id': '1'}]
        >>> as_list([{"id": "1"}, "junk"])
        [{'id': '1'}]
    """
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return []


def strip_links(text: Optional[str]) -> Optional[str]:
    """Remove every anchor element (tag and link text) from free text.

    Examples:
        >>> strip_links("See <a href='x'>here</a> for info")
        'See  for info'
        >>> strip_links(None) is None
        True
    """
    if text is None:
        return None
    return ANCHOR_PATTERN.sub("", text)


def _cover_art(item: Dict[str, Any], urls: ResourceUrls) -> Optional[str]:
    cover_art_id = item.get("coverArt")
    return urls.cover_art(cover_art_id) if cover_art_id else None


def normalize_track(item: Dict[str, Any], urls: ResourceUrls) -> Track:
    """Convert a raw song/entry into a Track.

    stream_url is set only when the item has a stream identifier ("streamId"
    or "id"); cover_art_url only when it has "coverArt".

    Example:
        >>> urls = ResourceUrls("https://music.example.com")
        >>> track = normalize_track({"id": "7", "title": "Song"}, urls)
        >>> track.cover_art_url is None
        True
    """
    stream_id = item.get("streamId") or item.get("id")
    return Track(
        id=item.get("id"),
        title=item.get("title") or "",
        duration=item.get("duration") or 0,
        starred=bool(item.get("starred")),
        track_number=item.get("track"),
        album_id=item.get("albumId"),
        album_name=item.get("album"),
        artist_id=item.get("artistId"),
        artist_name=item.get("artist"),
        genre=item.get("genre"),
        year=item.get("year"),
        cover_art_url=_cover_art(item, urls),
        stream_url=urls.stream(stream_id) if stream_id else None,
    )


def normalize_album(item: Dict[str, Any], urls: ResourceUrls) -> Album:
    """Convert a raw album, including its embedded songs, into an Album."""
    return Album(
        id=item.get("id"),
        # Folder-based listings name albums with "title"
        name=item.get("name") or item.get("title") or "",
        artist_id=item.get("artistId"),
        artist_name=item.get("artist"),
        year=item.get("year") or 0,
        starred=bool(item.get("starred")),
        genre_id=item.get("genre"),
        cover_art_url=_cover_art(item, urls),
        track_count=item.get("songCount"),
        tracks=[normalize_track(song, urls) for song in as_list(item.get("song"))],
    )


def normalize_artist(item: Dict[str, Any], urls: ResourceUrls) -> Artist:
    """Convert a raw artist into an Artist.

    Embedded albums are sorted newest first (ties keep server order) and
    similar artists are normalized recursively. The payload is a tree, so
    the recursion ends where the server's nesting does.
    """
    albums = sorted(
        (normalize_album(album, urls) for album in as_list(item.get("album"))),
        key=lambda album: album.year,
        reverse=True,
    )

    description = item.get("biography") or item.get("description")
    musicbrainz_id = item.get("musicBrainzId")

    return Artist(
        id=item.get("id"),
        name=item.get("name") or "",
        album_count=item.get("albumCount") or 0,
        description=strip_links(description) if description else None,
        starred=bool(item.get("starred")),
        image_url=(
            item.get("largeImageUrl")
            or item.get("artistImageUrl")
            or item.get("mediumImageUrl")
        ),
        lastfm_url=item.get("lastFmUrl"),
        musicbrainz_url=MUSICBRAINZ_ARTIST_URL.format(musicbrainz_id) if musicbrainz_id else None,
        albums=albums,
        similar_artists=[
            normalize_artist(similar, urls) for similar in as_list(item.get("similarArtist"))
        ],
    )


def normalize_genre(item: Dict[str, Any]) -> Genre:
    """Convert a raw genre. Genres are identified by their name."""
    name = item.get("value") or item.get("name") or ""
    return Genre(
        id=name,
        name=name,
        album_count=item.get("albumCount") or 0,
        track_count=item.get("songCount") or 0,
    )


def normalize_playlist(item: Dict[str, Any], urls: ResourceUrls) -> Playlist:
    """Convert a raw playlist, including entries when present.

    Empty playlists get no cover art even if the server names one.
    """
    tracks = [normalize_track(entry, urls) for entry in as_list(item.get("entry"))]
    track_count = item.get("songCount")
    if track_count is None:
        track_count = len(tracks)

    return Playlist(
        id=item.get("id"),
        name=item.get("name") or UNNAMED_PLAYLIST,
        cover_art_url=_cover_art(item, urls) if track_count > 0 else None,
        track_count=track_count,
        comment=item.get("comment"),
        tracks=tracks,
    )


def normalize_podcast(item: Dict[str, Any], urls: ResourceUrls) -> Podcast:
    """Convert a raw podcast channel and its episodes.

    Episodes keep server order (newest first) and are numbered in reverse,
    so the first episode gets the highest number. An episode is playable
    once its status is "completed".
    """
    name = item.get("title") or ""
    cover_art_url = _cover_art(item, urls) or item.get("originalImageUrl")
    raw_episodes = as_list(item.get("episode"))
    total = len(raw_episodes)

    episodes = []
    for index, episode in enumerate(raw_episodes):
        stream_id = episode.get("streamId")
        episodes.append(
            PodcastEpisode(
                id=episode.get("id"),
                title=episode.get("title") or "",
                duration=episode.get("duration") or 0,
                starred=False,
                track_number=total - index,
                album_id=item.get("id"),
                album_name=name,
                cover_art_url=cover_art_url,
                stream_url=urls.stream(stream_id) if stream_id else None,
                description=episode.get("description"),
                playable=episode.get("status") == "completed",
            )
        )

    logger.debug(f"Normalized podcast {name} with {total} episodes")
    return Podcast(
        id=item.get("id"),
        name=name,
        description=item.get("description"),
        cover_art_url=cover_art_url,
        url=item.get("url"),
        episodes=episodes,
    )


def normalize_scan_status(item: Optional[Dict[str, Any]]) -> ScanStatus:
    item = item or {}
    return ScanStatus(scanning=bool(item.get("scanning")), count=item.get("count") or 0)
