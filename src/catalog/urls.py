"""Synthesized resource URLs (stream, cover art, download).

URLs carry the active protocol's credential parameters so a media player can
fetch them directly, without going through the client again.
"""

from typing import Dict, Optional
from urllib.parse import urlencode

COVER_ART_SIZE = 300


class ResourceUrls:
    """Builds fetchable URLs for one server and credential snapshot.

    Example:
        >>> urls = ResourceUrls("https://music.example.com", {"access_token": "abc"})
        >>> urls.stream("42")
        'https://music.example.com/rest/stream?id=42&format=raw&access_token=abc'
    """

    def __init__(self, server_address: str, auth_params: Optional[Dict[str, str]] = None):
        self.server_address = server_address.rstrip("/")
        self.auth_params = {
            key: value for key, value in (auth_params or {}).items() if value is not None
        }

    def _build(self, endpoint: str, params: Dict[str, object]) -> str:
        query = urlencode({**params, **self.auth_params})
        return f"{self.server_address}/rest/{endpoint}?{query}"

    def stream(self, stream_id: str) -> str:
        return self._build("stream", {"id": stream_id, "format": "raw"})

    def cover_art(self, cover_art_id: str, size: int = COVER_ART_SIZE) -> str:
        return self._build("getCoverArt", {"id": cover_art_id, "size": size})

    def download(self, item_id: str) -> str:
        return self._build("download", {"id": item_id})
