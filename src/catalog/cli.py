"""
Catalog client command line interface.

Thin argparse front end over CatalogClient. The session is saved to a JSON
state file so that `login --remember` works across invocations.
"""

import argparse
import asyncio
import getpass
import logging
from typing import List, Optional

from .client import CatalogClient
from .config import PROTOCOLS, ClientConfig
from .exceptions import (
    AuthError,
    CatalogError,
    RemoteError,
    TransportError,
    UnsupportedOperationError,
)
from .logger import setup_logging
from .models import Album, AlbumSort, Artist, Track
from .storage import JsonFileStore

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = "~/.config/catalog-client/session.json"


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="catalog-client",
        description="Browse and manage a remote music catalog",
        epilog="Example: catalog-client --server https://music.example.com login alice",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--server", metavar="URL", help="Server base URL (overrides CATALOG_SERVER_URL)")
    parser.add_argument("--protocol", choices=PROTOCOLS, help="Server dialect (overrides CATALOG_PROTOCOL)")
    parser.add_argument("--state-file", metavar="FILE", help=f"Session file (default: {DEFAULT_STATE_FILE})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose debug logging")
    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")

    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    login = commands.add_parser("login", help="Log in and save the session")
    login.add_argument("account", help="Account id (email or username)")
    login.add_argument("--password", help="Password (prompted when omitted)")
    login.add_argument("--no-remember", action="store_true", help="Do not save the session")

    commands.add_parser("logout", help="Forget the saved session")
    commands.add_parser("ping", help="Check that the saved session is still valid")
    commands.add_parser("genres", help="List genres")

    albums = commands.add_parser("albums", help="List albums")
    albums.add_argument("--sort", default=AlbumSort.A_Z.value, choices=[s.value for s in AlbumSort])
    albums.add_argument("--size", type=int, default=50)
    albums.add_argument("--offset", type=int, default=0)

    commands.add_parser("artists", help="List artists")
    commands.add_parser("artist", help="Show an artist").add_argument("id")
    commands.add_parser("album", help="Show an album").add_argument("id")
    commands.add_parser("playlists", help="List playlists")
    commands.add_parser("playlist", help="Show a playlist ('random' for a random mix)").add_argument("id")
    commands.add_parser("starred", help="List starred items")
    commands.add_parser("search", help="Search artists, albums and tracks").add_argument("query")
    commands.add_parser("podcasts", help="List podcasts (Subsonic-style servers)")

    scan = commands.add_parser("scan", help="Start a library scan (Subsonic-style servers)")
    scan.add_argument("--status", action="store_true", help="Only report scan progress")

    return parser


def build_config(args: argparse.Namespace) -> ClientConfig:
    """Merge command line options over environment configuration.

    Only CATALOG_SERVER_URL fixes the server. A --server option replaces it
    with a user choice that run_command() applies to the session, so a
    remembered login also remembers the server.

    Raises:
        ValueError: If an option or variable holds an invalid value
    """
    if args.server and not args.server.startswith(("http://", "https://")):
        raise ValueError("--server must be a valid HTTP/HTTPS URL")

    config = ClientConfig.from_environment()
    return ClientConfig(
        server_url=None if args.server else config.server_url,
        protocol=args.protocol or config.protocol,
        client_name=config.client_name,
        api_version=config.api_version,
        timeout=config.timeout,
        state_file=args.state_file or config.state_file or DEFAULT_STATE_FILE,
    )


def format_track(track: Track) -> str:
    minutes, seconds = divmod(track.duration, 60)
    number = f"{track.track_number:>2}. " if track.track_number else ""
    artist = f"{track.artist_name} - " if track.artist_name else ""
    return f"{number}{artist}{track.title} [{minutes}:{seconds:02d}] ({track.id})"


def format_album(album: Album) -> str:
    year = f" ({album.year})" if album.year else ""
    artist = f"{album.artist_name} - " if album.artist_name else ""
    return f"{artist}{album.name}{year} ({album.id})"


def format_artist(artist: Artist) -> str:
    return f"{artist.name} - {artist.album_count} albums ({artist.id})"


def print_lines(lines: List[str]) -> None:
    for line in lines:
        print(line)


async def run_command(args: argparse.Namespace, config: ClientConfig) -> None:
    """Execute one CLI command against the configured server."""
    store = JsonFileStore(config.state_file)

    async with CatalogClient.from_config(config, store) as client:
        session = client.session
        if args.server:
            session.set_server_address(args.server)

        if args.command == "login":
            password = args.password or getpass.getpass(f"Password for {args.account}: ")
            await session.login(args.account, password, remember=not args.no_remember)
            print(f"Logged in as {session.account_id}")
        elif args.command == "logout":
            session.logout()
            print("Logged out")
        elif args.command == "ping":
            valid = await session.probe_session_validity()
            print("Session is valid" if valid else "Session is not valid; please log in")
        elif args.command == "genres":
            genres = await client.list_genres()
            print_lines([f"{g.name}: {g.album_count} albums, {g.track_count} tracks" for g in genres])
        elif args.command == "albums":
            albums = await client.list_albums(args.sort, size=args.size, offset=args.offset)
            print_lines([format_album(album) for album in albums])
        elif args.command == "artists":
            print_lines([format_artist(artist) for artist in await client.list_artists()])
        elif args.command == "artist":
            artist = await client.get_artist_details(args.id)
            print(format_artist(artist))
            if artist.description:
                print(artist.description)
            print_lines([f"  {format_album(album)}" for album in artist.albums])
            if artist.similar_artists:
                print("Similar: " + ", ".join(a.name for a in artist.similar_artists))
        elif args.command == "album":
            album = await client.get_album_details(args.id)
            print(format_album(album))
            print_lines([f"  {format_track(track)}" for track in album.tracks])
        elif args.command == "playlists":
            playlists = await client.list_playlists()
            print_lines([f"{p.name} - {p.track_count} tracks ({p.id})" for p in playlists])
        elif args.command == "playlist":
            playlist = await client.get_playlist(args.id)
            print(f"{playlist.name} ({playlist.id})")
            print_lines([f"  {format_track(track)}" for track in playlist.tracks])
        elif args.command == "starred":
            starred = await client.get_starred()
            print_lines([f"artist: {format_artist(a)}" for a in starred.artists])
            print_lines([f"album:  {format_album(a)}" for a in starred.albums])
            print_lines([f"track:  {format_track(t)}" for t in starred.tracks])
        elif args.command == "search":
            result = await client.search(args.query)
            print_lines([f"artist: {format_artist(a)}" for a in result.artists])
            print_lines([f"album:  {format_album(a)}" for a in result.albums])
            print_lines([f"track:  {format_track(t)}" for t in result.tracks])
        elif args.command == "podcasts":
            for podcast in await client.list_podcasts():
                print(f"{podcast.name} ({podcast.id})")
                for episode in podcast.episodes:
                    marker = "" if episode.playable else " [not downloaded]"
                    print(f"  {format_track(episode)}{marker}")
        elif args.command == "scan":
            if args.status:
                status = await client.get_scan_status()
            else:
                status = await client.start_library_scan()
            state = "scanning" if status.scanning else "idle"
            print(f"Library scan {state}: {status.count} items")


def display_error(error: Exception) -> None:
    """
    Display error message with appropriate context.

    Args:
        error: Exception that occurred
    """
    if isinstance(error, AuthError):
        print(f"Authentication failed: {error.message}")
    elif isinstance(error, RemoteError):
        print(f"Server error: {error}")
    elif isinstance(error, TransportError):
        print(f"Could not reach the server: {error.message}")
        print("Please check the server URL and your network connection.")
    elif isinstance(error, UnsupportedOperationError):
        print(f"Not supported: {error}")
    else:
        print(f"Unexpected error: {error}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Returns:
        Exit code: 0 on success, 1 on catalog errors, 2 on invalid configuration
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 2

    try:
        asyncio.run(run_command(args, config))
    except CatalogError as e:
        logger.debug(f"Command {args.command} failed: {e!r}")
        display_error(e)
        return 1

    return 0
