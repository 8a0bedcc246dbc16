"""Subsonic-style token authentication.

Subsonic-compatible servers accept a salted MD5 token instead of the
plaintext password:

    1. Generate a random salt (16 hex characters)
    2. token = MD5(password + salt)
    3. Send u={username}&t={token}&s={salt} with every request

The token and salt are computed once at login and kept in the session, so
the password itself is never stored or re-sent.

Example:
    >>> token, salt = generate_token("sesame", salt="c19b2d")
    >>> token
    '26719a1196d2a940705a59634eb18eab'
    >>> create_auth_params("admin", token, salt)["u"]
    'admin'
"""

import hashlib
import secrets
from typing import Dict, Optional, Tuple


def generate_token(password: str, salt: Optional[str] = None) -> Tuple[str, str]:
    """Generate a Subsonic authentication token.

    Args:
        password: Plaintext account password
        salt: Optional pre-generated salt. If None, a fresh one is generated.
              Primarily for testing purposes.

    Returns:
        Tuple of (token, salt): token is 32 lowercase hex chars
    """
    # secrets.token_hex(8) produces 16 hex characters
    if salt is None:
        salt = secrets.token_hex(8)

    token = hashlib.md5(f"{password}{salt}".encode("utf-8")).hexdigest()
    return token, salt


def verify_token(password: str, token: str, salt: str) -> bool:
    """Check that token matches MD5(password + salt)."""
    expected_token = hashlib.md5(f"{password}{salt}".encode("utf-8")).hexdigest()
    return token == expected_token


def create_auth_params(
    username: str,
    token: str,
    salt: str,
    api_version: str = "1.16.1",
    client_name: str = "catalog-client",
    response_format: str = "json",
) -> Dict[str, str]:
    """Create the full set of Subsonic authentication query parameters.

    Args:
        username: Account identifier
        token: MD5(password + salt)
        salt: Salt used to build the token
        api_version: Subsonic API version (default: "1.16.1")
        client_name: Client application identifier
        response_format: Response format marker (default: "json")

    Returns:
        Dictionary with u, t, s, v, c, f
    """
    return {
        "u": username,
        "t": token,
        "s": salt,
        "v": api_version,
        "c": client_name,
        "f": response_format,
    }
