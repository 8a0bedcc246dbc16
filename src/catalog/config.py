"""Configuration for the catalog client.

All configuration can be read from environment variables via
ClientConfig.from_environment().
"""

import os
import warnings
from dataclasses import dataclass
from typing import Optional

PROTOCOLS = ("rest", "subsonic")


@dataclass
class ClientConfig:
    """Connection settings for a catalog client.

    Attributes:
        server_url: Fixed server base URL. When set, the session cannot change
            its server and the address is never persisted.
        protocol: Response dialect, "rest" or "subsonic"
        client_name: Client identifier sent to Subsonic-style servers
        api_version: Subsonic protocol version string
        timeout: Request timeout in seconds
        state_file: Optional path of the JSON file holding the saved session
    """

    server_url: Optional[str] = None
    protocol: str = "subsonic"
    client_name: str = "catalog-client"
    api_version: str = "1.16.1"
    timeout: float = 30.0
    state_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration on initialization."""
        if self.server_url is not None:
            if not self.server_url.startswith(("http://", "https://")):
                raise ValueError("server_url must be a valid HTTP/HTTPS URL")
            self.server_url = self.server_url.rstrip("/")
            if not self.server_url.startswith("https://"):
                warnings.warn(
                    "Using HTTP instead of HTTPS for the music server. "
                    "Credentials will be transmitted insecurely.",
                    UserWarning,
                    stacklevel=2,
                )
        if self.protocol not in PROTOCOLS:
            raise ValueError(f"protocol must be one of {', '.join(PROTOCOLS)}")
        if not self.client_name:
            raise ValueError("client_name is required")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_environment(cls) -> "ClientConfig":
        """Load configuration from environment variables.

        Recognized variables: CATALOG_SERVER_URL, CATALOG_PROTOCOL,
        CATALOG_CLIENT_NAME, CATALOG_API_VERSION, CATALOG_TIMEOUT,
        CATALOG_STATE_FILE.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        timeout = os.getenv("CATALOG_TIMEOUT", "30")
        try:
            timeout_seconds = float(timeout)
        except ValueError:
            raise ValueError(f"CATALOG_TIMEOUT must be a number (got: {timeout!r})")

        return cls(
            server_url=os.getenv("CATALOG_SERVER_URL") or None,
            protocol=os.getenv("CATALOG_PROTOCOL", "subsonic").lower(),
            client_name=os.getenv("CATALOG_CLIENT_NAME", "catalog-client"),
            api_version=os.getenv("CATALOG_API_VERSION", "1.16.1"),
            timeout=timeout_seconds,
            state_file=os.getenv("CATALOG_STATE_FILE") or None,
        )

    @property
    def server_fixed(self) -> bool:
        """True when the server address comes from configuration."""
        return bool(self.server_url)
