"""Server dialects understood by the catalog client."""

from .base import AuthRequest, Credentials, Operation, ProtocolAdapter
from .rest import RestAdapter
from .subsonic import SubsonicAdapter

ADAPTERS = {
    RestAdapter.name: RestAdapter,
    SubsonicAdapter.name: SubsonicAdapter,
}


def create_adapter(
    name: str, client_name: str = "catalog-client", api_version: str = "1.16.1"
) -> ProtocolAdapter:
    """Instantiate the adapter for a dialect name ("rest" or "subsonic").

    Raises:
        ValueError: If the name is unknown
    """
    try:
        adapter_class = ADAPTERS[name]
    except KeyError:
        raise ValueError(f"Unknown protocol '{name}' (expected one of: {', '.join(ADAPTERS)})")
    return adapter_class(client_name=client_name, api_version=api_version)


__all__ = [
    "AuthRequest",
    "Credentials",
    "Operation",
    "ProtocolAdapter",
    "RestAdapter",
    "SubsonicAdapter",
    "create_adapter",
]
