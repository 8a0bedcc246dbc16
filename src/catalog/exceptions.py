"""Exception classes for the catalog client."""

from typing import Optional


class CatalogError(Exception):
    """Base exception for all catalog client errors."""

    pass


class AuthError(CatalogError):
    """Login rejected by the server, or no server to log in to.

    Attributes:
        message: Error message supplied by the server
        code: Optional server error code
    """

    def __init__(self, message: str, code: Optional[int] = None):
        self.message = message
        self.code = code
        super().__init__(message)


class RegistrationError(AuthError):
    """Account registration rejected by the server."""

    pass


class RemoteError(CatalogError):
    """Envelope-level failure reported by the server.

    Attributes:
        message: Server message, or the raw status token when none was given
        code: Server error code when the dialect provides one
    """

    def __init__(self, message: str, code: Optional[int] = None):
        """Initialize remote error.

        Args:
            message: Human-readable error message
            code: Optional numeric error code (Subsonic-style servers)
        """
        self.message = message
        self.code = code
        if code is None:
            super().__init__(message)
        else:
            super().__init__(f"{message} (code {code})")


class MissingParameterError(RemoteError):
    """Required parameter missing (code 10)."""

    pass


class VersionMismatchError(RemoteError):
    """Client or server protocol version incompatible (codes 20, 30, 43, 44)."""

    pass


class CredentialsRejectedError(RemoteError):
    """Stored credential rejected on a catalog call (codes 40, 41, 42)."""

    pass


class PermissionDeniedError(RemoteError):
    """User not authorized for the requested action (code 50)."""

    pass


class NotFoundError(RemoteError):
    """Requested resource does not exist (code 70)."""

    pass


class TransportError(CatalogError):
    """Network or HTTP failure below the envelope layer.

    Attributes:
        message: Description of the failure
        status_code: HTTP status when a response was received
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UnsupportedOperationError(CatalogError):
    """Operation not offered by the active protocol dialect."""

    pass


REMOTE_ERROR_CODES = {
    10: MissingParameterError,
    20: VersionMismatchError,
    30: VersionMismatchError,
    40: CredentialsRejectedError,
    41: CredentialsRejectedError,
    42: CredentialsRejectedError,
    43: VersionMismatchError,
    44: VersionMismatchError,
    50: PermissionDeniedError,
    70: NotFoundError,
}


def remote_error_for(message: str, code: Optional[int] = None) -> RemoteError:
    """Build the RemoteError subclass matching a server error code.

    Examples:
        >>> type(remote_error_for("Album not found", 70)).__name__
        'NotFoundError'
        >>> type(remote_error_for("failed")).__name__
        'RemoteError'
    """
    error_class = REMOTE_ERROR_CODES.get(code, RemoteError)
    return error_class(message, code)
