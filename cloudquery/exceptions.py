"""
Custom exceptions for the CloudQuery client library.
"""


class CloudqueryError(Exception):
    """Base exception for CloudQuery client errors."""
    pass


class ConfigurationError(CloudqueryError):
    """Raised when client configuration is invalid."""
    pass


class ReservedParameterError(CloudqueryError):
    """Raised when request params use a name reserved for signing."""

    def __init__(self, names):
        self.names = sorted(names)
        super().__init__(
            f"Reserved signature parameter(s) in request params: {', '.join(self.names)}"
        )


class HTTPError(CloudqueryError):
    """Raised when HTTP request fails."""
    pass


class AuthenticationError(CloudqueryError):
    """Raised when the service rejects account credentials."""

    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)
