"""
CloudQuery Client Library

A Python client library for the CloudQuery document indexing service.
Requests are signed with the account secret in the query string.

Example usage:
    from cloudquery import Client

    secret = Client.get_secret("account", "password")
    client = Client("account", secret)
    client.add_indexes("notes")
    client.add_documents("notes", {"title": "hello"})
    response = client.get_documents("notes", "hello")
"""

from .client import Client
from .config import ClientConfig
from .crypto import sign, nonce, now_in_milliseconds
from .documents import Identifiable, identify_documents
from .exceptions import (
    CloudqueryError,
    ConfigurationError,
    ReservedParameterError,
    HTTPError,
    AuthenticationError
)
from .constants import (
    SCHEME,
    HOST,
    PATH,
    API_PATHS,
    CONTENT_TYPES,
    SIGNING_METHOD,
    DEFAULT_CONFIG
)
from .query import encode_query, escape
from .request import Request, build_signed_url

__version__ = "0.2.0"
__all__ = [
    "Client",
    "ClientConfig",
    "Request",
    "build_signed_url",
    "encode_query",
    "escape",
    "sign",
    "nonce",
    "now_in_milliseconds",
    "Identifiable",
    "identify_documents",
    "CloudqueryError",
    "ConfigurationError",
    "ReservedParameterError",
    "HTTPError",
    "AuthenticationError",
    "SCHEME",
    "HOST",
    "PATH",
    "API_PATHS",
    "CONTENT_TYPES",
    "SIGNING_METHOD",
    "DEFAULT_CONFIG"
]
