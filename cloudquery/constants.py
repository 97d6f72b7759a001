"""
Constants for the CloudQuery client library.
Compatible with the CloudQuery v0 HTTP API.
"""

from types import MappingProxyType

# Service endpoint
SCHEME = "https"
HOST = "api.xoopit.com"
PATH = "/v0"

DEFAULT_PORTS = MappingProxyType({
    'http': 80,
    'https': 443,
})

# Path segment per API resource
API_PATHS = MappingProxyType({
    'account': "account",
    'schema': "schema",
    'indexes': "i",
    'documents': "i",
})

# Standard Content-Types for requests
CONTENT_TYPES = MappingProxyType({
    'json': "application/json;charset=utf-8",
    'form': "application/x-www-form-urlencoded",
    'xml': "application/xml;charset=utf-8",
})

# Request signing (query parameter names are part of the wire protocol)
SIGNING_METHOD = "SHA1"
PARAM_NAME = "x_name"
PARAM_TIME = "x_time"
PARAM_NONCE = "x_nonce"
PARAM_METHOD = "x_method"
PARAM_SIGNATURE = "x_sig"
PARAM_METHOD_OVERRIDE = "_method"

RESERVED_PARAMS = frozenset({
    PARAM_NAME,
    PARAM_TIME,
    PARAM_NONCE,
    PARAM_METHOD,
    PARAM_SIGNATURE,
})

# Verbs tunnelled through POST with a _method override
OVERRIDDEN_METHODS = ('PUT', 'DELETE')

# Default configuration values
DEFAULT_CONFIG = MappingProxyType({
    'host': HOST,
    'path': PATH,
    'secure': True,     # https unless explicitly disabled
    'port': None,       # scheme default
    'timeout': 30,      # HTTP timeout in seconds
})
