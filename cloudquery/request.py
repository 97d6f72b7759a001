"""
Signed request construction for the CloudQuery API.

A :class:`Request` turns a method, path and params into the absolute URL the
service expects. When an account is given the query string carries
``x_name``, ``x_time``, ``x_nonce`` and ``x_method``; when a secret is given
the URI is signed and ``x_sig`` is appended as the final parameter.
"""

from typing import Any, Dict, Mapping, Optional

from . import crypto
from .constants import (
    SCHEME,
    HOST,
    PATH,
    DEFAULT_PORTS,
    SIGNING_METHOD,
    PARAM_NAME,
    PARAM_TIME,
    PARAM_NONCE,
    PARAM_METHOD,
    PARAM_SIGNATURE,
    PARAM_METHOD_OVERRIDE,
    RESERVED_PARAMS,
    OVERRIDDEN_METHODS,
)
from .exceptions import ReservedParameterError
from .query import encode_query


class Request:
    """
    A single API call: method, location, params and optional body.

    PUT and DELETE are sent as POST with a ``_method`` param holding the
    original verb. Any other method is passed through unchanged.
    """

    def __init__(
        self,
        method: str = 'POST',
        path: str = PATH,
        params: Optional[Mapping[str, Any]] = None,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
        scheme: str = SCHEME,
        host: str = HOST,
        port: Optional[int] = None,
        account: Optional[str] = None,
        secret: Optional[str] = None,
    ):
        """
        Initialize request.

        Args:
            method: HTTP method
            path: Absolute path on the service host
            params: Query parameters (copied, order preserved)
            body: Request body
            headers: Extra HTTP headers
            scheme: "http" or "https"
            host: Service host name
            port: TCP port (defaults to the scheme's port)
            account: Account name, enables signature params
            secret: Account secret, enables the x_sig signature

        Raises:
            ReservedParameterError: If params use a signature parameter name
        """
        self.params: Dict[str, Any] = dict(params or {})

        reserved = RESERVED_PARAMS.intersection(self.params)
        if reserved:
            raise ReservedParameterError(reserved)

        self.method = method
        if self.method in OVERRIDDEN_METHODS:
            self.params[PARAM_METHOD_OVERRIDE] = self.method
            self.method = 'POST'

        self.path = path
        self.body = body
        self.headers: Dict[str, str] = dict(headers or {})
        self.scheme = scheme
        self.host = host
        self.port = port if port is not None else DEFAULT_PORTS.get(scheme)

        self.account = account
        self.secret = secret

    def __repr__(self):
        return f"Request({self.method} {self.scheme}://{self.host}{self.path})"

    def signature_params(self, account: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the per-request authentication params.

        Returns:
            x_name, x_time, x_nonce and x_method, or {} without an account
        """
        if account is None:
            account = self.account
        if not account:
            return {}

        return {
            PARAM_NAME: account,
            PARAM_TIME: crypto.now_in_milliseconds(),
            PARAM_NONCE: crypto.nonce(),
            PARAM_METHOD: SIGNING_METHOD,
        }

    def query_string(self, additional_params: Optional[Mapping[str, Any]] = None) -> str:
        """Encode the request params followed by ``additional_params``."""
        params = dict(self.params)
        params.update(additional_params or {})
        return encode_query(params)

    def request_uri(self, account: Optional[str] = None, secret: Optional[str] = None) -> str:
        """
        Build path and query string, signed when a secret is available.

        Args:
            account: Overrides the request's account
            secret: Overrides the request's secret

        Returns:
            ``path[?query][&x_sig=...]``
        """
        if secret is None:
            secret = self.secret

        query = self.query_string(self.signature_params(account))
        uri = f"{self.path}?{query}" if query else self.path

        if secret:
            uri = self.append_signature(uri, secret)
        return uri

    def append_signature(self, uri: str, secret: str) -> str:
        """
        Sign ``uri`` and append ``x_sig`` as its last parameter.

        Format: x_sig = sign(secret + uri)
        """
        signature = crypto.sign(secret, uri)
        return f"{uri}&{encode_query({PARAM_SIGNATURE: signature})}"

    def base_uri(self) -> str:
        """Scheme and authority; default ports are omitted."""
        if self.port is None or self.port == DEFAULT_PORTS.get(self.scheme):
            return f"{self.scheme}://{self.host}"
        return f"{self.scheme}://{self.host}:{self.port}"

    def url(self, account: Optional[str] = None, secret: Optional[str] = None) -> str:
        """Absolute signed URL; each call draws a fresh nonce and time."""
        return self.base_uri() + self.request_uri(account, secret)


def build_signed_url(request: Request) -> str:
    """Return the absolute, signed URL for ``request``."""
    return request.url()


__all__ = ["Request", "build_signed_url"]
