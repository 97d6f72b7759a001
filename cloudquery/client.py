"""
CloudQuery API client.

This module provides account, schema, index and document operations on top
of signed :class:`~cloudquery.request.Request` objects, dispatched over a
``requests`` session.
"""

import http.client
import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import requests

from .config import ClientConfig
from .constants import API_PATHS, CONTENT_TYPES
from .documents import identify_documents
from .exceptions import AuthenticationError, HTTPError
from .query import encode_query, escape
from .request import Request

logger = logging.getLogger(__name__)


class Client:
    """
    Client for the CloudQuery document indexing service.

    Every request is signed with the account's secret. Responses are
    returned as dicts carrying the parsed JSON body and a ``STATUS`` key.
    """

    def __init__(
        self,
        account: Optional[str] = None,
        secret: Optional[str] = None,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        **overrides,
    ):
        """
        Initialize client.

        Args:
            account: Account name
            secret: Account secret (see :meth:`get_secret`)
            config: Base configuration, defaults to :class:`ClientConfig`
            session: HTTP session to use instead of a new one; the caller
                remains responsible for closing it
            **overrides: Configuration options (host, path, secure, port, timeout)
        """
        self.account = account
        self.secret = secret

        self.config = (config or ClientConfig()).merge(**overrides)

        self._owns_session = session is None
        self.session = session or requests.Session()

    # Account management

    @classmethod
    def get_secret(cls, account: str, password: str, config: Optional[ClientConfig] = None) -> str:
        """
        Log in with account credentials and fetch the account secret.

        The login cookie set by the auth endpoint authorizes the account
        lookup, so both calls share one session.

        Raises:
            AuthenticationError: If the service rejects the credentials
            HTTPError: If a request fails
        """
        with cls(config=config) as client:
            auth = client._post(client.build_path('auth'), encode_query({
                'name': account,
                'password': password,
            }))
            status_code, _, _ = client.execute_request(
                auth.method, auth.url(), auth.headers, auth.body, CONTENT_TYPES['form']
            )

            if status_code != 200:
                reason = http.client.responses.get(status_code, '')
                logger.error("Login for account %s failed: %s %s", account, status_code, reason)
                raise AuthenticationError(f"Error: {status_code} {reason}".rstrip(), status_code)

            lookup = client._get(client.build_path(API_PATHS['account'], escape(account)))
            status_code, _, body = client.execute_request(
                lookup.method, lookup.url(), lookup.headers, lookup.body
            )
            result = client.parse_response(status_code, body)

        try:
            return result['result']['secret']
        except (KeyError, TypeError):
            raise AuthenticationError(
                f"No secret in account response: {result.get('REASON', body)}", status_code
            )

    def get_account(self) -> Dict[str, Any]:
        return self.send_request(self._get(self.account_path()))

    def update_account(self, account_doc: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.send_request(self._put(self.account_path(), _to_json(account_doc or {})))

    def delete_account(self) -> Dict[str, Any]:
        return self.send_request(self._delete(self.account_path()))

    def account_path(self) -> str:
        account = escape(self.account) if self.account is not None else None
        return self.build_path(API_PATHS['account'], account)

    # Schema management

    def add_schema(self, xml) -> Dict[str, Any]:
        """Upload a schema definition given as XML text or a readable file."""
        body = xml.read() if hasattr(xml, 'read') else xml
        request = self._post(self.build_path(API_PATHS['schema']), body)
        return self.send_request(request, CONTENT_TYPES['xml'])

    def delete_schema(self, schema_name: str) -> Dict[str, Any]:
        return self.send_request(self._delete(self.build_path(
            API_PATHS['schema'],
            escape(f'xfs.schema.name:"{schema_name}"'),
        )))

    def get_schemas(self) -> Dict[str, Any]:
        return self.send_request(self._get(self.build_path(API_PATHS['schema'])))

    # Index management

    def add_indexes(self, *indexes) -> Dict[str, Any]:
        body = _to_json(list(_flatten(indexes)))
        return self.send_request(self._post(self.build_path(API_PATHS['indexes']), body))

    def delete_indexes(self, *indexes) -> Dict[str, Any]:
        return self.send_request(self._delete(
            self.build_path(API_PATHS['indexes'], url_pipe_join(indexes))
        ))

    def get_indexes(self) -> Dict[str, Any]:
        return self.send_request(self._get(self.build_path(API_PATHS['indexes'])))

    # Document management

    def add_documents(self, index: str, docs, *schemas) -> Dict[str, Any]:
        request = self._post(
            self.build_path(API_PATHS['documents'], escape(index), url_pipe_join(schemas)),
            _to_json(identify_documents(docs)),
        )
        return self.send_request(request)

    def update_documents(self, index: str, docs, *schemas) -> Dict[str, Any]:
        request = self._put(
            self.build_path(API_PATHS['documents'], escape(index), url_pipe_join(schemas)),
            _to_json(identify_documents(docs)),
        )
        return self.send_request(request)

    def modify_documents(self, index: str, query: str, modifications, *schemas) -> Dict[str, Any]:
        """Apply ``modifications`` to every document matching ``query``."""
        request = self._put(
            self.build_path(API_PATHS['documents'], escape(index), url_pipe_join(schemas), escape(query)),
            _to_json(modifications),
        )
        return self.send_request(request)

    def delete_documents(self, index: str, query: str, *schemas) -> Dict[str, Any]:
        request = self._delete(
            self.build_path(API_PATHS['documents'], escape(index), url_pipe_join(schemas), escape(query))
        )
        return self.send_request(request)

    def get_documents(self, index: str, query, options: Optional[Mapping[str, Any]] = None,
                      *schemas) -> Dict[str, Any]:
        """
        Query documents in an index.

        Args:
            index: Index name
            query: Query string, or several to pipe-join
            options: ``fields`` (list of field names), ``sort`` (field or
                list of fields) and any other query params such as
                ``limit`` and ``offset``
            *schemas: Schema names to restrict the search to

        Returns:
            Result dict with ``STATUS``
        """
        options = dict(options or {})

        fields = options.pop('fields', None)
        if fields:
            fields = url_pipe_join(fields)

        if options.get('sort'):
            options['sort'] = ','.join(_flatten([options['sort']]))

        request = self._get(
            self.build_path(
                API_PATHS['documents'],
                escape(index),
                url_pipe_join(schemas),
                url_pipe_join(query),
                fields,
            ),
            options,
        )
        return self.send_request(request)

    def count_documents(self, index: str, query, *schemas) -> Dict[str, Any]:
        request = self._get(
            self.build_path(
                API_PATHS['documents'],
                escape(index),
                url_pipe_join(schemas),
                url_pipe_join(query),
                '@count',
            )
        )
        return self.send_request(request)

    # Request construction

    def build_path(self, *path_elements) -> str:
        """Join path elements under the configured base path, skipping None."""
        elements = [str(e) for e in _flatten(path_elements) if e is not None]
        return '/'.join([self.config.path] + elements)

    def _build_request(self, **options) -> Request:
        params = {
            'account': self.account,
            'secret': self.secret,
            'scheme': self.config.scheme,
            'host': self.config.host,
            'port': self.config.port,
        }
        params.update(options)
        return Request(**params)

    def _get(self, path: str, params=None) -> Request:
        return self._build_request(method='GET', path=path, params=params)

    def _delete(self, path: str, params=None) -> Request:
        return self._build_request(method='DELETE', path=path, params=params)

    def _post(self, path: str, doc, params=None) -> Request:
        return self._build_request(method='POST', path=path, body=doc, params=params)

    def _put(self, path: str, doc, params=None) -> Request:
        return self._build_request(method='PUT', path=path, body=doc, params=params)

    # Dispatch

    def send_request(self, request: Request, content_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Execute a request and normalize the response.

        Raises:
            HTTPError: If the request could not be sent
        """
        status_code, _, body = self.execute_request(
            request.method, request.url(), request.headers, request.body, content_type
        )
        return self.parse_response(status_code, body)

    def parse_response(self, status_code: int, body: str) -> Dict[str, Any]:
        """
        Translate ``(status, body)`` into a result dict.

        2xx bodies are parsed as JSON; anything else becomes a ``REASON``
        diagnostic. ``STATUS`` is always set.
        """
        if 200 <= status_code <= 299:
            try:
                result = json.loads(body)
            except ValueError as e:
                logger.warning("Unparseable response body (status %s): %s", status_code, e)
                result = {'REASON': str(e)}
            else:
                if not isinstance(result, dict):
                    result = {'result': result}
        else:
            reason = http.client.responses.get(status_code, '')
            logger.warning("Request failed: %s %s", status_code, reason)
            result = {'REASON': f"Error: {status_code} {reason}".rstrip()}

        result['STATUS'] = status_code
        return result

    def execute_request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body=None,
        content_type: Optional[str] = None,
    ) -> Tuple[int, str, str]:
        """
        Issue one HTTP call.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Extra headers
            body: Request body (str or bytes)
            content_type: Defaults to JSON

        Returns:
            Tuple of (status code, header text, body text)

        Raises:
            HTTPError: If request fails
        """
        headers = dict(headers or {})
        headers['Content-Type'] = content_type or CONTENT_TYPES['json']
        headers['Accept-Encoding'] = 'gzip'

        if isinstance(body, str):
            body = body.encode('utf-8')

        logger.debug("%s %s", method, url)
        try:
            prepared = self.session.prepare_request(
                requests.Request(method, url, headers=headers, data=body)
            )
            # The signature covers the URL as built; undo requests' requoting.
            prepared.url = url
            settings = self.session.merge_environment_settings(url, {}, None, None, None)
            response = self.session.send(prepared, timeout=self.config.timeout, **settings)
        except requests.RequestException as e:
            raise HTTPError(f"HTTP request failed: {e}")

        logger.debug("%s %s -> %s", method, url, response.status_code)
        header_text = '\r\n'.join(f"{k}: {v}" for k, v in response.headers.items())
        return response.status_code, header_text, response.text

    def close(self):
        """Close HTTP session, unless it was passed in by the caller."""
        if self.session and self._owns_session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def url_pipe_join(values, default_value: str = '*') -> str:
    """Pipe-join and escape ``values`` as one path segment, ``*`` if empty."""
    if values is None or isinstance(values, str):
        values = [] if values is None else [values]
    values = list(_flatten(values))
    if not values:
        return default_value
    return escape('|'.join(str(v) for v in values))


def _flatten(values: Iterable) -> Iterable:
    for value in values:
        if isinstance(value, (list, tuple)):
            yield from _flatten(value)
        else:
            yield value


def _to_json(value) -> bytes:
    return json.dumps(value, separators=(',', ':')).encode('utf-8')
