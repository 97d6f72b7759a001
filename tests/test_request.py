"""
Unit tests for signed request construction.
"""

import re
import time
from unittest.mock import patch
from urllib.parse import parse_qsl, urlsplit

import pytest

from cloudquery import Request, ReservedParameterError, build_signed_url, sign
from cloudquery.constants import SIGNING_METHOD


class TestRequest:
    """Test Request construction and signing."""

    @pytest.fixture
    def valid_options(self):
        """Options for a plain http request."""
        return {
            'scheme': 'http',
            'host': 'example.com',
            'path': '/v0/',
        }

    @pytest.fixture
    def request_factory(self, valid_options):
        """Build requests from the valid options plus overrides."""
        def factory(**options):
            return Request(**{**valid_options, **options})
        return factory

    def test_init_valid_options(self, request_factory):
        """Test request instantiates with valid options."""
        request = request_factory()

        assert request.method == 'POST'
        assert request.scheme == 'http'
        assert request.host == 'example.com'
        assert request.port == 80
        assert request.params == {}

    def test_init_defaults(self):
        """Test defaults point at the public service over https."""
        request = Request()

        assert request.scheme == 'https'
        assert request.host == 'api.xoopit.com'
        assert request.path == '/v0'
        assert request.port == 443

    def test_put_becomes_post_with_override(self, request_factory):
        """Test PUT is sent as POST with _method=PUT."""
        request = request_factory(method='PUT', params={'a': 'b'})

        assert request.method == 'POST'
        assert request.params['_method'] == 'PUT'
        assert '_method=PUT' in request.query_string()

    def test_delete_becomes_post_with_override(self, request_factory):
        """Test DELETE is sent as POST with _method=DELETE."""
        request = request_factory(method='DELETE')

        assert request.method == 'POST'
        assert request.query_string() == '_method=DELETE'

    def test_get_and_post_unchanged(self, request_factory):
        """Test GET and POST pass through without override."""
        for method in ('GET', 'POST'):
            request = request_factory(method=method)
            assert request.method == method
            assert '_method' not in request.params

    def test_unknown_method_passes_through(self, request_factory):
        """Test unrecognized methods are not validated."""
        request = request_factory(method='PATCH')

        assert request.method == 'PATCH'
        assert '_method' not in request.params

    def test_params_are_copied(self, request_factory):
        """Test the caller's params mapping is not mutated."""
        params = {'q': '1'}
        request_factory(method='PUT', params=params)

        assert params == {'q': '1'}

    def test_reserved_params_rejected(self, request_factory):
        """Test signature parameter names cannot be supplied by callers."""
        for name in ('x_name', 'x_time', 'x_nonce', 'x_method', 'x_sig'):
            with pytest.raises(ReservedParameterError) as exc_info:
                request_factory(params={name: 'value'})
            assert exc_info.value.names == [name]

    def test_signature_params_without_account(self, request_factory):
        """Test no account yields no signature params."""
        assert request_factory().signature_params() == {}

    def test_signature_params_with_account(self, request_factory):
        """Test account yields x_name, x_time, x_nonce and x_method."""
        params = request_factory(account='account').signature_params()

        assert set(params) == {'x_name', 'x_time', 'x_nonce', 'x_method'}
        assert params['x_name'] == 'account'
        assert abs(params['x_time'] - int(time.time() * 1000)) <= 100
        assert re.match(r'^\d+\.\d+$', params['x_nonce'])
        assert params['x_method'] == SIGNING_METHOD

    def test_signature_params_account_override(self, request_factory):
        """Test an explicit account overrides the request's own."""
        params = request_factory(account='mine').signature_params('other')

        assert params['x_name'] == 'other'

    def test_query_string_from_params(self, request_factory):
        """Test query string is built from the request params."""
        assert request_factory(params={'these': 'params'}).query_string() == 'these=params'

    def test_query_string_escapes(self, request_factory):
        """Test params with non alphanumeric characters are url-encoded."""
        assert request_factory(params={'weird': 'values=here'}).query_string() == 'weird=values%3Dhere'

    def test_query_string_empty(self, request_factory):
        """Test empty params give an empty query string."""
        assert request_factory(params={}).query_string() == ''

    def test_query_string_params_before_signature_params(self, request_factory):
        """Test caller params come first, additional params after."""
        query = request_factory(params={'a': '1'}).query_string({'x_name': 'acct'})

        assert query == 'a=1&x_name=acct'

    def test_request_uri_without_query(self, request_factory):
        """Test URI is the bare path when there are no params."""
        assert request_factory(path='/v0/i').request_uri() == '/v0/i'

    def test_append_signature(self, request_factory):
        """Test x_sig is appended at the end of the query string."""
        url = 'http://example.com/path?query=string'
        signed_url = request_factory().append_signature(url, 'secret')

        assert signed_url.startswith(url + '&x_sig=')
        assert re.search(r'x_sig=[-\w]+(?:%3D)*$', signed_url)

    def test_append_signature_value(self, request_factory):
        """Test x_sig signs secret + uri with '=' percent-encoded."""
        uri = '/path?query=string'
        signed = request_factory().append_signature(uri, 'secret')

        expected = sign('secret', uri).replace('=', '%3D')
        assert signed == f"{uri}&x_sig={expected}"

    def test_base_uri_http(self, request_factory):
        """Test an http base URI omits the default port."""
        assert request_factory(scheme='http').base_uri() == 'http://example.com'

    def test_base_uri_https(self, request_factory):
        """Test an https base URI omits the default port."""
        request = request_factory(scheme='https')

        assert request.port == 443
        assert request.base_uri() == 'https://example.com'

    def test_base_uri_custom_port(self, request_factory):
        """Test a non-default port is written out."""
        assert request_factory(port=8080).base_uri() == 'http://example.com:8080'

    def test_build_signed_url(self):
        """Test a signed URL keeps path and params and ends with x_sig."""
        request = Request(
            method='GET',
            scheme='http',
            host='example.com',
            path='/path',
            params={'query': 'string'},
            secret='secret',
        )
        url = build_signed_url(request)

        assert url.startswith('http://example.com/path?query=string')
        assert re.search(r'&x_sig=[-\w]+(?:%3D)*$', url)

        expected = sign('secret', '/path?query=string').replace('=', '%3D')
        assert url == f"http://example.com/path?query=string&x_sig={expected}"

    @patch('cloudquery.crypto.now_in_milliseconds', return_value=1700000000123)
    @patch('cloudquery.crypto.nonce', return_value='4242.1700000000')
    def test_build_signed_url_with_account(self, mock_nonce, mock_now, request_factory):
        """Test the full signed URL for an authenticated request."""
        request = request_factory(
            method='GET', path='/v0/i', params={'limit': '10'}, account='acct', secret='s3cret'
        )
        url = build_signed_url(request)

        uri = '/v0/i?limit=10&x_name=acct&x_time=1700000000123&x_nonce=4242.1700000000&x_method=SHA1'
        expected = sign('s3cret', uri).replace('=', '%3D')
        assert url == f"http://example.com{uri}&x_sig={expected}"

    def test_signature_is_last_param(self, request_factory):
        """Test nothing follows x_sig."""
        url = request_factory(params={'z': '1'}, account='acct', secret='secret').url()
        keys = [key for key, _ in parse_qsl(urlsplit(url).query)]

        assert keys == ['z', 'x_name', 'x_time', 'x_nonce', 'x_method', 'x_sig']

    def test_unsigned_without_secret(self, request_factory):
        """Test requests without a secret carry no x_sig."""
        url = request_factory(params={'q': '1'}, account='acct').url()

        assert 'x_name=acct' in url
        assert 'x_sig' not in url

    def test_unsigned_without_account_or_secret(self, request_factory):
        """Test requests without credentials are left untouched."""
        url = request_factory(path='/v0/auth').url()

        assert url == 'http://example.com/v0/auth'

    def test_url_secret_override(self, request_factory):
        """Test an explicit secret overrides the request's own."""
        request = request_factory(path='/p', params={'a': 'b'}, secret='mine')

        expected = sign('other', '/p?a=b').replace('=', '%3D')
        assert request.url(secret='other').endswith(f"&x_sig={expected}")

    @patch('cloudquery.crypto.now_in_milliseconds', return_value=1700000000123)
    @patch('cloudquery.crypto.nonce', return_value='1.1700000000')
    def test_same_nonce_same_signature(self, mock_nonce, mock_now, request_factory):
        """Test signing is a pure function of secret and URI."""
        request = request_factory(account='acct', secret='secret')

        assert request.url() == request.url()

    @patch('cloudquery.crypto.nonce', side_effect=['1.1700000000', '2.1700000001'])
    def test_fresh_nonce_changes_signature(self, mock_nonce, request_factory):
        """Test fresh nonces give different signatures for the same path."""
        request = request_factory(account='acct', secret='secret')

        first = request.url().rsplit('x_sig=', 1)[1]
        second = request.url().rsplit('x_sig=', 1)[1]
        assert first != second

    def test_put_signed_url_carries_override(self, request_factory):
        """Test the _method override is part of the signed query."""
        url = request_factory(method='PUT', path='/v0/account/acct', account='acct', secret='s').url()

        assert '/v0/account/acct?_method=PUT&x_name=acct' in url
