"""
Tests for the Flask Email Verification API

All DNS answers come from MockDNSService; no real lookups occur.
"""

import json
import logging
import socket

import pytest
from unittest.mock import MagicMock, patch
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import app as api
from email_verifier import EmailVerifier, DomainValidator, MockDNSService

SPF = 'v=spf1 include:_spf.example.com ~all'
DMARC = 'v=DMARC1; p=none'


@pytest.fixture
def dns():
    """Mock DNS state shared by the client fixture."""
    return MockDNSService(
        mx={'example.com': True, 'nomx.com': False},
        txt={
            'example.com': ['google-site-verification=abc', SPF],
            '_dmarc.example.com': [DMARC],
            'nomx.com': ['v=spf1 -all'],
        },
    )


@pytest.fixture
def client(dns):
    """Flask test client wired to the mock DNS service."""
    api.app.config['TESTING'] = True
    with patch.object(api, 'verifier', EmailVerifier(DomainValidator(dns))):
        with api.app.test_client() as client:
            yield client


def _post(client, body):
    """POST a raw body to /verify."""
    return client.post('/verify', data=body)


class TestVerifyEndpoint:
    """Tests for POST /verify."""

    def test_valid_email(self, client):
        response = client.post('/verify', json={'email': 'user@example.com'})

        assert response.status_code == 200
        assert response.mimetype == 'application/json'
        assert response.get_json() == {
            'valid': True,
            'hasMX': True,
            'hasSPF': True,
            'spfRecord': SPF,
            'hasDMARC': True,
            'dmarcRecord': DMARC,
        }

    def test_response_key_order(self, client):
        """Keys are serialized in response layout order, not sorted."""
        response = client.post('/verify', json={'email': 'user@nomx.com'})

        keys = list(json.loads(response.get_data(as_text=True)))
        assert keys == ['valid', 'reason', 'hasMX', 'hasSPF', 'spfRecord', 'hasDMARC']

    def test_no_mx_is_still_200(self, client):
        response = client.post('/verify', json={'email': 'user@nomx.com'})

        assert response.status_code == 200
        assert response.get_json() == {
            'valid': False,
            'reason': 'Domain does not have valid MX records',
            'hasMX': False,
            'hasSPF': True,
            'spfRecord': 'v=spf1 -all',
            'hasDMARC': False,
        }

    def test_invalid_format(self, client, dns):
        response = client.post('/verify', json={'email': 'not-an-email'})

        assert response.status_code == 200
        assert response.get_json() == {
            'valid': False,
            'reason': 'Invalid email format',
            'hasMX': False,
            'hasSPF': False,
            'hasDMARC': False,
        }
        assert dns.call_history == []

    def test_body_without_content_type(self, client):
        """The body is read as JSON whatever the Content-Type."""
        response = _post(client, '{"email": "user@example.com"}')

        assert response.status_code == 200
        assert response.get_json()['valid'] is True

    def test_unknown_fields_ignored(self, client):
        response = client.post('/verify', json={'email': 'user@example.com', 'extra': 1})
        assert response.status_code == 200

    @pytest.mark.parametrize("body", [
        '{not json',
        '',
        '[]',
        '"user@example.com"',
        '{"email": 42}',
        '{"email": ["user@example.com"]}',
    ])
    def test_invalid_body(self, client, body):
        response = _post(client, body)

        assert response.status_code == 400
        assert response.mimetype == 'text/plain'
        assert response.get_data(as_text=True) == 'Invalid request body'

    @pytest.mark.parametrize("body", ['{}', 'null', '{"email": ""}', '{"email": null}'])
    def test_missing_email(self, client, body):
        response = _post(client, body)

        assert response.status_code == 400
        assert response.mimetype == 'text/plain'
        assert response.get_data(as_text=True) == 'Email is required'

    @pytest.mark.parametrize("method", ['GET', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'])
    def test_other_methods_not_allowed(self, client, method):
        response = client.open('/verify', method=method)

        assert response.status_code == 405
        assert response.mimetype == 'text/plain'
        assert response.get_data(as_text=True) == 'Only POST method is allowed'
        assert 'POST' in response.headers['Allow']

    def test_get_with_valid_body_not_allowed(self, client, dns):
        response = client.get('/verify', json={'email': 'user@example.com'})

        assert response.status_code == 405
        assert dns.call_history == []

    def test_cors_preflight_not_allowed(self, client):
        """A browser preflight is a non-POST request like any other."""
        response = client.open('/verify', method='OPTIONS', headers={
            'Origin': 'http://localhost:3000',
            'Access-Control-Request-Method': 'POST',
        })

        assert response.status_code == 405
        assert response.get_data(as_text=True) == 'Only POST method is allowed'

    @pytest.mark.parametrize("key", ['Email', 'EMAIL', 'eMail'])
    def test_email_field_name_case_insensitive(self, client, key):
        response = _post(client, json.dumps({key: 'user@example.com'}))

        assert response.status_code == 200
        assert response.get_json()['valid'] is True

    def test_later_email_field_wins(self, client):
        response = _post(client, '{"email": "not-an-email", "Email": "user@example.com"}')

        assert response.status_code == 200
        assert response.get_json()['valid'] is True

    def test_null_email_field_does_not_override(self, client):
        response = _post(client, '{"email": "user@example.com", "EMAIL": null}')

        assert response.status_code == 200
        assert response.get_json()['valid'] is True

    def test_non_string_email_any_case(self, client):
        response = _post(client, '{"EMAIL": 5}')

        assert response.status_code == 400
        assert response.get_data(as_text=True) == 'Invalid request body'


class TestServe:
    """Tests for starting the HTTP server."""

    def test_port_in_use(self, caplog):
        """A taken port is logged and reported through the exit status."""
        with socket.create_server(('127.0.0.1', 0)) as busy:
            port = busy.getsockname()[1]
            with caplog.at_level(logging.INFO, logger='app'):
                status = api.serve('127.0.0.1', port)

        assert status == 1
        messages = [record.getMessage() for record in caplog.records]
        assert f"starting server at :{port}" in messages
        assert any(m.startswith("Error in starting the server") for m in messages)

    def test_serves_until_interrupted(self):
        server = MagicMock()
        server.serve_forever.side_effect = KeyboardInterrupt

        with patch.object(api.socket, 'create_server') as create_server, \
                patch.object(api, 'make_server', return_value=server) as make_server:
            create_server.return_value.fileno.return_value = 7
            status = api.serve('127.0.0.1', 8080)

        assert status == 0
        create_server.assert_called_once_with(('127.0.0.1', 8080))
        make_server.assert_called_once_with('127.0.0.1', 8080, api.app, threaded=True, fd=7)
        server.server_close.assert_called_once()


class TestOtherRoutes:
    """Tests for health and error handlers."""

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert data['service'] == 'email-verifier'

    def test_health_post_not_allowed(self, client):
        response = client.post('/health')

        assert response.status_code == 405
        assert response.get_data(as_text=True) == 'Only GET method is allowed'

    def test_unknown_route(self, client):
        response = client.get('/nope')

        assert response.status_code == 404
        assert response.get_data(as_text=True) == 'Not found'

    def test_unexpected_error(self, client):
        """Unhandled exceptions become a plain-text 500."""
        api.app.config['TESTING'] = False
        api.app.config['PROPAGATE_EXCEPTIONS'] = False
        try:
            with patch.object(api.verifier, 'verify', side_effect=RuntimeError('boom')):
                response = client.post('/verify', json={'email': 'user@example.com'})
        finally:
            api.app.config['TESTING'] = True
            api.app.config['PROPAGATE_EXCEPTIONS'] = None

        assert response.status_code == 500
        assert response.get_data(as_text=True) == 'Internal server error'

    def test_cors_header(self, client):
        response = client.post(
            '/verify',
            json={'email': 'user@example.com'},
            headers={'Origin': 'http://localhost:3000'}
        )
        assert 'Access-Control-Allow-Origin' in response.headers


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
