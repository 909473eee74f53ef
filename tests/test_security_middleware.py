"""
Tests for security headers, CORS enforcement and body sanitization.
"""

import pytest

from middleware.security import build_csp, sanitize_payload


class TestSecurityHeaders:

    def test_csp_restricts_sources_and_framing(self, client, valid_payload):
        response = client.post('/send-email', json=valid_payload)
        csp = response.headers['Content-Security-Policy']

        assert "script-src 'self'" in csp
        assert 'style-src ' in csp
        assert 'img-src ' in csp
        assert "connect-src 'self'" in csp
        assert "frame-ancestors 'none'" in csp

    def test_hardening_headers_on_every_response(self, client):
        for response in (client.get('/missing'), client.post('/send-email', json={})):
            assert response.headers['X-Frame-Options'] == 'DENY'
            assert response.headers['X-Content-Type-Options'] == 'nosniff'
            assert 'max-age=' in response.headers['Strict-Transport-Security']
            assert 'Server' not in response.headers

    def test_build_csp(self):
        assert build_csp({'default-src': "'self'", 'object-src': "'none'"}) == \
            "default-src 'self'; object-src 'none'"


class TestCors:

    def test_allowed_origin_is_echoed(self, client, valid_payload):
        response = client.post('/send-email', json=valid_payload,
                               headers={'Origin': 'https://www.example.com'})
        assert response.headers['Access-Control-Allow-Origin'] == 'https://www.example.com'

    def test_other_origins_get_no_cors_headers(self, client, valid_payload):
        response = client.post('/send-email', json=valid_payload,
                               headers={'Origin': 'https://evil.example.net'})
        assert 'Access-Control-Allow-Origin' not in response.headers

    def test_preflight_allows_get_and_post_only(self, client):
        response = client.options('/send-email', headers={
            'Origin': 'https://www.example.com',
            'Access-Control-Request-Method': 'POST',
            'Access-Control-Request-Headers': 'Content-Type',
        })
        methods = response.headers['Access-Control-Allow-Methods']

        assert response.status_code == 200
        assert 'POST' in methods
        assert 'GET' in methods
        assert 'DELETE' not in methods
        assert 'PUT' not in methods


class TestSanitizePayload:

    def test_operator_and_dotted_keys_are_removed(self):
        payload = {'$gt': 1, 'a.b': 2, 'name': 'Ada', 'nested': {'$where': 'x', 'ok': [{'$in': []}, 'v']}}
        assert sanitize_payload(payload) == {'name': 'Ada', 'nested': {'ok': [{}, 'v']}}

    def test_nul_characters_are_stripped(self):
        assert sanitize_payload({'message': 'he\x00llo'}) == {'message': 'hello'}

    @pytest.mark.parametrize('value', [None, 3, 1.5, True])
    def test_scalars_pass_through(self, value):
        assert sanitize_payload(value) == value

    def test_dollar_inside_values_is_kept_for_validation(self):
        assert sanitize_payload({'message': 'cost $5'}) == {'message': 'cost $5'}

    def test_non_object_body_becomes_empty_payload(self, client):
        response = client.post('/send-email', json=['Ada', 'ada@example.com', 'Hello'])
        assert response.status_code == 400
        assert response.get_json()['message'] == 'All fields are required.'
