"""
Unit tests for outbound request shaping (no network I/O).
"""

import base64
from urllib.parse import parse_qs

import pytest

from runtime_spi.core.domain import (
    AuthorizationCodeRedirectRequest,
    AuthorizationCodeTokenRequest,
    ClientCredentialsRequest,
    GrantType,
    ImplicitGrantRequest,
    InvalidateTokenRequest,
    PasswordCredentialsRequest,
    RefreshTokenRequest,
)
from runtime_spi.infrastructure import request_builder
from runtime_spi.infrastructure.request_builder import (
    API_KEY_HEADER,
    TOKEN_LIFETIME_HEADER,
    client_authorization,
)

API_KEY = "test-api-key"


def basic_credentials(client_id, client_secret):
    return base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()


def form(encoded):
    """Decode a form-url-encoded string into a flat dict."""
    return {k: v[0] for k, v in parse_qs(encoded, keep_blank_values=True).items()}


class TestClientAuthorization:
    def test_bare_base64_without_scheme(self):
        assert client_authorization("app", "secret") == "YXBwOnNlY3JldA=="

    def test_non_ascii_credentials(self):
        assert client_authorization("app", "sécret") == basic_credentials(
            "app", "sécret"
        )


class TestTokenRequests:
    """POST operations: path, grant_type, body and headers."""

    @pytest.mark.parametrize("with_optionals", [False, True])
    def test_client_credentials(self, with_optionals):
        extra = {"scope": "read", "token_lifetime": 60000} if with_optionals else {}
        outbound = request_builder.build_client_credentials(
            ClientCredentialsRequest(client_id="app", client_secret="s", **extra),
            API_KEY,
        )

        assert outbound.method == "POST"
        assert outbound.path == "/tokentypes/client/tokens"
        assert outbound.grant_type == GrantType.CLIENT_CREDENTIALS
        assert outbound.query is None
        assert outbound.target == "/tokentypes/client/tokens"
        body = form(outbound.body)
        assert body["grant_type"] == "client_credentials"
        if with_optionals:
            assert body["scope"] == "read"
            assert outbound.headers[TOKEN_LIFETIME_HEADER] == "60000"
        else:
            assert "scope" not in body
            assert TOKEN_LIFETIME_HEADER not in outbound.headers

    def test_post_headers(self):
        outbound = request_builder.build_client_credentials(
            ClientCredentialsRequest(client_id="app", client_secret="s"), API_KEY
        )

        assert outbound.headers == {
            "Authorization": basic_credentials("app", "s"),
            API_KEY_HEADER: API_KEY,
            "Content-Type": "application/x-www-form-urlencoded",
        }

    def test_password_credentials(self):
        outbound = request_builder.build_password_credentials(
            PasswordCredentialsRequest(
                client_id="app",
                client_secret="s",
                username="alice",
                password="p@ss word&",
            ),
            API_KEY,
        )

        assert outbound.path == "/tokentypes/password/tokens"
        assert outbound.grant_type == GrantType.PASSWORD
        assert form(outbound.body) == {
            "grant_type": "password",
            "username": "alice",
            "password": "p@ss word&",
        }

    def test_authorization_code_token(self):
        outbound = request_builder.build_authorization_code_token(
            AuthorizationCodeTokenRequest(
                client_id="app",
                client_secret="s",
                code="abc",
                redirect_uri="https://app/callback",
            ),
            API_KEY,
        )

        assert outbound.path == "/tokentypes/authcode/tokens"
        assert outbound.grant_type == GrantType.AUTHORIZATION_CODE
        assert form(outbound.body) == {
            "grant_type": "authorization_code",
            "code": "abc",
            "redirect_uri": "https://app/callback",
            "client_id": "app",
        }

    def test_refresh_token(self):
        outbound = request_builder.build_refresh_token(
            RefreshTokenRequest(
                client_id="app", client_secret="s", refresh_token="R", scope=""
            ),
            API_KEY,
        )

        assert outbound.path == "/tokentypes/all/refresh"
        assert outbound.grant_type == GrantType.REFRESH_TOKEN
        assert form(outbound.body) == {
            "grant_type": "refresh_token",
            "refresh_token": "R",
        }


class TestInvalidateRequests:
    def test_access_token_only(self):
        outbound = request_builder.build_invalidate_token(
            InvalidateTokenRequest(client_id="app", client_secret="s", access_token="A"),
            API_KEY,
        )

        assert outbound.path == "/tokentypes/all/invalidate"
        assert outbound.grant_type is None
        assert form(outbound.body) == {"token": "A", "token_type_hint": "access_token"}

    def test_refresh_token_takes_precedence(self):
        outbound = request_builder.build_invalidate_token(
            InvalidateTokenRequest(
                client_id="app", client_secret="s", refresh_token="R", access_token="A"
            ),
            API_KEY,
        )

        assert outbound.body == "token=R&token_type_hint=refresh_token"


class TestRedirectRequests:
    """GET operations: query string and API key only."""

    def test_authorization_code_redirect(self):
        outbound = request_builder.build_authorization_code_redirect(
            AuthorizationCodeRedirectRequest(
                client_id="app",
                redirect_uri="https://app/callback",
                scope="read",
                state="xyz",
            ),
            API_KEY,
        )

        assert outbound.method == "GET"
        assert outbound.path == "/tokentypes/authcode/authcodes"
        assert outbound.body is None
        assert outbound.headers == {API_KEY_HEADER: API_KEY}
        assert form(outbound.query) == {
            "response_type": "code",
            "client_id": "app",
            "redirect_uri": "https://app/callback",
            "scope": "read",
            "state": "xyz",
        }

    def test_implicit_grant_minimal(self):
        outbound = request_builder.build_implicit_grant(
            ImplicitGrantRequest(client_id="app"), API_KEY
        )

        assert outbound.path == "/tokentypes/implicit/tokens"
        assert outbound.query == "response_type=token&client_id=app"
        assert "Authorization" not in outbound.headers
        assert outbound.target == (
            "/tokentypes/implicit/tokens?response_type=token&client_id=app"
        )
