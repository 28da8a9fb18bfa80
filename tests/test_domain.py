"""
Tests for runtime SPI domain models.
"""

import pytest
from pydantic import ValidationError

from runtime_spi.core.domain import (
    ClientCredentialsRequest,
    GrantType,
    InvalidateTokenRequest,
    NoContent,
    PasswordCredentialsRequest,
    TokenResult,
)


class TestOperationRequests:
    """Required fields are enforced when requests are built."""

    def test_client_credentials_requires_secret(self):
        with pytest.raises(ValidationError):
            ClientCredentialsRequest(client_id="app")

    def test_password_requires_username_and_password(self):
        with pytest.raises(ValidationError):
            PasswordCredentialsRequest(client_id="app", client_secret="s")

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            ClientCredentialsRequest(client_id="app", client_secret="s", grant="x")

    def test_requests_are_frozen(self):
        request = ClientCredentialsRequest(client_id="app", client_secret="s")

        with pytest.raises(ValidationError):
            request.scope = "read"

    def test_invalidate_requires_a_token(self):
        with pytest.raises(ValidationError, match="refresh_token or access_token"):
            InvalidateTokenRequest(client_id="app", client_secret="s")

    def test_invalidate_accepts_both_tokens(self):
        request = InvalidateTokenRequest(
            client_id="app", client_secret="s", refresh_token="R", access_token="A"
        )

        assert request.refresh_token == "R"
        assert request.access_token == "A"


class TestTokenResult:
    """Tests for TokenResult parsing."""

    def test_from_backend_payload(self, token_payload):
        result = TokenResult.from_backend_payload(
            token_payload, GrantType.CLIENT_CREDENTIALS
        )

        assert result == TokenResult(
            access_token="T",
            refresh_token="R",
            token_type="client_credentials",
            scope="S",
            expires_in=3600,
        )

    def test_token_type_comes_from_grant_not_payload(self):
        result = TokenResult.from_backend_payload(
            {"access_token": "T", "token_type": "Bearer"}, GrantType.PASSWORD
        )

        assert result.token_type == "password"

    def test_missing_fields_are_none(self):
        result = TokenResult.from_backend_payload({}, GrantType.REFRESH_TOKEN)

        assert result.access_token is None
        assert result.refresh_token is None
        assert result.scope is None
        assert result.expires_in is None

    @pytest.mark.parametrize("payload", [[], "token", None, 42])
    def test_non_object_payload_keeps_grant_type(self, payload):
        result = TokenResult.from_backend_payload(payload, GrantType.PASSWORD)

        assert result == TokenResult(token_type="password")

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (12345, "12345"),
            (1.5, "1.5"),
            (True, "true"),
            (["read", "write"], "read write"),
            ({"nested": "x"}, None),
        ],
    )
    def test_string_fields_are_coerced(self, raw, expected):
        result = TokenResult.from_backend_payload(
            {"access_token": raw, "refresh_token": raw, "scope": raw},
            GrantType.CLIENT_CREDENTIALS,
        )

        assert result.access_token == expected
        assert result.refresh_token == expected
        assert result.scope == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (3600, 3600),
            ("3600", 3600),
            (" 1799 ", 1799),
            ("120s", 120),
            (59.9, 59),
            ("never", None),
            ("", None),
            (None, None),
            (True, None),
        ],
    )
    def test_expires_in_parsing(self, raw, expected):
        result = TokenResult(token_type="password", expires_in=raw)

        assert result.expires_in == expected

    def test_to_oauth_response_omits_empty_fields(self):
        result = TokenResult(access_token="T", token_type="client_credentials")

        assert result.to_oauth_response() == {
            "access_token": "T",
            "token_type": "client_credentials",
        }


def test_no_content_defaults():
    """NoContent is a distinct, empty success value."""
    result = NoContent()

    assert result.status_code == 200
    assert result.body == ""
    assert not isinstance(result, TokenResult)
