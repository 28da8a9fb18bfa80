"""
Core domain models for the runtime SPI.

One request model per OAuth operation, so that required parameters are
enforced when the request is built rather than when the backend rejects it.
Results are either a TokenResult, the NoContent success marker, or (for the
redirect operations) the plain redirect target string.
"""

import json
import math
import re
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class GrantType(str, Enum):
    """OAuth 2.0 grant types sent as ``grant_type`` on token requests."""

    CLIENT_CREDENTIALS = "client_credentials"
    PASSWORD = "password"
    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"


class _OperationRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ClientCredentialsRequest(_OperationRequest):
    """Parameters for a client_credentials token."""

    client_id: str
    client_secret: str
    scope: Optional[str] = None
    token_lifetime: Optional[int] = Field(
        default=None, description="Requested token lifetime in milliseconds"
    )


class PasswordCredentialsRequest(_OperationRequest):
    """
    Parameters for a password token.

    Username and password are forwarded as-is. Checking them is the
    caller's responsibility.
    """

    client_id: str
    client_secret: str
    username: str
    password: str
    scope: Optional[str] = None
    token_lifetime: Optional[int] = Field(
        default=None, description="Requested token lifetime in milliseconds"
    )


class AuthorizationCodeTokenRequest(_OperationRequest):
    """
    Parameters for exchanging an authorization code for a token.

    redirect_uri must match the one used when the code was generated.
    """

    client_id: str
    client_secret: str
    code: str
    redirect_uri: Optional[str] = None
    token_lifetime: Optional[int] = Field(
        default=None, description="Requested token lifetime in milliseconds"
    )


class AuthorizationCodeRedirectRequest(_OperationRequest):
    """Parameters for generating an authorization code redirect."""

    client_id: str
    redirect_uri: Optional[str] = None
    scope: Optional[str] = None
    state: Optional[str] = None


class ImplicitGrantRequest(_OperationRequest):
    """Parameters for an implicit grant redirect."""

    client_id: str
    redirect_uri: Optional[str] = None
    scope: Optional[str] = None
    state: Optional[str] = None


class RefreshTokenRequest(_OperationRequest):
    """Parameters for refreshing an access token."""

    client_id: str
    client_secret: str
    refresh_token: str
    scope: Optional[str] = None
    token_lifetime: Optional[int] = Field(
        default=None, description="Requested token lifetime in milliseconds"
    )


class InvalidateTokenRequest(_OperationRequest):
    """
    Parameters for invalidating a token.

    One of refresh_token or access_token must be given. When both are given
    the refresh token is invalidated and the access token is ignored; existing
    callers of the backend rely on that precedence.
    """

    client_id: str
    client_secret: str
    refresh_token: Optional[str] = None
    access_token: Optional[str] = None

    @model_validator(mode="after")
    def require_a_token(self) -> "InvalidateTokenRequest":
        if not self.refresh_token and not self.access_token:
            raise ValueError("either refresh_token or access_token must be specified")
        return self


class TokenResult(BaseModel):
    """
    Token issued by the backend.

    token_type is the grant type that was requested, since the backend does
    not reliably return one.
    """

    model_config = ConfigDict(frozen=True)

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: str
    scope: Optional[str] = None
    expires_in: Optional[int] = Field(default=None, description="Lifetime in seconds")

    @field_validator("access_token", "refresh_token", "scope", mode="before")
    @classmethod
    def coerce_to_string(cls, v):
        """Render scalar JSON values as strings; lists become space-delimited."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (bool, int, float)):
            return json.dumps(v)
        if isinstance(v, list):
            return " ".join(str(item) for item in v)
        return None

    @field_validator("expires_in", mode="before")
    @classmethod
    def parse_expires_in(cls, v):
        """Accept integers and numeric strings; anything else becomes None."""
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        if isinstance(v, float):
            return int(v) if math.isfinite(v) else None
        match = _LEADING_INT.match(str(v))
        return int(match.group(1)) if match else None

    @classmethod
    def from_backend_payload(
        cls, payload: Any, grant_type: GrantType
    ) -> "TokenResult":
        """
        Build a TokenResult from the backend's JSON token response.

        Args:
            payload: Decoded JSON returned by the backend. Anything other
                than an object yields a result with only token_type set.
            grant_type: Grant type recorded when the request was made

        Returns:
            TokenResult with token_type set to the grant type
        """
        if not isinstance(payload, dict):
            payload = {}
        return cls(
            access_token=payload.get("access_token"),
            refresh_token=payload.get("refresh_token"),
            token_type=grant_type.value,
            scope=payload.get("scope"),
            expires_in=payload.get("expires_in"),
        )

    def to_oauth_response(self) -> Dict[str, Any]:
        """Render as a standard OAuth 2.0 token response, without empty fields."""
        return self.model_dump(exclude_none=True)


class NoContent(BaseModel):
    """
    Successful token-endpoint call that returned no token payload.

    Produced when the body does not parse as JSON, and always for
    invalidation.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int = 200
    body: str = ""
