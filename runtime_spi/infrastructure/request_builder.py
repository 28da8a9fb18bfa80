"""
Outbound request shaping for the Apigee DNA adapter.

Turns operation requests into wire-level requests (verb, path, headers and
either a form body or a query string) without doing any I/O, so the exact
shape of every call can be checked in isolation.
"""

import base64
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urlencode

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


API_KEY_HEADER = "x-DNA-Api-Key"
TOKEN_LIFETIME_HEADER = "x-DNA-Token-Lifetime"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

CLIENT_TOKENS_PATH = "/tokentypes/client/tokens"
PASSWORD_TOKENS_PATH = "/tokentypes/password/tokens"
AUTHCODE_TOKENS_PATH = "/tokentypes/authcode/tokens"
AUTHCODE_AUTHCODES_PATH = "/tokentypes/authcode/authcodes"
IMPLICIT_TOKENS_PATH = "/tokentypes/implicit/tokens"
REFRESH_PATH = "/tokentypes/all/refresh"
INVALIDATE_PATH = "/tokentypes/all/invalidate"


@dataclass(frozen=True)
class OutboundRequest:
    """
    A fully shaped backend call.

    Token operations are POSTs with a form body. Redirect operations are GETs
    with a query string and no body. grant_type is the grant recorded for the
    call, echoed back as the token type of the result.
    """

    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    query: Optional[str] = None
    grant_type: Optional[GrantType] = None

    @property
    def target(self) -> str:
        """Path relative to the base URI, including the query string for GETs."""
        if self.query is None:
            return self.path
        return f"{self.path}?{self.query}"


def client_authorization(client_id: str, client_secret: str) -> str:
    """
    Encode client credentials for the Authorization header.

    The backend expects the bare base64 value, without a "Basic " prefix.
    """
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def _form(params: Dict[str, Optional[str]]) -> str:
    return urlencode({k: v for k, v in params.items() if v is not None})


def _post(
    path: str,
    api_key: str,
    client_id: str,
    client_secret: str,
    params: Dict[str, Optional[str]],
    grant_type: Optional[GrantType] = None,
    token_lifetime: Optional[int] = None,
) -> OutboundRequest:
    headers = {
        "Authorization": client_authorization(client_id, client_secret),
        API_KEY_HEADER: api_key,
        "Content-Type": FORM_CONTENT_TYPE,
    }
    if token_lifetime:
        headers[TOKEN_LIFETIME_HEADER] = str(token_lifetime)
    return OutboundRequest(
        method="POST",
        path=path,
        headers=headers,
        body=_form(params),
        grant_type=grant_type,
    )


def _get(path: str, api_key: str, params: Dict[str, Optional[str]]) -> OutboundRequest:
    return OutboundRequest(
        method="GET",
        path=path,
        headers={API_KEY_HEADER: api_key},
        query=_form(params),
    )


def build_client_credentials(
    request: ClientCredentialsRequest, api_key: str
) -> OutboundRequest:
    """POST /tokentypes/client/tokens"""
    grant = GrantType.CLIENT_CREDENTIALS
    return _post(
        CLIENT_TOKENS_PATH,
        api_key,
        request.client_id,
        request.client_secret,
        {"grant_type": grant.value, "scope": request.scope or None},
        grant_type=grant,
        token_lifetime=request.token_lifetime,
    )


def build_password_credentials(
    request: PasswordCredentialsRequest, api_key: str
) -> OutboundRequest:
    """POST /tokentypes/password/tokens"""
    grant = GrantType.PASSWORD
    return _post(
        PASSWORD_TOKENS_PATH,
        api_key,
        request.client_id,
        request.client_secret,
        {
            "grant_type": grant.value,
            "username": request.username,
            "password": request.password,
            "scope": request.scope or None,
        },
        grant_type=grant,
        token_lifetime=request.token_lifetime,
    )


def build_authorization_code_token(
    request: AuthorizationCodeTokenRequest, api_key: str
) -> OutboundRequest:
    """POST /tokentypes/authcode/tokens"""
    grant = GrantType.AUTHORIZATION_CODE
    return _post(
        AUTHCODE_TOKENS_PATH,
        api_key,
        request.client_id,
        request.client_secret,
        {
            "grant_type": grant.value,
            "code": request.code,
            "redirect_uri": request.redirect_uri or None,
            "client_id": request.client_id,
        },
        grant_type=grant,
        token_lifetime=request.token_lifetime,
    )


def build_authorization_code_redirect(
    request: AuthorizationCodeRedirectRequest, api_key: str
) -> OutboundRequest:
    """GET /tokentypes/authcode/authcodes"""
    return _get(
        AUTHCODE_AUTHCODES_PATH,
        api_key,
        {
            "response_type": "code",
            "client_id": request.client_id,
            "redirect_uri": request.redirect_uri or None,
            "scope": request.scope or None,
            "state": request.state or None,
        },
    )


def build_implicit_grant(
    request: ImplicitGrantRequest, api_key: str
) -> OutboundRequest:
    """GET /tokentypes/implicit/tokens"""
    return _get(
        IMPLICIT_TOKENS_PATH,
        api_key,
        {
            "response_type": "token",
            "client_id": request.client_id,
            "redirect_uri": request.redirect_uri or None,
            "scope": request.scope or None,
            "state": request.state or None,
        },
    )


def build_refresh_token(request: RefreshTokenRequest, api_key: str) -> OutboundRequest:
    """POST /tokentypes/all/refresh"""
    grant = GrantType.REFRESH_TOKEN
    return _post(
        REFRESH_PATH,
        api_key,
        request.client_id,
        request.client_secret,
        {
            "grant_type": grant.value,
            "refresh_token": request.refresh_token,
            "scope": request.scope or None,
        },
        grant_type=grant,
        token_lifetime=request.token_lifetime,
    )


def build_invalidate_token(
    request: InvalidateTokenRequest, api_key: str
) -> OutboundRequest:
    """
    POST /tokentypes/all/invalidate

    A refresh token takes precedence over an access token when both are set.
    """
    if request.refresh_token:
        params = {"token": request.refresh_token, "token_type_hint": "refresh_token"}
    else:
        params = {"token": request.access_token, "token_type_hint": "access_token"}
    return _post(
        INVALIDATE_PATH,
        api_key,
        request.client_id,
        request.client_secret,
        params,
    )
