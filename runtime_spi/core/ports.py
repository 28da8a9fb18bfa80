"""
Port definitions (interfaces) for the runtime SPI.

RuntimeSPI is the set of OAuth operations a runtime needs from an
authorization backend. Infrastructure adapters implement it; callers depend
on this interface, not on a concrete backend.
"""

from typing import Protocol, Union

from runtime_spi.core.domain import (
    AuthorizationCodeRedirectRequest,
    AuthorizationCodeTokenRequest,
    ClientCredentialsRequest,
    ImplicitGrantRequest,
    InvalidateTokenRequest,
    NoContent,
    PasswordCredentialsRequest,
    RefreshTokenRequest,
    TokenResult,
)

TokenOutcome = Union[TokenResult, NoContent]


class RuntimeSPI(Protocol):
    """
    Port (interface) for OAuth 2.0 token and redirect operations.

    Every operation raises an AdapterError subclass on failure. Token
    operations return a TokenResult, or NoContent when the backend answered
    successfully without a token payload. Redirect operations return the
    redirect target URI.
    """

    async def create_token_client_credentials(
        self, request: ClientCredentialsRequest
    ) -> TokenOutcome:
        """Issue a token using the client_credentials grant."""
        ...

    async def create_token_password_credentials(
        self, request: PasswordCredentialsRequest
    ) -> TokenOutcome:
        """Issue a token using the password grant."""
        ...

    async def create_token_authorization_code(
        self, request: AuthorizationCodeTokenRequest
    ) -> TokenOutcome:
        """Exchange an authorization code for a token."""
        ...

    async def generate_authorization_code(
        self, request: AuthorizationCodeRedirectRequest
    ) -> str:
        """Generate an authorization code and return the redirect URI."""
        ...

    async def create_token_implicit_grant(self, request: ImplicitGrantRequest) -> str:
        """Issue a token using the implicit grant and return the redirect URI."""
        ...

    async def refresh_token(self, request: RefreshTokenRequest) -> TokenOutcome:
        """Exchange a refresh token for a new token."""
        ...

    async def invalidate_token(self, request: InvalidateTokenRequest) -> NoContent:
        """Invalidate a refresh or access token."""
        ...
