"""
Runtime SPI implementation backed by an Apigee DNA adapter proxy.

This is a driven adapter that implements the RuntimeSPI port by forwarding
each operation as a single HTTP call to the proxy deployed at the configured
base URI.
"""

import json
import logging
from typing import NamedTuple, Optional

import httpx

from runtime_spi.config import DEFAULT_MAX_RESPONSE_BYTES, AdapterConfig
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
from runtime_spi.core.exceptions import (
    BackendError,
    ResponseTooLargeError,
    TransportError,
)
from runtime_spi.core.ports import TokenOutcome
from runtime_spi.infrastructure import request_builder
from runtime_spi.infrastructure.request_builder import OutboundRequest

logger = logging.getLogger(__name__)

REDIRECT_STATUS = 302


class BufferedResponse(NamedTuple):
    """Status, fully read body and redirect target of one backend call."""

    status_code: int
    body: str
    location: Optional[str]


class ApigeeRuntimeAdapter:
    """
    Concrete implementation of RuntimeSPI using an Apigee-hosted backend.

    Each call opens its own connection and buffers its own response, so one
    adapter can serve many concurrent calls. Nothing is retried; wrap calls
    in asyncio.timeout() to bound them.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES,
    ):
        """
        Initialize the adapter.

        Args:
            uri: Base URI the Apigee DNA adapter is deployed to
            key: API key for the adapter
            transport: Optional httpx transport (e.g. httpx.MockTransport)
            max_response_bytes: Upper bound on a buffered response body

        Raises:
            ConfigurationError: If uri or key is missing
            UnsupportedProtocolError: If uri is not an http(s) URL
        """
        self.config = AdapterConfig(
            base_uri=uri or "",
            api_key=key or "",
            max_response_bytes=max_response_bytes,
        )
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: AdapterConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ApigeeRuntimeAdapter":
        """Create an adapter from an already validated configuration."""
        return cls(
            uri=config.base_uri,
            key=config.api_key,
            transport=transport,
            max_response_bytes=config.max_response_bytes,
        )

    # ------------------------------------------------------------------
    # Token operations (POST)
    # ------------------------------------------------------------------

    async def create_token_client_credentials(
        self, request: ClientCredentialsRequest
    ) -> TokenOutcome:
        """
        Generate an access token using client credentials.

        Returns:
            TokenResult with the standard OAuth 2.0 fields, or NoContent
        """
        outbound = request_builder.build_client_credentials(
            request, self.config.api_key
        )
        return await self._token_call(outbound)

    async def create_token_password_credentials(
        self, request: PasswordCredentialsRequest
    ) -> TokenOutcome:
        """
        Generate an access token using password credentials.

        The username and password are not verified here.
        """
        outbound = request_builder.build_password_credentials(
            request, self.config.api_key
        )
        return await self._token_call(outbound)

    async def create_token_authorization_code(
        self, request: AuthorizationCodeTokenRequest
    ) -> TokenOutcome:
        """Exchange a code from generate_authorization_code for a token."""
        outbound = request_builder.build_authorization_code_token(
            request, self.config.api_key
        )
        return await self._token_call(outbound)

    async def refresh_token(self, request: RefreshTokenRequest) -> TokenOutcome:
        outbound = request_builder.build_refresh_token(request, self.config.api_key)
        return await self._token_call(outbound)

    async def invalidate_token(self, request: InvalidateTokenRequest) -> NoContent:
        """
        Invalidate a refresh token or an access token.

        Any successful response is reported as NoContent, whatever its body.
        """
        outbound = request_builder.build_invalidate_token(request, self.config.api_key)
        response = await self._send(outbound)
        self._raise_for_token_status(response)
        return NoContent(status_code=response.status_code, body=response.body)

    # ------------------------------------------------------------------
    # Redirect operations (GET)
    # ------------------------------------------------------------------

    async def generate_authorization_code(
        self, request: AuthorizationCodeRedirectRequest
    ) -> str:
        """
        Generate a redirect for the authorization_code grant type.

        Returns:
            The redirect URI from the backend's Location header
        """
        outbound = request_builder.build_authorization_code_redirect(
            request, self.config.api_key
        )
        return await self._redirect_call(outbound)

    async def create_token_implicit_grant(self, request: ImplicitGrantRequest) -> str:
        """
        Generate a redirect for the implicit grant type.

        Returns:
            The redirect URI from the backend's Location header
        """
        outbound = request_builder.build_implicit_grant(request, self.config.api_key)
        return await self._redirect_call(outbound)

    # ------------------------------------------------------------------
    # Response handling
    # ------------------------------------------------------------------

    async def _token_call(self, outbound: OutboundRequest) -> TokenOutcome:
        response = await self._send(outbound)
        self._raise_for_token_status(response)

        try:
            payload = json.loads(response.body)
        except ValueError:
            # Not every backend operation returns JSON
            logger.debug(f"Non-JSON response from {outbound.path}, treating as empty")
            return NoContent(status_code=response.status_code, body=response.body)

        return TokenResult.from_backend_payload(payload, outbound.grant_type)

    def _raise_for_token_status(self, response: BufferedResponse) -> None:
        if response.status_code >= 300:
            logger.warning(
                f"Backend rejected token request: "
                f"{response.status_code} {response.body[:200]}"
            )
            raise BackendError(response.body, status_code=response.status_code)

    async def _redirect_call(self, outbound: OutboundRequest) -> str:
        response = await self._send(outbound)
        if response.status_code != REDIRECT_STATUS:
            logger.warning(
                f"Backend did not redirect: {response.status_code} {response.body[:200]}"
            )
            raise BackendError(response.body, status_code=response.status_code)
        if not response.location:
            raise BackendError(
                "Redirect response has no Location header",
                status_code=response.status_code,
            )
        return response.location

    async def _send(self, outbound: OutboundRequest) -> BufferedResponse:
        """
        Perform the HTTP call and buffer the whole response body.

        Raises:
            TransportError: On any connection-level failure
            ResponseTooLargeError: If the body exceeds max_response_bytes
        """
        url = self.config.url_for(outbound.target)
        logger.info(f"{outbound.method} {url}")

        limit = self.config.max_response_bytes
        try:
            async with httpx.AsyncClient(
                transport=self._transport, follow_redirects=False
            ) as client:
                async with client.stream(
                    outbound.method,
                    url,
                    headers=outbound.headers,
                    content=outbound.body,
                ) as response:
                    data = bytearray()
                    async for chunk in response.aiter_bytes():
                        data.extend(chunk)
                        if len(data) > limit:
                            raise ResponseTooLargeError(
                                f"Response body exceeds {limit} bytes",
                                status_code=response.status_code,
                            )
                    return BufferedResponse(
                        status_code=response.status_code,
                        body=data.decode("utf-8", errors="replace"),
                        location=response.headers.get("location"),
                    )
        except httpx.RequestError as e:
            logger.error(f"Transport error on {outbound.method} {url}: {e!r}")
            raise TransportError(str(e) or type(e).__name__) from e
