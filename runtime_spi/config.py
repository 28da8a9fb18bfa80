"""
Runtime SPI adapter configuration.

The adapter needs two things: the base URI the Apigee DNA adapter proxy is
deployed to, and the API key issued for it. Both are validated at
construction so a misconfigured adapter fails before any request is made.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import httpx

from runtime_spi.core.exceptions import ConfigurationError, UnsupportedProtocolError


logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")

# Upper bound on a buffered response body (1 MiB)
DEFAULT_MAX_RESPONSE_BYTES = 1024 * 1024


@dataclass(frozen=True)
class AdapterConfig:
    """
    Immutable adapter configuration.

    Raises:
        ConfigurationError: If base_uri or api_key is missing, base_uri has
            no host, or api_key is not ASCII
        UnsupportedProtocolError: If base_uri is not an http(s) URL
    """

    base_uri: str
    api_key: str
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES

    def __post_init__(self):
        if not self.base_uri:
            raise ConfigurationError("uri parameter must be specified")
        if not self.api_key:
            raise ConfigurationError("key parameter must be specified")
        # Sent verbatim as a header value
        if not self.api_key.isascii():
            raise ConfigurationError("key parameter must be ASCII")
        if self.max_response_bytes <= 0:
            raise ConfigurationError("max_response_bytes must be positive")

        try:
            url = httpx.URL(self.base_uri)
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"Invalid uri '{self.base_uri}': {e}") from e
        if url.scheme not in SUPPORTED_SCHEMES:
            raise UnsupportedProtocolError(f"Unsupported protocol {url.scheme}:")
        if not url.host:
            raise ConfigurationError(f"uri '{self.base_uri}' has no host")

        # Paths are appended directly to the base URI
        object.__setattr__(self, "base_uri", self.base_uri.rstrip("/"))

    @classmethod
    def from_env(cls) -> "AdapterConfig":
        """Load configuration from environment variables."""
        max_bytes = os.getenv("APIGEE_RUNTIME_MAX_RESPONSE_BYTES")
        return cls(
            base_uri=os.getenv("APIGEE_RUNTIME_URI", ""),
            api_key=os.getenv("APIGEE_RUNTIME_KEY", ""),
            max_response_bytes=(
                int(max_bytes) if max_bytes else DEFAULT_MAX_RESPONSE_BYTES
            ),
        )

    def url_for(self, path: str) -> str:
        """Absolute URL for a backend path."""
        return f"{self.base_uri}{path}"


@lru_cache()
def get_adapter_config() -> AdapterConfig:
    """Get adapter configuration singleton."""
    config = AdapterConfig.from_env()
    logger.info(f"Runtime SPI configured for {config.base_uri}")
    return config
