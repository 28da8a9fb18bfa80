"""
Shared test configuration and fixtures.
"""

import pytest

from runtime_spi.infrastructure.apigee_runtime import ApigeeRuntimeAdapter

BASE_URI = "http://apigee.test/dna"
API_KEY = "test-api-key"


@pytest.fixture
def adapter():
    """Adapter pointed at the fake backend."""
    return ApigeeRuntimeAdapter(uri=BASE_URI, key=API_KEY)


@pytest.fixture
def token_payload():
    """Token response body as returned by the backend."""
    return {
        "access_token": "T",
        "refresh_token": "R",
        "scope": "S",
        "expires_in": "3600",
    }
