"""Shared test fixtures and configuration for all tests.

Provides settings and factories for the error shapes the adapter
recognizes (TransportError, httpx errors, API payloads, RPC errors).
"""

import pytest
import httpx

from provisioning_retry.config import Settings
from provisioning_retry.errors.models import TransportError


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with a small backoff cap and metrics on.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.MAX_RETRIES = 1
    """
    return Settings(
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        MAX_RETRIES=3,
        RETRY_BACKOFF_BASE=2.0,
        RETRY_MAX_DELAY_SECONDS=5.0,
        RETRY_MAX_HINT_SECONDS=120.0,
        PROMETHEUS_ENABLED=True,
    )


@pytest.fixture
def rest_error():
    """Factory fixture for REST-family TransportError.

    Usage:
        def test_something(rest_error):
            error = rest_error(409, "Operation already in progress")
    """
    def _create(status_code: int, message: str = "", sub_errors=None, retry_after=None) -> TransportError:
        return TransportError.rest(
            status_code,
            message,
            sub_errors=sub_errors,
            retry_after=retry_after,
        )

    return _create


@pytest.fixture
def http_status_error():
    """Factory fixture for httpx.HTTPStatusError with a JSON or text body.

    Usage:
        def test_something(http_status_error):
            error = http_status_error(403, json={"error": {...}})
    """
    def _create(
        status_code: int,
        json=None,
        text: str | None = None,
        headers: dict | None = None,
    ) -> httpx.HTTPStatusError:
        request = httpx.Request("POST", "https://compute.example.com/v1/projects/p/instances")
        if json is not None:
            response = httpx.Response(status_code, json=json, headers=headers, request=request)
        else:
            response = httpx.Response(status_code, text=text or "", headers=headers, request=request)
        return httpx.HTTPStatusError(
            f"Server returned {status_code}", request=request, response=response
        )

    return _create

