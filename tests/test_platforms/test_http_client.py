"""Tests for the upstream HTTP client."""

import asyncio

import httpx
import pytest
import respx

from src.platforms.http_client import (
    APIKeyRotator,
    HTTPClient,
    HTTPClientError,
    RateLimitError,
    RetryConfig,
)

URL = "https://api.example.com/data"


class TestAPIKeyRotator:
    """Tests for APIKeyRotator."""

    def test_from_env_var_with_multiple_keys(self):
        rotator = APIKeyRotator.from_env_var("key1,key2,key3")

        assert rotator is not None
        assert rotator.keys == ["key1", "key2", "key3"]

    def test_from_env_var_with_whitespace(self):
        """Should strip whitespace and drop empty segments."""
        rotator = APIKeyRotator.from_env_var("  key1  ,, key2 ,  ")

        assert rotator.keys == ["key1", "key2"]

    @pytest.mark.parametrize("value", [None, "", "   ", " , "])
    def test_from_env_var_without_keys(self, value):
        assert APIKeyRotator.from_env_var(value) is None

    def test_next_key_rotation(self):
        rotator = APIKeyRotator(keys=["x", "y", "z"])

        assert [rotator.next_key() for _ in range(4)] == ["x", "y", "z", "x"]

    @pytest.mark.asyncio
    async def test_concurrent_requests_spread_keys(self):
        rotator = APIKeyRotator(keys=["1", "2", "3"])

        async def take():
            await asyncio.sleep(0)
            return rotator.next_key()

        results = await asyncio.gather(*[take() for _ in range(9)])

        assert results.count("1") == 3
        assert results.count("2") == 3
        assert results.count("3") == 3


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_default_values(self):
        config = RetryConfig()

        assert config.max_retries == 2
        assert config.max_backoff_seconds == 8.0
        assert config.base_delay == 0.5
        assert config.jitter_factor == 0.1

    def test_calculate_backoff_respects_max(self):
        config = RetryConfig(base_delay=1.0, max_backoff_seconds=5.0, jitter_factor=0.0)

        assert config.calculate_backoff(0) == 1.0
        assert config.calculate_backoff(2) == 4.0
        assert config.calculate_backoff(3) == 5.0
        assert config.calculate_backoff(10) == 5.0

    def test_calculate_backoff_with_jitter(self):
        config = RetryConfig(base_delay=1.0, jitter_factor=0.1)

        backoffs = [config.calculate_backoff(0) for _ in range(100)]

        assert all(1.0 <= b < 1.1 for b in backoffs)

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        assert RetryConfig().is_retryable_status(status) is True

    @pytest.mark.parametrize("status", [200, 400, 401, 403, 404])
    def test_non_retryable_statuses(self, status):
        assert RetryConfig().is_retryable_status(status) is False

    def test_is_retryable_exception(self):
        config = RetryConfig()

        assert config.is_retryable_exception(httpx.TimeoutException("timeout")) is True
        assert config.is_retryable_exception(httpx.ConnectError("refused")) is True
        assert config.is_retryable_exception(ValueError("bad value")) is False


class TestHTTPClient:
    """Tests for HTTPClient."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_with_params(self):
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={"result": "ok"}))

        async with HTTPClient() as client:
            response = await client.get(URL, params={"q": "search", "limit": 10})

        assert response.json() == {"result": "ok"}
        request = route.calls.last.request
        assert request.url.params["q"] == "search"
        assert request.url.params["limit"] == "10"

    @pytest.mark.asyncio
    @respx.mock
    async def test_post_form_data(self):
        route = respx.post(URL).mock(return_value=httpx.Response(200, json={}))

        async with HTTPClient() as client:
            await client.post(URL, data={"grant_type": "client_credentials"})

        request = route.calls.last.request
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        assert request.content == b"grant_type=client_credentials"

    @pytest.mark.asyncio
    @respx.mock
    async def test_post_json_body(self):
        route = respx.post(URL).mock(return_value=httpx.Response(200, json={}))

        async with HTTPClient() as client:
            await client.post(URL, json_body={"name": "test"})

        assert route.calls.last.request.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    @respx.mock
    async def test_api_key_in_query_param(self):
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))

        async with HTTPClient() as client:
            await client.get(
                URL,
                params={"part": "id"},
                api_key_rotator=APIKeyRotator(keys=["my_secret_key"]),
                api_key_param="key",
            )

        params = route.calls.last.request.url.params
        assert params["key"] == "my_secret_key"
        assert params["part"] == "id"

    @pytest.mark.asyncio
    @respx.mock
    async def test_retry_on_500_with_success(self):
        route = respx.get(URL).mock(
            side_effect=[
                httpx.Response(500, text="Server error"),
                httpx.Response(503, text="Unavailable"),
                httpx.Response(200, json={"success": True}),
            ]
        )

        config = RetryConfig(max_retries=2, base_delay=0.01, jitter_factor=0.0)
        async with HTTPClient(retry_config=config) as client:
            response = await client.get(URL)

        assert response.status_code == 200
        assert route.call_count == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_rate_limit_error_after_retries_exhausted(self):
        respx.get(URL).mock(return_value=httpx.Response(429, text="Rate limited"))

        config = RetryConfig(max_retries=1, base_delay=0.01, jitter_factor=0.0)
        async with HTTPClient(retry_config=config) as client:
            with pytest.raises(RateLimitError) as exc_info:
                await client.get(URL)

        assert exc_info.value.status_code == 429
        assert "Rate limit exceeded" in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_after_retries_exhausted(self):
        respx.get(URL).mock(return_value=httpx.Response(503, text="Service unavailable"))

        config = RetryConfig(max_retries=1, base_delay=0.01, jitter_factor=0.0)
        async with HTTPClient(retry_config=config) as client:
            with pytest.raises(HTTPClientError) as exc_info:
                await client.get(URL)

        assert exc_info.value.status_code == 503
        assert exc_info.value.response_body == "Service unavailable"
        assert "failed with status 503" in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_retry_on_4xx(self):
        route = respx.get(URL).mock(return_value=httpx.Response(404, text="Not found"))

        config = RetryConfig(max_retries=3, base_delay=0.01, jitter_factor=0.0)
        async with HTTPClient(retry_config=config) as client:
            with pytest.raises(HTTPClientError) as exc_info:
                await client.get(URL)

        assert route.call_count == 1
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    @respx.mock
    async def test_retry_on_timeout(self):
        route = respx.get(URL).mock(
            side_effect=[
                httpx.TimeoutException("Request timed out"),
                httpx.Response(200, json={"success": True}),
            ]
        )

        config = RetryConfig(max_retries=2, base_delay=0.01, jitter_factor=0.0)
        async with HTTPClient(retry_config=config) as client:
            response = await client.get(URL)

        assert response.status_code == 200
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_after_retries_exhausted(self):
        respx.get(URL).mock(side_effect=httpx.ConnectError("Connection refused"))

        config = RetryConfig(max_retries=1, base_delay=0.01, jitter_factor=0.0)
        async with HTTPClient(retry_config=config) as client:
            with pytest.raises(HTTPClientError) as exc_info:
                await client.get(URL)

        assert exc_info.value.status_code is None
        assert "ConnectError" in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_protocol_error_not_retried(self):
        route = respx.get(URL).mock(side_effect=httpx.RemoteProtocolError("Server disconnected"))

        config = RetryConfig(max_retries=3, base_delay=0.01, jitter_factor=0.0)
        async with HTTPClient(retry_config=config) as client:
            with pytest.raises(HTTPClientError) as exc_info:
                await client.get(URL)

        assert route.call_count == 1
        assert exc_info.value.status_code is None
        assert "RemoteProtocolError" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, httpx.RemoteProtocolError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_key_rotation_on_retry(self):
        used_keys = []

        def side_effect(request):
            used_keys.append(request.url.params["key"])
            if len(used_keys) <= 2:
                return httpx.Response(429, text="Rate limited")
            return httpx.Response(200, json={"success": True})

        respx.get(URL).mock(side_effect=side_effect)

        rotator = APIKeyRotator(keys=["key_a", "key_b", "key_c"])
        config = RetryConfig(max_retries=3, base_delay=0.01, jitter_factor=0.0)

        async with HTTPClient(retry_config=config) as client:
            await client.get(URL, api_key_rotator=rotator, api_key_param="key")

        assert used_keys == ["key_a", "key_b", "key_c"]

    @pytest.mark.asyncio
    async def test_client_not_used_as_context_manager(self):
        client = HTTPClient()

        with pytest.raises(RuntimeError, match="must be used as async context manager"):
            await client.get(URL)
