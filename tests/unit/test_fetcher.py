"""
Unit tests for the rate-limited fetcher
"""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import httpx
import pytest
from core.config import ImporterConfig
from ingestion.fetcher import RateLimitedFetcher

BASE_URL = "https://api.example.com"


def sequence(*responses):
    """Handler returning the given responses in order; exceptions are raised."""
    calls = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    handler.calls = calls
    return handler


class TestRateLimitedFetcher:
    """Test retry, backoff and rate-limit handling"""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, make_fetcher, sleeper):
        handler = sequence(httpx.Response(200, json={"items": []}))
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products", {"page": 1, "limit": 100})

        assert response.status_code == 200
        assert len(handler.calls) == 1
        assert sleeper.calls == []

    @pytest.mark.asyncio
    async def test_builds_url_and_query(self, make_fetcher):
        handler = sequence(httpx.Response(200, json={}))
        fetcher = make_fetcher(handler)

        await fetcher.fetch("products", {"page": 3, "limit": 100})

        request = handler.calls[0]
        assert str(request.url).startswith(f"{BASE_URL}/products?")
        assert request.url.params["page"] == "3"
        assert request.url.params["limit"] == "100"

    def test_url_for_trims_slashes(self):
        fetcher = RateLimitedFetcher(ImporterConfig(base_url="https://api.example.com/v1/"))

        assert fetcher.url_for("/products") == "https://api.example.com/v1/products"

    @pytest.mark.asyncio
    async def test_server_errors_back_off_then_give_up(self, make_fetcher, sleeper):
        handler = sequence(httpx.Response(503))
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products", {"page": 1})

        assert response is None
        assert len(handler.calls) == 4
        assert sleeper.calls == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_server_error_then_success(self, make_fetcher, sleeper):
        handler = sequence(
            httpx.Response(500),
            httpx.Response(502),
            httpx.Response(200, json={"items": []}),
        )
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products")

        assert response.status_code == 200
        assert sleeper.calls == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_rate_limit_uses_retry_after(self, make_fetcher, sleeper):
        handler = sequence(
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200, json={"items": []}),
        )
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products")

        assert response.status_code == 200
        assert sleeper.calls == [2.0]

    @pytest.mark.asyncio
    async def test_rate_limit_consumes_attempts(self, make_fetcher, sleeper):
        handler = sequence(httpx.Response(429, headers={"Retry-After": "2"}))
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products")

        assert response is None
        assert len(handler.calls) == 4
        assert sleeper.calls == [2.0, 2.0, 2.0, 2.0]

    @pytest.mark.asyncio
    async def test_rate_limit_without_header_waits_default(self, make_fetcher, sleeper):
        handler = sequence(httpx.Response(429), httpx.Response(200, json={}))
        fetcher = make_fetcher(handler)

        await fetcher.fetch("/products")

        assert sleeper.calls == [6.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header,expected", [
        ("0", 1.0),
        ("-5", 1.0),
        ("soon", 6.0),
        (" 3 ", 3.0),
        ("1.5", 1.5),
        ("0.2", 1.0),
        ("inf", 6.0),
    ])
    async def test_retry_after_values(self, make_fetcher, sleeper, header, expected):
        handler = sequence(
            httpx.Response(429, headers={"Retry-After": header}),
            httpx.Response(200, json={}),
        )
        fetcher = make_fetcher(handler)

        await fetcher.fetch("/products")

        assert sleeper.calls == [expected]

    @pytest.mark.asyncio
    async def test_retry_after_http_date(self, make_fetcher, sleeper):
        when = datetime.now(timezone.utc) + timedelta(seconds=30)
        handler = sequence(
            httpx.Response(429, headers={"Retry-After": format_datetime(when, usegmt=True)}),
            httpx.Response(200, json={}),
        )
        fetcher = make_fetcher(handler)

        await fetcher.fetch("/products")

        assert len(sleeper.calls) == 1
        assert 20.0 <= sleeper.calls[0] <= 31.0

    @pytest.mark.asyncio
    async def test_network_error_is_retried(self, make_fetcher, sleeper):
        handler = sequence(
            httpx.ConnectError("connection refused"),
            httpx.Response(200, json={"items": []}),
        )
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products")

        assert response.status_code == 200
        assert sleeper.calls == [1.0]

    @pytest.mark.asyncio
    async def test_timeouts_exhaust_budget(self, make_fetcher, sleeper):
        handler = sequence(httpx.ReadTimeout("timed out"))
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products")

        assert response is None
        assert len(handler.calls) == 4
        assert sleeper.calls == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_unsupported_protocol_is_not_retried(self, make_fetcher, sleeper):
        handler = sequence(httpx.UnsupportedProtocol("ftp is not supported"))
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products")

        assert response is None
        assert len(handler.calls) == 1
        assert sleeper.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 404, 422])
    async def test_client_errors_returned_without_retry(self, make_fetcher, sleeper, status):
        handler = sequence(httpx.Response(status))
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products")

        assert response.status_code == status
        assert len(handler.calls) == 1
        assert sleeper.calls == []

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self, make_fetcher, sleeper):
        handler = sequence(httpx.Response(503))
        fetcher = make_fetcher(handler)

        response = await fetcher.fetch("/products", max_retries=0)

        assert response is None
        assert len(handler.calls) == 1
        assert sleeper.calls == []

    @pytest.mark.asyncio
    async def test_retry_budget_from_config(self, make_fetcher, sleeper):
        handler = sequence(httpx.Response(500))
        config = ImporterConfig(base_url=BASE_URL, max_retries=1, initial_backoff=0.5)
        fetcher = make_fetcher(handler, config=config)

        response = await fetcher.fetch("/products")

        assert response is None
        assert len(handler.calls) == 2
        assert sleeper.calls == [0.5]

    @pytest.mark.asyncio
    async def test_owned_client_closed_on_exit(self, importer_config):
        async with RateLimitedFetcher(importer_config) as fetcher:
            client = fetcher.client
            assert client.timeout.read == importer_config.request_timeout

        assert client.is_closed

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self, make_fetcher):
        fetcher = make_fetcher(sequence(httpx.Response(200, json={})))
        client = fetcher.client

        await fetcher.aclose()

        assert not client.is_closed
        await client.aclose()
