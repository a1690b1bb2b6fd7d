"""
Rate-limited HTTP fetcher with retry and backoff.

One call to fetch() issues GET requests until it gets a usable response
or runs out of attempts:

- 429 waits for Retry-After (default 6s) and consumes an attempt
- 5xx, timeouts and network errors back off exponentially (1, 2, 4, ...)
- anything else (2xx, 3xx, 4xx other than 429) is returned as-is

Exhaustion returns None instead of raising; the caller decides what a
missing response means for the run.
"""

import asyncio
import enum
import logging
import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from core.config import ImporterConfig

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class OutcomeKind(str, enum.Enum):
    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    RETRYABLE = "retryable"
    FATAL = "fatal"


class FetchOutcome:
    """Classified result of one request attempt."""

    __slots__ = ("kind", "response", "reason", "wait_seconds")

    def __init__(
        self,
        kind: OutcomeKind,
        response: Optional[httpx.Response] = None,
        reason: Optional[str] = None,
        wait_seconds: Optional[float] = None
    ):
        self.kind = kind
        self.response = response
        self.reason = reason
        self.wait_seconds = wait_seconds

    @classmethod
    def success(cls, response: httpx.Response) -> "FetchOutcome":
        return cls(OutcomeKind.SUCCESS, response=response)

    @classmethod
    def rate_limited(cls, wait_seconds: float) -> "FetchOutcome":
        return cls(OutcomeKind.RATE_LIMITED, reason="rate limited", wait_seconds=wait_seconds)

    @classmethod
    def retryable(cls, reason: str) -> "FetchOutcome":
        return cls(OutcomeKind.RETRYABLE, reason=reason)

    @classmethod
    def fatal(cls, reason: str) -> "FetchOutcome":
        return cls(OutcomeKind.FATAL, reason=reason)

    def __repr__(self) -> str:
        return f"FetchOutcome({self.kind.value}, reason={self.reason!r})"


class RateLimitedFetcher:
    """
    Fetch single pages from the remote source, masking transient failures.

    Attributes:
        config: Importer configuration (base URL, timeout, retry budget)
        client: Optional httpx.AsyncClient; one is created on first use otherwise
        sleep: Awaitable sleep, injectable for tests
    """

    def __init__(
        self,
        config: ImporterConfig,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
        log: Optional[logging.Logger] = None
    ):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.sleep = sleep
        self.log = log or logger
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "RateLimitedFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.request_timeout,
                follow_redirects=True,
                headers={"Accept": "application/json"}
            )
        return self._client

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def fetch(
        self,
        path: str,
        query: Optional[Dict[str, Any]] = None,
        max_retries: Optional[int] = None
    ) -> Optional[httpx.Response]:
        """
        GET one resource with retries.

        Args:
            path: Path below the base URL (e.g. "/products")
            query: Query parameters
            max_retries: Retry budget; total attempts are max_retries + 1

        Returns:
            The response, or None when the retry budget is exhausted or
            the request can never succeed
        """
        if max_retries is None:
            max_retries = self.config.max_retries
        url = self.url_for(path)
        attempt = 0
        backoff = self.config.initial_backoff

        while attempt <= max_retries:
            attempt += 1
            outcome = await self._attempt(url, query)

            if outcome.kind == OutcomeKind.SUCCESS:
                return outcome.response

            if outcome.kind == OutcomeKind.RATE_LIMITED:
                self.log.warning(
                    f"API rate limited, waiting {outcome.wait_seconds}s "
                    f"(attempt {attempt}/{max_retries + 1})"
                )
                await self.sleep(outcome.wait_seconds)
                continue

            if outcome.kind == OutcomeKind.FATAL:
                self.log.error(f"Request to {url} cannot succeed: {outcome.reason}")
                return None

            self.log.warning(
                f"Request attempt {attempt}/{max_retries + 1} failed: {outcome.reason}"
            )
            if attempt > max_retries:
                break

            await self.sleep(backoff)
            backoff *= 2

        self.log.error(f"Max retries reached for request {url} params={query}")
        return None

    async def _attempt(self, url: str, query: Optional[Dict[str, Any]]) -> FetchOutcome:
        try:
            response = await self.client.get(url, params=query)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            return FetchOutcome.fatal(f"{type(e).__name__}: {e}")
        except httpx.TimeoutException as e:
            return FetchOutcome.retryable(f"timeout: {type(e).__name__}")
        except httpx.TransportError as e:
            return FetchOutcome.retryable(f"network error: {type(e).__name__}: {e}")

        if response.status_code == 429:
            return FetchOutcome.rate_limited(self._retry_after(response))

        if response.is_server_error:
            return FetchOutcome.retryable(f"server error: {response.status_code}")

        return FetchOutcome.success(response)

    def _retry_after(self, response: httpx.Response) -> float:
        """Seconds to wait after a 429, at least one."""
        header = response.headers.get("Retry-After")
        wait = self.config.default_retry_after
        if header:
            header = header.strip()
            try:
                wait = float(header)
            except ValueError:
                wait = _seconds_until(header, default=wait)
            if not math.isfinite(wait):
                wait = self.config.default_retry_after
        return max(1.0, wait)


def _seconds_until(http_date: str, default: float) -> float:
    """Retry-After may also be an HTTP date."""
    try:
        when = parsedate_to_datetime(http_date)
    except (TypeError, ValueError):
        return default
    if when is None:
        return default
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return (when - datetime.now(timezone.utc)).total_seconds()
