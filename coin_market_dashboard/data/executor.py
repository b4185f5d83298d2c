"""Rate-limited request executor for the CoinGecko API.

All retry and backoff policy lives here so the endpoint code stays declarative:
- counted attempts with linear backoff (backoff_ms * n before attempt n + 1)
- HTTP 429 waits a fixed delay and retries without spending a counted attempt
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from coin_market_dashboard.config import API_KEY_HEADER, RetryPolicy, Settings
from coin_market_dashboard.data.errors import (
    CoinGeckoError,
    RateLimited,
    TransientNetworkFailure,
    UpstreamHTTPError,
)


logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class RequestExecutor:
    """Issues GET requests against the CoinGecko API with retry."""

    def __init__(
        self,
        settings: Settings | None = None,
        policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.policy = policy or self.settings.retry
        self._transport = transport
        self._sleep = sleep or asyncio.sleep
        self._client: httpx.AsyncClient | None = None

        if not self.settings.has_api_key():
            logger.warning("COINGECKO_API_KEY not set, using anonymous access")

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            headers = {"accept": "application/json"}
            if self.settings.has_api_key():
                headers[API_KEY_HEADER] = self.settings.coingecko_api_key
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers=headers,
                timeout=30.0,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RequestExecutor":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def execute(self, endpoint: str) -> Any:
        """
        GET an endpoint and return its decoded JSON body.

        Args:
            endpoint: Path relative to the base URL, query string included

        Returns:
            The JSON payload, unvalidated

        Raises:
            TransientNetworkFailure: every counted attempt failed (last error)
            RateLimited: more 429 responses than the policy allows
        """
        policy = self.policy
        attempts = 0
        rate_limit_hits = 0
        last_error: CoinGeckoError | None = None
        wait = 0.0

        while attempts < policy.max_attempts:
            if wait:
                await self._sleep(wait)

            try:
                response = await self.client.get(endpoint)
            except httpx.RequestError as e:
                attempts += 1
                last_error = TransientNetworkFailure(f"API request failed: {e!r}")
                last_error.__cause__ = e
                logger.warning(f"API request attempt {attempts} failed: {last_error}")
                wait = policy.backoff_before(attempts + 1)
                continue

            if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
                rate_limit_hits += 1
                if rate_limit_hits > policy.max_attempts:
                    raise RateLimited(
                        f"Rate limited {rate_limit_hits} times requesting {endpoint}"
                    )
                logger.info("Rate limited, waiting...")
                wait = policy.rate_limit_wait
                continue

            if not response.is_success:
                attempts += 1
                last_error = UpstreamHTTPError(response.status_code, response.reason_phrase)
                logger.warning(f"API request attempt {attempts} failed: {last_error}")
                wait = policy.backoff_before(attempts + 1)
                continue

            try:
                return response.json()
            except ValueError as e:
                attempts += 1
                last_error = TransientNetworkFailure(f"Invalid JSON from {endpoint}")
                last_error.__cause__ = e
                logger.warning(f"API request attempt {attempts} failed: {last_error}")
                wait = policy.backoff_before(attempts + 1)

        if last_error is None:
            raise TransientNetworkFailure(f"No response received for {endpoint}")
        raise last_error
