"""Errors raised by the CoinGecko access layer."""


class CoinGeckoError(Exception):
    """Base class for every failure surfaced to the dashboard."""


class TransientNetworkFailure(CoinGeckoError):
    """Connection-level failure; retried up to the attempt ceiling."""


class UpstreamHTTPError(TransientNetworkFailure):
    """Non-2xx response other than 429."""

    def __init__(self, status_code: int, reason: str) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"API request failed: {status_code} {reason}".rstrip())


class RateLimited(CoinGeckoError):
    """HTTP 429 received more often than the rate-limit budget allows."""


class ConstraintViolation(CoinGeckoError):
    """The request asks for data the dashboard structurally does not serve."""


class InvalidPage(ConstraintViolation):
    def __init__(self, page: int) -> None:
        self.page = page
        super().__init__(f"Page must be 1 or greater, got {page}")


class PageLimitExceeded(ConstraintViolation):
    def __init__(self, page: int, max_page: int) -> None:
        self.page = page
        self.max_page = max_page
        super().__init__(
            f"Page limit exceeded for free tier: page {page} > {max_page}"
        )


class UnexpectedPayload(CoinGeckoError):
    """2xx response whose JSON body does not have the expected shape."""

    def __init__(self, endpoint: str, expected: str, payload: object) -> None:
        self.endpoint = endpoint
        super().__init__(
            f"Unexpected response from {endpoint}: expected {expected}, "
            f"got {type(payload).__name__}"
        )


class EmptyChartData(CoinGeckoError):
    """Chart response parsed fine but holds no price points."""

    def __init__(self, coin_id: str, days: str) -> None:
        self.coin_id = coin_id
        self.days = days
        super().__init__(f"No chart data available for {coin_id} ({days}d)")


class ChartFallbackExhausted(CoinGeckoError):
    """The 24h chart failed and so did its 7-day replacement."""

    def __init__(
        self, coin_id: str, primary_error: Exception, fallback_error: Exception
    ) -> None:
        self.coin_id = coin_id
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(
            f"Chart data unavailable for {coin_id}: {fallback_error}"
        )
