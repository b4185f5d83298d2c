import pytest

from coin_market_dashboard.config import RetryPolicy, Settings
from coin_market_dashboard.data.coingecko_fetcher import CoinGeckoFetcher
from coin_market_dashboard.data.executor import RequestExecutor
from tests.helpers import FakeUpstream, SleepRecorder


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        coingecko_api_key="test-key",
        base_url="https://api.example.test/api/v3",
        cache_dir=tmp_path,
    )


@pytest.fixture
def policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, backoff_ms=2000, rate_limit_wait_ms=5000)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def executor(settings, policy, upstream, sleeper) -> RequestExecutor:
    return RequestExecutor(settings, policy=policy, transport=upstream.transport, sleep=sleeper)


@pytest.fixture
def fetcher(settings, executor, sleeper) -> CoinGeckoFetcher:
    return CoinGeckoFetcher(settings, executor=executor, sleep=sleeper)
