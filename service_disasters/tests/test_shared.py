"""
Tests for the shared retry, circuit breaker and configuration helpers.
"""

import pytest
from unittest.mock import AsyncMock

from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException, CircuitBreakerState
from shared.config import get_config
from shared.retry import RetryConfig, RetryError, calculate_delay, call_with_retry


class FakeMonotonic:
    def __init__(self):
        self.value = 100.0

    def __call__(self):
        return self.value


class TestCircuitBreaker:
    """Test cases for CircuitBreaker."""

    @pytest.fixture
    def clock(self):
        return FakeMonotonic()

    @pytest.fixture
    def breaker(self, clock):
        return CircuitBreaker("test", failure_threshold=2, recovery_timeout=30.0, clock=clock)

    @pytest.mark.asyncio
    async def test_opens_after_threshold(self, breaker):
        failing = AsyncMock(side_effect=RuntimeError("down"))

        for _ in range(2):
            with pytest.raises(RuntimeError):
                await breaker.call(failing)

        assert breaker.state == CircuitBreakerState.OPEN
        with pytest.raises(CircuitBreakerOpenException):
            await breaker.call(failing)
        assert failing.await_count == 2

    @pytest.mark.asyncio
    async def test_half_open_success_closes(self, breaker, clock):
        failing = AsyncMock(side_effect=RuntimeError("down"))
        for _ in range(2):
            with pytest.raises(RuntimeError):
                await breaker.call(failing)

        clock.value += 30.0
        assert breaker.state == CircuitBreakerState.HALF_OPEN

        assert await breaker.call(AsyncMock(return_value="ok")) == "ok"
        assert breaker.get_state()["state"] == "closed"
        assert breaker.get_state()["failure_count"] == 0

    @pytest.mark.asyncio
    async def test_half_open_failure_reopens(self, breaker, clock):
        failing = AsyncMock(side_effect=RuntimeError("down"))
        for _ in range(2):
            with pytest.raises(RuntimeError):
                await breaker.call(failing)

        clock.value += 30.0
        with pytest.raises(RuntimeError):
            await breaker.call(failing)

        assert breaker.state == CircuitBreakerState.OPEN

    @pytest.mark.asyncio
    async def test_success_resets_failure_count(self, breaker):
        with pytest.raises(RuntimeError):
            await breaker.call(AsyncMock(side_effect=RuntimeError("down")))
        await breaker.call(AsyncMock(return_value=None))
        with pytest.raises(RuntimeError):
            await breaker.call(AsyncMock(side_effect=RuntimeError("down")))

        assert breaker.state == CircuitBreakerState.CLOSED


class TestRetry:
    """Test cases for call_with_retry."""

    @pytest.mark.asyncio
    async def test_retries_until_success(self):
        func = AsyncMock(side_effect=[ConnectionError("a"), "ok"])

        result = await call_with_retry(func, exceptions=(ConnectionError,), config=RetryConfig(base_delay=0, jitter=False))

        assert result == "ok"
        assert func.await_count == 2

    @pytest.mark.asyncio
    async def test_exhaustion_raises_retry_error(self):
        error = ConnectionError("down")
        func = AsyncMock(side_effect=error)

        with pytest.raises(RetryError) as exc_info:
            await call_with_retry(func, exceptions=(ConnectionError,), config=RetryConfig(max_attempts=3, base_delay=0))

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_exception is error
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_other_exceptions_are_not_retried(self):
        func = AsyncMock(side_effect=ValueError("bad"))

        with pytest.raises(ValueError):
            await call_with_retry(func, exceptions=(ConnectionError,), config=RetryConfig(base_delay=0))

        assert func.await_count == 1

    def test_delay_is_exponential_and_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=5.0, exponential_base=2.0, jitter=False)

        assert [calculate_delay(attempt, config) for attempt in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 5.0]


class TestConfig:
    """Configuration defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("DISASTER_GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("DISASTER_CACHE_TTL_SECONDS", raising=False)

        config = get_config("disasters", 3000)

        assert config.cache_ttl_seconds == 3600
        assert config.cache_backend == "memory"
        assert config.official_updates_url == "https://www.redcross.org"
        assert config.gemini_api_key is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DISASTER_CACHE_TTL_SECONDS", "60")
        monkeypatch.delenv("DISASTER_GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")

        config = get_config("disasters", 3000)

        assert config.cache_ttl_seconds == 60
        assert config.gemini_api_key == "from-env"
