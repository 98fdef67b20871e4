"""
Tests for the circuit breaker guarding ConceptNet
"""
import pytest
from unittest.mock import patch

from circuit_breaker import CircuitBreaker, CircuitBreakerError, CircuitState


class TestCircuitBreaker:

    @pytest.mark.asyncio
    async def test_opens_after_threshold(self):
        breaker = CircuitBreaker("test", failure_threshold=2, recovery_timeout=60, expected_exception=ValueError)

        async def failing():
            raise ValueError("down")

        for _ in range(2):
            with pytest.raises(ValueError):
                await breaker.call(failing)

        assert breaker.state == CircuitState.OPEN
        with pytest.raises(CircuitBreakerError):
            await breaker.call(failing)

    @pytest.mark.asyncio
    async def test_unexpected_errors_do_not_count(self):
        breaker = CircuitBreaker("test", failure_threshold=1, expected_exception=ValueError)

        async def broken():
            raise KeyError("bug")

        with pytest.raises(KeyError):
            await breaker.call(broken)
        assert breaker.state == CircuitState.CLOSED

    def test_half_open_recovers_on_success(self):
        breaker = CircuitBreaker("test", failure_threshold=1, recovery_timeout=0, expected_exception=ValueError)

        @breaker
        def flaky(fail):
            if fail:
                raise ValueError("down")
            return "ok"

        with pytest.raises(ValueError):
            flaky(True)
        assert breaker.state == CircuitState.OPEN

        assert flaky(False) == "ok"
        assert breaker.state == CircuitState.CLOSED

    def test_reset_waits_for_recovery_timeout(self):
        breaker = CircuitBreaker("test", failure_threshold=1, recovery_timeout=60, expected_exception=ValueError)

        with pytest.raises(ValueError):
            breaker.call_sync(lambda: (_ for _ in ()).throw(ValueError("down")))

        with patch.object(breaker, "_should_attempt_reset", return_value=False):
            with pytest.raises(CircuitBreakerError):
                breaker.call_sync(lambda: "ok")
