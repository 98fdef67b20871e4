"""
circuit_breaker.py - Circuit breaker for external services
"""
from typing import Callable, Type
from datetime import datetime, timedelta
from enum import Enum
import functools
from logger import get_logger
from metrics import circuit_breaker_state
import asyncio

logger = get_logger(__name__)


class CircuitState(Enum):
    CLOSED = 0
    OPEN = 1
    HALF_OPEN = 2


class CircuitBreakerError(Exception):
    """Raised when circuit is open"""
    pass


class CircuitBreaker:
    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        expected_exception: Type[Exception] = Exception
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.failure_count = 0
        self.last_failure_time = None
        self._set_state(CircuitState.CLOSED)

    def __call__(self, func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            return await self.call(func, *args, **kwargs)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            return self.call_sync(func, *args, **kwargs)

        if asyncio.iscoroutinefunction(func):
            return wrapper
        return sync_wrapper

    async def call(self, func: Callable, *args, **kwargs):
        """Execute coroutine function with circuit breaker"""
        self._before_call(func)
        try:
            result = await func(*args, **kwargs)
        except self.expected_exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    def call_sync(self, func: Callable, *args, **kwargs):
        """Execute function with circuit breaker"""
        self._before_call(func)
        try:
            result = func(*args, **kwargs)
        except self.expected_exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    def _before_call(self, func: Callable):
        if self.state == CircuitState.OPEN:
            if self._should_attempt_reset():
                self._set_state(CircuitState.HALF_OPEN)
            else:
                raise CircuitBreakerError(f"Circuit breaker '{self.name}' is OPEN for {func.__name__}")

    def _should_attempt_reset(self) -> bool:
        """Check if we should try to reset the circuit"""
        if self.last_failure_time is None:
            return False

        time_since_failure = datetime.now() - self.last_failure_time
        return time_since_failure >= timedelta(seconds=self.recovery_timeout)

    def _set_state(self, state: CircuitState):
        self.state = state
        circuit_breaker_state.labels(self.name).set(state.value)

    def _on_success(self):
        self.failure_count = 0
        if self.state == CircuitState.HALF_OPEN:
            self._set_state(CircuitState.CLOSED)
            logger.info(f"Circuit breaker '{self.name}' closed after successful recovery")

    def _on_failure(self):
        self.failure_count += 1
        self.last_failure_time = datetime.now()

        if self.state == CircuitState.HALF_OPEN:
            self._set_state(CircuitState.OPEN)
            logger.warning(f"Circuit breaker '{self.name}' reopened after failure in half-open state")
        elif self.failure_count >= self.failure_threshold:
            self._set_state(CircuitState.OPEN)
            logger.warning(f"Circuit breaker '{self.name}' opened after {self.failure_count} failures")
