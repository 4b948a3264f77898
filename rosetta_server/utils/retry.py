"""
Bounded exponential backoff around connector calls.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from ..config import DEFAULT_BASE_DELAY, DEFAULT_MAX_DELAY, DEFAULT_MAX_RETRIES
from .errors import NodeUnavailable, RosettaError
from .metrics import connector_calls, connector_duration, connector_failures, connector_retries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Only NodeUnavailable is retried; delays double from base_delay up to max_delay."""
    max_attempts: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY

    def delay(self, attempt: int) -> float:
        """Delay slept after the given (1 based) failed attempt."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


NO_RETRY = RetryPolicy(max_attempts=1)


async def call_with_retry(operation: str, func: Callable[..., Awaitable[Any]], *args,
                          policy: RetryPolicy = RetryPolicy(), shield: bool = True, **kwargs) -> Any:
    """
    Run ``func(*args, **kwargs)`` under ``policy``.

    Each attempt is shielded so a disconnecting caller does not cancel a call
    already in flight at the node. When the budget is exhausted the last
    NodeUnavailable is raised with ``details["attempts"]`` set.
    """
    attempts = 0
    log_sleep = before_sleep_log(logger, logging.WARNING)

    def before_sleep(retry_state):
        connector_retries.labels(operation=operation).inc()
        log_sleep(retry_state)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(policy.max_attempts, 1)),
        wait=lambda retry_state: policy.delay(retry_state.attempt_number),
        sleep=asyncio.sleep,
        retry=retry_if_exception_type(NodeUnavailable),
        before_sleep=before_sleep,
        reraise=True,
    )

    connector_calls.labels(operation=operation).inc()
    start_time = time.time()
    try:
        async for attempt in retrying:
            with attempt:
                attempts += 1
                if shield:
                    result = await asyncio.shield(func(*args, **kwargs))
                else:
                    result = await func(*args, **kwargs)
        return result
    except NodeUnavailable as e:
        connector_failures.labels(operation=operation, reason=type(e).__name__).inc()
        logger.error(f"{operation} failed after {attempts} attempts: {e.message}")
        e.details["attempts"] = attempts
        raise
    except RosettaError as e:
        connector_failures.labels(operation=operation, reason=type(e).__name__).inc()
        raise
    finally:
        connector_duration.labels(operation=operation).observe(time.time() - start_time)
