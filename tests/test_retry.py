"""
Tests for the connector retry policy
"""
import asyncio
import logging

import pytest

from rosetta_server.utils.errors import BlockNotFound, NodeUnavailable
from rosetta_server.utils.retry import NO_RETRY, RetryPolicy, call_with_retry

FAST = RetryPolicy(max_attempts=3, base_delay=0.0, max_delay=0.0)


class Flaky:
    def __init__(self, failures, error=NodeUnavailable):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self, value):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(f"attempt {self.calls} failed")
        return value


@pytest.mark.asyncio
async def test_backoff_doubles_up_to_max_delay(monkeypatch):
    """Test the sleeps between attempts double from base_delay and stop at max_delay"""
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    policy = RetryPolicy(max_attempts=5, base_delay=0.5, max_delay=1.5)
    with pytest.raises(NodeUnavailable):
        await call_with_retry("block", Flaky(10), "ok", policy=policy)
    assert sleeps == [0.5, 1.0, 1.5, 1.5]


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures():
    """Test success after transient failures"""
    func = Flaky(2)
    assert await call_with_retry("block", func, "ok", policy=FAST) == "ok"
    assert func.calls == 3


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(caplog):
    """Test giving up after max attempts"""
    func = Flaky(10)
    with caplog.at_level(logging.WARNING, logger="rosetta_server.utils.retry"):
        with pytest.raises(NodeUnavailable) as excinfo:
            await call_with_retry("network_status", func, "ok", policy=FAST)
    assert func.calls == 3
    assert excinfo.value.details["attempts"] == 3
    assert "network_status failed after 3 attempts" in caplog.text


@pytest.mark.asyncio
async def test_permanent_errors_are_not_retried():
    """Test permanent errors are not retried"""
    func = Flaky(1, error=BlockNotFound)
    with pytest.raises(BlockNotFound):
        await call_with_retry("block", func, "ok", policy=FAST)
    assert func.calls == 1


@pytest.mark.asyncio
async def test_no_retry_policy():
    """Test the single attempt policy"""
    func = Flaky(1)
    with pytest.raises(NodeUnavailable) as excinfo:
        await call_with_retry("submit", func, "ok", policy=NO_RETRY)
    assert func.calls == 1
    assert excinfo.value.details["attempts"] == 1


@pytest.mark.asyncio
async def test_unshielded_call():
    """Test calls without shielding"""
    func = Flaky(0)
    assert await call_with_retry("hash", func, 7, policy=FAST, shield=False) == 7
