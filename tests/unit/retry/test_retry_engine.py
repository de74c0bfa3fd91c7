"""
Unit tests for the retry engine.

asyncio.sleep is patched so backoff is observed rather than waited for.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, call, patch

import pytest
from prometheus_client import REGISTRY

from provisioning_retry.pipelines.decision import RetryDecision
from provisioning_retry.pipelines.registry import COMMON_INFRA, QUOTA_AWARE, RPC
from provisioning_retry.retry.engine import RetryEngine
from provisioning_retry.retry.exceptions import RetryExhausted
from provisioning_retry.retry.metadata import RetryMetadata
from tests.factories import PER_MINUTE_QUOTA_MESSAGE, FakeRpcError


class ApiError(Exception):
    """REST error raised by a fake client."""

    def __init__(self, status_code: int, message: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def attempts_count(pipeline: str, outcome: str) -> float:
    labels = {"pipeline": pipeline, "outcome": outcome}
    return REGISTRY.get_sample_value("retry_attempts_total", labels) or 0.0


# ============================================================================
# Success paths
# ============================================================================


@pytest.mark.asyncio
async def test_success_first_attempt(test_settings):
    """No failure: one call, no sleep, empty history."""
    engine = RetryEngine(COMMON_INFRA, test_settings)
    operation = AsyncMock(return_value={"name": "instance-1"})

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock) as sleep:
        result, metadata = await engine.execute_with_retry(operation)

    assert result == {"name": "instance-1"}
    assert metadata.total_attempts == 1
    assert metadata.retried_on == []
    assert metadata.pipeline == "common_infra"
    sleep.assert_not_called()


@pytest.mark.asyncio
async def test_success_after_transient_failures(test_settings):
    """Two 503s then success, with exponential backoff in between."""
    engine = RetryEngine(COMMON_INFRA, test_settings)
    operation = AsyncMock(side_effect=[ApiError(503), ApiError(503), "done"])

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock) as sleep:
        result, metadata = await engine.execute_with_retry(operation)

    assert result == "done"
    assert operation.await_count == 3
    assert sleep.await_args_list == [call(2.0), call(4.0)]
    assert metadata.total_attempts == 3
    assert metadata.retried_on == ["common_retryable_status", "common_retryable_status"]
    assert metadata.total_delay_seconds == 6.0


@pytest.mark.asyncio
async def test_delay_hint_overrides_backoff(test_settings):
    """Per-minute quota waits for the hint, even past the backoff cap."""
    engine = RetryEngine(QUOTA_AWARE, test_settings)
    operation = AsyncMock(side_effect=[ApiError(403, PER_MINUTE_QUOTA_MESSAGE), "ok"])

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock) as sleep:
        result, metadata = await engine.execute_with_retry(operation)

    assert result == "ok"
    sleep.assert_awaited_once_with(60.0)
    assert metadata.retried_on == ["per_minute_quota_exceeded"]


@pytest.mark.asyncio
async def test_rpc_transient_status_retries(test_settings):
    engine = RetryEngine(RPC, test_settings)
    operation = AsyncMock(side_effect=[FakeRpcError("FAILED_PRECONDITION"), 42])

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock):
        result, metadata = await engine.execute_with_retry(operation)

    assert result == 42
    assert metadata.retried_on == ["rpc_status_table"]


# ============================================================================
# Failure paths
# ============================================================================


@pytest.mark.asyncio
async def test_non_retryable_error_is_reraised_unchanged(test_settings):
    engine = RetryEngine(COMMON_INFRA, test_settings)
    error = ApiError(404, "Missing page")
    operation = AsyncMock(side_effect=error)

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock) as sleep:
        with pytest.raises(ApiError) as exc_info:
            await engine.execute_with_retry(operation)

    assert exc_info.value is error
    assert operation.await_count == 1
    sleep.assert_not_called()


@pytest.mark.asyncio
async def test_unclassifiable_error_is_not_retried(test_settings):
    engine = RetryEngine(COMMON_INFRA, test_settings)
    operation = AsyncMock(side_effect=ValueError("bad input"))

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock):
        with pytest.raises(ValueError):
            await engine.execute_with_retry(operation)

    assert operation.await_count == 1


@pytest.mark.asyncio
async def test_retries_exhausted(test_settings):
    """MAX_RETRIES=3 means four calls, three sleeps, then RetryExhausted."""
    engine = RetryEngine(COMMON_INFRA, test_settings)
    last = ApiError(500, "still broken")
    operation = AsyncMock(side_effect=[ApiError(500), ApiError(502), ApiError(503), last])

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock) as sleep:
        with pytest.raises(RetryExhausted) as exc_info:
            await engine.execute_with_retry(operation)

    exhausted = exc_info.value
    assert exhausted.last_error is last
    assert exhausted.__cause__ is last
    assert exhausted.retry_metadata.total_attempts == 4
    assert len(exhausted.retry_metadata.retried_on) == 3
    # 2, 4, then 8 capped at RETRY_MAX_DELAY_SECONDS=5
    assert sleep.await_args_list == [call(2.0), call(4.0), call(5.0)]
    assert "4 attempts" in str(exhausted)
    assert "common_infra" in str(exhausted)


@pytest.mark.asyncio
async def test_zero_retries_allows_single_attempt(test_settings):
    test_settings.MAX_RETRIES = 0
    engine = RetryEngine(COMMON_INFRA, test_settings)
    operation = AsyncMock(side_effect=ApiError(503))

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock) as sleep:
        with pytest.raises(RetryExhausted) as exc_info:
            await engine.execute_with_retry(operation)

    assert exc_info.value.retry_metadata.total_attempts == 1
    sleep.assert_not_called()


# ============================================================================
# Metrics
# ============================================================================


@pytest.mark.asyncio
async def test_outcomes_are_counted(test_settings):
    engine = RetryEngine(COMMON_INFRA, test_settings)
    retry_before = attempts_count("common_infra", "retry")
    success_before = attempts_count("common_infra", "success")

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock):
        await engine.execute_with_retry(AsyncMock(side_effect=[ApiError(429), "ok"]))

    assert attempts_count("common_infra", "retry") == retry_before + 1
    assert attempts_count("common_infra", "success") == success_before + 1


@pytest.mark.asyncio
async def test_metrics_disabled(test_settings):
    test_settings.PROMETHEUS_ENABLED = False
    engine = RetryEngine(RPC, test_settings)
    before = attempts_count("rpc", "success")

    await engine.execute_with_retry(AsyncMock(return_value="ok"))

    assert attempts_count("rpc", "success") == before


# ============================================================================
# Delay computation and metadata
# ============================================================================


def test_compute_delay(test_settings):
    engine = RetryEngine(COMMON_INFRA, test_settings)
    backoff = RetryDecision(retryable=True, predicate="common_retryable_status")
    hinted = RetryDecision(retryable=True, delay_hint=timedelta(seconds=30), predicate="x")

    assert engine.compute_delay(backoff, 1) == 2.0
    assert engine.compute_delay(backoff, 2) == 4.0
    assert engine.compute_delay(backoff, 10) == 5.0
    assert engine.compute_delay(hinted, 1) == 30.0


def test_backoff_overflow_is_capped(test_settings):
    """2.0 ** 5000 overflows a float; the cap still applies."""
    engine = RetryEngine(COMMON_INFRA, test_settings)
    decision = RetryDecision(retryable=True, predicate="common_retryable_status")

    assert engine.compute_delay(decision, 5000) == 5.0


def test_delay_hint_is_capped(test_settings):
    engine = RetryEngine(COMMON_INFRA, test_settings)
    decision = RetryDecision(
        retryable=True, delay_hint=timedelta(hours=6), predicate="common_retryable_status"
    )

    assert engine.compute_delay(decision, 1) == 120.0


@pytest.mark.asyncio
async def test_large_retry_budget_does_not_overflow(test_settings):
    test_settings.MAX_RETRIES = 2000
    engine = RetryEngine(COMMON_INFRA, test_settings)
    failures = [ApiError(503) for _ in range(1100)]
    operation = AsyncMock(side_effect=[*failures, "ok"])

    with patch("provisioning_retry.retry.engine.asyncio.sleep", new_callable=AsyncMock) as sleep:
        result, metadata = await engine.execute_with_retry(operation)

    assert result == "ok"
    assert metadata.total_attempts == 1101
    assert sleep.await_args_list[-1] == call(5.0)


def test_max_attempts_from_settings(test_settings):
    assert RetryEngine(COMMON_INFRA, test_settings).max_attempts == 4


def test_default_settings_are_used():
    engine = RetryEngine(RPC)
    assert engine.max_attempts == engine.settings.MAX_RETRIES + 1
    assert engine.max_hint == engine.settings.RETRY_MAX_HINT_SECONDS


class TestRetryMetadata:
    """RetryMetadata invariants."""

    def test_valid(self):
        metadata = RetryMetadata(pipeline="rpc", total_attempts=2, retried_on=["rpc_status_table"])
        assert metadata.total_delay_seconds == 0.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"total_attempts": 0},
            {"total_attempts": 1, "retried_on": ["a"]},
            {"total_attempts": 1, "total_delay_seconds": -1.0},
            {"total_attempts": 1, "total_latency_ms": -5},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            RetryMetadata(pipeline="rpc", **kwargs)

    def test_frozen(self):
        metadata = RetryMetadata(pipeline="rpc", total_attempts=1)
        with pytest.raises(AttributeError):
            metadata.total_attempts = 3

