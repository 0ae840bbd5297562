"""Unit tests for the bounded retry helper."""

import pytest

from shared_kernel.retry import RetryConfig, compute_delay, retry_async


class Flaky:
    """Callable failing a fixed number of times before succeeding."""

    def __init__(self, failures: int, error: Exception):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


NO_JITTER = RetryConfig(max_retries=3, base_delay=0.5, max_delay=8.0, jitter=False)


class TestComputeDelay:
    def test_doubles_per_attempt(self):
        assert [compute_delay(n, NO_JITTER) for n in range(4)] == [0.5, 1.0, 2.0, 4.0]

    def test_capped_at_max_delay(self):
        assert compute_delay(10, NO_JITTER) == 8.0

    def test_jitter_stays_within_bounds(self):
        config = RetryConfig(base_delay=1.0, jitter=True)
        for _ in range(50):
            assert 0.5 <= compute_delay(0, config) <= 1.5


class TestRetryAsync:
    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        fn = Flaky(failures=2, error=ConnectionError("reset"))
        sleep = RecordingSleep()

        result = await retry_async(
            fn, NO_JITTER, retryable_exceptions=(ConnectionError,), sleep=sleep
        )

        assert result == "ok"
        assert fn.calls == 3
        assert sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_reraises_after_exhausting_retries(self):
        fn = Flaky(failures=10, error=ConnectionError("reset"))
        sleep = RecordingSleep()

        with pytest.raises(ConnectionError):
            await retry_async(
                fn, NO_JITTER, retryable_exceptions=(ConnectionError,), sleep=sleep
            )

        assert fn.calls == 4
        assert len(sleep.delays) == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates_immediately(self):
        fn = Flaky(failures=1, error=ValueError("bad input"))

        with pytest.raises(ValueError):
            await retry_async(
                fn,
                NO_JITTER,
                retryable_exceptions=(ConnectionError,),
                sleep=RecordingSleep(),
            )

        assert fn.calls == 1

    @pytest.mark.asyncio
    async def test_on_retry_receives_attempt_and_delay(self):
        fn = Flaky(failures=1, error=ConnectionError("reset"))
        seen = []

        await retry_async(
            fn,
            NO_JITTER,
            retryable_exceptions=(ConnectionError,),
            on_retry=lambda attempt, delay, exc: seen.append((attempt, delay, str(exc))),
            sleep=RecordingSleep(),
        )

        assert seen == [(1, 0.5, "reset")]

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self):
        fn = Flaky(failures=1, error=ConnectionError("reset"))

        with pytest.raises(ConnectionError):
            await retry_async(
                fn,
                RetryConfig(max_retries=0, jitter=False),
                retryable_exceptions=(ConnectionError,),
                sleep=RecordingSleep(),
            )

        assert fn.calls == 1
