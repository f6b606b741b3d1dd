"""
Unit tests for wastewise.utils.retry module.
"""

from unittest.mock import Mock

import pytest

from wastewise.utils.retry import RetryPolicy, exponential_backoff


class TransientError(Exception):
    pass


class FatalError(Exception):
    pass


class TestExponentialBackoff:

    def test_doubles_each_attempt(self):
        backoff = exponential_backoff(1.0)

        assert [backoff(attempt, TransientError()) for attempt in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_scales_with_base_delay(self):
        assert exponential_backoff(0.5)(2, TransientError()) == 2.0


class TestRetryPolicy:

    def test_returns_first_success(self, no_sleep):
        func = Mock(return_value="ok")
        policy = RetryPolicy(max_attempts=3, sleep=no_sleep)

        assert policy.call(func, 1, key="value") == "ok"
        func.assert_called_once_with(1, key="value")
        no_sleep.assert_not_called()

    def test_retries_until_success(self, no_sleep):
        func = Mock(side_effect=[TransientError("a"), TransientError("b"), "ok"])
        policy = RetryPolicy(max_attempts=3, sleep=no_sleep)

        assert policy.call(func) == "ok"
        assert func.call_count == 3
        assert [c.args[0] for c in no_sleep.call_args_list] == [1.0, 2.0]

    def test_raises_last_error_after_exhaustion(self, no_sleep):
        last = TransientError("third")
        func = Mock(side_effect=[TransientError("first"), TransientError("second"), last])
        policy = RetryPolicy(max_attempts=3, sleep=no_sleep)

        with pytest.raises(TransientError) as exc_info:
            policy.call(func)

        assert exc_info.value is last
        assert no_sleep.call_count == 2

    def test_non_retryable_error_is_raised_immediately(self, no_sleep):
        func = Mock(side_effect=FatalError("stop"))
        policy = RetryPolicy(
            max_attempts=3,
            retryable=lambda e: not isinstance(e, FatalError),
            sleep=no_sleep,
        )

        with pytest.raises(FatalError):
            policy.call(func)

        func.assert_called_once()
        no_sleep.assert_not_called()

    def test_custom_backoff_receives_error(self, no_sleep):
        backoff = Mock(return_value=5.0)
        error = TransientError("loading")
        func = Mock(side_effect=[error, "ok"])
        policy = RetryPolicy(max_attempts=2, backoff=backoff, sleep=no_sleep)

        policy.call(func)

        backoff.assert_called_once_with(0, error)
        no_sleep.assert_called_once_with(5.0)

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)
