"""Tests for retry handler."""

from unittest.mock import Mock, patch

import pytest
from azure.core.exceptions import (
    HttpResponseError,
    ResourceNotFoundError,
    ServiceRequestError,
)

from azteardown.retry_handler import (
    is_transient_error,
    retry_with_exponential_backoff,
    should_retry_http_error,
)


def http_error(status_code: int) -> HttpResponseError:
    error = HttpResponseError(message=f"HTTP {status_code}")
    error.status_code = status_code
    return error


class TestShouldRetryHttpError:
    """Tests for should_retry_http_error()."""

    @pytest.mark.parametrize("status_code", [408, 429, 500, 502, 503, 504])
    def test_retryable_codes(self, status_code):
        assert should_retry_http_error(status_code) is True

    @pytest.mark.parametrize("status_code", [400, 401, 403, 404, 409])
    def test_non_retryable_codes(self, status_code):
        assert should_retry_http_error(status_code) is False


class TestIsTransientError:
    def test_network_errors(self):
        assert is_transient_error(ConnectionError("reset")) is True
        assert is_transient_error(TimeoutError()) is True
        assert is_transient_error(ServiceRequestError(message="dns")) is True

    def test_throttling(self):
        assert is_transient_error(http_error(429)) is True

    def test_not_found_is_not_transient(self):
        assert is_transient_error(ResourceNotFoundError(message="gone")) is False

    def test_other_errors(self):
        assert is_transient_error(ValueError("bad")) is False
        assert is_transient_error(http_error(409)) is False


class TestRetryWithExponentialBackoff:
    """Tests for retry_with_exponential_backoff decorator."""

    def test_succeeds_on_first_attempt(self):
        """Should return immediately on success."""
        call_count = 0

        @retry_with_exponential_backoff(max_attempts=3)
        def successful_operation():
            nonlocal call_count
            call_count += 1
            return "success"

        assert successful_operation() == "success"
        assert call_count == 1

    def test_retries_on_transient_error(self):
        """Should retry on transient errors."""
        call_count = 0

        @retry_with_exponential_backoff(max_attempts=3, initial_delay=0.01, jitter=False)
        def flaky_operation():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionError("Temporary network error")
            return "success"

        with patch("azteardown.retry_handler.time.sleep"):
            assert flaky_operation() == "success"
        assert call_count == 3

    def test_raises_after_max_attempts(self):
        """Should raise exception after max attempts exceeded."""
        call_count = 0

        @retry_with_exponential_backoff(max_attempts=3, initial_delay=0.01, jitter=False)
        def always_fails():
            nonlocal call_count
            call_count += 1
            raise http_error(503)

        with patch("azteardown.retry_handler.time.sleep"):
            with pytest.raises(HttpResponseError):
                always_fails()

        assert call_count == 3

    def test_not_found_raised_immediately(self):
        call_count = 0

        @retry_with_exponential_backoff(max_attempts=3)
        def missing():
            nonlocal call_count
            call_count += 1
            raise ResourceNotFoundError(message="gone")

        with pytest.raises(ResourceNotFoundError):
            missing()

        assert call_count == 1

    def test_exponential_backoff_delays(self):
        """Should double the delay between retries, capped at max_delay."""
        operation = Mock(side_effect=[ConnectionError(), ConnectionError(), ConnectionError(), "ok"])
        wrapped = retry_with_exponential_backoff(
            max_attempts=4, initial_delay=1.0, max_delay=3.0, jitter=False
        )(operation)

        with patch("azteardown.retry_handler.time.sleep") as mock_sleep:
            assert wrapped() == "ok"

        delays = [call[0][0] for call in mock_sleep.call_args_list]
        assert delays == [1.0, 2.0, 3.0]

    def test_jitter_adds_randomness(self):
        """First delay should be within ±25% of initial_delay."""
        operation = Mock(side_effect=[ConnectionError(), "ok"])
        wrapped = retry_with_exponential_backoff(max_attempts=2, initial_delay=1.0)(operation)

        with patch("azteardown.retry_handler.time.sleep") as mock_sleep:
            assert wrapped() == "ok"

        assert 0.75 <= mock_sleep.call_args[0][0] <= 1.25

    def test_passes_arguments_through(self):
        operation = Mock(return_value="vm")

        assert retry_with_exponential_backoff()(operation)("rg1", "vm1") == "vm"
        operation.assert_called_once_with("rg1", "vm1")
