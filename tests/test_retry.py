"""Tests for the query retry policy."""

from gem_farm_sdk.program.errors import RemoteRejectionError, TransportFailureError
from gem_farm_sdk.program.retry import RetryConfig, is_retryable


class TestRetryConfig:
    def test_default_disables_retries(self):
        assert RetryConfig.default().max_retries == 0

    def test_builders_return_new_config(self):
        base = RetryConfig.with_retries(3)
        tuned = base.with_base_delay_ms(50).with_max_delay_ms(200)

        assert base.base_delay_ms == 100
        assert (tuned.max_retries, tuned.base_delay_ms, tuned.max_delay_ms) == (3, 50, 200)

    def test_backoff_doubles_within_jitter(self):
        config = RetryConfig.with_retries(5).with_base_delay_ms(100)

        for attempt, ceiling in enumerate((0.1, 0.2, 0.4)):
            assert 0.75 * ceiling <= config.backoff_seconds(attempt) <= ceiling

    def test_backoff_capped(self):
        config = RetryConfig.with_retries(10).with_max_delay_ms(1000)

        assert config.backoff_seconds(9) <= 1.0


class TestIsRetryable:
    def test_transport_failure(self):
        assert is_retryable(TransportFailureError("timeout"))

    def test_rejection_is_final(self):
        assert not is_retryable(RemoteRejectionError("custom program error: 0x1770"))
