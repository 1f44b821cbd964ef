"""Backoff policy for read-only RPC queries.

Account fetches and program-account scans may be repeated after a transport
failure. Transaction submissions never go through this policy: a dropped
send may still land, and resending would double-submit.
"""

import random
from dataclasses import dataclass, replace

from .errors import TransportFailureError


@dataclass(frozen=True)
class RetryConfig:
    """How many times a failed query is repeated and how long to wait between tries."""

    max_retries: int = 0
    base_delay_ms: int = 100
    max_delay_ms: int = 10_000

    @classmethod
    def default(cls) -> "RetryConfig":
        """No retries."""
        return cls()

    @classmethod
    def with_retries(cls, max_retries: int) -> "RetryConfig":
        return cls(max_retries=max_retries)

    def with_base_delay_ms(self, delay: int) -> "RetryConfig":
        return replace(self, base_delay_ms=delay)

    def with_max_delay_ms(self, delay: int) -> "RetryConfig":
        return replace(self, max_delay_ms=delay)

    def backoff_seconds(self, attempt: int) -> float:
        """Doubling delay for the given zero-based attempt, capped, with 75-100% jitter."""
        ceiling = min(self.base_delay_ms << attempt, self.max_delay_ms)
        return ceiling * random.uniform(0.75, 1.0) / 1000.0


def is_retryable(error: Exception) -> bool:
    """Only transport-level failures are worth another attempt."""
    return isinstance(error, TransportFailureError)