"""Delivery retry policy as an explicit state machine.

Backoff is linear and capped (2s, 4s, 6s, 8s, 8s, ...), not exponential.
"""

from dataclasses import dataclass
from enum import Enum

BASE_BACKOFF_MS = 2000
MAX_BACKOFF_MS = 8000


class RetryState(str, Enum):
    ATTEMPTING = "attempting"
    DELIVERED = "delivered"
    PERMANENT_FAILURE = "permanent_failure"


def backoff_ms(attempt_index: int) -> int:
    """Delay after the failed attempt at 0-based ``attempt_index``."""
    return min(BASE_BACKOFF_MS * (attempt_index + 1), MAX_BACKOFF_MS)


@dataclass
class RetryPolicy:
    max_retries: int = 3

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def next_state(self, attempt_index: int, succeeded: bool) -> RetryState:
        if succeeded:
            return RetryState.DELIVERED
        if attempt_index + 1 >= self.total_attempts:
            return RetryState.PERMANENT_FAILURE
        return RetryState.ATTEMPTING

    def delay_seconds(self, attempt_index: int) -> float:
        return backoff_ms(attempt_index) / 1000
