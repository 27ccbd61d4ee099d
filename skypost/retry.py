from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """
    Exponential backoff retry policy.

    - max_attempts counts the initial attempt (max_attempts=3 => 1 try + 2 retries).
    - base_delay_seconds is the delay after the first failure; it doubles per failure.
    - jitter_ratio adds multiplicative jitter in [1-jitter, 1+jitter].
    """

    max_attempts: int = 1
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 20.0
    jitter_ratio: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must be >= 0")
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must be >= base_delay_seconds")
        if not (0.0 <= self.jitter_ratio <= 1.0):
            raise ValueError("jitter_ratio must be between 0 and 1")

    def backoff_seconds(self, failure_attempt: int) -> float:
        exponent = max(0, failure_attempt - 1)
        delay = min(self.max_delay_seconds, self.base_delay_seconds * (2**exponent))
        if delay == 0.0 or self.jitter_ratio <= 0:
            return delay
        return delay * random.uniform(1.0 - self.jitter_ratio, 1.0 + self.jitter_ratio)


@dataclass(frozen=True)
class RetryEvent:
    operation: str
    failure_attempt: int
    max_attempts: int
    delay_seconds: float
    error_type: str
    error_message: str


IsRetryableFn = Callable[[BaseException], bool]
OnRetryFn = Callable[[RetryEvent], None]
SleepFn = Callable[[float], None]


def call_with_retries(
    fn: Callable[[], T],
    *,
    cfg: RetryConfig,
    is_retryable: IsRetryableFn,
    operation: str,
    on_retry: OnRetryFn | None = None,
    sleep_fn: SleepFn | None = None,
) -> T:
    """
    Call fn(), retrying failures that is_retryable accepts until max_attempts is reached.

    The last failure, or any non-retryable one, propagates unchanged.
    """
    sleeper = sleep_fn or time.sleep

    attempt = 1
    while True:
        try:
            return fn()
        except Exception as exc:
            if attempt >= cfg.max_attempts or not is_retryable(exc):
                raise

            delay = cfg.backoff_seconds(attempt)
            if on_retry is not None:
                on_retry(
                    RetryEvent(
                        operation=operation,
                        failure_attempt=attempt,
                        max_attempts=cfg.max_attempts,
                        delay_seconds=delay,
                        error_type=type(exc).__name__,
                        error_message=str(exc).strip(),
                    )
                )
            if delay > 0:
                sleeper(delay)
            attempt += 1
