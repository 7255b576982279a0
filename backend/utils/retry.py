"""Retry policy for upstream calls"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Tuple, Type, TypeVar

from config import config

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    How often and how patiently an upstream call is retried.

    `max_attempts=1` means a single attempt with no retry. The delay before
    attempt n (n >= 2) is `backoff_seconds * backoff_factor ** (n - 2)`.
    Only exceptions that are instances of `retry_on` are retried; anything
    else propagates immediately.
    """
    max_attempts: int = 1
    backoff_seconds: float = 0.0
    backoff_factor: float = 2.0
    retry_on: Tuple[Type[BaseException], ...] = field(default_factory=tuple)

    def delay_before(self, attempt: int) -> float:
        if attempt <= 1:
            return 0.0
        return self.backoff_seconds * (self.backoff_factor ** (attempt - 2))

    def should_retry(self, exc: BaseException, attempt: int) -> bool:
        return attempt < self.max_attempts and isinstance(exc, self.retry_on)


def default_llm_policy(retry_on: Tuple[Type[BaseException], ...] = ()) -> RetryPolicy:
    """Policy for LLM calls built from LLM_MAX_ATTEMPTS / LLM_BACKOFF_SECONDS."""
    return RetryPolicy(
        max_attempts=max(1, config.LLM_MAX_ATTEMPTS),
        backoff_seconds=config.LLM_BACKOFF_SECONDS,
        retry_on=retry_on,
    )


def call_with_retry(fn: Callable[[], T], policy: RetryPolicy,
                    sleep: Callable[[float], None] = time.sleep) -> T:
    """Run `fn` under `policy`, re-raising the last failure."""
    attempt = 1
    while True:
        try:
            return fn()
        except Exception as e:
            if not policy.should_retry(e, attempt):
                raise
            attempt += 1
            delay = policy.delay_before(attempt)
            logger.warning(f"Retrying after {type(e).__name__} (attempt {attempt}/{policy.max_attempts}, sleeping {delay:.1f}s)")
            if delay > 0:
                sleep(delay)
