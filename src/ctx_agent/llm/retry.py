"""Bounded retry for single calls to remote endpoints."""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


def call_with_retry(
    fn: Callable[[], T],
    *,
    is_retryable: Callable[[Exception], bool],
    max_retries: int = 1,
    backoff_s: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn``, retrying up to ``max_retries`` times after a fixed delay.

    Only exceptions accepted by ``is_retryable`` are retried; anything else, and
    the last retryable failure, is re-raised unchanged.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as exc:
            if attempt >= max_retries or not is_retryable(exc):
                raise
            attempt += 1
            logger.warning(
                "retry event=scheduled attempt=%d/%d backoff_s=%.2f reason=%s",
                attempt + 1,
                max_retries + 1,
                backoff_s,
                exc,
            )
            if backoff_s > 0:
                sleep(backoff_s)
