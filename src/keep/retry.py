"""Retry with exponential backoff for transient sync server failures."""

import logging
from typing import Callable

import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .errors import NetworkError

logger = structlog.stdlib.get_logger(__name__)


def is_transient(exc: BaseException) -> bool:
    """Transport failures and 5xx responses are worth retrying; 4xx are not."""
    if not isinstance(exc, NetworkError):
        return False
    return exc.status is None or exc.status >= 500


def http_retry(
    max_attempts: int = 3,
    min_wait: float = 2.0,
    max_wait: float = 10.0,
    predicate: Callable[[BaseException], bool] = is_transient,
):
    """Retry decorator for sync server requests.

    Args:
        max_attempts: Max attempts, including the first
        min_wait: Min wait between retries (seconds)
        max_wait: Max wait between retries (seconds)
        predicate: Decides whether an exception is retried
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception(predicate),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
