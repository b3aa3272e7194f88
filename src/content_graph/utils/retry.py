"""Shared retry decorator for record store HTTP calls.

Retries transport failures (connection errors, timeouts) and 5xx responses.
4xx responses are not retried: they mean the request itself is wrong.
"""

from __future__ import annotations

import logging

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from content_graph.config import MAX_RETRIES

# before_sleep_log takes a stdlib logger; structlog loggers do not fit here.
_tenacity_logger = logging.getLogger("content_graph.retry")

HTTP_SERVER_ERROR = 500


def _is_retryable(exc: BaseException) -> bool:
    """Check if a failed store call is worth retrying.

    Args:
        exc: The exception raised by the HTTP call.

    Returns:
        True for transport errors and 5xx status errors.
    """
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= HTTP_SERVER_ERROR
    return False


store_retry = retry(
    retry=retry_if_exception(_is_retryable),
    stop=stop_after_attempt(MAX_RETRIES),
    wait=wait_random_exponential(multiplier=0.5, max=10),
    before_sleep=before_sleep_log(_tenacity_logger, logging.WARNING),
    reraise=True,
)
"""Retry decorator for ``HttpRecordStore`` requests.

Re-raises the last underlying httpx error after the final attempt so the
caller can wrap it in ``StoreError``.
"""
