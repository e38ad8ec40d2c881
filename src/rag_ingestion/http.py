"""Thin request helper shared by every outbound HTTP client."""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

logger = logging.getLogger(__name__)

# Only transport-level failures are retried; an HTTP error status is an answer.
_RETRYABLE = (requests.ConnectionError, requests.Timeout)


def send(
    session: requests.Session,
    method: str,
    url: str,
    *,
    timeout: float,
    max_attempts: int = 1,
    **kwargs: Any,
) -> requests.Response:
    """Issue one request, retrying transport errors with exponential backoff.

    Parameters
    ----------
    session:
        Session used for the call (connection pooling, default headers).
    method / url:
        Forwarded to :meth:`requests.Session.request`.
    timeout:
        Per-attempt timeout in seconds.
    max_attempts:
        Total attempts; ``1`` disables retries.

    Raises
    ------
    requests.RequestException
        The last transport error once attempts are exhausted.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts ({max_attempts}) must be >= 1")

    attempt = 1
    while True:
        try:
            return session.request(method, url, timeout=timeout, **kwargs)
        except _RETRYABLE as exc:
            if attempt >= max_attempts:
                raise
            wait = 2 ** attempt
            logger.warning(
                "Retry %d/%d for %s %s (wait %ds): %s",
                attempt, max_attempts, method, url, wait, exc,
            )
            time.sleep(wait)
            attempt += 1
