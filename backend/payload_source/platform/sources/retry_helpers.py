"""Retry helpers for requests to Payload and to upload hosts.

Retries cover rate limits (429), transient server errors (502/503/504) and
timeouts. Everything else fails immediately so a broken configuration surfaces
on the first pass instead of after a round of backoff.
"""

import httpx
from tenacity import retry_if_exception, wait_exponential

RETRYABLE_STATUS_CODES = {429, 502, 503, 504}


def should_retry_on_rate_limit(exception: BaseException) -> bool:
    """Check if exception is a 429 or a transient gateway error.

    Args:
        exception: Exception to check

    Returns:
        True if the request should be retried
    """
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRYABLE_STATUS_CODES
    return False


def should_retry_on_timeout(exception: BaseException) -> bool:
    """Check if exception is a timeout or a dropped connection."""
    return isinstance(
        exception, (httpx.ConnectTimeout, httpx.ReadTimeout, httpx.RemoteProtocolError)
    )


def should_retry_on_rate_limit_or_timeout(exception: BaseException) -> bool:
    """Combined retry condition for rate limits and timeouts.

    Example:
        @retry(
            stop=stop_after_attempt(5),
            retry=retry_if_rate_limit_or_timeout,
            wait=wait_rate_limit_with_backoff,
            reraise=True,
        )
        async def _get(self, url, params=None):
            ...
    """
    return should_retry_on_rate_limit(exception) or should_retry_on_timeout(exception)


def wait_rate_limit_with_backoff(retry_state) -> float:
    """Wait strategy that respects Retry-After for 429s, exponential backoff otherwise.

    Args:
        retry_state: tenacity retry state

    Returns:
        Number of seconds to wait before retry
    """
    exception = retry_state.outcome.exception()

    if isinstance(exception, httpx.HTTPStatusError) and exception.response.status_code == 429:
        retry_after = exception.response.headers.get("Retry-After")
        if retry_after:
            try:
                # At least 1s so short windows don't burn every attempt, at most 120s
                return min(max(float(retry_after), 1.0), 120.0)
            except (ValueError, TypeError):
                pass
        return wait_exponential(multiplier=1, min=2, max=30)(retry_state)

    return wait_exponential(multiplier=1, min=2, max=10)(retry_state)


retry_if_rate_limit_or_timeout = retry_if_exception(should_retry_on_rate_limit_or_timeout)
