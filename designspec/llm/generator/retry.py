"""Retry, backoff and timeout handling for backend completion calls.

Each attempt runs under a fixed timeout. Timeouts are returned at once and
never retried; transient failures (rate limits, 5xx, connection resets) are
retried with exponential backoff.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from designspec.config import get_retry_settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

# Message fragments, matched against the lowercased error message
TIMEOUT_MARKERS: tuple[str, ...] = ("timeout", "timed out")
NETWORK_RETRY_MARKERS: tuple[str, ...] = (
    "timeout",
    "etimedout",
    "econnreset",
    "connection reset",
)
NETWORK_TIMEOUT_MARKERS: tuple[str, ...] = (
    "timeout",
    "timed out",
    "etimedout",
    "econnreset",
    "connection reset",
)


class RequestOutcome(str, Enum):
    """Classified result of a completion request."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass
class RetryConfig:
    """Configuration for retry strategy.

    Attributes:
        max_retries: Maximum number of retry attempts after the first call.
        base_delay: Base delay for exponential backoff (seconds).
        max_delay: Maximum delay between retries (seconds).
        timeout: Per-attempt timeout (seconds).
        exponential_backoff: Use exponential backoff; otherwise a fixed delay.
    """

    max_retries: int = 2
    base_delay: float = 1.0
    max_delay: float = 30.0
    timeout: float = 30.0
    exponential_backoff: bool = True

    @classmethod
    def from_env(cls) -> RetryConfig:
        """Build from OPENAI_RETRY_MAX, OPENAI_RETRY_BASE_MS and OPENAI_TIMEOUT_MS."""
        return cls(**get_retry_settings())


@dataclass
class RetryResult:
    """Result of a completion request with retry information.

    Attributes:
        outcome: success, timeout or error.
        completion: Backend response on success, otherwise None.
        retry_count: Number of retries performed.
        backend_request_id: Backend-assigned request id, when available.
        error: Last error observed, when the request failed.
    """

    outcome: RequestOutcome
    completion: Any = None
    retry_count: int = 0
    backend_request_id: str | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == RequestOutcome.SUCCESS


def _message(error: BaseException) -> str:
    return str(error).lower()


def _status_code(error: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


class RetryStrategy:
    """Classifies failures and computes backoff delays.

    Example:
        >>> strategy = RetryStrategy(RetryConfig(base_delay=1.0))
        >>> strategy.get_backoff_delay(2)
        4.0
    """

    def __init__(self, config: RetryConfig | None = None):
        """Initialize retry strategy.

        Args:
            config: Retry configuration options.
        """
        self._config = config or RetryConfig()

    @property
    def config(self) -> RetryConfig:
        return self._config

    def get_backoff_delay(self, attempt: int) -> float:
        """Calculate backoff delay for retry attempt.

        Args:
            attempt: Current attempt number (0-based).

        Returns:
            Delay in seconds, ``base_delay * 2**attempt`` capped at max_delay.
        """
        if not self._config.exponential_backoff:
            return self._config.base_delay

        delay = self._config.base_delay * (2**attempt)
        return min(delay, self._config.max_delay)

    def is_timeout(self, error: BaseException) -> bool:
        """Whether an attempt failed by exceeding its time budget.

        HTTP status errors (e.g. 504 Gateway Timeout) are not timeouts.
        """
        if isinstance(error, (TimeoutError, httpx.TimeoutException)):
            return True
        if _status_code(error) is not None:
            return False
        message = _message(error)
        return any(marker in message for marker in TIMEOUT_MARKERS)

    def is_retryable(self, error: BaseException) -> bool:
        """Whether a failure is transient.

        Status codes 429/500/502/503/504 are retryable. Errors without a
        status are retryable when their message names a timeout or a
        connection reset.
        """
        status = _status_code(error)
        if status is not None:
            return status in RETRYABLE_STATUS_CODES

        message = _message(error)
        return any(marker in message for marker in NETWORK_RETRY_MARKERS)

    def classify_final(self, error: BaseException | None) -> RequestOutcome:
        """Outcome once retries are exhausted or a failure is not retryable.

        The last observed error decides: network timeouts and connection
        resets report as ``timeout``, everything else as ``error``.
        """
        if error is None:
            return RequestOutcome.ERROR
        if isinstance(error, (TimeoutError, httpx.TimeoutException)):
            return RequestOutcome.TIMEOUT
        if _status_code(error) is not None:
            return RequestOutcome.ERROR
        message = _message(error)
        if any(marker in message for marker in NETWORK_TIMEOUT_MARKERS):
            return RequestOutcome.TIMEOUT
        return RequestOutcome.ERROR


def extract_request_id(completion: Any) -> str | None:
    """Find a backend-assigned request id on a completion.

    Looks at the SDK ``_request_id`` attribute, then the
    ``openai-request-id`` / ``x-request-id`` response headers, then the
    embedded ``id`` field. Absence is not an error.
    """
    if completion is None:
        return None

    request_id = getattr(completion, "_request_id", None)
    if request_id:
        return str(request_id)

    response = getattr(completion, "_response", None)
    headers = getattr(response, "headers", None)
    if headers is not None:
        for name in ("openai-request-id", "x-request-id"):
            value = headers.get(name)
            if value:
                return str(value)

    if isinstance(completion, dict):
        embedded = completion.get("id")
    else:
        embedded = getattr(completion, "id", None)
    return str(embedded) if embedded else None


def _call_with_timeout(func: Callable[[], Any], timeout: float) -> Any:
    """Run ``func`` in a worker thread, raising TimeoutError past ``timeout``.

    The worker is abandoned, not cancelled, when the timeout fires.
    """
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(func)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as e:
        raise TimeoutError("Request timeout") from e
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def request_completion(
    client: Any,
    params: dict[str, Any],
    *,
    config: RetryConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RetryResult:
    """Create a chat completion with timeout and retry handling.

    Args:
        client: OpenAI-compatible client exposing
            ``client.chat.completions.create(**params)``.
        params: Completion request parameters.
        config: Retry policy. Defaults to the environment configuration.
        sleep: Delay function, injectable for tests.

    Returns:
        RetryResult. Never raises for backend failures.
    """
    config = config or RetryConfig.from_env()
    strategy = RetryStrategy(config)

    last_error: BaseException | None = None
    retry_count = 0

    for attempt in range(config.max_retries + 1):
        try:
            completion = _call_with_timeout(
                lambda: client.chat.completions.create(**params), config.timeout
            )
        except Exception as e:
            last_error = e

            if strategy.is_timeout(e):
                logger.warning(f"Completion attempt {attempt + 1} timed out: {e}")
                return RetryResult(
                    outcome=RequestOutcome.TIMEOUT,
                    retry_count=retry_count,
                    error=e,
                )

            if not strategy.is_retryable(e) or attempt == config.max_retries:
                logger.warning(f"Completion attempt {attempt + 1} failed: {e}")
                break

            delay = strategy.get_backoff_delay(attempt)
            retry_count += 1
            logger.warning(
                f"Completion attempt {attempt + 1} failed ({e}), "
                f"retrying in {delay:.2f}s"
            )
            sleep(delay)
            continue

        return RetryResult(
            outcome=RequestOutcome.SUCCESS,
            completion=completion,
            retry_count=retry_count,
            backend_request_id=extract_request_id(completion),
        )

    return RetryResult(
        outcome=strategy.classify_final(last_error),
        retry_count=retry_count,
        error=last_error,
    )


__all__ = [
    "RETRYABLE_STATUS_CODES",
    "RequestOutcome",
    "RetryConfig",
    "RetryResult",
    "RetryStrategy",
    "extract_request_id",
    "request_completion",
]
