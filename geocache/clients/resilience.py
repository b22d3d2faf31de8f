"""Failure handling for geocoding provider calls.

Provider errors split into transient ones, which are retried and counted by
the circuit breaker, and permanent ones, which surface immediately.
"""

import logging
import time
from enum import StrEnum

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for all geocoding provider errors."""


class TransientAPIError(APIError):
    """Rate limiting, provider 5xx or a dropped connection. Worth retrying."""


class PermanentAPIError(APIError):
    """The provider answered, but the request cannot succeed as sent."""


class AuthError(PermanentAPIError):
    """The provider rejected the access key (401)."""


class SchemaChangeError(PermanentAPIError):
    """The provider body no longer has the expected shape."""


class NoResultsError(PermanentAPIError):
    """The provider found nothing for the given address or coordinates."""


class CircuitOpenError(APIError):
    """Provider calls are suspended until the breaker's reset timeout passes."""


TRANSIENT_STATUS_CODES = {429, 500, 502, 503, 504}


def classify_response(response: object) -> None:
    """Turn a provider error status into the matching exception.

    Args:
        response: Anything with a ``status_code`` (usually ``httpx.Response``).
            Success, redirects and a missing status are accepted silently.

    Raises:
        AuthError: On 401.
        TransientAPIError: On 429 and any 5xx.
        PermanentAPIError: On any other 4xx.
    """
    status = getattr(response, "status_code", None)
    if status is None or status < 400:
        return

    if status in TRANSIENT_STATUS_CODES or status >= 500:
        raise TransientAPIError(f"Geocoding provider unavailable (HTTP {status})")
    if status == 401:
        raise AuthError(f"Geocoding provider rejected the access key (HTTP {status})")
    raise PermanentAPIError(f"Provider rejected the request (HTTP {status})")


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log a provider call that is about to be retried."""
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Geocoding request failed (attempt %d), retrying: %s",
        retry_state.attempt_number, error,
    )


# Three attempts, backing off 1s then up to 10s between them
resilient_request = retry(
    retry=retry_if_exception_type(TransientAPIError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    before_sleep=log_retry_attempt,
    reraise=True,
)


class CircuitState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Stops calling the provider after repeated transient failures.

    After *fail_max* failures in a row the breaker opens and rejects calls.
    Once *reset_timeout* seconds have passed it lets one trial call through;
    success closes it again, failure reopens it. ``PermanentAPIError`` means
    the provider is up and answering, so it never counts as a failure.
    """

    def __init__(
        self, name: str, fail_max: int = 5, reset_timeout: float = 60.0
    ) -> None:
        self.name = name
        self.fail_max = fail_max
        self.reset_timeout = reset_timeout

        self._state = CircuitState.CLOSED
        self._fail_count = 0
        self._last_failure_time = 0.0

    @property
    def state(self) -> CircuitState:
        cooled_down = time.monotonic() - self._last_failure_time >= self.reset_timeout
        if self._state == CircuitState.OPEN and cooled_down:
            self._state = CircuitState.HALF_OPEN
        return self._state

    def _record_failure(self, trial: bool) -> None:
        self._fail_count += 1
        self._last_failure_time = time.monotonic()
        if trial or self._fail_count >= self.fail_max:
            self._state = CircuitState.OPEN
            logger.warning(
                "Circuit '%s' open after %d consecutive failures",
                self.name, self._fail_count,
            )

    async def call_async(self, coro):  # type: ignore[no-untyped-def]
        """Await *coro* unless the breaker is open.

        Raises:
            CircuitOpenError: If the breaker is open; *coro* is closed unawaited.
        """
        state = self.state
        if state == CircuitState.OPEN:
            coro.close()
            raise CircuitOpenError(f"Circuit '{self.name}' is open")

        try:
            result = await coro
        except PermanentAPIError:
            raise
        except Exception:
            self._record_failure(trial=state == CircuitState.HALF_OPEN)
            raise

        self._fail_count = 0
        self._state = CircuitState.CLOSED
        return result


def validate_provider_schema(data: object) -> None:
    """Check that a provider body is an object carrying a ``data`` list.

    Raises:
        SchemaChangeError: If it is not.
    """
    if not isinstance(data, dict):
        raise SchemaChangeError("Expected dict for geocoding provider response")
    if "data" not in data:
        raise SchemaChangeError("Missing keys in geocoding response: {'data'}")
    if not isinstance(data["data"], list):
        raise SchemaChangeError("Expected list for 'data' in geocoding response")
