"""User-friendly error messages and safe tool wrapper."""

import logging

from geocache.clients.resilience import (
    AuthError,
    CircuitOpenError,
    NoResultsError,
    PermanentAPIError,
    SchemaChangeError,
    TransientAPIError,
)
from geocache.keys import InvalidKeyError

logger = logging.getLogger(__name__)


def get_user_message(error: Exception, context: dict | None = None) -> str:
    """Map an exception to a user-friendly message.

    Args:
        error: The exception to translate.
        context: Optional dict with extra info (e.g. {"query": "Paris"}).

    Returns:
        A human-readable error message.
    """
    query = (context or {}).get("query", "your request")

    if isinstance(error, InvalidKeyError):
        return f"Invalid input: {error}"
    if isinstance(error, NoResultsError):
        return f"No results found for {query}."
    if isinstance(error, AuthError):
        return (
            "The geocoding provider rejected the configured access key. "
            "Please check GEOCODING_API_KEY."
        )
    if isinstance(error, SchemaChangeError):
        return (
            "The geocoding provider changed its response format. "
            "This feature may need an update. Please try again later."
        )
    if isinstance(error, CircuitOpenError):
        return (
            "The geocoding service is temporarily unavailable. "
            "Please try again in a few minutes."
        )
    if isinstance(error, TransientAPIError):
        return (
            f"There was a temporary issue looking up {query}. "
            "Please try again shortly."
        )
    if isinstance(error, PermanentAPIError):
        return f"Could not complete the lookup for {query}. {error}"
    return "Something went wrong. Please try again or contact support."


async def safe_tool_wrapper(
    func,  # type: ignore[no-untyped-def]
    *args: object,
    context: dict | None = None,
    **kwargs: object,
) -> str:
    """Call an async function, catching errors and returning friendly messages.

    Args:
        func: Async callable to invoke.
        *args: Positional arguments for *func*.
        context: Optional context dict for error messages.
        **kwargs: Keyword arguments for *func*.

    Returns:
        The function's return value on success, or a user-friendly error string.
    """
    try:
        return await func(*args, **kwargs)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Tool error in %s", func.__name__)
        return get_user_message(exc, context)
