"""Safe error message formatting utilities.

Ensures exceptions always have useful display messages, even when
their str() representation is empty (e.g., TimeoutError, CancelledError).
"""

from __future__ import annotations

import asyncio

from rich.markup import escape as _escape_markup

from ..errors import TransportError

# Friendly messages for specific exception types known to have empty str()
FRIENDLY_MESSAGES: dict[type, str] = {
    TimeoutError: "Request timed out. This may indicate network issues or a slow server.",
    asyncio.CancelledError: "Operation was cancelled.",
    ConnectionResetError: "Connection was reset by the server.",
    KeyboardInterrupt: "Operation interrupted by user.",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a useful display message.

    Args:
        e: The exception to format
        include_type: Whether to include the exception type name

    Returns:
        A non-empty, user-friendly error message

    Examples:
        >>> format_error_message(TimeoutError())
        'TimeoutError: Request timed out. This may indicate network issues or a slow server.'

        >>> format_error_message(ValueError("invalid input"), include_type=False)
        'invalid input'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if isinstance(e, TransportError) and e.status_code is not None and str(e.status_code) not in error_str:
        error_str = f"{error_str} (HTTP {e.status_code})"

    if error_str:
        if include_type and error_type not in error_str:
            return f"{error_type}: {error_str}"
        return error_str

    for exc_type, friendly_msg in FRIENDLY_MESSAGES.items():
        if isinstance(e, exc_type):
            return f"{error_type}: {friendly_msg}"

    return f"{error_type}: (no additional details)"


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings."""
    return _escape_markup(str(value))
