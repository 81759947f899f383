"""Error message formatting for CLI output.

Ensures query failures always have a useful display message, even when an
exception's str() is empty (e.g. TimeoutError) or when the failure needs a
hint about which source produced it.
"""

from __future__ import annotations

import asyncio

from rich.markup import escape as _escape_markup

from ..errors import ApiError
from ..errors import FilesystemError
from ..errors import InvalidPathError
from ..errors import NotFoundError
from ..errors import ParseError

# Used when the exception carries no message of its own
FRIENDLY_MESSAGES: dict[type, str] = {
    TimeoutError: "Request timed out. The registry may be slow or unreachable.",
    asyncio.CancelledError: "Operation was cancelled.",
    ConnectionResetError: "Connection was reset by the server.",
    KeyboardInterrupt: "Operation interrupted by user.",
    NotFoundError: "No local root directory is configured.",
}

# Which side of the query a failure came from
SOURCE_HINTS: dict[type, str] = {
    ApiError: "registry",
    FilesystemError: "local",
    ParseError: "local",
    InvalidPathError: "local",
    NotFoundError: "local",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a non-empty display message.

    Args:
        e: The exception to format
        include_type: Whether to prefix the exception type name

    Returns:
        A user-facing error message

    Examples:
        >>> format_error_message(ApiError(404))
        'ApiError (registry, status 404): API Error: 404'

        >>> format_error_message(ValueError("bad source"), include_type=False)
        'bad source'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if not error_str:
        for exc_type, friendly_msg in FRIENDLY_MESSAGES.items():
            if isinstance(e, exc_type):
                error_str = friendly_msg
                break
        else:
            error_str = "(no additional details)"

    if not include_type:
        return error_str

    label = error_type
    hint = next((h for t, h in SOURCE_HINTS.items() if isinstance(e, t)), None)
    if isinstance(e, ApiError):
        label = f"{error_type} ({hint}, status {e.status_code})"
    elif hint:
        label = f"{error_type} ({hint})"

    return f"{label}: {error_str}"


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings."""
    return _escape_markup(str(value))
