"""Error taxonomy for module queries.

Every failure surfaced by ``search`` or ``describe`` is one of these types.
"""

from __future__ import annotations


class ModuleQueryError(Exception):
    """Base class for all module query failures."""


class FilesystemError(ModuleQueryError):
    """Unexpected disk I/O failure."""


class NotFoundError(ModuleQueryError):
    """Operation requires a local root directory but none is configured."""


class ParseError(ModuleQueryError):
    """A structured file (package.json) could not be parsed."""


class InvalidPathError(ModuleQueryError):
    """A local readme path escapes the configured modules directory."""


class ApiError(ModuleQueryError):
    """Remote endpoint failure.

    Raised for non-2xx responses, 2xx responses with a missing or unexpected
    shape, and transport failures (reported with status 500).
    """

    def __init__(self, status_code: int = 500, message: str | None = None):
        self.status_code = status_code
        self.message = message or f"API Error: {status_code}"
        super().__init__(self.message)


__all__ = [
    "ModuleQueryError",
    "FilesystemError",
    "NotFoundError",
    "ParseError",
    "InvalidPathError",
    "ApiError",
]
