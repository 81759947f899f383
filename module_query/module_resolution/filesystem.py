"""Async filesystem capability used by the local module source."""

from __future__ import annotations

import stat
from pathlib import Path

import aiofiles
import aiofiles.os


class FileSystem:
    """Directory listing, stat and text reads, all non-blocking.

    Errors surface as ``OSError`` subclasses so callers can tell a missing
    file (``FileNotFoundError``) from other failures.
    """

    async def list_dir(self, path: Path) -> list[str]:
        """List entry names in a directory; a missing directory lists as empty."""
        try:
            return await aiofiles.os.listdir(path)
        except FileNotFoundError:
            return []

    async def is_dir(self, path: Path) -> bool:
        """Whether ``path`` is a directory. Symlinks are not followed."""
        st = await aiofiles.os.stat(path, follow_symlinks=False)
        return stat.S_ISDIR(st.st_mode)

    async def read_text(self, path: Path) -> str:
        async with aiofiles.open(path, encoding="utf-8") as f:
            return await f.read()
