"""Local module source - modules installed under a root directory.

Local modules are addressed by root-anchored identifiers such as
``/plugins/foo-bar``: the leading slash marks them as local, and the rest is
resolved against the configured root directory.
"""

from __future__ import annotations

import asyncio
import json
import logging
import posixpath
from pathlib import Path
from pathlib import PurePosixPath
from typing import Any

from ..errors import FilesystemError
from ..errors import InvalidPathError
from ..errors import NotFoundError
from ..errors import ParseError
from ..models import ModuleDetails
from .filesystem import FileSystem

logger = logging.getLogger(__name__)

DESCRIPTOR_FILE = "package.json"
README_FILE = "README.md"
DEFAULT_LOCAL_VERSION = "0.0.1"


def _normalize_subpath(modules_path: str | None) -> str | None:
    if not modules_path:
        return None
    return modules_path.replace("\\", "/").strip("/")


class LocalModuleSource:
    """Enumerates locally installed modules and reads their documents from disk."""

    def __init__(
        self,
        root_dir: str | Path | None,
        modules_path: str | None,
        filesystem: FileSystem | None = None,
    ):
        """Initialize local source.

        Args:
            root_dir: Local root directory. None disables local reads.
            modules_path: Modules directory, relative to ``root_dir`` (e.g. "plugins")
            filesystem: Filesystem capability (for testing)
        """
        self.root_dir = Path(root_dir) if root_dir else None
        self.modules_path = _normalize_subpath(modules_path)
        self.fs = filesystem or FileSystem()

    async def list_modules(self) -> list[str]:
        """List installed module directories as root-anchored identifiers.

        Entries that are not directories are left out. A missing modules
        directory yields an empty list. If stat fails for a single entry,
        the failure is logged and the entry is skipped so one broken entry
        cannot hide the rest of the listing.

        Returns:
            Identifiers sorted by basename, e.g. ["/plugins/bar", "/plugins/foo"]

        Raises:
            FilesystemError: The modules directory could not be listed
        """
        if self.root_dir is None or self.modules_path is None:
            return []

        modules_dir = self.root_dir / self.modules_path
        try:
            entries = await self.fs.list_dir(modules_dir)
        except OSError as e:
            raise FilesystemError(f"Failed to list local modules in {modules_dir}: {e}") from e

        # Each entry is written to its own slot; no shared state between stats
        results = await asyncio.gather(*(self._directory_entry(modules_dir, entry) for entry in entries))

        modules = [module for module in results if module is not None]
        modules.sort(key=posixpath.basename)
        logger.debug(f"Found {len(modules)} local modules in {modules_dir}")
        return modules

    async def _directory_entry(self, modules_dir: Path, entry: str) -> str | None:
        try:
            is_dir = await self.fs.is_dir(modules_dir / entry)
        except OSError as e:
            logger.warning(f"Skipping local module entry '{entry}': {e}")
            return None

        if not is_dir:
            return None
        return "/" + posixpath.join(self.modules_path, entry).lstrip("/")

    async def read_descriptor(self, path: str) -> dict[str, Any]:
        """Read and parse ``<root>/<path>/package.json``.

        Raises:
            NotFoundError: No root directory configured
            ParseError: File is not a JSON object
            FilesystemError: File could not be read
        """
        package_file = self._module_dir(path) / DESCRIPTOR_FILE
        try:
            text = await self.fs.read_text(package_file)
        except OSError as e:
            raise FilesystemError(f"Failed to read {package_file}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Failed to parse package.json for '{path}': {e}") from e

        if not isinstance(data, dict):
            raise ParseError(f"Failed to parse package.json for '{path}': expected an object")
        return data

    async def read_details(self, path: str) -> ModuleDetails:
        """Synthesize module details from the local descriptor.

        Local installs carry no version history, author or deprecation
        signal, so the installed version is the only version.
        """
        descriptor = await self.read_descriptor(path)
        version = descriptor.get("version") or DEFAULT_LOCAL_VERSION
        return ModuleDetails(author=None, versions=(version,), deprecated=False)

    async def read_readme(self, path: str) -> str | None:
        """Read ``<root>/<path>/README.md``.

        Returns:
            Readme text, or None when the module has no readme

        Raises:
            InvalidPathError: ``path`` is not inside the modules directory
            FilesystemError: Readme exists but could not be read
        """
        module_path = self._confined_path(path)
        if module_path is None:
            raise InvalidPathError(f"Invalid local module path: '{path}'")

        readme_file = self.root_dir / module_path / README_FILE
        try:
            return await self.fs.read_text(readme_file)
        except FileNotFoundError:
            logger.debug(f"No readme for local module '{path}'")
            return None
        except OSError as e:
            raise FilesystemError(f"Failed to read {readme_file}: {e}") from e

    def _module_dir(self, path: str) -> Path:
        if self.root_dir is None:
            raise NotFoundError(f"Local module '{path}' not found: no root directory configured")
        return self.root_dir / path.replace("\\", "/").lstrip("/")

    def _confined_path(self, path: str) -> str | None:
        """Normalize ``path`` and return it root-relative if it lies inside the modules directory."""
        if self.root_dir is None or self.modules_path is None:
            return None

        normalized = PurePosixPath(posixpath.normpath("/" + path.replace("\\", "/").lstrip("/")))
        base = PurePosixPath("/", self.modules_path)
        if normalized == base or base not in normalized.parents:
            return None
        return str(normalized.relative_to("/"))
