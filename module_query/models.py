"""Data model shared by the local and registry sources."""

from __future__ import annotations

import os
from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any
from typing import Iterable


class Source(str, Enum):
    """A place modules can be discovered from."""

    LOCAL = "local"
    REGISTRY = "registry"


# Older configurations name the registry source after npm
_SOURCE_ALIASES = {"npm": Source.REGISTRY}


@dataclass(frozen=True)
class SourcePolicy:
    """Which sources participate in queries. Fixed at construction."""

    sources: frozenset[Source] = frozenset({Source.LOCAL, Source.REGISTRY})

    @classmethod
    def parse(cls, names: Iterable[str | Source]) -> SourcePolicy:
        """Build a policy from source names such as ``["local", "registry"]``.

        Raises:
            ValueError: Unknown source name
        """
        sources = set()
        for name in names:
            if isinstance(name, Source):
                sources.add(name)
                continue
            key = name.strip().lower()
            if key in _SOURCE_ALIASES:
                sources.add(_SOURCE_ALIASES[key])
                continue
            try:
                sources.add(Source(key))
            except ValueError:
                valid = ", ".join(s.value for s in Source)
                raise ValueError(f"Unknown module source '{name}' (expected one of: {valid})") from None
        return cls(frozenset(sources))

    def __contains__(self, source: Source) -> bool:
        return source in self.sources


@dataclass(frozen=True)
class LocalModule:
    """A module installed under the local root, addressed by its root-anchored path."""

    path: str


@dataclass(frozen=True)
class RegistryModule:
    """A module published to the registry, addressed by its (possibly scoped) name."""

    name: str


ModuleRef = LocalModule | RegistryModule


def classify_identifier(identifier: str) -> ModuleRef:
    """Classify a module identifier once, before any fetch happens.

    Absolute paths (``/plugins/foo``) are local modules; everything else,
    including scoped names like ``@scope/name``, is a registry name.
    """
    if identifier.startswith("/") or os.path.isabs(identifier):
        return LocalModule(identifier.replace("\\", "/"))
    return RegistryModule(identifier)


@dataclass(frozen=True)
class ModuleDetails:
    """Author, version history and deprecation state of a module."""

    author: str | None
    versions: tuple[str, ...]
    deprecated: bool = False


@dataclass(frozen=True)
class SearchOptions:
    """Filters recognized by ``ModuleResolver.search``."""

    keywords: tuple[str, ...] = ()
    include_scoped: bool = False
    include_deprecated: bool = False


@dataclass(frozen=True)
class ModuleDescriptor:
    """Normalized view of one module, merged from descriptor, details and readme."""

    id: str
    name: str
    display_name: str
    author: str | None
    version: str | None
    versions: tuple[str, ...]
    description: str | None
    readme_html: str | None
    has_client: bool
    has_server: bool
    has_worker: bool
    is_local: bool
    is_deprecated: bool
    serves: Any = None
    builds: Any = None
    metadata: Any = None
    readme_text: str | None = None
    type: str = field(default="module")

    @property
    def capability_flags(self) -> dict[str, bool]:
        return {"client": self.has_client, "server": self.has_server, "worker": self.has_worker}

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["versions"] = list(self.versions)
        return data


__all__ = [
    "Source",
    "SourcePolicy",
    "LocalModule",
    "RegistryModule",
    "ModuleRef",
    "classify_identifier",
    "ModuleDetails",
    "SearchOptions",
    "ModuleDescriptor",
]
