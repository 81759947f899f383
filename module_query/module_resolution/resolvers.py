"""Module resolver - one query interface over local and registry modules.

``describe`` resolves one identifier into a ModuleDescriptor by fetching
its descriptor, details and readme concurrently from the source the
identifier points at. ``search`` runs the local and registry searches
concurrently and merges their results, local modules first.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..errors import ApiError
from ..errors import ParseError
from ..models import LocalModule
from ..models import ModuleDescriptor
from ..models import ModuleDetails
from ..models import ModuleRef
from ..models import SearchOptions
from ..models import Source
from ..models import SourcePolicy
from ..models import classify_identifier
from ..registry.client import RegistryClient
from ..utils.markdown import render_markdown
from .sources import LocalModuleSource

logger = logging.getLogger(__name__)


class ModuleResolver:
    """Searches and describes modules across the local tree and the registry."""

    def __init__(
        self,
        root_dir: str | Path | None = None,
        modules_path: str | None = None,
        sources: SourcePolicy | list[str] | tuple[str, ...] | None = None,
        registry: RegistryClient | None = None,
        registry_factory: Callable[[], RegistryClient] = RegistryClient,
        local: LocalModuleSource | None = None,
        render: Callable[[str], str] = render_markdown,
    ):
        """Initialize resolver.

        Args:
            root_dir: Local root directory
            modules_path: Modules directory relative to ``root_dir``
            sources: Participating sources (default: local and registry)
            registry: Registry client, closed with the resolver
            registry_factory: Builds the registry client on first registry access
                when ``registry`` is omitted (default: public registry)
            local: Local source; built from ``root_dir``/``modules_path`` if omitted
            render: Markdown-to-HTML renderer for readmes
        """
        if sources is None:
            sources = SourcePolicy()
        elif not isinstance(sources, SourcePolicy):
            sources = SourcePolicy.parse(sources)

        self.sources = sources
        self.local = local or LocalModuleSource(root_dir, modules_path)
        self._registry = registry
        self._registry_factory = registry_factory
        self.render = render

    @property
    def registry(self) -> RegistryClient:
        """Registry client, created on first use so local-only resolvers open no HTTP client."""
        if self._registry is None:
            self._registry = self._registry_factory()
        return self._registry

    async def aclose(self) -> None:
        if self._registry is not None:
            await self._registry.aclose()

    async def __aenter__(self) -> ModuleResolver:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def describe(self, identifier: str) -> ModuleDescriptor:
        """Resolve one module into a normalized descriptor.

        Absolute paths are read from the local tree, anything else from the
        registry. The identifier is classified once and all three fetches
        use that classification. If any fetch fails, the whole call fails
        with that error.

        Raises:
            ModuleQueryError: Any fetch failed
        """
        ref = classify_identifier(identifier)
        logger.debug(f"[module:describe] {identifier} -> {ref}")

        descriptor, details, readme = await asyncio.gather(
            self._fetch_descriptor(ref),
            self._fetch_details(ref),
            self._fetch_readme(ref),
        )
        return self._merge(ref, descriptor, details, readme)

    async def search(self, term: str = "", options: SearchOptions | None = None) -> list[ModuleDescriptor]:
        """Search enabled sources for modules matching ``term``.

        Local modules match when their directory name contains ``term``;
        registry modules are whatever the registry search returns, narrowed
        by ``options``. A registry module whose name is already provided
        locally is dropped in favour of the local one.

        Raises:
            ModuleQueryError: Either enabled source failed
        """
        options = options or SearchOptions()

        local_results, registry_results = await asyncio.gather(
            self._search_local(term),
            self._search_registry(term, options),
        )

        seen = {module.name for module in local_results}
        merged = list(local_results)
        for module in registry_results:
            if module.name not in seen:
                merged.append(module)

        logger.debug(
            f"[module:search] '{term}': {len(local_results)} local, "
            f"{len(registry_results)} registry, {len(merged)} merged"
        )
        return merged

    async def _search_local(self, term: str) -> list[ModuleDescriptor]:
        if Source.LOCAL not in self.sources:
            return []

        paths = await self.local.list_modules()
        matches = [path for path in paths if term in posixpath.basename(path)]
        return await self._describe_all(matches)

    async def _search_registry(self, term: str, options: SearchOptions) -> list[ModuleDescriptor]:
        if Source.REGISTRY not in self.sources:
            return []

        names = await self.registry.search(term, options.keywords)
        if not options.include_scoped:
            names = [name for name in names if not name.startswith("@")]

        modules = await self._describe_all(names)
        if not options.include_deprecated:
            modules = [module for module in modules if not module.is_deprecated]
        return modules

    async def _describe_all(self, identifiers: list[str]) -> list[ModuleDescriptor]:
        return list(await asyncio.gather(*(self.describe(identifier) for identifier in identifiers)))

    async def _fetch_descriptor(self, ref: ModuleRef) -> dict[str, Any]:
        if isinstance(ref, LocalModule):
            return await self.local.read_descriptor(ref.path)
        return await self.registry.fetch_descriptor(ref.name)

    async def _fetch_details(self, ref: ModuleRef) -> ModuleDetails:
        if isinstance(ref, LocalModule):
            return await self.local.read_details(ref.path)
        return await self.registry.fetch_details(ref.name)

    async def _fetch_readme(self, ref: ModuleRef) -> str | None:
        if isinstance(ref, LocalModule):
            return await self.local.read_readme(ref.path)
        return await self.registry.fetch_readme(ref.name)

    def _merge(
        self,
        ref: ModuleRef,
        descriptor: dict[str, Any],
        details: ModuleDetails,
        readme: str | None,
    ) -> ModuleDescriptor:
        name = descriptor.get("name")
        if not isinstance(name, str) or not name:
            if isinstance(ref, LocalModule):
                raise ParseError(f"package.json for '{ref.path}' has no name")
            raise ApiError(message=f"package.json for '{ref.name}' has no name")

        return ModuleDescriptor(
            id=name,
            name=name,
            display_name=name,
            author=details.author,
            version=descriptor.get("version"),
            versions=details.versions,
            description=descriptor.get("description") or None,
            readme_html=self.render(readme) if readme else None,
            has_client=bool(descriptor.get("client")),
            has_server=bool(descriptor.get("server")),
            has_worker=bool(descriptor.get("worker")),
            is_local=isinstance(ref, LocalModule),
            is_deprecated=details.deprecated,
            serves=descriptor.get("serves") or None,
            builds=descriptor.get("builds") or None,
            metadata=descriptor.get("metadata") or None,
            readme_text=readme or None,
        )

    def __repr__(self) -> str:
        enabled = ", ".join(sorted(source.value for source in self.sources.sources))
        return f"ModuleResolver(sources=[{enabled}], local={self.local.root_dir}, registry={self._registry})"
