"""Dependency injection helpers.

Builds resolvers and registry clients from merged settings so commands and
embedding applications share one construction path.
"""

from pathlib import Path

from .models import SourcePolicy
from .module_resolution import ModuleResolver
from .registry import RegistryClient
from .settings import QuerySettings
from .settings import SettingsManager


def create_registry_client(settings: QuerySettings | None = None) -> RegistryClient:
    """Create a registry client from settings."""
    settings = settings or SettingsManager().get_query_settings()
    return RegistryClient(registry_url=settings.registry_url, cdn_url=settings.cdn_url, timeout=settings.timeout)


def create_module_resolver(
    settings: QuerySettings | None = None,
    *,
    root: str | Path | None = None,
    modules_path: str | None = None,
    sources: list[str] | tuple[str, ...] | None = None,
) -> ModuleResolver:
    """Create a ModuleResolver.

    Explicit arguments take precedence over settings files and environment.

    Args:
        settings: Pre-resolved settings (default: read via SettingsManager)
        root: Local root directory override
        modules_path: Modules subpath override
        sources: Source names override (e.g. ["local"])

    Returns:
        ModuleResolver that builds its registry client on first registry
        access and closes it on aclose()

    Raises:
        ValueError: Unknown source name
    """
    settings = settings or SettingsManager().get_query_settings()

    policy = SourcePolicy.parse(sources or settings.sources)
    return ModuleResolver(
        root_dir=root or settings.root,
        modules_path=modules_path or settings.modules_path,
        sources=policy,
        registry_factory=lambda: create_registry_client(settings),
    )
