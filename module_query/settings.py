"""Settings manager for module query configuration.

Merges three settings scopes (later overrides earlier):
- User global (~/.modquery/settings.yaml)
- Project (.modquery/settings.yaml)
- Local (.modquery/settings.local.yaml)

Environment variables (MODQUERY_ROOT, MODQUERY_MODULES_PATH,
MODQUERY_SOURCES) override all files.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .registry.client import DEFAULT_CDN_URL
from .registry.client import DEFAULT_REGISTRY_URL
from .registry.client import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_SOURCES = ("local", "registry")


@dataclass
class QuerySettings:
    """Effective configuration for a ModuleResolver."""

    root: str | None = None
    modules_path: str | None = None
    sources: tuple[str, ...] = DEFAULT_SOURCES
    registry_url: str = DEFAULT_REGISTRY_URL
    cdn_url: str = DEFAULT_CDN_URL
    timeout: float = DEFAULT_TIMEOUT


class SettingsManager:
    """Reads and merges settings across user/project/local scopes."""

    def __init__(self, config_dir: Path | None = None, user_dir: Path | None = None):
        """Initialize settings manager with standard paths.

        Args:
            config_dir: Base directory for project/local settings (for testing).
                        If None, uses .modquery in the current directory.
            user_dir: Base directory for user settings (for testing).
                      If None, uses ~/.modquery.
        """
        if config_dir is None:
            config_dir = Path(".modquery")
        if user_dir is None:
            user_dir = Path.home() / ".modquery"

        self.user_settings_file = user_dir / "settings.yaml"
        self.project_settings_file = config_dir / "settings.yaml"
        self.local_settings_file = config_dir / "settings.local.yaml"

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Returns:
            Merged settings dictionary
        """
        merged: dict[str, Any] = {}
        for path in (self.user_settings_file, self.project_settings_file, self.local_settings_file):
            settings = self._read_settings(path)
            if settings:
                merged = self._deep_merge(merged, settings)
        return merged

    def get_query_settings(self, env: dict[str, str] | None = None) -> QuerySettings:
        """Resolve effective query settings from files and environment.

        Args:
            env: Environment mapping (defaults to os.environ)

        Returns:
            QuerySettings with environment overrides applied
        """
        env = os.environ if env is None else env
        merged = self.get_merged_settings()
        modules = merged.get("modules") or {}
        registry = merged.get("registry") or {}

        sources = modules.get("sources") or DEFAULT_SOURCES
        if isinstance(sources, str):
            sources = [s.strip() for s in sources.split(",") if s.strip()]

        settings = QuerySettings(
            root=modules.get("root"),
            modules_path=modules.get("path"),
            sources=tuple(sources),
            registry_url=registry.get("url") or DEFAULT_REGISTRY_URL,
            cdn_url=registry.get("cdn_url") or DEFAULT_CDN_URL,
            timeout=float(registry.get("timeout") or DEFAULT_TIMEOUT),
        )

        if root := env.get("MODQUERY_ROOT"):
            settings.root = root
        if modules_path := env.get("MODQUERY_MODULES_PATH"):
            settings.modules_path = modules_path
        if env_sources := env.get("MODQUERY_SOURCES"):
            settings.sources = tuple(s.strip() for s in env_sources.split(",") if s.strip())

        return settings

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from YAML file.

        Args:
            path: Path to settings file

        Returns:
            Settings dict or None if file doesn't exist or is unreadable
        """
        if not path.exists():
            return None

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries, overlay taking precedence."""
        result = base.copy()

        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
