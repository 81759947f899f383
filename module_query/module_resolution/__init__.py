"""Module resolution - local and registry sources behind one query interface."""

from .filesystem import FileSystem
from .resolvers import ModuleResolver
from .sources import LocalModuleSource

__all__ = [
    "FileSystem",
    "LocalModuleSource",
    "ModuleResolver",
]
