"""Module query - search and describe modules from a local tree and a package registry."""

from .errors import ApiError
from .errors import FilesystemError
from .errors import InvalidPathError
from .errors import ModuleQueryError
from .errors import NotFoundError
from .errors import ParseError
from .models import ModuleDescriptor
from .models import SearchOptions
from .models import Source
from .models import SourcePolicy
from .module_resolution import ModuleResolver
from .registry import RegistryClient

__all__ = [
    "ModuleResolver",
    "RegistryClient",
    "ModuleDescriptor",
    "SearchOptions",
    "Source",
    "SourcePolicy",
    "ModuleQueryError",
    "FilesystemError",
    "NotFoundError",
    "ParseError",
    "InvalidPathError",
    "ApiError",
]
