"""Registry access for published modules."""

from .client import RegistryClient

__all__ = ["RegistryClient"]
