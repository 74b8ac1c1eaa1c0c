"""Configuration loading for the NLS resolver."""

from .manager import ConfigManager
from .schema import ResolverConfig

__all__ = ["ConfigManager", "ResolverConfig"]
