# pkgalt/__init__.py
"""
pkgalt - alternatives registry for pkgtool.

Several packages may provide the same command; pkgalt records every
provider with a priority and keeps the shared link pointing at the best one.
"""

from .config import Config, ConfigError
from .installer import Installer
from .remover import Remover
from .resolver import LinkState, Resolver, select_winner
from .store import Alternative, RegistryError, RegistryRecord, RegistryStore

__version__ = "1.0.0"

__all__ = [
    "Alternative",
    "Config",
    "ConfigError",
    "Installer",
    "LinkState",
    "RegistryError",
    "RegistryRecord",
    "RegistryStore",
    "Remover",
    "Resolver",
    "select_winner",
]
