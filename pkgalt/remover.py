# pkgalt/remover.py
"""Remove an alternative from a name and re-point its public link."""

from __future__ import annotations

from .config import Config
from .log import get_logger
from .paths import PathNormalizer
from .resolver import Resolver
from .store import RegistryError, RegistryStore
from .utils import EXIT_INTERNAL

logger = get_logger("pkgalt.remover")


class Remover:
    def __init__(self, config: Config):
        self.config = config
        self.normalizer = PathNormalizer(config.offline_root)
        self.store = RegistryStore(config.admin_dir)
        self.resolver = Resolver(config, self.store)

    def remove(self, name: str, path: str) -> int:
        target = self.normalizer.normalize(path)
        try:
            self.store.remove_entry(name, target)
            return self.resolver.reconcile(name)
        except RegistryError as e:
            logger.error("cannot remove %s from %s: %s", target, name, e)
            return EXIT_INTERNAL
