# pkgalt/installer.py
"""
Installer for pkgalt
- Binds a name to its public link on first use
- Adds (or re-prioritises) an alternative in the registry
- Re-points the public link at the winning alternative
"""

from __future__ import annotations

from .config import Config
from .log import get_logger
from .paths import PathNormalizer
from .resolver import Resolver
from .store import RegistryError, RegistryStore
from .utils import EXIT_INTERNAL, ensure_dir, parse_priority

logger = get_logger("pkgalt.installer")


class Installer:
    def __init__(self, config: Config):
        self.config = config
        self.normalizer = PathNormalizer(config.offline_root)
        self.store = RegistryStore(config.admin_dir)
        self.resolver = Resolver(config, self.store)

    def install(self, link: str, name: str, path: str, priority: str) -> int:
        """
        Register `path` as an alternative for `name` and reconcile `link`.

        `priority` is the raw command line text; anything that does not start
        with an integer counts as 0. There is no rollback: if the link cannot
        be updated the registry still holds the new alternative and the next
        install/remove for `name` fixes the link.
        """
        target = self.normalizer.normalize(path)
        value = parse_priority(priority)

        ensure_dir(self.config.admin_dir)
        try:
            duplicate = self.store.append_or_init(name, link, target, value)
        except RegistryError as e:
            logger.error("cannot install %s for %s: %s", target, name, e)
            return EXIT_INTERNAL

        if duplicate:
            logger.info(
                "Warn: %s has multiple providers with the same priority, please check %s for details",
                name, self.store.record_path(name),
            )

        try:
            return self.resolver.reconcile(name)
        except RegistryError as e:
            logger.error("cannot update %s: %s", name, e)
            return EXIT_INTERNAL
