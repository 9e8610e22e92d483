# pkgalt/resolver.py
# -*- coding: utf-8 -*-
"""
resolver.py - pick the winning alternative and point the public link at it

Decision table applied by Resolver.reconcile(name):

    no alternatives left      -> delete the record, drop the link if it is a symlink
    winner, link absent       -> create parent dirs and the symlink
    winner, link is a symlink -> replace it
    winner, link is not a link -> refuse (EXIT_REFUSED), nothing is touched
"""

from __future__ import annotations

import enum
import os
import stat
from pathlib import Path
from typing import Iterable, Optional

from .config import Config
from .log import get_logger
from .store import Alternative, RegistryStore
from .utils import EXIT_INTERNAL, EXIT_OK, EXIT_REFUSED, ensure_dir

logger = get_logger("pkgalt.resolver")


class LinkState(enum.Enum):
    ABSENT = "absent"
    SYMLINK = "symlink"
    FOREIGN = "foreign"


def select_winner(alternatives: Iterable[Alternative]) -> Optional[Alternative]:
    """
    Highest priority wins; among equal priorities the one scanned last
    (i.e. appended last) wins.
    """
    best: Optional[Alternative] = None
    for alt in alternatives:
        if best is None or alt.priority >= best.priority:
            best = alt
    return best


def inspect_link(path: Path) -> LinkState:
    """lstat based; errors other than a missing path or parent propagate."""
    try:
        st = os.lstat(path)
    except (FileNotFoundError, NotADirectoryError):
        return LinkState.ABSENT
    if stat.S_ISLNK(st.st_mode):
        return LinkState.SYMLINK
    return LinkState.FOREIGN


class Resolver:
    def __init__(self, config: Config, store: Optional[RegistryStore] = None):
        self.config = config
        self.store = store or RegistryStore(config.admin_dir)

    def link_location(self, link: str) -> Path:
        """Where the public link lives on disk (the offline root is a plain prefix)."""
        return Path(f"{self.config.offline_root}{link}")

    def reconcile(self, name: str) -> int:
        record = self.store.read(name)
        if record is None:
            logger.debug("no record for %s, nothing to reconcile", name)
            return EXIT_OK

        link = self.link_location(record.link)
        try:
            state = inspect_link(link)
        except OSError as e:
            # registry already holds the change; the next install/remove retries
            logger.error("cannot inspect %s (%s)", link, e.strerror or e)
            return EXIT_INTERNAL
        winner = select_winner(record.alternatives)

        if winner is None:
            logger.info("removing %s as no more alternatives exist for it", link)
            self.store.delete(name)
            if state is LinkState.SYMLINK:
                try:
                    link.unlink()
                except OSError as e:
                    logger.error("cannot remove %s (%s)", link, e.strerror or e)
            return EXIT_OK

        if state is LinkState.FOREIGN:
            logger.error(
                "Error: not linking %s to %s since %s exists and is not a link",
                link, winner.path, link,
            )
            return EXIT_REFUSED

        self._point(link, winner.path, replace=state is LinkState.SYMLINK)
        return EXIT_OK

    def _point(self, link: Path, target: str, replace: bool) -> None:
        ensure_dir(link.parent)
        logger.info("Linking %s to %s", link, target)
        try:
            if replace:
                link.unlink()
            os.symlink(target, link)
        except OSError as e:
            # the decision stands; the next install/remove retries the link
            logger.error("symlink %s -> %s failed: %s", link, target, e.strerror or e)
