# pkgalt/paths.py
"""Path canonicalisation for alternative targets."""

from __future__ import annotations
import re

_SEPARATOR_RUN = re.compile(r"/{2,}")


class PathNormalizer:
    """
    Collapse repeated separators and strip the offline root, so that
    registry entries stay relative to the virtual root even when the
    caller passes paths inside the staging tree.
    """

    def __init__(self, offline_root: str = ""):
        self.offline_root = offline_root or ""

    def normalize(self, path: str) -> str:
        path = _SEPARATOR_RUN.sub("/", path)
        if self.offline_root and path.startswith(self.offline_root):
            path = path[len(self.offline_root):]
        return path
