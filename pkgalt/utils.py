#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
utils.py
Utility helpers shared by the pkgalt modules.

- Exit status codes of the update-alternatives command.
- Directory creation (mkdir -p) with error reporting.
- Permissive integer scanning for priorities.
"""

from __future__ import annotations
import re
from pathlib import Path
from typing import Optional, Union

from .log import get_logger

logger = get_logger("pkgalt.utils")

# -----------------------
# Exit status
# -----------------------
EXIT_OK = 0
EXIT_REFUSED = 1   # public link occupied by something that is not a symlink
EXIT_USAGE = 2
EXIT_INTERNAL = 3

# -----------------------
# Files
# -----------------------
def ensure_dir(path: Union[str, Path], mode: int = 0o777) -> bool:
    """
    Create a directory and its parents if they do not exist.
    Failures are logged with the offending path; returns False in that case.
    """
    p = Path(path)
    try:
        p.mkdir(parents=True, mode=mode, exist_ok=True)
    except OSError as e:
        logger.error("cannot create directory %s (%s)", p, e.strerror or e)
        return False
    return True

# -----------------------
# Integers
# -----------------------
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def scan_int(text: str) -> Optional[int]:
    """
    Read the leading decimal integer of `text` (optional whitespace and sign).
    Trailing garbage is ignored; None if there is no leading integer.
    """
    m = _INT_PREFIX.match(text)
    if m is None:
        return None
    return int(m.group(1))


def parse_priority(text: str) -> int:
    """Permissive priority parsing: text without a leading integer counts as 0."""
    value = scan_int(text)
    return 0 if value is None else value
