# pkgalt/log.py
# -*- coding: utf-8 -*-
"""
Logging module for pkgalt
- init_logging(conf) sets up the root handlers from the `logging` config section
- get_logger(name) returns a per-module logger
- set_level(level) for dynamic adjustment
- shutdown_logging() flushes and removes the handlers
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from logging import Logger
from pathlib import Path
from typing import Any, Dict, List, Optional

# Default logging configuration when config is absent
_DEFAULT_LOG_CONFIG = {
    "level": "INFO",
    "logfile": None,
    "max_size_mb": 10,
    "backup_count": 3,
    "console": True,
    "console_colors": True,
    "levels": {},  # per-namespace levels
}

CONSOLE_FORMAT = "update-alternatives: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s -> %(message)s"

_handlers: List[logging.Handler] = []


# ---------------- Formatters ----------------

class ColorFormatter(logging.Formatter):
    COLOR_MAP = {
        "DEBUG": "\033[94m",    # light blue
        "WARNING": "\033[93m",  # yellow
        "ERROR": "\033[91m",    # red
        "CRITICAL": "\033[95m", # magenta
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_colors: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt, style="%")
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if self.use_colors and record.levelname in self.COLOR_MAP:
            return f"{self.COLOR_MAP[record.levelname]}{msg}{self.RESET}"
        return msg


class _MaxLevelFilter(logging.Filter):
    """Lets through records strictly below `level` (stdout gets INFO, stderr the rest)."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


# ---------------- Utilities ----------------

def _merge_with_defaults(conf: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    base = dict(_DEFAULT_LOG_CONFIG)
    base["levels"] = {}
    if not conf:
        return base
    for k, v in conf.items():
        if k == "levels" and isinstance(v, dict):
            base["levels"].update(v)
        elif v is not None or k == "logfile":
            base[k] = v
    return base


def _level_str_to_int(level: str) -> int:
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO


# ---------------- Initialization / teardown ----------------

def init_logging(config: Optional[Dict[str, Any]] = None) -> None:
    """
    Set up the logging infrastructure.

    - config: the `logging` section of the configuration (Config.logging).

    Console output mirrors the classic tool: informational messages on
    stdout, warnings and errors on stderr.
    """
    conf = _merge_with_defaults(config)
    shutdown_logging()

    root = logging.getLogger()
    level = _level_str_to_int(conf.get("level", "INFO"))
    root.setLevel(level)

    if conf.get("console", True):
        use_colors = bool(conf.get("console_colors", True))

        out = logging.StreamHandler(sys.stdout)
        out.setLevel(level)
        out.addFilter(_MaxLevelFilter(logging.WARNING))
        out.setFormatter(ColorFormatter(CONSOLE_FORMAT, use_colors=use_colors and sys.stdout.isatty()))
        _handlers.append(out)

        err = logging.StreamHandler(sys.stderr)
        err.setLevel(max(level, logging.WARNING))
        err.setFormatter(ColorFormatter(CONSOLE_FORMAT, use_colors=use_colors and sys.stderr.isatty()))
        _handlers.append(err)

    logfile = conf.get("logfile")
    if logfile:
        try:
            Path(logfile).parent.mkdir(parents=True, exist_ok=True)
            fh = logging.handlers.RotatingFileHandler(
                logfile,
                maxBytes=int(conf.get("max_size_mb", 10)) * 1024 * 1024,
                backupCount=int(conf.get("backup_count", 3)),
                encoding="utf-8",
            )
        except OSError as e:
            root.warning("cannot open log file '%s' (%s), file logging disabled", logfile, e)
        else:
            fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            fh.setLevel(level)
            _handlers.append(fh)

    for h in _handlers:
        root.addHandler(h)

    # Per-namespace log levels
    for name, lvl in (conf.get("levels") or {}).items():
        logging.getLogger(name).setLevel(_level_str_to_int(lvl))

    root.debug("logging initialised: %s", conf)


def shutdown_logging() -> None:
    """
    Flush, close and detach the handlers installed by init_logging.
    """
    root = logging.getLogger()
    while _handlers:
        h = _handlers.pop()
        h.flush()
        h.close()
        root.removeHandler(h)


def set_level(level: str) -> None:
    lvl = _level_str_to_int(level)
    logging.getLogger().setLevel(lvl)
    for h in _handlers:
        if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
            h.setLevel(max(lvl, logging.WARNING))
        else:
            h.setLevel(lvl)


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)
