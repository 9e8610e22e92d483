#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
cli.py
Command line entry point (`update-alternatives`).

    update-alternatives --install <link> <name> <path> <priority>
    update-alternatives --remove <name> <path>
    update-alternatives --help

Exit status: 0 ok, 1 link occupied by a non-symlink, 2 usage error,
3 registry/config error.
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from rich.console import Console

from .config import Config, ConfigError
from .installer import Installer
from .log import init_logging, set_level, shutdown_logging
from .remover import Remover
from .utils import EXIT_INTERNAL, EXIT_USAGE

PROG = "update-alternatives"

_EPILOG = """\
<link> is the link pointing to the provided path (ie. /usr/bin/foo).
<name> is the name in {admin_dir} (ie. foo)
<path> is the name referred to (ie. /usr/bin/foo-extra-spiffy)
<priority> is an integer; options with higher numbers are chosen.
"""


class _Parser(argparse.ArgumentParser):
    """argparse with usage errors rendered through rich on stderr."""

    def __init__(self, *args, console: Optional[Console] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.console = console or Console(stderr=True)

    def error(self, message: str):
        self.console.print(f"{self.prog}: {message}", style="bold red", markup=False, highlight=False, soft_wrap=True)
        self.console.print(self.format_usage(), end="", markup=False, highlight=False, soft_wrap=True)
        raise SystemExit(EXIT_USAGE)


def _build_cli(admin_dir: str, console: Optional[Console] = None) -> argparse.ArgumentParser:
    p = _Parser(
        prog=PROG,
        description="Maintain symbolic links pointing at the highest priority alternative",
        epilog=_EPILOG.format(admin_dir=admin_dir),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        console=console,
    )
    action = p.add_mutually_exclusive_group(required=True)
    action.add_argument("--install", nargs=4, metavar=("LINK", "NAME", "PATH", "PRIORITY"),
                        help="register PATH as an alternative for NAME, linked at LINK")
    action.add_argument("--remove", nargs=2, metavar=("NAME", "PATH"),
                        help="unregister PATH as an alternative for NAME")
    p.add_argument("-c", "--config", help="config file path (yaml)")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def _config_option(argv: Optional[List[str]], console: Console) -> Optional[str]:
    """Pick --config out of argv ahead of the full parse (the help text needs the config)."""
    pre = _Parser(prog=PROG, add_help=False, console=console)
    pre.add_argument("-c", "--config")
    known, _ = pre.parse_known_args(argv)
    return known.config


def main(argv: Optional[List[str]] = None) -> int:
    console = Console(stderr=True)
    try:
        cfg = Config.load(_config_option(argv, console))
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else EXIT_USAGE
    except ConfigError as e:
        console.print(f"{PROG}: {e}", style="bold red", markup=False, highlight=False, soft_wrap=True)
        return EXIT_INTERNAL

    parser = _build_cli(cfg.admin_dir, console)
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else EXIT_USAGE

    init_logging(cfg.logging)
    if args.verbose:
        set_level("DEBUG")
    try:
        if args.install:
            link, name, path, priority = args.install
            return Installer(cfg).install(link, name, path, priority)
        name, path = args.remove
        return Remover(cfg).remove(name, path)
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
