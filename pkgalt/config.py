#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
config.py
Config loader/validator for pkgalt.

Responsibilities:
- Load the YAML configuration file (path from --config, PKGTOOL_CONF or default).
- Merge it with the default values.
- Validate the basic types of the `alternatives` and `logging` sections.
- Apply the OPKG_OFFLINE_ROOT override (used verbatim, no expansion).
- Provide convenient access via Config.get(...) and properties.

Usage:
    cfg = Config.load('/etc/pkgtool/config.yaml')        # load from file
    cfg = Config.load()                                  # PKGTOOL_CONF or /etc/pkgtool/config.yaml
    cfg.admin_dir                                        # registry directory under the offline root
"""

from __future__ import annotations
import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

# -----------------------
# Defaults
# -----------------------
DEFAULT_CONFIG: Dict[str, Any] = {
    'alternatives': {
        'admin_dir': '/usr/lib/opkg/alternatives',
        'offline_root': '',
    },
    'logging': {
        'level': 'INFO',
        'logfile': None,
        'console_colors': True,
        'levels': {},
    },
}

OFFLINE_ROOT_ENV = 'OPKG_OFFLINE_ROOT'
CONFIG_ENV = 'PKGTOOL_CONF'


# -----------------------
# Exceptions
# -----------------------
class ConfigError(Exception):
    pass


# -----------------------
# Utilities
# -----------------------
def _deep_update(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively update base with override and return new dict.
    Dict values are merged, non-dict override replaces.
    """
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_update(result[k], v)
        else:
            result[k] = v
    return result


def _default_config_path(environ: Mapping[str, str]) -> Optional[Path]:
    envp = environ.get(CONFIG_ENV)
    if envp:
        return Path(envp)
    if Path('/etc/pkgtool/config.yaml').exists():
        return Path('/etc/pkgtool/config.yaml')
    user_cfg = Path.home().joinpath('.config/pkgtool/config.yaml')
    if user_cfg.exists():
        return user_cfg
    return None


# -----------------------
# Config dataclass
# -----------------------
@dataclass
class Config:
    raw: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_CONFIG))
    source_path: Optional[Path] = None

    @classmethod
    def load(cls, path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> 'Config':
        """
        Load configuration.
        Resolution order:
          1. explicit `path` argument,
          2. environment variable PKGTOOL_CONF,
          3. /etc/pkgtool/config.yaml,
          4. ~/.config/pkgtool/config.yaml (if exists),
          5. fallback to DEFAULT_CONFIG
        OPKG_OFFLINE_ROOT, when set, wins over alternatives.offline_root.
        """
        if environ is None:
            environ = os.environ
        cfg_path = Path(path) if path else _default_config_path(environ)

        base = copy.deepcopy(DEFAULT_CONFIG)
        if cfg_path is not None:
            if not cfg_path.exists():
                raise ConfigError(f"config file {cfg_path} does not exist")
            try:
                raw_user = yaml.safe_load(cfg_path.read_text(encoding='utf-8')) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"failed to parse config file {cfg_path}: {e}") from e
            if not isinstance(raw_user, dict):
                raise ConfigError(f"config file {cfg_path} must contain a mapping")
            base = _deep_update(base, raw_user)

        offline_root = environ.get(OFFLINE_ROOT_ENV)
        if offline_root is not None:
            base['alternatives']['offline_root'] = offline_root

        cfg = cls(raw=base, source_path=cfg_path)
        cfg._validate()
        return cfg

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        cfg = cls(raw=_deep_update(copy.deepcopy(DEFAULT_CONFIG), data))
        cfg._validate()
        return cfg

    def _validate(self) -> None:
        alt = self.raw.get('alternatives')
        if not isinstance(alt, dict):
            raise ConfigError("'alternatives' section must be a mapping")
        admin_dir = alt.get('admin_dir')
        if not isinstance(admin_dir, str) or not admin_dir.startswith('/'):
            raise ConfigError(f"alternatives.admin_dir must be an absolute path, got {admin_dir!r}")
        if alt.get('offline_root') is None:
            alt['offline_root'] = ''
        if not isinstance(alt['offline_root'], str):
            raise ConfigError("alternatives.offline_root must be a string")

        logs = self.raw.get('logging')
        if not isinstance(logs, dict):
            raise ConfigError("'logging' section must be a mapping")
        if not isinstance(logs.get('levels') or {}, dict):
            raise ConfigError("logging.levels must be a mapping of logger name to level")

    # Convenience getters
    def get(self, *keys, default: Any = None) -> Any:
        """
        cfg.get('alternatives', 'admin_dir') or cfg.get('logging', 'level')
        """
        node = self.raw
        for k in keys:
            if isinstance(node, dict) and k in node:
                node = node[k]
            else:
                return default
        return node

    @property
    def offline_root(self) -> str:
        return self.get('alternatives', 'offline_root', default='')

    @property
    def admin_dir(self) -> str:
        # plain concatenation: the offline root is a prefix, not a parent dir
        return f"{self.offline_root}{self.get('alternatives', 'admin_dir')}"

    @property
    def logging(self) -> Dict[str, Any]:
        return self.get('logging', default={})
