# pkgalt/store.py
# -*- coding: utf-8 -*-
"""
RegistryStore - per-name alternatives records for pkgalt

Each name owns one plain text file under the admin directory:

    /usr/bin/editor          <- public link (first line, set once)
    /usr/bin/nano 40         <- one "<target> <priority>" line per alternative
    /usr/bin/vim 60

Features:
- Streaming rewrite into "<record>.new" + atomic replace, so the record is
  never visible half written under its own name
- Removal is idempotent (missing record or entry is a no-op)
- Registration keeps the first link bound to a name and warns on mismatch
- Duplicate priority detection on append
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .log import get_logger
from .utils import ensure_dir, scan_int

logger = get_logger("pkgalt.store")

# paths may carry bytes that are not valid UTF-8; keep them byte exact
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class RegistryError(Exception):
    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


# ---------------- Data types ----------------

@dataclass(frozen=True)
class Alternative:
    path: str
    priority: int

    def to_line(self) -> str:
        return f"{self.path} {self.priority}\n"

    @staticmethod
    def from_line(line: str) -> Optional["Alternative"]:
        """Parse "<path> <priority>"; None for lines without a scannable priority."""
        fields = line.split()
        if len(fields) < 2:
            return None
        priority = scan_int(fields[1])
        if priority is None:
            return None
        return Alternative(path=fields[0], priority=priority)


@dataclass
class RegistryRecord:
    name: str
    link: str
    alternatives: List[Alternative] = field(default_factory=list)

    def to_text(self) -> str:
        return f"{self.link}\n" + "".join(alt.to_line() for alt in self.alternatives)

    def priorities(self) -> List[int]:
        return [alt.priority for alt in self.alternatives]


def _strip_eol(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("cannot remove temporary file %s (%s)", path, e.strerror or e)


def _entry_target(line: str) -> Optional[str]:
    fields = line.split(None, 1)
    return fields[0] if fields else None


# ---------------- Store ----------------

class RegistryStore:
    def __init__(self, admin_dir: Union[str, Path]):
        self.admin_dir = Path(admin_dir)

    def record_path(self, name: str) -> Path:
        return self.admin_dir / name

    def exists(self, name: str) -> bool:
        return self.record_path(name).exists()

    def read_header(self, name: str) -> Optional[str]:
        """
        Return the link path stored on the first line of the record, or None
        when there is no record. An unreadable or empty record yields "".
        """
        record = self.record_path(name)
        try:
            with record.open("r", encoding=_ENCODING, errors=_ERRORS) as fh:
                first = fh.readline()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("cannot read %s (%s)", record, e.strerror or e)
            return ""
        if not first:
            logger.warning("%s is empty, no link recorded", record)
        return _strip_eol(first)

    def read(self, name: str) -> Optional[RegistryRecord]:
        record = self.record_path(name)
        try:
            with record.open("r", encoding=_ENCODING, errors=_ERRORS) as fh:
                lines = fh.readlines()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise RegistryError(f"cannot read {record} ({e.strerror or e})", record) from e

        if not lines:
            logger.warning("%s is empty, no link recorded", record)
            return RegistryRecord(name=name, link="")
        alternatives = []
        for line in lines[1:]:
            alt = Alternative.from_line(line)
            if alt is not None:
                alternatives.append(alt)
        return RegistryRecord(name=name, link=_strip_eol(lines[0]), alternatives=alternatives)

    def write(self, record: RegistryRecord) -> None:
        """Write a whole record (temporary file + atomic replace)."""
        target = self.record_path(record.name)
        tmp = target.with_name(target.name + ".new")
        try:
            with tmp.open("w", encoding=_ENCODING, errors=_ERRORS) as fh:
                fh.write(record.to_text())
            os.replace(tmp, target)
        except OSError as e:
            _discard(tmp)
            logger.error("cannot write %s (%s)", target, e.strerror or e)
            raise RegistryError(f"cannot write {target} ({e.strerror or e})", target) from e

    def remove_entry(self, name: str, target_path: str) -> None:
        """
        Rewrite the record without the lines registering `target_path`.
        The whole first field must match; the link line is always kept.
        """
        record = self.record_path(name)
        tmp = record.with_name(record.name + ".new")
        try:
            src = record.open("r", encoding=_ENCODING, errors=_ERRORS)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.error("cannot open %s (%s)", record, e.strerror or e)
            raise RegistryError(f"cannot open {record} ({e.strerror or e})", record) from e

        with src:
            try:
                with tmp.open("w", encoding=_ENCODING, errors=_ERRORS) as dst:
                    for lineno, line in enumerate(src):
                        if lineno > 0 and _entry_target(line) == target_path:
                            continue
                        dst.write(line)
            except OSError as e:
                _discard(tmp)
                logger.error("cannot open %s for writing (%s)", tmp, e.strerror or e)
                raise RegistryError(f"cannot rewrite {record} ({e.strerror or e})", tmp) from e

        try:
            os.replace(tmp, record)
        except OSError as e:
            _discard(tmp)
            logger.error("cannot replace %s (%s)", record, e.strerror or e)
            raise RegistryError(f"cannot replace {record} ({e.strerror or e})", record) from e

    def append_or_init(self, name: str, link_path: str, target_path: str, priority: int) -> bool:
        """
        Register `target_path` with `priority` under `name`, creating the
        record bound to `link_path` on first use.

        Returns True if another alternative already has the same priority.
        """
        if not ensure_dir(self.admin_dir):
            raise RegistryError(f"cannot create registry directory {self.admin_dir}", self.admin_dir)

        header = self.read_header(name)
        if header is None:
            self.write(RegistryRecord(name=name, link=link_path))
        elif header != link_path:
            logger.warning(
                "cannot register alternative %s to %s since it is already registered to %s",
                name, link_path, header,
            )

        self.remove_entry(name, target_path)

        current = self.read(name)
        duplicate = current is not None and priority in current.priorities()

        record = self.record_path(name)
        try:
            with record.open("a", encoding=_ENCODING, errors=_ERRORS) as fh:
                fh.write(Alternative(target_path, priority).to_line())
        except OSError as e:
            logger.error("cannot open %s for appending (%s)", record, e.strerror or e)
            raise RegistryError(f"cannot append to {record} ({e.strerror or e})", record) from e
        return duplicate

    def delete(self, name: str) -> None:
        record = self.record_path(name)
        try:
            record.unlink(missing_ok=True)
        except OSError as e:
            logger.error("cannot remove %s (%s)", record, e.strerror or e)
            raise RegistryError(f"cannot remove {record} ({e.strerror or e})", record) from e
