from __future__ import annotations

import logging
from pathlib import Path

import pytest

from pkgalt.store import Alternative, RegistryError, RegistryRecord, RegistryStore


def _write(store: RegistryStore, name: str, text: str) -> Path:
    store.admin_dir.mkdir(parents=True, exist_ok=True)
    path = store.record_path(name)
    path.write_text(text, encoding="utf-8")
    return path


class TestReadHeader:
    def test_missing_record(self, store: RegistryStore):
        assert store.read_header("editor") is None

    def test_first_line_without_terminator(self, store: RegistryStore):
        _write(store, "editor", "/usr/bin/editor\n/usr/bin/vim 60\n")
        assert store.read_header("editor") == "/usr/bin/editor"

    def test_empty_record_yields_empty_header(self, store: RegistryStore, caplog):
        _write(store, "editor", "")
        with caplog.at_level(logging.WARNING, logger="pkgalt.store"):
            assert store.read_header("editor") == ""
        assert "is empty" in caplog.text

    def test_unreadable_record_yields_empty_header(self, store: RegistryStore, caplog):
        # a directory in place of the record cannot be read as a file
        store.record_path("editor").mkdir(parents=True)
        with caplog.at_level(logging.ERROR, logger="pkgalt.store"):
            assert store.read_header("editor") == ""
        assert "cannot read" in caplog.text


class TestRoundTrip:
    def test_written_record_reads_back(self, store: RegistryStore):
        alternatives = [
            Alternative("/usr/bin/nano", 40),
            Alternative("/usr/bin/vim", 60),
            Alternative("/usr/bin/ed", -5),
            Alternative("/usr/bin/vi", 60),
        ]
        store.admin_dir.mkdir(parents=True)
        store.write(RegistryRecord("editor", "/usr/bin/editor", alternatives))

        record = store.read("editor")
        assert record is not None
        assert record.link == "/usr/bin/editor"
        assert set(record.alternatives) == set(alternatives)
        assert not store.record_path("editor").with_name("editor.new").exists()

    def test_on_disk_format(self, store: RegistryStore):
        store.admin_dir.mkdir(parents=True)
        store.write(RegistryRecord("editor", "/usr/bin/editor", [Alternative("/usr/bin/vim", 60)]))
        assert store.record_path("editor").read_text() == "/usr/bin/editor\n/usr/bin/vim 60\n"

    def test_lines_without_priority_are_skipped(self, store: RegistryStore):
        _write(store, "editor", "/usr/bin/editor\n/usr/bin/vim 60\n/usr/bin/broken\n/usr/bin/odd abc\n/usr/bin/ed 7x\n")
        record = store.read("editor")
        assert record.alternatives == [Alternative("/usr/bin/vim", 60), Alternative("/usr/bin/ed", 7)]

    def test_read_missing_record(self, store: RegistryStore):
        assert store.read("editor") is None


class TestRemoveEntry:
    def test_removes_matching_line_only(self, store: RegistryStore):
        path = _write(store, "editor", "/usr/bin/editor\n/usr/bin/vim 60\n/usr/bin/nano 40\n")
        store.remove_entry("editor", "/usr/bin/vim")
        assert path.read_text() == "/usr/bin/editor\n/usr/bin/nano 40\n"

    def test_prefix_of_another_path_does_not_match(self, store: RegistryStore):
        path = _write(store, "editor", "/usr/bin/editor\n/usr/bin/vim.tiny 10\n/usr/bin/vim 60\n")
        store.remove_entry("editor", "/usr/bin/vim")
        assert path.read_text() == "/usr/bin/editor\n/usr/bin/vim.tiny 10\n"

    def test_header_is_never_removed(self, store: RegistryStore):
        path = _write(store, "editor", "/usr/bin/editor\n/usr/bin/vim 60\n")
        store.remove_entry("editor", "/usr/bin/editor")
        assert path.read_text() == "/usr/bin/editor\n/usr/bin/vim 60\n"

    def test_unparseable_lines_survive_rewrite(self, store: RegistryStore):
        path = _write(store, "editor", "/usr/bin/editor\n/usr/bin/odd abc\n/usr/bin/vim 60\n")
        store.remove_entry("editor", "/usr/bin/vim")
        assert path.read_text() == "/usr/bin/editor\n/usr/bin/odd abc\n"

    def test_missing_record_is_noop(self, store: RegistryStore):
        store.remove_entry("editor", "/usr/bin/vim")
        assert not store.record_path("editor").exists()

    def test_removal_is_idempotent(self, store: RegistryStore):
        path = _write(store, "editor", "/usr/bin/editor\n/usr/bin/vim 60\n/usr/bin/nano 40\n")
        store.remove_entry("editor", "/usr/bin/vim")
        once = path.read_text()
        store.remove_entry("editor", "/usr/bin/vim")
        assert path.read_text() == once

    def test_failed_rewrite_keeps_original(self, store: RegistryStore):
        path = _write(store, "editor", "/usr/bin/editor\n/usr/bin/vim 60\n")
        # a directory squatting on the temporary name makes the rewrite fail
        path.with_name("editor.new").mkdir()
        with pytest.raises(RegistryError):
            store.remove_entry("editor", "/usr/bin/vim")
        assert path.read_text() == "/usr/bin/editor\n/usr/bin/vim 60\n"


class TestAppendOrInit:
    def test_creates_record_and_directory(self, store: RegistryStore):
        duplicate = store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/nano", 40)
        assert duplicate is False
        assert store.record_path("editor").read_text() == "/usr/bin/editor\n/usr/bin/nano 40\n"

    def test_appends_in_order(self, store: RegistryStore):
        store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/nano", 40)
        store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/vim", 60)
        assert store.record_path("editor").read_text() == (
            "/usr/bin/editor\n/usr/bin/nano 40\n/usr/bin/vim 60\n"
        )

    def test_reinstall_replaces_previous_entry(self, store: RegistryStore):
        store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/nano", 40)
        store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/vim", 60)
        duplicate = store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/nano", 60)
        assert duplicate is True
        record = store.read("editor")
        assert record.alternatives == [Alternative("/usr/bin/vim", 60), Alternative("/usr/bin/nano", 60)]

    def test_same_target_same_priority_is_not_a_duplicate(self, store: RegistryStore):
        store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/vim", 60)
        assert store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/vim", 60) is False

    def test_link_mismatch_warns_and_keeps_first_link(self, store: RegistryStore, caplog):
        store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/nano", 40)
        with caplog.at_level(logging.WARNING, logger="pkgalt.store"):
            store.append_or_init("editor", "/bin/editor", "/usr/bin/vim", 60)
        assert "already registered to /usr/bin/editor" in caplog.text
        record = store.read("editor")
        assert record.link == "/usr/bin/editor"
        assert Alternative("/usr/bin/vim", 60) in record.alternatives

    def test_unwritable_admin_dir_raises(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = RegistryStore(blocker / "alternatives")
        with pytest.raises(RegistryError):
            store.append_or_init("editor", "/usr/bin/editor", "/usr/bin/vim", 60)


def test_delete_missing_record_is_fine(store: RegistryStore):
    store.delete("editor")
    assert not store.exists("editor")
