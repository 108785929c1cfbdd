"""
Tests for the tag overlay and its sidecar file (src/core/timeline/tag_store.py).
"""

import logging

import pytest

from core.exceptions import PersistenceFailure
from core.timeline import tag_store
from core.timeline.tag_store import (
    FALLBACK_BASE_NAME,
    MAX_BASE_NAME_LENGTH,
    TagStore,
    sanitize_file_name,
    tag_file_path,
)


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "sources" / "evidence.plaso.csv"
    path.parent.mkdir(parents=True)
    path.write_text("h\n1\n2\n3\n", encoding="utf-8")
    return path


@pytest.fixture
def store(source, data_dir):
    return TagStore(source, row_count=10, data_dir=data_dir)


class TestSanitizeFileName:
    @pytest.mark.parametrize("name,expected", [
        ("evidence", "evidence"),
        ("..evil", "evil"),
        ("a/b\\c", "abc"),
        ('we<i>rd:"na|me?*', "weirdname"),
        ("tab\there", "tabhere"),
        ("keep.single.dots", "keep.single.dots"),
        ("../../etc/passwd", "etcpasswd"),
    ])
    def test_removes_unsafe_parts(self, name, expected):
        assert sanitize_file_name(name) == expected

    def test_truncates_long_names(self):
        assert sanitize_file_name("x" * 500) == "x" * MAX_BASE_NAME_LENGTH

    @pytest.mark.parametrize("name", ["", "..", "///", "<>"])
    def test_falls_back_when_nothing_is_left(self, name):
        assert sanitize_file_name(name) == FALLBACK_BASE_NAME


class TestTagFilePath:
    def test_uses_complete_base_name(self, source, data_dir):
        path = tag_file_path(source, data_dir)
        assert path == data_dir / "evidence.plaso.tags"

    def test_creates_data_directory(self, source, data_dir):
        assert not data_dir.exists()
        tag_file_path(source, data_dir)
        assert data_dir.is_dir()

    def test_name_without_suffix(self, tmp_path, data_dir):
        source = tmp_path / "timeline_export"
        source.write_text("h\n", encoding="utf-8")
        assert tag_file_path(source, data_dir).name == "timeline_export.tags"

    def test_dot_only_name_falls_back(self, tmp_path, data_dir):
        source = tmp_path / "....csv"
        source.write_text("h\n", encoding="utf-8")
        assert tag_file_path(source, data_dir).name == "timeline.tags"

    def test_stays_inside_data_directory(self, tmp_path, data_dir):
        source = tmp_path / "..csv"
        source.write_text("h\n", encoding="utf-8")
        assert tag_file_path(source, data_dir).parent == data_dir

    def test_missing_source_raises(self, tmp_path, data_dir):
        with pytest.raises(PersistenceFailure):
            tag_file_path(tmp_path / "gone.csv", data_dir)

    def test_uncreatable_data_directory_raises(self, source, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(PersistenceFailure):
            tag_file_path(source, blocker / "data")


class TestToggle:
    def test_toggle_on_marks_dirty(self, store):
        assert store.toggle(3, True) is True
        assert store.is_tagged(3)
        assert 3 in store
        assert store.dirty

    def test_toggle_is_idempotent(self, store):
        events = []
        store.subscribe(lambda row, dirty: events.append((row, dirty)))
        assert store.toggle(3, True) is True
        assert store.toggle(3, True) is False
        assert events == [(3, True)]

    def test_untag_unknown_row_is_a_no_op(self, store):
        assert store.toggle(4, False) is False
        assert not store.dirty

    def test_toggle_off(self, store):
        store.toggle(2, True)
        store.toggle(2, False)
        assert not store.is_tagged(2)
        assert len(store) == 0
        # reverting still counts as an unsaved change
        assert store.dirty

    def test_unsubscribe(self, store):
        events = []

        def listener(row, dirty):
            events.append(row)

        store.subscribe(listener)
        store.unsubscribe(listener)
        store.unsubscribe(listener)
        store.toggle(1, True)
        assert events == []

    def test_tagged_rows_is_a_snapshot(self, store):
        store.toggle(1, True)
        snapshot = store.tagged_rows()
        store.toggle(2, True)
        assert snapshot == frozenset({1})


class TestSave:
    def test_save_writes_sorted_rows(self, store):
        for row in (7, 0, 3):
            store.toggle(row, True)
        assert store.save() is True
        assert store.path.read_text(encoding="utf-8") == "0\n3\n7\n"
        assert not store.dirty

    def test_save_notifies_without_row(self, store):
        events = []
        store.toggle(1, True)
        store.subscribe(lambda row, dirty: events.append((row, dirty)))
        store.save()
        assert events == [(None, False)]

    def test_save_empty_overlay(self, store):
        assert store.save() is True
        assert store.path.read_text(encoding="utf-8") == ""

    def test_save_failure_keeps_dirty(self, store, source, caplog):
        store.toggle(1, True)
        source.unlink()
        with caplog.at_level(logging.WARNING, logger="timesifter"):
            assert store.save() is False
        assert store.dirty
        assert "no longer exists" in caplog.text

    def test_save_then_load_round_trip(self, store, source, data_dir):
        for row in (9, 4, 1):
            store.toggle(row, True)
        store.save()

        reloaded = TagStore(source, row_count=10, data_dir=data_dir)
        assert reloaded.load() == 3
        assert reloaded.tagged_rows() == frozenset({1, 4, 9})
        assert not reloaded.dirty


class TestLoad:
    def _write_sidecar(self, store, text):
        store.path.write_text(text, encoding="utf-8")

    def test_missing_sidecar_is_empty(self, store):
        assert store.load() == 0
        assert store.tagged_rows() == frozenset()

    def test_skips_out_of_range_rows(self, store):
        self._write_sidecar(store, "0\n10\n-1\n9\n")
        assert store.load() == 2
        assert store.tagged_rows() == frozenset({0, 9})

    def test_skips_garbage(self, store):
        self._write_sidecar(store, "1\nabc\n2x\n\n  3  \n+4\n")
        store.load()
        assert store.tagged_rows() == frozenset({1, 3, 4})

    def test_skips_over_length_lines(self, store):
        self._write_sidecar(store, "1\n" + "0" * 21 + "\n" + "5" * 500 + "\n2\n")
        store.load()
        assert store.tagged_rows() == frozenset({1, 2})

    def test_last_line_without_newline(self, store):
        self._write_sidecar(store, "1\n2")
        store.load()
        assert store.tagged_rows() == frozenset({1, 2})

    def test_crlf_lines(self, store):
        store.path.write_bytes(b"1\r\n2\r\n")
        store.load()
        assert store.tagged_rows() == frozenset({1, 2})

    def test_line_limit(self, store, monkeypatch, caplog):
        monkeypatch.setattr(tag_store, "MAX_TAG_LINES", 2)
        self._write_sidecar(store, "1\n2\n3\n")
        with caplog.at_level(logging.WARNING, logger="timesifter"):
            store.load()
        assert store.tagged_rows() == frozenset({1, 2})
        assert "too many entries" in caplog.text

    def test_load_replaces_unsaved_changes(self, store):
        self._write_sidecar(store, "5\n")
        store.toggle(1, True)
        store.load()
        assert store.tagged_rows() == frozenset({5})
        assert not store.dirty

    def test_undecodable_sidecar_degrades_to_empty(self, store):
        store.path.write_bytes(b"1\n\xff\xfe\n")
        assert store.load() == 0
        assert store.tagged_rows() == frozenset()

    def test_sidecar_shared_by_same_base_name(self, store, tmp_path, data_dir):
        store.toggle(2, True)
        store.save()
        other = tmp_path / "elsewhere" / "evidence.plaso.txt"
        other.parent.mkdir()
        other.write_text("h\n", encoding="utf-8")
        twin = TagStore(other, row_count=10, data_dir=data_dir)
        twin.load()
        assert twin.tagged_rows() == frozenset({2})
