"""
Tests for the row offset index (src/core/timeline/line_index.py).
"""

import pytest

from core.exceptions import CorruptFileError, ResourceLimitExceeded
from core.timeline.line_index import MAX_ROW_COUNT, OFFSET_WIDTH, build_line_index


def _index(path, **limits):
    with path.open("rb") as handle:
        return build_line_index(handle, **limits)


class TestBuildLineIndex:
    def test_one_offset_per_data_row(self, write_timeline):
        path = write_timeline("h1,h2", ["a,b", "c,d", "e,f"])
        result = _index(path)
        assert len(result.index) == 3
        assert result.header == b"h1,h2"

    def test_offsets_address_row_starts(self, write_timeline):
        rows = ["first,row", "second,ré", "third,日本語"]
        path = write_timeline("x,y", rows)
        result = _index(path)
        with path.open("rb") as handle:
            for i, row in enumerate(rows):
                handle.seek(result.index[i])
                assert handle.readline().rstrip(b"\n").decode("utf-8") == row

    def test_offsets_strictly_increase(self, write_timeline):
        path = write_timeline("x", ["1", "", "22", "333"])
        offsets = list(_index(path).index)
        assert offsets == sorted(set(offsets))
        assert len(offsets) == 4

    def test_final_line_without_separator(self, write_timeline):
        path = write_timeline("x,y", ["a,b", "c,d"], trailing_newline=False)
        result = _index(path)
        assert len(result.index) == 2
        with path.open("rb") as handle:
            handle.seek(result.index[1])
            assert handle.readline() == b"c,d"

    def test_crlf_separators(self, write_timeline):
        path = write_timeline("x,y", ["a,b", "c,d"], newline="\r\n")
        result = _index(path)
        assert result.header == b"x,y"
        with path.open("rb") as handle:
            handle.seek(result.index[1])
            assert handle.readline() == b"c,d\r\n"

    def test_header_only_file_has_no_rows(self, write_timeline):
        path = write_timeline("x,y")
        assert len(_index(path).index) == 0

    def test_empty_file_is_corrupt(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_bytes(b"")
        with pytest.raises(CorruptFileError):
            _index(path)

    def test_handle_is_rewound(self, write_timeline):
        path = write_timeline("x", ["1", "2"])
        with path.open("rb") as handle:
            build_line_index(handle)
            assert handle.tell() == 0

    def test_memory_accounting(self, write_timeline):
        path = write_timeline("x", ["1", "2", "3"])
        assert _index(path).index.memory_bytes == 3 * OFFSET_WIDTH

    def test_index_is_read_only(self, write_timeline):
        index = _index(write_timeline("x", ["1"])).index
        with pytest.raises(IndexError):
            index[-1]
        assert not hasattr(index, "append")


class TestLineIndexLimits:
    def test_file_size_checked_before_scan(self, write_timeline):
        path = write_timeline("x", ["1", "2"])
        with pytest.raises(ResourceLimitExceeded) as excinfo:
            _index(path, max_file_size=3)
        assert excinfo.value.limit_name == "file size"

    def test_row_count_limit(self, write_timeline):
        path = write_timeline("x", ["1", "2", "3"])
        assert len(_index(path, max_rows=3).index) == 3
        with pytest.raises(ResourceLimitExceeded) as excinfo:
            _index(path, max_rows=2)
        assert excinfo.value.limit_name == "row count"

    def test_index_memory_limit(self, write_timeline):
        path = write_timeline("x", ["1", "2", "3"])
        assert len(_index(path, max_index_memory=3 * OFFSET_WIDTH).index) == 3
        with pytest.raises(ResourceLimitExceeded) as excinfo:
            _index(path, max_index_memory=2 * OFFSET_WIDTH)
        assert excinfo.value.limit_name == "index memory"

    def test_default_limits(self):
        assert MAX_ROW_COUNT == 10_000_000
