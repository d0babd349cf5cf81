"""Tests for the line-oriented diff report."""

from __future__ import annotations

import io

from clusterdiff.diff.formatter import DiffFormatter, write_header


def _formatter(**kwargs) -> tuple[DiffFormatter, io.StringIO]:
    stream = io.StringIO()
    return DiffFormatter(stream=stream, **kwargs), stream


class TestHeader:
    def test_banner_frames_text(self) -> None:
        stream = io.StringIO()
        write_header("Displaying manifest diffs for web-app-3", stream)
        banner = "  " + "-" * 80
        assert stream.getvalue() == f"{banner}\n  Displaying manifest diffs for web-app-3\n{banner}\n"


class TestDisplayDiff:
    def test_no_differences(self) -> None:
        differ, stream = _formatter()
        result = differ.display_diff({"a": 1}, {"a": 1})
        assert result.empty
        assert stream.getvalue() == "    no differences\n"

    def test_changed_value_shows_both_sides(self) -> None:
        differ, stream = _formatter()
        differ.display_diff({"java_version": "8"}, {"java_version": "7"})
        assert stream.getvalue() == (
            "    java_version: changed\n"
            '        local:  "8"\n'
            '        remote: "7"\n'
        )

    def test_one_sided_entries_use_labels(self) -> None:
        differ, stream = _formatter()
        differ.display_diff({"only_here": [1]}, {"only_there": {"b": 2, "a": 1}})
        assert stream.getvalue() == (
            "    only_here: only in local\n"
            "        local:  [1]\n"
            "    only_there: only in remote\n"
            '        remote: {"a": 1, "b": 2}\n'
        )

    def test_custom_labels_and_indentation(self) -> None:
        differ, stream = _formatter(left="desired", right="actual", indentation=2)
        differ.display_diff({"x": 1}, {"x": 2})
        assert stream.getvalue() == "  x: changed\n    desired: 1\n    actual:  2\n"
