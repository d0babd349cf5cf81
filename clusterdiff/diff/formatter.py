"""Line-oriented rendering of a DiffResult."""

from __future__ import annotations

import json
import sys
from typing import Any, TextIO

from clusterdiff.diff.engine import ChangeType, DiffEntry, DiffResult, compute_diff

_BANNER_WIDTH = 80


def write_header(text: str, stream: TextIO | None = None) -> None:
    """Write *text* framed by dashed banner lines."""
    out = stream or sys.stdout
    out.write(f"  {'-' * _BANNER_WIDTH}\n")
    out.write(f"  {text}\n")
    out.write(f"  {'-' * _BANNER_WIDTH}\n")


def _render(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


class DiffFormatter:
    """Writes diffs with fixed side labels and indentation.

    Args:
        left:        Label of the left-hand structure.
        right:       Label of the right-hand structure.
        stream:      Output stream; stdout (looked up at write time) if None.
        indentation: Spaces per nesting level.
    """

    def __init__(
        self,
        left: str = "local",
        right: str = "remote",
        stream: TextIO | None = None,
        indentation: int = 4,
    ) -> None:
        self.left = left
        self.right = right
        self._stream = stream
        self.indentation = indentation

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def header(self, text: str) -> None:
        write_header(text, self.stream)

    def display_diff(self, left: Any, right: Any) -> DiffResult:
        """Diff *left* against *right*, write the report and return the result."""
        result = compute_diff(left, right)
        self.write(result)
        return result

    def write(self, result: DiffResult) -> None:
        pad = " " * self.indentation
        if result.empty:
            self.stream.write(f"{pad}no differences\n")
            return
        for entry in result.entries:
            self.stream.write(f"{pad}{entry.path_str}: {self._describe(entry)}\n")
            for label, value in self._sides(entry):
                self.stream.write(f"{pad * 2}{label}{_render(value)}\n")

    def _describe(self, entry: DiffEntry) -> str:
        if entry.change is ChangeType.REMOVED:
            return f"only in {self.left}"
        if entry.change is ChangeType.ADDED:
            return f"only in {self.right}"
        return "changed"

    def _sides(self, entry: DiffEntry) -> list[tuple[str, Any]]:
        width = max(len(self.left), len(self.right)) + 2
        left_label = f"{self.left}:".ljust(width)
        right_label = f"{self.right}:".ljust(width)
        if entry.change is ChangeType.REMOVED:
            return [(left_label, entry.left)]
        if entry.change is ChangeType.ADDED:
            return [(right_label, entry.right)]
        return [(left_label, entry.left), (right_label, entry.right)]
