"""Structural diff of two normalized structures.

Mappings compare key by key (visited in sorted order, so key order never
matters), sequences compare position by position, scalars by value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from clusterdiff.diff.normalize import Normalized, normalize

PathPart = str | int


class ChangeType(StrEnum):
    """Kind of difference at one path."""

    ADDED = "added"  # present only on the right
    REMOVED = "removed"  # present only on the left
    CHANGED = "changed"


@dataclass(frozen=True)
class DiffEntry:
    """One difference between the left and right structures."""

    path: tuple[PathPart, ...]
    change: ChangeType
    left: Any = None
    right: Any = None

    @property
    def path_str(self) -> str:
        if not self.path:
            return "(root)"
        out = ""
        for part in self.path:
            if isinstance(part, int):
                out += f"[{part}]"
            else:
                out += f".{part}" if out else part
        return out


@dataclass
class DiffResult:
    """Every difference found, in traversal order."""

    entries: list[DiffEntry] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.entries

    def summary(self) -> dict[str, int]:
        counts = {change.value: 0 for change in ChangeType}
        for entry in self.entries:
            counts[entry.change.value] += 1
        return counts

    def __len__(self) -> int:
        return len(self.entries)


def compute_diff(left: Any, right: Any) -> DiffResult:
    """Normalize both sides and diff them."""
    result = DiffResult()
    _walk(normalize(left), normalize(right), (), result.entries)
    return result


def _walk(left: Normalized, right: Normalized, path: tuple[PathPart, ...], out: list[DiffEntry]) -> None:
    if isinstance(left, dict) and isinstance(right, dict):
        for key in sorted(set(left) | set(right)):
            if key not in right:
                out.append(DiffEntry(path + (key,), ChangeType.REMOVED, left=left[key]))
            elif key not in left:
                out.append(DiffEntry(path + (key,), ChangeType.ADDED, right=right[key]))
            else:
                _walk(left[key], right[key], path + (key,), out)
        return

    if isinstance(left, list) and isinstance(right, list):
        for i in range(max(len(left), len(right))):
            if i >= len(right):
                out.append(DiffEntry(path + (i,), ChangeType.REMOVED, left=left[i]))
            elif i >= len(left):
                out.append(DiffEntry(path + (i,), ChangeType.ADDED, right=right[i]))
            else:
                _walk(left[i], right[i], path + (i,), out)
        return

    if not _scalars_equal(left, right):
        out.append(DiffEntry(path, ChangeType.CHANGED, left=left, right=right))


def _scalars_equal(left: Normalized, right: Normalized) -> bool:
    # True == 1 in Python; a flag and a number are still different settings.
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if isinstance(left, float) and isinstance(right, float) and math.isnan(left) and math.isnan(right):
        return True
    return left == right
