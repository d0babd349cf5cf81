"""Manifest diff engine: normalization, structural diff, and report rendering."""

from clusterdiff.diff.engine import ChangeType, DiffEntry, DiffResult, compute_diff
from clusterdiff.diff.formatter import DiffFormatter, write_header
from clusterdiff.diff.normalize import normalize

__all__ = [
    "ChangeType",
    "DiffEntry",
    "DiffFormatter",
    "DiffResult",
    "compute_diff",
    "normalize",
    "write_header",
]
