"""Normalization of nested structures before comparison.

Keys of every mapping become strings, enum members (the symbolic values a
manifest may carry) become their string value, tuples become lists.  Other
scalars are left untouched, so ``"8"`` and ``8`` still differ.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, TypeAlias

Scalar: TypeAlias = str | int | float | bool | None
Normalized: TypeAlias = Scalar | dict[str, "Normalized"] | list["Normalized"]


def stringify_key(key: Any) -> str:
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


def normalize(obj: Any) -> Normalized:
    """Return a string-keyed, enum-free copy of *obj*.  Idempotent."""
    if isinstance(obj, Enum):
        return str(obj.value)
    if isinstance(obj, Mapping):
        return {stringify_key(k): normalize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [normalize(item) for item in obj]
    return obj
