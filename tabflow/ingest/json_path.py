"""
Dotted JSON path resolution.

A path such as ``author.name`` or ``items.[1].sku`` is split on ``.``
and walked one step at a time against a decoded JSON value:

- on an object the step is a key;
- on an array the step must be ``[n]`` with ``0 <= n < len(array)``;
- on a scalar the walk stops early and the scalar is returned.

The value reached is returned in its default string form (see
`stringify`).  Failures raise a subclass of `PathResolveError`.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, List

from ..errors import IndexParseError, IndexRangeError, KeyNotFoundError

NIL = "<nil>"

_INDEX_RE = re.compile(r"\[(-?\d+)\]")


def split_path(path: str) -> List[str]:
    if path is None:
        return []
    return str(path).split(".")


def stringify(value: Any) -> str:
    """Render a JSON value the way it is written to the table.

    Booleans become ``true``/``false``, ``null`` becomes ``<nil>``,
    numbers are written in decimal (integral floats without a fraction)
    and objects or arrays are written as compact JSON.
    """
    if value is None:
        return NIL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def resolve_value(data: Any, path: str) -> Any:
    """Walk ``path`` through ``data`` and return the raw value reached."""
    current = data
    for segment in split_path(path):
        if isinstance(current, dict):
            if segment not in current:
                raise KeyNotFoundError(f"key '{segment}' not found", path)
            current = current[segment]
        elif isinstance(current, list):
            match = _INDEX_RE.fullmatch(segment)
            if match is None:
                raise IndexParseError(f"expected an array index like [0], got '{segment}'", path)
            index = int(match.group(1))
            if index < 0 or index >= len(current):
                raise IndexRangeError(
                    f"index {index} out of range for array of length {len(current)}", path
                )
            current = current[index]
        else:
            break
    return current


def resolve(data: Any, path: str) -> str:
    """Resolve ``path`` against ``data`` and return the value as a string."""
    return stringify(resolve_value(data, path))
