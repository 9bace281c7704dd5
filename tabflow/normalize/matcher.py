"""
Column matcher.

Decides which profile column a harvested HTML label belongs to.  A
column can match a label in one of three ways, tried in this order:

1. ``exact_match``: the label equals ``regex`` or one of ``keywords``
   literally;
2. ``regex``: the label matches the pattern as a whole;
3. ``keywords``: one of the keywords occurs in the label, ignoring case.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, Iterable, Mapping, Optional, Sequence

from ..profile.schema import Column


@lru_cache(maxsize=None)
def _compiled(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern)


def column_matches(label: str, column: Column) -> bool:
    if column.exact_match:
        return (bool(column.regex) and label == column.regex) or label in column.keywords
    if column.regex:
        return _compiled(column.regex).fullmatch(label) is not None
    lowered = label.lower()
    return any(keyword.lower() in lowered for keyword in column.keywords)


def match_column(label: str, columns: Iterable[Column]) -> Optional[Column]:
    """Return the first column (in profile order) that accepts ``label``."""
    for column in columns:
        if column_matches(label, column):
            return column
    return None


def assign_labels(harvest: Mapping[str, str], columns: Sequence[Column]) -> Dict[str, str]:
    """Map column names to harvested values.

    Labels are visited in document order.  Each label is claimed by the
    first matching column; a column keeps the first value it receives.
    """
    values: Dict[str, str] = {}
    for label, value in harvest.items():
        column = match_column(label, columns)
        if column is not None and column.name not in values:
            values[column.name] = value
    return values
