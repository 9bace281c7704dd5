"""Newline and null policies applied to every field before it is written."""

from __future__ import annotations

from typing import Sequence

from ..ingest.json_path import NIL
from ..profile.schema import NEWLINE_REMOVE, NEWLINE_REPLACE, OutputPolicy

CRLF = "\r\n"


def apply_newline_policy(value: str, policy: OutputPolicy) -> str:
    if policy.newline_handling == NEWLINE_REMOVE:
        return value.replace(CRLF, "")
    if policy.newline_handling == NEWLINE_REPLACE:
        return value.replace(CRLF, policy.newline_replacement)
    return value


def apply_null_policy(value: str, policy: OutputPolicy) -> str:
    """Replace an empty or ``<nil>`` value with the configured sentinel."""
    if value == "" or value == NIL:
        return policy.null_sentinel
    return value


def is_blank_row(row: Sequence[str], policy: OutputPolicy) -> bool:
    sentinel = policy.null_sentinel
    return all(field == "" or field == sentinel for field in row)
