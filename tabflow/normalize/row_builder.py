"""
Row builder.

Turns one record into one output row according to a profile.  For each
column the value is taken from the source the column declares:

- ``html_label`` / ``html_tag`` columns of an HTML profile read the
  values extracted from the record's body;
- ``regex_line`` columns search the body line by line for a marker;
- ``json_path`` columns resolve a dotted path against the record.

The value is then cleaned (``clean_html``), the newline and null
policies are applied, and rows whose fields are all empty are dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from ..errors import PathResolveError, RecordError
from ..ingest.json_path import NIL, resolve
from ..profile.schema import (
    SOURCE_JSON_PATH,
    SOURCE_REGEX_LINE,
    Column,
    OutputPolicy,
    Profile,
)
from .html_to_fields import clean_content, extract_html_values
from .policies import CRLF, apply_newline_policy, apply_null_policy, is_blank_row

logger = logging.getLogger(__name__)

Row = Tuple[str, ...]


def extract_line_value(body: str, marker: str, extract_to_end: bool = False) -> str:
    """Return the text after ``marker`` on the first body line containing it.

    Lines are separated by ``\\r\\n``.  With ``extract_to_end`` the rest
    of the body (from the marker on) is returned with its line breaks;
    otherwise the value stops at the first ``<br`` on the line.

    The tail is not returned verbatim: a single-line value is trimmed on
    both sides, and with ``extract_to_end`` only the whitespace directly
    after the marker is removed.
    """
    if not marker:
        return ""
    lines = body.split(CRLF)
    for index, line in enumerate(lines):
        position = line.find(marker)
        if position < 0:
            continue
        tail = line[position + len(marker):]
        if extract_to_end:
            return CRLF.join([tail.lstrip()] + lines[index + 1:])
        cut = tail.find("<br")
        if cut >= 0:
            tail = tail[:cut]
        return tail.strip()
    return ""


class RowBuilder:
    """Build rows for one profile.

    A builder holds no per-record state, so a single instance is shared
    by all worker threads.
    """

    def __init__(self, profile: Profile, policy: OutputPolicy) -> None:
        self.profile = profile
        self.policy = policy
        self._html_columns = tuple(c for c in profile.columns if c.uses_html)
        self._chat_modes = tuple(profile.chat_mode(c) for c in profile.columns)

    @property
    def headers(self) -> list:
        return self.profile.headers

    def body_of(self, record: Mapping[str, Any]) -> str:
        """Resolve the profile's ``parse_body`` path, or ``""``."""
        if not self.profile.parse_body:
            return ""
        try:
            body = resolve(record, self.profile.parse_body)
        except PathResolveError as exc:
            logger.warning("Body not found: %s", exc)
            return ""
        return "" if body == NIL else body

    def _column_value(
        self,
        column: Column,
        record: Mapping[str, Any],
        body: str,
        html_values: Dict[str, str],
    ) -> str:
        if self.profile.is_html and column.uses_html:
            return html_values.get(column.name, "")
        if column.source == SOURCE_REGEX_LINE and self.profile.parse_body:
            return extract_line_value(body, column.line_marker, column.extract_to_end)
        if column.source == SOURCE_JSON_PATH and column.key:
            try:
                return resolve(record, column.key)
            except PathResolveError as exc:
                logger.warning("Column %s: %s", column.name, exc)
        return ""

    def build(self, record: Any) -> Optional[Row]:
        """Build the row for ``record``; ``None`` when the row is blank.

        Raises:
            RecordError: ``record`` is not a JSON object.
            HtmlParseError: the record's HTML body cannot be parsed.
        """
        if not isinstance(record, dict):
            raise RecordError(f"record is {type(record).__name__}, expected an object")

        body = self.body_of(record)
        html_values: Dict[str, str] = {}
        if self.profile.is_html and body and self._html_columns:
            html_values = extract_html_values(body, self._html_columns)

        row = []
        for column, chat in zip(self.profile.columns, self._chat_modes):
            value = self._column_value(column, record, body, html_values)
            if column.clean_html:
                value = clean_content(value, chat=chat)
            value = apply_newline_policy(value, self.policy)
            value = apply_null_policy(value, self.policy)
            row.append(value)

        if logger.isEnabledFor(logging.DEBUG):
            for column, value in zip(self.profile.columns, row):
                logger.debug("Column %s, Value: %s", column.name, value)

        if is_blank_row(row, self.policy):
            return None
        return tuple(row)
