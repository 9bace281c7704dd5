# profile/schema.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

SOURCE_JSON_PATH = "json_path"
SOURCE_HTML_LABEL = "html_label"
SOURCE_HTML_TAG = "html_tag"
SOURCE_REGEX_LINE = "regex_line"
SOURCES = (SOURCE_JSON_PATH, SOURCE_HTML_LABEL, SOURCE_HTML_TAG, SOURCE_REGEX_LINE)

CONTENT_TYPE_HTML = "html"

NEWLINE_KEEP = "keep"
NEWLINE_REMOVE = "remove"
NEWLINE_REPLACE = "replace"
NEWLINE_MODES = (NEWLINE_KEEP, NEWLINE_REMOVE, NEWLINE_REPLACE)

# null_value_handling -> sentinel written for empty values
NULL_SENTINELS: Dict[str, str] = {"null": "null", "nil": "nil", "empty": ""}

# Profiles historically treated as chat exports (Teams messages / replies).
CHAT_PROFILE_NAMES = frozenset({"teams", "replies"})


@dataclass(frozen=True)
class Column:
    name: str
    source: str = SOURCE_JSON_PATH   # one of SOURCES
    key: str = ""                    # dotted JSON path, or regex_line marker
    regex: str = ""
    keywords: Tuple[str, ...] = ()
    exact_match: bool = False
    extract_to_end: bool = False
    clean_html: bool = False
    chat_cleanup: Optional[bool] = None
    tag: str = ""
    format: str = ""                 # reserved

    @property
    def uses_html(self) -> bool:
        return self.source in (SOURCE_HTML_LABEL, SOURCE_HTML_TAG)

    @property
    def line_marker(self) -> str:
        """Text searched for by ``regex_line`` columns."""
        return self.regex or self.key


@dataclass(frozen=True)
class Profile:
    name: str
    columns: Tuple[Column, ...]
    output_file: str
    parse_body: str = ""
    content_type: str = ""
    chat_cleanup: Optional[bool] = None

    @property
    def headers(self) -> list:
        return [column.name for column in self.columns]

    @property
    def is_html(self) -> bool:
        return self.content_type.lower() == CONTENT_TYPE_HTML

    def chat_mode(self, column: Column) -> bool:
        """Whether chat cleanup applies to ``column`` under this profile."""
        if column.chat_cleanup is not None:
            return column.chat_cleanup
        if self.chat_cleanup is not None:
            return self.chat_cleanup
        return self.name in CHAT_PROFILE_NAMES


@dataclass(frozen=True)
class OutputPolicy:
    newline_handling: str = NEWLINE_KEEP
    newline_replacement: str = ""
    null_value_handling: str = "empty"
    delimiter: str = ","

    @property
    def null_sentinel(self) -> str:
        return NULL_SENTINELS[self.null_value_handling]


@dataclass(frozen=True)
class Config:
    profiles: Dict[str, Profile] = field(default_factory=dict)
    policy: OutputPolicy = field(default_factory=OutputPolicy)


def infer_source(*, tag: str, regex: str, keywords: Tuple[str, ...], content_type: str) -> str:
    """Pick a column source from the fields it sets.

    ``tag`` wins, then label rules (HTML profiles harvest labels, other
    profiles search body lines), then the JSON path.
    """
    if tag:
        return SOURCE_HTML_TAG
    if regex or keywords:
        if content_type.lower() == CONTENT_TYPE_HTML:
            return SOURCE_HTML_LABEL
        return SOURCE_REGEX_LINE
    return SOURCE_JSON_PATH
