"""
HTML to fields extractor.

Record bodies are often HTML written as structured prose, one field
per paragraph::

    <p><strong>Owner:</strong> Alice</p>
    <p><strong>Status:</strong> Open <strong>Due:</strong> Friday</p>

This module parses such a body with BeautifulSoup, harvests the
``<strong>`` labels and the text that follows each of them inside its
``<p>``, and hands the labels to the column matcher.  It also extracts
the full text of a given tag and provides `clean_content`, the
tag-stripping cleaner used by ``clean_html`` columns.
"""

from __future__ import annotations

import re
from typing import Dict, Sequence

from bs4 import BeautifulSoup, NavigableString, ParserRejectedMarkup, Tag
from bs4.element import PreformattedString

from ..errors import HtmlParseError
from ..profile.schema import SOURCE_HTML_LABEL, SOURCE_HTML_TAG, Column
from .matcher import assign_labels

_WHITESPACE_RE = re.compile(r"\s+")
# Mentions in chat messages: <at id="0">Bob</at>
_MENTION_RE = re.compile(r"<at\b[^>]*>.*?</at>", re.IGNORECASE | re.DOTALL)
_CHAT_PREFIX = "@{contentType=html; content="
_CHAT_SUFFIX = "}"


def parse_html(body: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(body, "html.parser")
    except (ParserRejectedMarkup, ValueError) as exc:
        raise HtmlParseError(f"cannot parse HTML body: {exc}") from exc


def _node_text(node) -> str:
    # Comments, doctypes and processing instructions carry no field text.
    if isinstance(node, PreformattedString):
        return ""
    if isinstance(node, NavigableString):
        return str(node)
    if isinstance(node, Tag):
        return node.get_text()
    return ""


def _label_text(strong: Tag) -> str:
    label = strong.get_text().strip()
    if label.endswith(":"):
        label = label[:-1]
    return label


def harvest_labels(soup: BeautifulSoup) -> Dict[str, str]:
    """Collect ``label -> value`` pairs from every ``<p>`` in ``soup``.

    Within a paragraph each ``<strong>`` starts a new label; the text of
    the siblings that follow it, up to the next ``<strong>`` or the end
    of the paragraph, is its value.  Text ahead of the first ``<strong>``
    is prepended to the first label's value.  A label seen twice keeps
    its last value.
    """
    harvest: Dict[str, str] = {}
    for paragraph in soup.find_all("p"):
        label = ""
        buffer = []
        for child in paragraph.children:
            if isinstance(child, Tag) and child.name == "strong":
                if label:
                    harvest[label] = "".join(buffer).strip()
                    buffer = []
                label = _label_text(child)
            else:
                buffer.append(_node_text(child))
        if label:
            harvest[label] = "".join(buffer).strip()
    return harvest


def tag_text(soup: BeautifulSoup, tag: str) -> str:
    """Text of every ``tag`` element in ``soup``, joined by single spaces."""
    return " ".join(element.get_text() for element in soup.find_all(tag)).strip()


def extract_html_values(body: str, columns: Sequence[Column]) -> Dict[str, str]:
    """Extract the values of the HTML-sourced ``columns`` from ``body``.

    Args:
        body: HTML fragment of one record.
        columns: Profile columns; only ``html_label`` and ``html_tag``
            columns are considered.

    Returns:
        A dictionary keyed by column name.  Columns that found nothing
        are absent.
    """
    soup = parse_html(body)
    label_columns = [c for c in columns if c.source == SOURCE_HTML_LABEL]
    values = assign_labels(harvest_labels(soup), label_columns) if label_columns else {}
    for column in columns:
        if column.source == SOURCE_HTML_TAG:
            values[column.name] = tag_text(soup, column.tag)
    return values


def strip_chat_wrapper(value: str) -> str:
    """Remove mention spans and the ``@{contentType=html; content=...}`` wrapper."""
    value = _MENTION_RE.sub("", value).strip()
    if value.startswith(_CHAT_PREFIX):
        value = value[len(_CHAT_PREFIX):]
        if value.endswith(_CHAT_SUFFIX):
            value = value[: -len(_CHAT_SUFFIX)]
    return value


def clean_content(value: str, *, chat: bool = False) -> str:
    """Reduce an HTML value to a single line of text.

    Tags are dropped except ``<br>``, which is kept as the literal
    ``<br>``.  Entities are decoded, no-break spaces become spaces and
    runs of whitespace collapse to one space.

    Cleaning a cleaned value again is a no-op unless the value contains
    markup that was entity-escaped in the source: ``"x &lt;y&gt; z"``
    cleans to ``"x <y> z"``, and a second pass drops ``<y>``.
    """
    if chat:
        value = strip_chat_wrapper(value)
    if not value:
        return ""
    parts = []
    for node in parse_html(value).descendants:
        if isinstance(node, Tag):
            if node.name == "br":
                parts.append("<br>")
        elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            parts.append(str(node))
    text = "".join(parts).replace("\u00a0", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()
