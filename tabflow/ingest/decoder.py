"""
Input file decoding.

Exports are usually UTF-8, but files saved by some Windows tooling come
out as UTF-16 little-endian with a byte order mark.  `decode_file`
accepts both: bytes that are valid UTF-8 are used as they are, anything
else is decoded as UTF-16 (honouring a BOM when present).  No other
encodings are attempted.
"""

from __future__ import annotations

import codecs
import json
import logging
from pathlib import Path
from typing import Any, List

from ..errors import DecodeError, JsonParseError

logger = logging.getLogger(__name__)


def decode_bytes(data: bytes, source: str = "<bytes>") -> str:
    """Return ``data`` as text, trying UTF-8 first and UTF-16 second.

    NUL bytes never occur in UTF-8 JSON, but BOM-less UTF-16 text of
    ASCII characters is otherwise valid UTF-8; such input goes straight
    to the UTF-16 decoder.
    """
    if b"\x00" not in data:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            pass
        else:
            # json.loads rejects a leading UTF-8 BOM
            return text[1:] if text.startswith("\ufeff") else text

    if data.startswith(codecs.BOM_UTF16_LE):
        codec, payload = "utf-16-le", data[len(codecs.BOM_UTF16_LE):]
    elif data.startswith(codecs.BOM_UTF16_BE):
        codec, payload = "utf-16-be", data[len(codecs.BOM_UTF16_BE):]
    else:
        codec, payload = "utf-16-le", data
    try:
        text = payload.decode(codec)
    except UnicodeDecodeError as exc:
        raise DecodeError(f"{source}: neither UTF-8 nor UTF-16: {exc}") from exc
    logger.debug("Decoded %s as %s", source, codec)
    return text


def decode_file(path: str | Path) -> str:
    """Read ``path`` and decode it with `decode_bytes`."""
    with open(path, "rb") as f:
        data = f.read()
    return decode_bytes(data, str(path))


def load_document(path: str | Path) -> List[Any]:
    """Decode and parse one input file, returning its ``value`` records.

    A document without a ``value`` key (or with ``value: null``) holds
    no records.  Anything other than a JSON object whose ``value`` is an
    array raises `JsonParseError`.
    """
    text = decode_file(path)
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise JsonParseError(f"{path}: invalid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise JsonParseError(f"{path}: top level is {type(document).__name__}, expected an object")
    records = document.get("value")
    if records is None:
        return []
    if not isinstance(records, list):
        raise JsonParseError(f"{path}: 'value' is {type(records).__name__}, expected an array")
    return records
