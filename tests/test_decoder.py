"""Tests for input decoding.

Documents are written to a temporary directory in UTF-8 and in UTF-16
(with and without a byte order mark); all of them must decode to the
same text and the same records.
"""

from __future__ import annotations

import codecs
import json
from pathlib import Path

import pytest  # type: ignore

from tabflow.errors import DecodeError, JsonParseError
from tabflow.ingest.decoder import decode_bytes, decode_file, load_document

DOCUMENT = {"value": [{"id": "X1", "title": "Café – résumé"}, {"id": "X2", "title": "plain"}]}
TEXT = json.dumps(DOCUMENT, ensure_ascii=False)


def test_utf8_file_is_returned_as_is(tmp_path: Path) -> None:
    path = tmp_path / "doc.json"
    path.write_bytes(TEXT.encode("utf-8"))
    assert decode_file(path) == TEXT


def test_utf16le_with_bom_matches_utf8(tmp_path: Path) -> None:
    utf8 = tmp_path / "utf8.json"
    utf16 = tmp_path / "utf16.json"
    utf8.write_bytes(TEXT.encode("utf-8"))
    utf16.write_bytes(codecs.BOM_UTF16_LE + TEXT.encode("utf-16-le"))
    assert decode_file(utf16) == decode_file(utf8)
    assert load_document(utf16) == load_document(utf8) == DOCUMENT["value"]


def test_utf16le_without_bom(tmp_path: Path) -> None:
    path = tmp_path / "nobom.json"
    path.write_bytes('{"value": [{"id": "A"}]}'.encode("utf-16-le"))
    assert load_document(path) == [{"id": "A"}]


def test_utf16be_bom_is_honoured() -> None:
    data = codecs.BOM_UTF16_BE + TEXT.encode("utf-16-be")
    assert decode_bytes(data) == TEXT


def test_utf8_bom_is_dropped(tmp_path: Path) -> None:
    path = tmp_path / "bom.json"
    path.write_bytes(codecs.BOM_UTF8 + TEXT.encode("utf-8"))
    assert load_document(path) == DOCUMENT["value"]


@pytest.mark.parametrize(
    "data",
    [
        codecs.BOM_UTF16_LE + b"{",  # truncated code unit
        codecs.BOM_UTF16_LE + b"\x00\xd8",  # lone high surrogate
    ],
)
def test_undecodable_bytes_raise(data: bytes) -> None:
    with pytest.raises(DecodeError):
        decode_bytes(data, "broken.json")


def test_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"value": [', encoding="utf-8")
    with pytest.raises(JsonParseError):
        load_document(path)


@pytest.mark.parametrize("payload", ['[{"id": 1}]', '{"value": {"id": 1}}', '"text"'])
def test_wrong_document_shape_raises(tmp_path: Path, payload: str) -> None:
    path = tmp_path / "shape.json"
    path.write_text(payload, encoding="utf-8")
    with pytest.raises(JsonParseError):
        load_document(path)


@pytest.mark.parametrize("payload", ["{}", '{"value": null}', '{"value": []}'])
def test_documents_without_records(tmp_path: Path, payload: str) -> None:
    path = tmp_path / "empty.json"
    path.write_text(payload, encoding="utf-8")
    assert load_document(path) == []
