"""
Ingest subsystem for tabflow.

Reads the raw input: `decoder` turns a file into text (UTF-8 or
UTF-16) and into the list of records stored under ``value``;
`json_path` follows dotted paths into a record and renders the value
found as a string.
"""

from .decoder import decode_bytes, decode_file, load_document  # noqa: F401
from .json_path import resolve, resolve_value, stringify  # noqa: F401
