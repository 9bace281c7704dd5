"""
Tabflow package: profile-driven JSON to table extraction.

This package turns a directory of JSON exports (each document holding an
array of records under ``value``) into a single delimited table.  Each
submodule implements one stage of the pipeline:

1. **profile** – Load the YAML profile document into immutable
   `Column`, `Profile` and `OutputPolicy` objects.  A profile names the
   output columns, where each value comes from and how it is cleaned.
2. **ingest** – Decode input files (UTF-8 or UTF-16) and resolve dotted
   JSON paths such as ``author.name`` or ``items.[1].sku``.
3. **normalize** – Harvest ``<strong>`` label/value pairs from embedded
   HTML bodies, match labels to columns, apply newline and null policies
   and build one row per record.  Rows are written with the csv module.
4. **collect** – Fan input files out to a pool of worker threads and fan
   the rows back in to a single writer, with best‑effort progress.
5. **cli** – Command line entry point wiring together the above
   components.
"""

from importlib import metadata  # noqa: F401 (expose package version)

try:
    __version__ = metadata.version("tabflow")
except metadata.PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.0.0"
