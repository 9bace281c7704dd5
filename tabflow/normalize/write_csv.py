"""
Delimited table writer.

`TableWriter` writes the header when it is opened, then one record per
row, and flushes when it is closed.  Quoting follows the csv module's
defaults: fields holding the delimiter, a quote or a line break are
quoted and quotes are doubled.  Unicode is written in UTF‑8 encoding.
If the file already exists, it will be overwritten.

Only one thread may write through a given `TableWriter`.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, Sequence

from ..errors import WriteError

logger = logging.getLogger(__name__)


class TableWriter:
    def __init__(self, path: str | Path, header: Sequence[str], *, delimiter: str = ",") -> None:
        self.path = Path(path)
        self.header = list(header)
        self.delimiter = delimiter
        self.rows_written = 0
        self._file = None
        self._writer = None

    def open(self) -> "TableWriter":
        """Create the output file and write the header row."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "w", newline="", encoding="utf-8")
            self._writer = csv.writer(self._file, delimiter=self.delimiter)
            self._writer.writerow(self.header)
        except OSError as exc:
            self.close()
            raise WriteError(f"cannot create output file {self.path}: {exc}") from exc
        logger.debug("Opened %s with header %s", self.path, self.header)
        return self

    def write_row(self, row: Sequence[str]) -> None:
        if self._writer is None:
            raise WriteError(f"{self.path} is not open")
        try:
            self._writer.writerow(row)
        except (csv.Error, OSError) as exc:
            raise WriteError(f"cannot write row to {self.path}: {exc}") from exc
        self.rows_written += 1

    def write_rows(self, rows: Iterable[Sequence[str]]) -> None:
        for row in rows:
            self.write_row(row)

    def close(self) -> None:
        if self._file is not None:
            try:
                self._file.flush()
            finally:
                self._file.close()
                self._file = None
                self._writer = None

    def __enter__(self) -> "TableWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
