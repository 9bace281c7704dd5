"""
Extraction runner.

This module fans the input files out to a pool of worker threads and
fans the resulting rows back in to a single writer:

- a **jobs** queue holds the file paths; each worker takes paths until
  the queue is empty (or the run is cancelled);
- a worker decodes and parses its file, builds the rows of every record
  and puts them on the **results** queue as one batch, so the rows of a
  file are written contiguously and in record order;
- file-level failures (undecodable file, invalid JSON, a record that is
  not an object) and skipped records go to the **errors** queue, which a
  logger thread drains.  They never abort the run;
- the calling thread is the only writer.  It stops once every worker
  has signalled completion, then flushes the table.

Interleaving of files in the output depends on scheduling and is not
deterministic.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from tqdm.contrib.logging import logging_redirect_tqdm

from ..errors import (
    DecodeError,
    HtmlParseError,
    InputDirectoryError,
    JsonParseError,
    RecordError,
    WriteError,
)
from ..ingest.decoder import load_document
from ..normalize.row_builder import Row, RowBuilder
from ..normalize.write_csv import TableWriter
from ..profile.schema import OutputPolicy, Profile
from .progress import ProgressReporter

logger = logging.getLogger(__name__)

_DONE = object()


@dataclass
class FileResult:
    """Rows and counters produced from one input file."""
    path: Path
    rows: List[Row] = field(default_factory=list)
    records: int = 0
    dropped: int = 0
    skipped: int = 0
    failed: bool = False


@dataclass
class RunStats:
    """Statistics for one extraction run."""
    files_total: int = 0
    files_processed: int = 0
    files_failed: int = 0
    records_seen: int = 0
    rows_written: int = 0
    rows_dropped: int = 0
    records_skipped: int = 0
    write_errors: int = 0
    errors_reported: int = 0
    cancelled: bool = False
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def processing_time(self) -> float:
        if not self.start_time or not self.end_time:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()


def default_workers() -> int:
    return os.cpu_count() or 1


def list_input_files(directory: str | Path) -> List[Path]:
    """Return the ``*.json`` files directly inside ``directory``, sorted."""
    path = Path(directory)
    if not path.is_dir():
        raise InputDirectoryError(f"input directory not found: {path}")
    try:
        with os.scandir(path) as entries:
            files = [Path(e.path) for e in entries if e.name.endswith(".json") and e.is_file()]
    except OSError as exc:
        raise InputDirectoryError(f"cannot list input directory {path}: {exc}") from exc
    return sorted(files)


def process_file(
    path: Path,
    builder: RowBuilder,
    report_error: Callable[[Exception], None],
) -> FileResult:
    """Build the rows of one input file.

    Records whose HTML body cannot be parsed are reported and skipped.

    Raises:
        DecodeError, JsonParseError: the file cannot be read as a document.
        RecordError: a record cannot be processed; the whole file is dropped.
    """
    records = load_document(path)
    result = FileResult(path=path)
    for index, record in enumerate(records):
        result.records += 1
        try:
            row = builder.build(record)
        except HtmlParseError as exc:
            result.skipped += 1
            report_error(HtmlParseError(f"{path}: record #{index}: {exc}"))
            continue
        except RecordError as exc:
            raise RecordError(f"{path}: record #{index}: {exc}") from exc
        if row is None:
            result.dropped += 1
            continue
        result.rows.append(row)
    logger.debug("Processed %s: %d records, %d rows", path, result.records, len(result.rows))
    return result


class ExtractionRunner:
    """Runs one profile over a list of input files."""

    def __init__(
        self,
        profile: Profile,
        policy: OutputPolicy,
        *,
        workers: Optional[int] = None,
        show_progress: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.profile = profile
        self.policy = policy
        self.workers = workers if workers and workers > 0 else default_workers()
        self.show_progress = show_progress
        self.cancel_event = cancel_event or threading.Event()
        self.builder = RowBuilder(profile, policy)

    def cancel(self) -> None:
        """Stop handing out new files; files in progress are still written."""
        self.cancel_event.set()

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------

    def _work(self, jobs: queue.Queue, results: queue.Queue, errors: queue.Queue) -> None:
        try:
            while not self.cancel_event.is_set():
                try:
                    path = jobs.get_nowait()
                except queue.Empty:
                    break
                try:
                    result = process_file(path, self.builder, errors.put)
                except (DecodeError, JsonParseError, RecordError) as exc:
                    errors.put(exc)
                    result = FileResult(path=path, failed=True)
                except OSError as exc:
                    errors.put(DecodeError(f"{path}: cannot read file: {exc}"))
                    result = FileResult(path=path, failed=True)
                except Exception as exc:  # noqa: BLE001
                    logger.exception("Unexpected error processing %s", path)
                    errors.put(exc)
                    result = FileResult(path=path, failed=True)
                results.put(result)
        finally:
            results.put(_DONE)

    def _log_errors(self, errors: queue.Queue, stats: RunStats) -> None:
        while True:
            exc = errors.get()
            if exc is _DONE:
                break
            stats.errors_reported += 1
            logger.error("%s", exc)

    # ------------------------------------------------------------------
    # Writer
    # ------------------------------------------------------------------

    def _write_result(
        self,
        writer: TableWriter,
        result: FileResult,
        stats: RunStats,
        errors: queue.Queue,
        progress: ProgressReporter,
    ) -> None:
        stats.files_processed += 1
        stats.records_seen += result.records
        stats.rows_dropped += result.dropped
        stats.records_skipped += result.skipped
        if result.failed:
            stats.files_failed += 1
        written = 0
        for row in result.rows:
            try:
                writer.write_row(row)
            except WriteError as exc:
                stats.write_errors += 1
                errors.put(exc)
                continue
            written += 1
        stats.rows_written += written
        progress.tick(written)

    def run(self, files: Sequence[Path]) -> RunStats:
        """Extract every file in ``files`` into the profile's output file.

        Raises:
            WriteError: the output file cannot be created.
        """
        files = list(files)
        stats = RunStats(files_total=len(files), start_time=datetime.now())
        capacity = max(1, len(files))
        workers = max(1, min(self.workers, len(files)))

        jobs: queue.Queue = queue.Queue(maxsize=capacity)
        for path in files:
            jobs.put(path)
        results: queue.Queue = queue.Queue(maxsize=capacity)
        errors: queue.Queue = queue.Queue(maxsize=capacity)

        logger.info(
            "Extracting %d files with profile '%s' using %d workers",
            len(files), self.profile.name, workers,
        )
        with TableWriter(self.profile.output_file, self.profile.headers, delimiter=self.policy.delimiter) as writer, \
                logging_redirect_tqdm(), \
                ProgressReporter(len(files), enabled=self.show_progress, desc=self.profile.name) as progress:
            error_thread = threading.Thread(
                target=self._log_errors, args=(errors, stats), name="tabflow-errors", daemon=True
            )
            error_thread.start()
            threads = [
                threading.Thread(
                    target=self._work, args=(jobs, results, errors), name=f"tabflow-worker-{i}", daemon=True
                )
                for i in range(workers)
            ]
            for thread in threads:
                thread.start()

            finished = 0
            while finished < workers:
                try:
                    item = results.get()
                except KeyboardInterrupt:
                    logger.warning("Interrupted; finishing files already in progress")
                    self.cancel()
                    continue
                if item is _DONE:
                    finished += 1
                    continue
                self._write_result(writer, item, stats, errors, progress)

            for thread in threads:
                thread.join()
            errors.put(_DONE)
            error_thread.join()

        stats.cancelled = self.cancel_event.is_set()
        stats.end_time = datetime.now()
        logger.info("Run finished: %s", stats)
        return stats


def run_extraction(
    input_dir: str | Path,
    profile: Profile,
    policy: OutputPolicy,
    *,
    workers: Optional[int] = None,
    show_progress: bool = True,
    cancel_event: Optional[threading.Event] = None,
) -> RunStats:
    """List the input directory and run ``profile`` over its JSON files."""
    files = list_input_files(input_dir)
    runner = ExtractionRunner(
        profile, policy, workers=workers, show_progress=show_progress, cancel_event=cancel_event
    )
    return runner.run(files)
