"""
Collection subsystem for tabflow.

The `collect` package drives a run.  `run_extraction` lists the input
directory and hands the files to an `ExtractionRunner`, which decodes
and converts them on a pool of worker threads while a single consumer
writes the rows to the profile's output file.  Failures of individual
files or records are logged and never stop the run.
"""

from .runner import (  # noqa: F401
    ExtractionRunner,
    RunStats,
    default_workers,
    list_input_files,
    process_file,
    run_extraction,
)
