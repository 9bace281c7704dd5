"""
Command line interface for tabflow.

This module exposes two subcommands: ``extract`` runs one profile over a
directory of JSON files and writes the profile's output table, and
``profiles`` lists the profiles defined in the profile document.  The
CLI is intentionally lightweight and delegates the work to the
`profile`, `collect` and `normalize` packages.

Defaults for the profile document, the profile and the worker count can
be supplied through ``TABFLOW_CONFIG``, ``TABFLOW_PROFILE`` and
``TABFLOW_WORKERS`` (a ``.env`` file in the working directory is read
first).  Exit status is 0 when the run completes, even if some files or
records failed, and 1 when the run cannot start.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List

from dotenv import load_dotenv

from .collect.runner import ExtractionRunner, default_workers, list_input_files
from .errors import TabflowError
from .profile.loader import load_config, select_profile

logger = logging.getLogger("tabflow.cli")

EXIT_OK = 0
EXIT_STARTUP_ERROR = 1
EXIT_INTERRUPTED = 130


def _env_workers() -> int:
    raw = os.getenv("TABFLOW_WORKERS", "")
    try:
        value = int(raw)
    except ValueError:
        return default_workers()
    return value if value > 0 else default_workers()


def cmd_extract(args: argparse.Namespace) -> int:
    """Run the selected profile over the input directory."""
    config = load_config(args.config)
    profile = select_profile(config, args.profile)
    files = list_input_files(args.input_dir)
    if not files:
        logger.warning("No JSON files found in %s", args.input_dir)
    runner = ExtractionRunner(
        profile,
        config.policy,
        workers=args.workers,
        show_progress=not args.no_progress,
    )
    stats = runner.run(files)
    logger.info(
        "Wrote %d rows from %d files (%d failed) to %s in %.1fs",
        stats.rows_written,
        stats.files_processed,
        stats.files_failed,
        profile.output_file,
        stats.processing_time,
    )
    if stats.cancelled:
        logger.warning("Run was interrupted; %s is incomplete", profile.output_file)
        return EXIT_INTERRUPTED
    return EXIT_OK


def cmd_profiles(args: argparse.Namespace) -> int:
    """Print the profiles defined in the profile document."""
    config = load_config(args.config)
    for name, profile in sorted(config.profiles.items()):
        print(f"{name}: {len(profile.columns)} columns -> {profile.output_file}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    # Shared options, accepted after the subcommand name
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=os.getenv("TABFLOW_CONFIG", "config.yaml"),
        help="Profile document (YAML); defaults to $TABFLOW_CONFIG or config.yaml",
    )
    common.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    parser = argparse.ArgumentParser(prog="tabflow", description="Profile-driven JSON to table extractor")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_cmd = subparsers.add_parser(
        "extract", parents=[common], help="Extract a directory of JSON files to a table"
    )
    extract_cmd.add_argument("input_dir", help="Directory containing the *.json files")
    extract_cmd.add_argument(
        "-p",
        "--profile",
        default=os.getenv("TABFLOW_PROFILE", ""),
        help="Profile name; defaults to $TABFLOW_PROFILE",
    )
    extract_cmd.add_argument(
        "-w",
        "--workers",
        type=int,
        default=_env_workers(),
        help="Number of worker threads (default: number of CPUs)",
    )
    extract_cmd.add_argument("--no-progress", action="store_true", help="Do not show the progress bar")
    extract_cmd.set_defaults(func=cmd_extract)

    profiles_cmd = subparsers.add_parser(
        "profiles", parents=[common], help="List the profiles in the profile document"
    )
    profiles_cmd.set_defaults(func=cmd_profiles)
    return parser


def main(argv: List[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="[%(levelname)s] %(message)s")
    try:
        return args.func(args)
    except TabflowError as exc:
        logger.error("%s", exc)
        return EXIT_STARTUP_ERROR


def run() -> None:
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
