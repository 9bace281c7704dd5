"""Tests for the command line interface and its exit codes."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest  # type: ignore

from tabflow.cli import EXIT_OK, EXIT_STARTUP_ERROR, main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TABFLOW_CONFIG", "TABFLOW_PROFILE", "TABFLOW_WORKERS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def workspace(tmp_path: Path) -> dict:
    input_dir = tmp_path / "exports"
    input_dir.mkdir()
    (input_dir / "page1.json").write_text(
        json.dumps({"value": [{"id": "X1", "author": {"name": "A"}}, {"id": "X2"}]}),
        encoding="utf-8",
    )
    output = tmp_path / "out.csv"
    config = tmp_path / "config.yaml"
    config.write_text(
        "profiles:\n"
        "  authors:\n"
        f"    output_file: {output.as_posix()}\n"
        "    columns:\n"
        "      - name: ID\n"
        "        key: id\n"
        "      - name: Author\n"
        "        key: author.name\n"
        "null_value_handling: nil\n",
        encoding="utf-8",
    )
    return {"input": input_dir, "output": output, "config": config}


def test_extract(workspace: dict) -> None:
    code = main(
        [
            "extract",
            str(workspace["input"]),
            "-p",
            "authors",
            "-w",
            "2",
            "--no-progress",
            "--config",
            str(workspace["config"]),
        ]
    )
    assert code == EXIT_OK
    with open(workspace["output"], newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["ID", "Author"]
    assert sorted(rows[1:]) == [["X1", "A"], ["X2", "nil"]]


def test_profile_and_config_from_environment(workspace: dict, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TABFLOW_CONFIG", str(workspace["config"]))
    monkeypatch.setenv("TABFLOW_PROFILE", "authors")
    assert main(["extract", str(workspace["input"]), "--no-progress"]) == EXIT_OK
    assert workspace["output"].exists()


def test_profiles_lists_names(workspace: dict, capsys: pytest.CaptureFixture) -> None:
    assert main(["profiles", "--config", str(workspace["config"])]) == EXIT_OK
    assert "authors: 2 columns" in capsys.readouterr().out


@pytest.mark.parametrize(
    "args",
    [
        ["-p", "unknown"],
        ["-p", ""],
        ["-p", "authors", "--config", "does-not-exist.yaml"],
    ],
)
def test_startup_errors(workspace: dict, args: list) -> None:
    argv = ["extract", str(workspace["input"]), "--no-progress"]
    if "--config" not in args:
        argv += ["--config", str(workspace["config"])]
    assert main(argv + args) == EXIT_STARTUP_ERROR
    assert not workspace["output"].exists()


def test_missing_input_directory(workspace: dict) -> None:
    argv = ["extract", str(workspace["input"] / "nope"), "-p", "authors", "--config", str(workspace["config"])]
    assert main(argv) == EXIT_STARTUP_ERROR


def test_broken_files_do_not_fail_the_run(workspace: dict) -> None:
    (workspace["input"] / "broken.json").write_bytes(b"\xff\xfe{")
    argv = ["extract", str(workspace["input"]), "-p", "authors", "--no-progress", "--config", str(workspace["config"])]
    assert main(argv) == EXIT_OK
