"""Tests for loading and validating the YAML profile document."""

from __future__ import annotations

from pathlib import Path

import pytest  # type: ignore

from tabflow.errors import ConfigError, ProfileNotFoundError
from tabflow.profile.loader import load_config, parse_config, select_profile

YAML_DOCUMENT = """
profiles:
  posts:
    output_file: out/posts.csv
    parse_body: body.content
    content_type: html
    columns:
      - name: ID
        key: id
      - name: Owner
        regex: Owner
        exact_match: true
        clean_html: true
      - name: Status
        keywords: [status, state]
      - name: Title
        tag: H1
  mail:
    output_file: mail.csv
    parse_body: body
    columns:
      - column: Requester
        regex: "Requester:"
      - name: Details
        key: "Details:"
        source: regex_line
        extract_to_end: true
newline_handling: replace
newline_replacement: " | "
null_value_handling: "null"
"""


def _document(columns: list, **extra) -> dict:
    return {"profiles": {"p": {"output_file": "o.csv", "columns": columns}}, **extra}


def test_load_config_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(YAML_DOCUMENT, encoding="utf-8")
    config = load_config(path)

    assert sorted(config.profiles) == ["mail", "posts"]
    posts = config.profiles["posts"]
    assert posts.headers == ["ID", "Owner", "Status", "Title"]
    assert posts.is_html
    assert [c.source for c in posts.columns] == ["json_path", "html_label", "html_label", "html_tag"]
    assert posts.columns[2].keywords == ("status", "state")
    assert posts.columns[3].tag == "h1"

    mail = config.profiles["mail"]
    assert mail.headers == ["Requester", "Details"]
    assert [c.source for c in mail.columns] == ["regex_line", "regex_line"]
    assert mail.columns[1].line_marker == "Details:"

    assert config.policy.newline_handling == "replace"
    assert config.policy.newline_replacement == " | "
    assert config.policy.null_sentinel == "null"


def test_policy_defaults() -> None:
    policy = parse_config(_document([{"name": "A", "key": "a"}])).policy
    assert policy.newline_handling == "keep"
    assert policy.null_sentinel == ""
    assert policy.delimiter == ","


def test_profiles_are_immutable() -> None:
    profile = parse_config(_document([{"name": "A", "key": "a"}])).profiles["p"]
    with pytest.raises(AttributeError):
        profile.output_file = "other.csv"  # type: ignore[misc]


@pytest.mark.parametrize(
    "document",
    [
        None,
        {},
        {"profiles": {}},
        {"profiles": {"p": {"columns": [{"name": "A"}]}}},
        _document([]),
        _document([{"key": "a"}]),
        _document([{"name": "A", "key": "a"}, {"name": "A", "key": "b"}]),
        _document([{"name": "A", "source": "xpath"}]),
        _document([{"name": "A", "source": "html_tag"}]),
        _document([{"name": "A", "exact_match": "yes", "key": "a"}]),
        _document([{"name": "A", "key": "a"}], newline_handling="squash"),
        _document([{"name": "A", "key": "a"}], null_value_handling="none"),
        _document([{"name": "A", "key": "a"}], delimiter=";;"),
    ],
)
def test_invalid_documents(document) -> None:
    with pytest.raises(ConfigError):
        parse_config(document)


def test_invalid_regex_is_reported_at_load_time() -> None:
    document = {
        "profiles": {
            "p": {
                "output_file": "o.csv",
                "content_type": "html",
                "columns": [{"name": "A", "regex": "(unclosed"}],
            }
        }
    }
    with pytest.raises(ConfigError, match="invalid regex"):
        parse_config(document)


def test_unreadable_and_malformed_files(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")
    broken = tmp_path / "broken.yaml"
    broken.write_text("profiles: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(broken)


def test_select_profile() -> None:
    config = parse_config(_document([{"name": "A", "key": "a"}]))
    assert select_profile(config, "p").name == "p"
    with pytest.raises(ProfileNotFoundError, match="available: p"):
        select_profile(config, "q")
    with pytest.raises(ConfigError):
        select_profile(config, "")


def test_chat_mode_resolution() -> None:
    document = {
        "profiles": {
            "teams": {"output_file": "t.csv", "columns": [{"name": "A", "key": "a"}]},
            "posts": {
                "output_file": "p.csv",
                "chat_cleanup": True,
                "columns": [{"name": "A", "key": "a"}, {"name": "B", "key": "b", "chat_cleanup": False}],
            },
            "other": {"output_file": "o.csv", "columns": [{"name": "A", "key": "a"}]},
        }
    }
    profiles = parse_config(document).profiles
    assert profiles["teams"].chat_mode(profiles["teams"].columns[0])
    assert profiles["posts"].chat_mode(profiles["posts"].columns[0])
    assert not profiles["posts"].chat_mode(profiles["posts"].columns[1])
    assert not profiles["other"].chat_mode(profiles["other"].columns[0])
