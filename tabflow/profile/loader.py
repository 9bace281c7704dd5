"""
Profile document loader.

The profile document is a YAML file with a ``profiles`` mapping plus
global output settings::

    profiles:
      posts:
        output_file: posts.csv
        parse_body: body.content
        content_type: html
        columns:
          - name: ID
            key: id
          - name: Owner
            regex: Owner
            exact_match: true
            clean_html: true
    newline_handling: replace
    newline_replacement: " | "
    null_value_handling: empty

`load_config` parses and validates the whole document into frozen
dataclasses; `select_profile` picks one profile by name.  Every problem
is reported as a `ConfigError` naming the offending profile or column,
since configuration errors are the only fatal errors of a run.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import yaml  # type: ignore

from ..errors import ConfigError, ProfileNotFoundError
from .schema import (
    NEWLINE_MODES,
    NULL_SENTINELS,
    SOURCE_HTML_LABEL,
    SOURCE_HTML_TAG,
    SOURCE_REGEX_LINE,
    SOURCES,
    Column,
    Config,
    OutputPolicy,
    Profile,
    infer_source,
)

logger = logging.getLogger(__name__)


def _as_bool(value: Any, where: str, field_name: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise ConfigError(f"{where}: '{field_name}' must be true or false, got {value!r}")


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_keywords(value: Any, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value if v is not None and str(v) != "")
    raise ConfigError(f"{where}: 'keywords' must be a list of strings")


def _parse_column(raw: Any, index: int, profile_name: str, content_type: str) -> Column:
    where = f"profile '{profile_name}', column #{index + 1}"
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{where}: expected a mapping")
    # 'column' is the older spelling of 'name'
    name = _as_str(raw.get("name", raw.get("column")))
    if not name:
        raise ConfigError(f"{where}: missing 'name'")
    where = f"profile '{profile_name}', column '{name}'"

    key = _as_str(raw.get("key"))
    regex = _as_str(raw.get("regex"))
    keywords = _as_keywords(raw.get("keywords"), where)
    tag = _as_str(raw.get("tag")).strip().lower()
    exact_match = _as_bool(raw.get("exact_match"), where, "exact_match")

    source = _as_str(raw.get("source")).strip().lower()
    if not source:
        source = infer_source(tag=tag, regex=regex, keywords=keywords, content_type=content_type)
    elif source not in SOURCES:
        raise ConfigError(f"{where}: unknown source '{source}' (expected one of {', '.join(SOURCES)})")

    if source == SOURCE_HTML_TAG and not tag:
        raise ConfigError(f"{where}: source 'html_tag' requires 'tag'")
    if source == SOURCE_HTML_LABEL and not (regex or keywords):
        raise ConfigError(f"{where}: source 'html_label' requires 'regex' or 'keywords'")
    if source == SOURCE_REGEX_LINE and not (regex or key):
        raise ConfigError(f"{where}: source 'regex_line' requires 'regex' or 'key'")
    if source == SOURCE_HTML_LABEL and regex and not exact_match:
        try:
            re.compile(regex)
        except re.error as exc:
            raise ConfigError(f"{where}: invalid regex {regex!r}: {exc}") from exc

    chat_cleanup = raw.get("chat_cleanup")
    if chat_cleanup is not None:
        chat_cleanup = _as_bool(chat_cleanup, where, "chat_cleanup")

    return Column(
        name=name,
        source=source,
        key=key,
        regex=regex,
        keywords=keywords,
        exact_match=exact_match,
        extract_to_end=_as_bool(raw.get("extract_to_end"), where, "extract_to_end"),
        clean_html=_as_bool(raw.get("clean_html"), where, "clean_html"),
        chat_cleanup=chat_cleanup,
        tag=tag,
        format=_as_str(raw.get("format")),
    )


def _parse_profile(name: str, raw: Any) -> Profile:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"profile '{name}': expected a mapping")
    output_file = _as_str(raw.get("output_file"))
    if not output_file:
        raise ConfigError(f"profile '{name}': missing 'output_file'")
    content_type = _as_str(raw.get("content_type"))
    raw_columns = raw.get("columns")
    if not isinstance(raw_columns, list) or not raw_columns:
        raise ConfigError(f"profile '{name}': 'columns' must be a non-empty list")

    columns: List[Column] = []
    seen: set = set()
    for index, raw_column in enumerate(raw_columns):
        column = _parse_column(raw_column, index, name, content_type)
        if column.name in seen:
            raise ConfigError(f"profile '{name}': duplicate column name '{column.name}'")
        seen.add(column.name)
        columns.append(column)

    chat_cleanup = raw.get("chat_cleanup")
    if chat_cleanup is not None:
        chat_cleanup = _as_bool(chat_cleanup, f"profile '{name}'", "chat_cleanup")

    return Profile(
        name=name,
        columns=tuple(columns),
        output_file=output_file,
        parse_body=_as_str(raw.get("parse_body")),
        content_type=content_type,
        chat_cleanup=chat_cleanup,
    )


def _parse_policy(raw: Mapping[str, Any]) -> OutputPolicy:
    newline_handling = _as_str(raw.get("newline_handling")) or "keep"
    if newline_handling not in NEWLINE_MODES:
        raise ConfigError(
            f"newline_handling must be one of {', '.join(NEWLINE_MODES)}, got '{newline_handling}'"
        )
    null_handling = _as_str(raw.get("null_value_handling")) or "empty"
    if null_handling not in NULL_SENTINELS:
        raise ConfigError(
            f"null_value_handling must be one of {', '.join(NULL_SENTINELS)}, got '{null_handling}'"
        )
    delimiter = _as_str(raw.get("delimiter")) or ","
    if len(delimiter) != 1:
        raise ConfigError(f"delimiter must be a single character, got {delimiter!r}")
    return OutputPolicy(
        newline_handling=newline_handling,
        newline_replacement=_as_str(raw.get("newline_replacement")),
        null_value_handling=null_handling,
        delimiter=delimiter,
    )


def parse_config(data: Any) -> Config:
    """Validate an already decoded profile document."""
    if not isinstance(data, Mapping):
        raise ConfigError("profile document must be a mapping")
    raw_profiles = data.get("profiles")
    if not isinstance(raw_profiles, Mapping) or not raw_profiles:
        raise ConfigError("profile document defines no 'profiles'")
    profiles: Dict[str, Profile] = {
        str(name): _parse_profile(str(name), raw) for name, raw in raw_profiles.items()
    }
    return Config(profiles=profiles, policy=_parse_policy(data))


def load_config(config_path: str | Path) -> Config:
    """Read and validate the YAML profile document at ``config_path``."""
    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read profile document {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse profile document {path}: {exc}") from exc
    config = parse_config(data)
    logger.debug("Loaded configuration from %s: %s", path, config)
    return config


def select_profile(config: Config, name: str) -> Profile:
    if not name:
        raise ConfigError("no profile selected")
    try:
        return config.profiles[name]
    except KeyError:
        raise ProfileNotFoundError(name, list(config.profiles)) from None
