"""Tests for matching harvested labels to profile columns."""

from __future__ import annotations

from tabflow.normalize.matcher import assign_labels, column_matches, match_column
from tabflow.profile.schema import Column


def _label_column(name: str, **rules) -> Column:
    return Column(name=name, source="html_label", **rules)


def test_exact_match_on_regex_text() -> None:
    column = _label_column("N", regex="Na.e", exact_match=True)
    assert column_matches("Na.e", column)
    assert not column_matches("Name", column)


def test_exact_match_on_keywords() -> None:
    column = _label_column("O", keywords=("Owner", "Assignee"), exact_match=True)
    assert column_matches("Assignee", column)
    assert not column_matches("assignee", column)
    assert not column_matches("Owner name", column)


def test_regex_must_match_whole_label() -> None:
    column = _label_column("N", regex="Na.e")
    assert column_matches("Name", column)
    assert not column_matches("My Name", column)
    assert not column_matches("Names", column)


def test_keywords_are_case_insensitive_substrings() -> None:
    column = _label_column("O", keywords=("owner",))
    assert column_matches("Project OWNER", column)
    assert not column_matches("Lead", column)


def test_regex_takes_precedence_over_keywords() -> None:
    column = _label_column("O", regex="Lead", keywords=("owner",))
    assert column_matches("Lead", column)
    assert not column_matches("Owner", column)


def test_column_without_rules_matches_nothing() -> None:
    assert not column_matches("Anything", _label_column("E"))


def test_first_column_in_profile_order_claims_label() -> None:
    first = _label_column("First", regex="Name")
    second = _label_column("Second", keywords=("name",))
    assert match_column("Name", [first, second]) is first
    assert assign_labels({"Name": "Alice"}, [first, second]) == {"First": "Alice"}


def test_column_keeps_first_matching_label() -> None:
    column = _label_column("O", keywords=("owner",))
    harvest = {"Owner": "A", "Backup owner": "B", "Other": "C"}
    assert assign_labels(harvest, [column]) == {"O": "A"}


def test_unmatched_labels_are_dropped() -> None:
    assert assign_labels({"Colour": "red"}, [_label_column("Size", regex="Size")]) == {}
