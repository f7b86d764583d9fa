"""Tests for the pattern matcher."""
from __future__ import annotations

from datetime import datetime

import pytest

from src.text_analysis.catalog import build_definition, default_catalog
from src.text_analysis.matcher import (
    calculate_pattern_stats,
    match_patterns,
    match_text,
    parse_group_value,
)
from src.text_analysis.models import PatternMatch, Position, ValueType


def _definition(expression: str, weight: float = 0.5):
    return build_definition(
        {
            "id": "probe",
            "name": "Probe",
            "expression": expression,
            "weight": weight,
            "category": "content",
            "formats": ["task-lists"],
        }
    )


def test_long_match_keeps_full_weight() -> None:
    matches = match_patterns("a" * 50, [_definition("a{50}")])

    assert len(matches) == 1
    assert matches[0].confidence == pytest.approx(0.5)
    assert matches[0].match_id == "probe-1"


def test_short_match_is_scaled_down() -> None:
    matches = match_patterns("ab", [_definition("ab", weight=1.0)])

    assert matches[0].confidence == pytest.approx(0.7 + (2 / 50) * 0.3)


def test_partially_filled_groups_blend_confidence() -> None:
    matches = match_patterns("a", [_definition("(a)(b)?", weight=1.0)])

    length_factor = 0.7 + (1 / 50) * 0.3
    fill_factor = 0.8 + (1 / 2) * 0.2
    assert matches[0].confidence == pytest.approx(length_factor * fill_factor)


def test_fully_filled_groups_keep_length_score() -> None:
    matches = match_patterns("ab", [_definition("(a)(b)?", weight=1.0)])

    assert matches[0].confidence == pytest.approx(0.7 + (2 / 50) * 0.3)


def test_zero_length_matches_advance_cursor() -> None:
    matches = match_patterns("ab", [_definition("x*")])

    assert [match.position.start for match in sorted(matches, key=lambda item: item.position.start)] == [0, 1, 2]


def test_quantity_extraction_parses_typed_values() -> None:
    definition = default_catalog().get_pattern("shopping-quantity")
    assert definition is not None

    matches = match_patterns("Buy 2 lbs apples", [definition])

    assert len(matches) == 1
    data = matches[0].data
    assert data is not None
    assert data.raw == {"quantity": "2", "unit": "lbs"}
    assert data.parsed == {"quantity": 2.0, "unit": "lbs"}
    assert data.types == {"quantity": "number", "unit": "string"}
    assert matches[0].position == Position(start=4, end=9, line=1)


def test_unparseable_date_is_omitted_from_parsed_values() -> None:
    definition = default_catalog().get_pattern("meeting-date")
    assert definition is not None

    matches = match_patterns("Date: 13/45/2024", [definition])

    data = matches[0].data
    assert data is not None
    assert data.raw == {"date": "13/45/2024"}
    assert data.types == {"date": "date"}
    assert "date" not in data.parsed


def test_parseable_date_becomes_datetime() -> None:
    definition = default_catalog().get_pattern("meeting-date")
    assert definition is not None

    data = match_patterns("Date: 03/15/2024", [definition])[0].data

    assert data is not None
    assert data.parsed["date"] == datetime(2024, 3, 15)


def test_line_number_and_context_window() -> None:
    definition = default_catalog().get_pattern("meeting-attendees")
    assert definition is not None
    text = "x" * 60 + "\nAttendees: Bob\n" + "y" * 60

    match = match_patterns(text, [definition])[0]

    assert match.position.line == 2
    assert match.match == "Attendees: Bob"
    assert match.context.startswith("...")
    assert match.context.endswith("...")
    assert "Attendees: Bob" in match.context


def test_context_without_truncation_has_no_ellipsis() -> None:
    definition = default_catalog().get_pattern("meeting-attendees")
    assert definition is not None
    text = "first line\nAttendees: Alice"

    match = match_patterns(text, [definition])[0]

    assert match.context == text


def test_match_text_orders_by_descending_confidence() -> None:
    text = "Attendees: Alice\n- [ ] buy milk\nI feel grateful today.\nSource: Smith et al. 2020"

    matches = match_text(text)
    confidences = [match.confidence for match in matches]

    assert matches
    assert confidences == sorted(confidences, reverse=True)
    assert all(0.0 <= value <= 1.0 for value in confidences)


def test_repeated_scans_are_identical() -> None:
    text = "Agenda: budget\nAction item: email Bob"

    assert match_text(text) == match_text(text)


def test_empty_text_has_no_matches() -> None:
    assert match_text("") == []


@pytest.mark.parametrize(
    ("raw", "value_type", "expected"),
    [
        ("abc", ValueType.NUMBER, 0.0),
        ("3.5", ValueType.NUMBER, 3.5),
        ("inf", ValueType.NUMBER, 0.0),
        ("TRUE", ValueType.BOOLEAN, True),
        ("yes", ValueType.BOOLEAN, False),
        (" John@Example.COM ", ValueType.EMAIL, "john@example.com"),
        (" http://example.com ", ValueType.URL, "http://example.com"),
        ("  padded ", ValueType.STRING, "padded"),
        ("not a date", ValueType.DATE, None),
    ],
)
def test_parse_group_value(raw: str, value_type: ValueType, expected: object) -> None:
    assert parse_group_value(raw, value_type) == expected


def test_calculate_pattern_stats() -> None:
    position = Position(start=0, end=1, line=1)
    matches = [
        PatternMatch("a-1", "a", "A", "x", position, 0.8),
        PatternMatch("a-2", "a", "A", "y", position, 0.4),
        PatternMatch("b-3", "b", "B", "z", position, 0.7),
    ]

    stats = calculate_pattern_stats(matches)

    assert stats.total == 3
    assert stats.average_confidence == pytest.approx((0.8 + 0.4 + 0.7) / 3)
    assert stats.counts_by_pattern_name == {"A": 2, "B": 1}
    assert stats.high_confidence_count == 2


def test_calculate_pattern_stats_empty() -> None:
    stats = calculate_pattern_stats([])

    assert stats.total == 0
    assert stats.average_confidence == 0.0
    assert stats.high_confidence_count == 0
