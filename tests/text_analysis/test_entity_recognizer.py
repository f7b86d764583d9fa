"""Tests for entity extraction."""
from __future__ import annotations

import pytest

from src.text_analysis.entities import extract_entities, summarize_entities
from src.text_analysis.models import EntityType

MIXED_TEXT = (
    "Call 555-123-4567 at 3:30 pm on 12/25/2024, email a@b.io, "
    "see https://example.com #launch @sam"
)


def test_single_email_entity() -> None:
    entities = extract_entities("john@example.com")

    assert len(entities) == 1
    entity = entities[0]
    assert entity.entity_type is EntityType.EMAIL
    assert entity.value == "john@example.com"
    assert entity.confidence == 0.95


def test_mixed_text_finds_every_entity_type() -> None:
    entities = extract_entities(MIXED_TEXT)

    assert {entity.entity_type for entity in entities} == set(EntityType)
    assert len(entities) == 7

    by_type = {entity.entity_type: entity for entity in entities}
    assert by_type[EntityType.PHONE].value == "555-123-4567"
    assert by_type[EntityType.TIME].original_text == "3:30 pm"
    assert by_type[EntityType.DATE].value == "12/25/2024"
    assert by_type[EntityType.URL].value == "https://example.com"
    assert by_type[EntityType.HASHTAG].value == "launch"
    assert by_type[EntityType.MENTION].value == "sam"


def test_entities_are_sorted_and_spans_reproduce_text() -> None:
    entities = extract_entities(MIXED_TEXT)

    starts = [entity.position.start for entity in entities]
    assert starts == sorted(starts)
    for entity in entities:
        assert MIXED_TEXT[entity.position.start : entity.position.end] == entity.original_text
        assert 0.0 <= entity.confidence <= 1.0


def test_entity_type_filter() -> None:
    entities = extract_entities(MIXED_TEXT, entity_types=["email", EntityType.URL, "unknown"])

    assert {entity.entity_type for entity in entities} == {EntityType.EMAIL, EntityType.URL}


def test_line_numbers_are_one_based() -> None:
    entities = extract_entities("first\nsecond #tag")

    assert entities[0].position.line == 2


def test_empty_text_has_no_entities() -> None:
    assert extract_entities("") == []


def test_summarize_entities() -> None:
    entities = extract_entities("#one #two #one john@example.com")

    stats = summarize_entities(entities)

    assert stats.total == 4
    assert stats.by_type == {"hashtag": 3, "email": 1}
    assert stats.unique_entities == 3
    assert stats.average_confidence == pytest.approx((0.9 * 3 + 0.95) / 4)
