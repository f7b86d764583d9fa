"""Tests for format prediction scoring."""
from __future__ import annotations

import pytest

from src.text_analysis.classifier import classify_content, extract_keywords, predict_formats, to_percentage
from src.text_analysis.config import ClassifierSettings
from src.text_analysis.matcher import match_text
from src.text_analysis.models import ContentStructure, OutputFormat
from src.text_analysis.structure import analyze_structure

MEETING_TEXT = """# Team Meeting
Attendees: Alice Smith, Bob Jones
Date: 03/15/2024

## Agenda
Agenda: quarterly roadmap review
- Budget review
- Hiring plan

## Action Items
Action item: Alice to send report by Friday
Action: Alice to send report by Friday
Decision: ship the beta next sprint
"""

SHOPPING_TEXT = """- 2 lbs apples
- milk
- bread
- eggs
- 1 dozen bananas
- cheese
- chicken
- lettuce
"""


def _classify(text: str):
    return classify_content(text, analyze_structure(text), match_text(text))


def test_meeting_text_ranks_meeting_notes_first() -> None:
    classification = _classify(MEETING_TEXT)

    assert classification.top_prediction is not None
    assert classification.top_prediction.output_format is OutputFormat.MEETING_NOTES


def test_predictions_cover_every_format_in_order() -> None:
    predictions = _classify(MEETING_TEXT).predictions
    confidences = [prediction.confidence for prediction in predictions]

    assert len(predictions) == 6
    assert {prediction.output_format for prediction in predictions} == set(OutputFormat)
    assert confidences == sorted(confidences, reverse=True)
    assert all(0 <= value <= 100 for value in confidences)


def test_factors_compose_the_overall_score() -> None:
    for prediction in _classify(MEETING_TEXT).predictions:
        names = [factor.name for factor in prediction.factors]
        assert names == ["Pattern Matches", "Structure Analysis", "Content Analysis", "Keyword Matching"]
        assert [factor.weight for factor in prediction.factors] == [0.4, 0.25, 0.2, 0.15]
        composed = sum(factor.weight * factor.score for factor in prediction.factors)
        assert prediction.scores.overall == pytest.approx(composed)
        assert prediction.confidence == to_percentage(prediction.scores.overall)


def test_meeting_structure_factor_description() -> None:
    prediction = next(
        item for item in _classify(MEETING_TEXT).predictions if item.output_format is OutputFormat.MEETING_NOTES
    )

    structure_factor = prediction.factors[1]
    assert structure_factor.score == 1.0
    assert structure_factor.description == "3 sections, 1 lists"
    assert prediction.factors[0].description == "5 of 5 patterns matched"


def test_shopping_list_ranks_shopping_first() -> None:
    classification = _classify(SHOPPING_TEXT)

    assert classification.top_prediction is not None
    assert classification.top_prediction.output_format is OutputFormat.SHOPPING_LISTS


def test_empty_input_falls_back_to_journal_notes() -> None:
    predictions = predict_formats("", ContentStructure(), [])

    assert len(predictions) == 6
    assert predictions[0].output_format is OutputFormat.JOURNAL_NOTES
    assert all(prediction.confidence == 0 for prediction in predictions)


def test_fallback_format_is_configurable() -> None:
    settings = ClassifierSettings(fallback_format=OutputFormat.TASK_LISTS)

    predictions = predict_formats("", ContentStructure(), [], settings=settings)

    assert predictions[0].output_format is OutputFormat.TASK_LISTS


def test_to_percentage_rounds_and_clamps() -> None:
    assert to_percentage(0.125) == 13
    assert to_percentage(2.0) == 100
    assert to_percentage(-1.0) == 0
    assert to_percentage(float("nan")) == 0


def test_extract_keywords_by_frequency() -> None:
    assert extract_keywords("alpha beta beta gamma gamma gamma an") == ["gamma", "beta", "alpha"]
    assert extract_keywords("one two three four", limit=1) == ["three"]


def test_classification_includes_categories_and_style() -> None:
    classification = _classify(MEETING_TEXT)

    assert "Business/Professional" in [category.name for category in classification.categories]
    assert classification.language.code == "en"
    assert classification.style.complexity in {"simple", "moderate", "complex"}
