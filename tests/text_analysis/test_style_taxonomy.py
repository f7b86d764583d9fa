"""Tests for content categories and writing style descriptors."""
from __future__ import annotations

import pytest

from src.text_analysis.models import PatternMatch, Position
from src.text_analysis.taxonomy import (
    analyze_style,
    categorize_content,
    detect_language,
    determine_complexity,
    determine_formality,
    determine_perspective,
    determine_tone,
)


def _names(text: str, patterns=()) -> list[str]:
    return [category.name for category in categorize_content(text, list(patterns))]


def test_business_category_from_terms_or_patterns() -> None:
    assert _names("The project deadline moved.") == ["Business/Professional"]

    match = PatternMatch("action-items-1", "action-items", "Action Items", "x", Position(0, 1, 1), 0.3)
    assert _names("nothing relevant", [match]) == ["Business/Professional"]


def test_personal_category_from_pronoun_density() -> None:
    assert _names("I saw my cat. I fed my cat. I love me.") == ["Personal"]
    assert _names("I saw it.") == []


def test_academic_category_and_confidence() -> None:
    categories = categorize_content("Smith et al reported a new theory.", [])

    assert [category.name for category in categories] == ["Academic"]
    assert categories[0].confidence == pytest.approx(0.85)


def test_multiple_categories_keep_fixed_order() -> None:
    text = "Today I realized the research project needs more team time."

    assert _names(text) == ["Business/Professional", "Personal", "Academic"]


def test_language_is_reported_as_english() -> None:
    guess = detect_language("Bonjour tout le monde")

    assert (guess.code, guess.name) == ("en", "English")
    assert guess.confidence == pytest.approx(0.95)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Therefore we proceed. Furthermore it holds.", "formal"),
        ("yeah that was cool lol", "informal"),
        ("plain words only", "neutral"),
    ],
)
def test_determine_formality(text: str, expected: str) -> None:
    assert determine_formality(text) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("What a great and wonderful day", "positive"),
        ("That was terrible", "negative"),
        ("good start, bad ending", "mixed"),
        ("the sky is blue", "neutral"),
    ],
)
def test_determine_tone(text: str, expected: str) -> None:
    assert determine_tone(text) == expected


def test_determine_complexity_by_sentence_length() -> None:
    assert determine_complexity("Short one. Another short one.") == "simple"
    assert determine_complexity(" ".join(["word"] * 15) + ".") == "moderate"
    assert determine_complexity(" ".join(["word"] * 25) + ".") == "complex"
    assert determine_complexity("") == "simple"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("I went home and my dog greeted me.", "first-person"),
        ("You should check your notes.", "second-person"),
        ("They said she left with him.", "third-person"),
        ("We told you that our plan suits your team.", "mixed"),
        ("no pronouns here", "first-person"),
    ],
)
def test_determine_perspective(text: str, expected: str) -> None:
    assert determine_perspective(text) == expected


def test_analyze_style_combines_descriptors() -> None:
    style = analyze_style("I think this is great.")

    assert style.formality == "neutral"
    assert style.tone == "positive"
    assert style.complexity == "simple"
    assert style.perspective == "first-person"
