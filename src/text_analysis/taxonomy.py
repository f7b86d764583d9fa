"""Coarse content categories, language guess and writing style descriptors."""
from __future__ import annotations

import re
from typing import Sequence

from .models import ContentCategory, LanguageGuess, PatternMatch, WritingStyle
from .normalization import split_sentences, split_words

__all__ = [
    "categorize_content",
    "detect_language",
    "analyze_style",
    "determine_formality",
    "determine_tone",
    "determine_complexity",
    "determine_perspective",
]

_BUSINESS_TERMS = re.compile(r"\b(meeting|project|deadline|client|team|manager|strategy)\b", re.IGNORECASE)
_PERSONAL_TERMS = re.compile(r"\b(i feel|i think|my day|today i|grateful|realized)\b", re.IGNORECASE)
_FIRST_PERSON_SINGULAR = re.compile(r"\b(i|me|my|myself)\b", re.IGNORECASE)
_ACADEMIC_TERMS = re.compile(
    r"\b(research|study|hypothesis|theory|methodology|citation|reference|et al)\b",
    re.IGNORECASE,
)

_FORMAL_TERMS = re.compile(r"\b(therefore|thus|consequently|furthermore|moreover|shall|hereby)\b", re.IGNORECASE)
_INFORMAL_TERMS = re.compile(r"\b(gonna|wanna|yeah|cool|awesome|hey|lol)\b", re.IGNORECASE)
_POSITIVE_TERMS = re.compile(r"\b(happy|joy|success|excellent|wonderful|great|good|amazing)\b", re.IGNORECASE)
_NEGATIVE_TERMS = re.compile(r"\b(sad|bad|terrible|awful|fail|poor|horrible|disappointing)\b", re.IGNORECASE)

_PERSPECTIVES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("first-person", re.compile(r"\b(i|me|my|we|us|our)\b", re.IGNORECASE)),
    ("second-person", re.compile(r"\b(you|your|yours)\b", re.IGNORECASE)),
    ("third-person", re.compile(r"\b(he|she|they|it|him|her|them)\b", re.IGNORECASE)),
)

_BUSINESS_PATTERN_PREFIXES = ("meeting", "action")
_ACADEMIC_PATTERN_PREFIXES = ("research", "citation")


def _has_prefix(patterns: Sequence[PatternMatch], prefixes: tuple[str, ...]) -> bool:
    return any(match.pattern_id.startswith(prefixes) for match in patterns)


def categorize_content(text: str, patterns: Sequence[PatternMatch]) -> list[ContentCategory]:
    """Flag business, personal and academic content with fixed confidences."""

    categories: list[ContentCategory] = []
    if _BUSINESS_TERMS.search(text) or _has_prefix(patterns, _BUSINESS_PATTERN_PREFIXES):
        categories.append(
            ContentCategory(
                name="Business/Professional",
                confidence=0.8,
                description="Contains business or professional terminology",
                keywords=("meeting", "project", "deadline", "team"),
            )
        )
    if _PERSONAL_TERMS.search(text) or len(_FIRST_PERSON_SINGULAR.findall(text)) > 5:
        categories.append(
            ContentCategory(
                name="Personal",
                confidence=0.75,
                description="Contains personal or reflective content",
                keywords=("i", "my", "feel", "think"),
            )
        )
    if _ACADEMIC_TERMS.search(text) or _has_prefix(patterns, _ACADEMIC_PATTERN_PREFIXES):
        categories.append(
            ContentCategory(
                name="Academic",
                confidence=0.85,
                description="Contains academic or research content",
                keywords=("study", "research", "citation", "theory"),
            )
        )
    return categories


def detect_language(text: str) -> LanguageGuess:
    # TODO: replace with a real detector; every input is reported as English.
    return LanguageGuess(code="en", name="English", confidence=0.95)


def determine_formality(text: str) -> str:
    formal = len(_FORMAL_TERMS.findall(text))
    informal = len(_INFORMAL_TERMS.findall(text))
    if formal > informal * 2:
        return "formal"
    if informal > formal * 2:
        return "informal"
    return "neutral"


def determine_tone(text: str) -> str:
    positive = len(_POSITIVE_TERMS.findall(text))
    negative = len(_NEGATIVE_TERMS.findall(text))
    if positive and negative:
        return "mixed"
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def _average_sentence_length(text: str) -> float:
    sentences = split_sentences(text)
    if not sentences:
        return 0.0
    return sum(len(split_words(sentence)) for sentence in sentences) / len(sentences)


def determine_complexity(text: str) -> str:
    average = _average_sentence_length(text)
    if average > 20:
        return "complex"
    if average > 12:
        return "moderate"
    return "simple"


def determine_perspective(text: str) -> str:
    """Dominant pronoun perspective, ``mixed`` when the runner-up is over half the leader.

    Ties keep first, second, third person order, so text without pronouns
    reports ``first-person``.
    """

    counts = [(name, len(pattern.findall(text))) for name, pattern in _PERSPECTIVES]
    counts.sort(key=lambda item: item[1], reverse=True)
    (leader, leader_count), (_, runner_up_count) = counts[0], counts[1]
    if runner_up_count > leader_count * 0.5:
        return "mixed"
    return leader


def analyze_style(text: str) -> WritingStyle:
    return WritingStyle(
        formality=determine_formality(text),
        tone=determine_tone(text),
        complexity=determine_complexity(text),
        perspective=determine_perspective(text),
    )
