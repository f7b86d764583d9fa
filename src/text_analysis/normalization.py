"""Shared text helpers for the analysis modules."""
from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Iterable

__all__ = [
    "split_lines",
    "split_sentences",
    "split_paragraphs",
    "split_words",
    "word_tokens",
    "parse_date",
    "clamp",
    "round_half_up",
    "finite_or_zero",
    "mean",
    "line_number_at",
]

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
_PARAGRAPH_BOUNDARY = re.compile(r"\n\s*\n")
_WORD_TOKEN = re.compile(r"\b\w+\b")

# Ordered from most to least specific; the first format that parses wins.
_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%m/%d/%y",
    "%m-%d-%y",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
)


def split_lines(text: str) -> list[str]:
    return text.split("\n")


def split_sentences(text: str) -> list[str]:
    """Split on runs of terminal punctuation, dropping blank fragments."""

    return [sentence for sentence in _SENTENCE_BOUNDARY.split(text) if sentence.strip()]


def split_paragraphs(text: str) -> list[str]:
    return [block for block in _PARAGRAPH_BOUNDARY.split(text) if block.strip()]


def split_words(text: str) -> list[str]:
    return text.split()


def word_tokens(text: str) -> list[str]:
    return _WORD_TOKEN.findall(text.lower())


def parse_date(value: str) -> datetime | None:
    """Parse common numeric and long-form dates, returning ``None`` on failure."""

    candidate = re.sub(r"\s+", " ", value).strip()
    if not candidate:
        return None
    for date_format in _DATE_FORMATS:
        try:
            return datetime.strptime(candidate, date_format)
        except ValueError:
            continue
    return None


def finite_or_zero(value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def clamp(value: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    number = finite_or_zero(value)
    if number < minimum:
        return minimum
    if number > maximum:
        return maximum
    return number


def round_half_up(value: float, places: int = 0) -> float:
    """Round to ``places`` decimals with halves going up, unlike ``round``."""

    scale = 10**places
    return math.floor(finite_or_zero(value) * scale + 0.5) / scale


def mean(values: Iterable[float], default: float = 0.0) -> float:
    collected = [finite_or_zero(value) for value in values]
    if not collected:
        return default
    return sum(collected) / len(collected)


def line_number_at(text: str, offset: int) -> int:
    """Return the 1-based line number containing ``offset``."""

    return text.count("\n", 0, offset) + 1
