"""Scan text against pattern definitions and score each occurrence."""
from __future__ import annotations

import itertools
import logging
import re
from collections import Counter
from datetime import datetime
from typing import Iterable, Iterator, Sequence

from .catalog import PatternCatalog, default_catalog
from .models import (
    ExtractedValue,
    ExtractionGroup,
    PatternData,
    PatternDefinition,
    PatternMatch,
    PatternStats,
    Position,
    ValueType,
)
from .normalization import clamp, finite_or_zero, line_number_at, mean, parse_date

__all__ = [
    "DEFAULT_CONTEXT_WINDOW",
    "HIGH_CONFIDENCE_THRESHOLD",
    "match_patterns",
    "match_text",
    "calculate_pattern_stats",
    "score_match",
    "parse_group_value",
]

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_WINDOW = 50
HIGH_CONFIDENCE_THRESHOLD = 0.7

_TRUTHY = {"true", "1"}


def score_match(definition: PatternDefinition, matched: re.Match[str]) -> float:
    """Weight scaled by match length and, when groups exist, by group fill rate."""

    confidence = definition.weight
    length_factor = min(len(matched.group(0)) / 50, 1.0)
    confidence *= 0.7 + length_factor * 0.3

    total_groups = len(matched.groups())
    if total_groups:
        filled = sum(1 for value in matched.groups() if value)
        confidence *= 0.8 + (filled / total_groups) * 0.2

    return clamp(confidence)


def parse_group_value(raw: str, value_type: ValueType) -> str | float | bool | datetime | None:
    """Convert a captured string according to its declared type."""

    if value_type is ValueType.NUMBER:
        try:
            return finite_or_zero(float(raw.strip()))
        except ValueError:
            return 0.0
    if value_type is ValueType.DATE:
        return parse_date(raw)
    if value_type is ValueType.BOOLEAN:
        return raw.strip().lower() in _TRUTHY
    if value_type is ValueType.EMAIL:
        return raw.strip().lower()
    return raw.strip()


def _extract_data(groups: Sequence[ExtractionGroup], matched: re.Match[str]) -> PatternData | None:
    fields: dict[str, ExtractedValue] = {}
    for group in groups:
        raw = matched.group(group.name)
        if not raw:
            continue
        fields[group.name] = ExtractedValue(
            name=group.name,
            value_type=group.value_type,
            raw=raw,
            value=parse_group_value(raw, group.value_type),
        )
    return PatternData(fields) if fields else None


def _context(text: str, start: int, end: int, window: int) -> str:
    lower = max(0, start - window)
    upper = min(len(text), end + window)
    snippet = text[lower:upper]
    if lower > 0:
        snippet = "..." + snippet
    if upper < len(text):
        snippet = snippet + "..."
    return snippet


def _scan(
    definition: PatternDefinition,
    text: str,
    context_window: int,
    sequence: Iterator[int],
) -> Iterable[PatternMatch]:
    cursor = 0
    length = len(text)
    while cursor <= length:
        matched = definition.regex.search(text, cursor)
        if matched is None:
            break
        start, end = matched.span()
        cursor = end if end > start else end + 1
        yield PatternMatch(
            match_id=f"{definition.pattern_id}-{next(sequence)}",
            pattern_id=definition.pattern_id,
            name=definition.name,
            match=matched.group(0),
            position=Position(start=start, end=end, line=line_number_at(text, start)),
            confidence=score_match(definition, matched),
            data=_extract_data(definition.extraction, matched) if definition.extraction else None,
            context=_context(text, start, end, context_window),
        )


def match_patterns(
    text: str,
    patterns: Iterable[PatternDefinition],
    *,
    context_window: int = DEFAULT_CONTEXT_WINDOW,
) -> list[PatternMatch]:
    """Return every non-overlapping match of ``patterns`` ordered by confidence."""

    if not text:
        return []
    # Sequence numbers are scoped to a single call.
    sequence = itertools.count(1)
    matches: list[PatternMatch] = []
    for definition in patterns:
        matches.extend(_scan(definition, text, context_window, sequence))
    matches.sort(key=lambda item: item.confidence, reverse=True)
    logger.debug("Matched %d pattern occurrences", len(matches))
    return matches


def match_text(
    text: str,
    *,
    catalog: PatternCatalog | None = None,
    context_window: int = DEFAULT_CONTEXT_WINDOW,
) -> list[PatternMatch]:
    """Run ``match_patterns`` against every definition in ``catalog``."""

    source = catalog if catalog is not None else default_catalog()
    return match_patterns(text, source.get_all_patterns(), context_window=context_window)


def calculate_pattern_stats(
    matches: Sequence[PatternMatch],
    *,
    high_confidence_threshold: float = HIGH_CONFIDENCE_THRESHOLD,
) -> PatternStats:
    counts = Counter(match.name for match in matches)
    return PatternStats(
        total=len(matches),
        average_confidence=mean(match.confidence for match in matches),
        counts_by_pattern_name=dict(counts),
        high_confidence_count=sum(1 for match in matches if match.confidence >= high_confidence_threshold),
    )
