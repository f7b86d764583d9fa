"""Regex-driven entity extraction (dates, times, contacts, links and tags)."""
from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Callable, Iterable

from .models import EntityStatistics, EntityType, ExtractedEntity, Position
from .normalization import line_number_at, mean

__all__ = ["ENTITY_CONFIDENCE", "extract_entities", "summarize_entities"]

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r"\b(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})\b")
_TIME_PATTERN = re.compile(r"\b(\d{1,2}:\d{2}(?:\s*(?:am|pm))?)\b", re.IGNORECASE)
_EMAIL_PATTERN = re.compile(r"\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b")
_URL_PATTERN = re.compile(r"\b((?:https?://|www\.)[^\s<>\"']+)", re.IGNORECASE)
_PHONE_PATTERN = re.compile(r"\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
# The lookbehind keeps the domain half of an email address from reading as a mention.
_MENTION_PATTERN = re.compile(r"(?<![\w.+-])@([a-zA-Z0-9_]+)")
_HASHTAG_PATTERN = re.compile(r"#([a-zA-Z0-9_]+)")

ENTITY_CONFIDENCE: dict[EntityType, float] = {
    EntityType.DATE: 0.9,
    EntityType.TIME: 0.85,
    EntityType.EMAIL: 0.95,
    EntityType.URL: 0.9,
    EntityType.PHONE: 0.85,
    EntityType.MENTION: 0.9,
    EntityType.HASHTAG: 0.9,
}


def _value(match: re.Match[str]) -> str:
    return match.group(1) if match.groups() else match.group(0)


def _email_value(match: re.Match[str]) -> str:
    return match.group(1).lower()


_SCANS: tuple[tuple[EntityType, re.Pattern[str], Callable[[re.Match[str]], str]], ...] = (
    (EntityType.DATE, _DATE_PATTERN, _value),
    (EntityType.TIME, _TIME_PATTERN, _value),
    (EntityType.EMAIL, _EMAIL_PATTERN, _email_value),
    (EntityType.URL, _URL_PATTERN, _value),
    (EntityType.PHONE, _PHONE_PATTERN, _value),
    (EntityType.MENTION, _MENTION_PATTERN, _value),
    (EntityType.HASHTAG, _HASHTAG_PATTERN, _value),
)


def _scan(
    text: str,
    entity_type: EntityType,
    pattern: re.Pattern[str],
    normalize: Callable[[re.Match[str]], str],
) -> Iterable[ExtractedEntity]:
    confidence = ENTITY_CONFIDENCE[entity_type]
    for match in pattern.finditer(text):
        start, end = match.span()
        yield ExtractedEntity(
            entity_type=entity_type,
            value=normalize(match),
            original_text=match.group(0),
            position=Position(start=start, end=end, line=line_number_at(text, start)),
            confidence=confidence,
        )


def extract_entities(
    text: str,
    *,
    entity_types: Iterable[EntityType | str] | None = None,
) -> list[ExtractedEntity]:
    """Run every entity scan and merge the results by start offset.

    ``entity_types`` limits the scans that run; values may be ``EntityType``
    members or their string names. Unknown names are ignored.
    """

    if not text:
        return []

    selected: set[EntityType] | None = None
    if entity_types is not None:
        selected = set()
        for item in entity_types:
            try:
                selected.add(item if isinstance(item, EntityType) else EntityType(str(item).strip().lower()))
            except ValueError:
                logger.debug("Ignoring unknown entity type %r", item)

    entities: list[ExtractedEntity] = []
    for entity_type, pattern, normalize in _SCANS:
        if selected is not None and entity_type not in selected:
            continue
        entities.extend(_scan(text, entity_type, pattern, normalize))

    entities.sort(key=lambda entity: entity.position.start)
    return entities


def summarize_entities(entities: Iterable[ExtractedEntity]) -> EntityStatistics:
    collected = list(entities)
    by_type = Counter(entity.entity_type.value for entity in collected)
    return EntityStatistics(
        total=len(collected),
        by_type=dict(by_type),
        average_confidence=mean(entity.confidence for entity in collected),
        unique_entities=len({entity.value for entity in collected}),
    )
