"""Core data models for the text analysis engine."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Mapping

__all__ = [
    "OutputFormat",
    "PatternCategory",
    "ValueType",
    "EntityType",
    "Position",
    "ExtractionGroup",
    "PatternDefinition",
    "ExtractedValue",
    "PatternData",
    "PatternMatch",
    "PatternStats",
    "DocumentSection",
    "StructureNode",
    "ListItem",
    "ListStructure",
    "ParagraphInfo",
    "IndentationPattern",
    "ContentStructure",
    "TextStatistics",
    "ExtractedEntity",
    "PredictionFactor",
    "FormatScores",
    "FormatPrediction",
    "ContentCategory",
    "LanguageGuess",
    "WritingStyle",
    "ContentClassification",
    "ConfidenceScores",
    "StageTimings",
    "PatternStatistics",
    "EntityStatistics",
    "AnalysisStatistics",
    "AnalysisMetadata",
    "TextAnalysis",
    "ValidationReport",
    "FormatDetection",
]


class OutputFormat(Enum):
    """Structured output formats the engine can recommend."""

    MEETING_NOTES = "meeting-notes"
    TASK_LISTS = "task-lists"
    JOURNAL_NOTES = "journal-notes"
    SHOPPING_LISTS = "shopping-lists"
    RESEARCH_NOTES = "research-notes"
    STUDY_NOTES = "study-notes"

    @property
    def display_name(self) -> str:
        return _FORMAT_DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: object) -> "OutputFormat | None":
        """Resolve a format hint, returning ``None`` for anything unrecognised."""

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        candidate = value.strip().lower().replace("_", "-")
        for member in cls:
            if member.value == candidate:
                return member
        return None


_FORMAT_DISPLAY_NAMES: dict[OutputFormat, str] = {
    OutputFormat.MEETING_NOTES: "Meeting Notes",
    OutputFormat.TASK_LISTS: "Task Lists",
    OutputFormat.JOURNAL_NOTES: "Journal/Notes",
    OutputFormat.SHOPPING_LISTS: "Shopping Lists",
    OutputFormat.RESEARCH_NOTES: "Research Notes",
    OutputFormat.STUDY_NOTES: "Study Notes",
}


class PatternCategory(Enum):
    """Broad role a pattern plays when scoring a format."""

    METADATA = "metadata"
    CONTENT = "content"
    STRUCTURE = "structure"


class ValueType(Enum):
    """Declared type of a named capture group."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    EMAIL = "email"
    URL = "url"


class EntityType(Enum):
    DATE = "date"
    TIME = "time"
    EMAIL = "email"
    URL = "url"
    PHONE = "phone"
    MENTION = "mention"
    HASHTAG = "hashtag"


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass(frozen=True, slots=True)
class Position:
    """Character span of a match plus its 1-based line number."""

    start: int
    end: int
    line: int

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end, "line": self.line}


# ---------------------------------------------------------------------------
# Pattern recognition
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ExtractionGroup:
    """Named capture group declared by a pattern definition."""

    name: str
    value_type: ValueType = ValueType.STRING
    required: bool = False


@dataclass(frozen=True, slots=True)
class PatternDefinition:
    """Weighted regular-expression rule tied to one or more output formats."""

    pattern_id: str
    name: str
    description: str
    regex: re.Pattern[str]
    weight: float
    category: PatternCategory
    formats: frozenset[OutputFormat]
    extraction: tuple[ExtractionGroup, ...] = ()

    def applies_to(self, output_format: OutputFormat) -> bool:
        return output_format in self.formats

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.pattern_id,
            "name": self.name,
            "description": self.description,
            "regex": self.regex.pattern,
            "weight": self.weight,
            "category": self.category.value,
            "formats": sorted(item.value for item in self.formats),
            "extraction": [
                {"name": group.name, "type": group.value_type.value, "required": group.required}
                for group in self.extraction
            ],
        }


@dataclass(frozen=True, slots=True)
class ExtractedValue:
    """Typed value pulled from a named capture group.

    ``value`` holds the parsed form whose Python type follows ``value_type``:
    ``str`` for string/email/url, ``float`` for number, ``bool`` for boolean and
    ``datetime`` for date. A date that could not be parsed keeps ``value=None``.
    """

    name: str
    value_type: ValueType
    raw: str
    value: str | float | bool | datetime | None

    @property
    def is_parsed(self) -> bool:
        return self.value is not None


@dataclass(frozen=True, slots=True)
class PatternData:
    """Ordered mapping of extracted fields for a single match."""

    fields: Mapping[str, ExtractedValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", dict(self.fields))

    def __iter__(self) -> Iterator[ExtractedValue]:
        return iter(self.fields.values())

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def raw(self) -> dict[str, str]:
        return {name: item.raw for name, item in self.fields.items()}

    @property
    def parsed(self) -> dict[str, Any]:
        return {name: item.value for name, item in self.fields.items() if item.is_parsed}

    @property
    def types(self) -> dict[str, str]:
        return {name: item.value_type.value for name, item in self.fields.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw": self.raw,
            "parsed": {name: _json_value(value) for name, value in self.parsed.items()},
            "types": self.types,
        }


@dataclass(frozen=True, slots=True)
class PatternMatch:
    """One located occurrence of a pattern definition."""

    match_id: str
    pattern_id: str
    name: str
    match: str
    position: Position
    confidence: float
    data: PatternData | None = None
    context: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.match_id,
            "pattern_id": self.pattern_id,
            "name": self.name,
            "match": self.match,
            "position": self.position.to_dict(),
            "confidence": self.confidence,
            "data": self.data.to_dict() if self.data is not None else None,
            "context": self.context,
        }


@dataclass(frozen=True, slots=True)
class PatternStats:
    total: int
    average_confidence: float
    counts_by_pattern_name: Mapping[str, int]
    high_confidence_count: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "counts_by_pattern_name", dict(self.counts_by_pattern_name))


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DocumentSection:
    """Contiguous span classified as header/title/quote/code/list/content."""

    section_id: str
    section_type: str
    title: str | None
    content: str
    position: Position
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.section_id,
            "type": self.section_type,
            "title": self.title,
            "content": self.content,
            "position": self.position.to_dict(),
            "confidence": self.confidence,
        }


@dataclass(frozen=True, slots=True)
class StructureNode:
    """Outline node stored in the flat node arena of a ``ContentStructure``.

    ``parent`` and ``children`` are indices into ``ContentStructure.nodes``.
    """

    index: int
    node_id: str
    level: int
    node_type: str
    content: str
    parent: int | None = None
    children: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "id": self.node_id,
            "level": self.level,
            "type": self.node_type,
            "content": self.content,
            "parent": self.parent,
            "children": list(self.children),
        }


@dataclass(frozen=True, slots=True)
class ListItem:
    content: str
    marker: str
    level: int
    item_type: str = "text"
    priority: str | None = None
    due_date: datetime | None = None
    completed: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "content": self.content,
            "marker": self.marker,
            "level": self.level,
            "type": self.item_type,
        }
        if self.priority is not None:
            payload["priority"] = self.priority
        if self.due_date is not None:
            payload["due_date"] = self.due_date.isoformat()
        if self.completed is not None:
            payload["completed"] = self.completed
        return payload


@dataclass(frozen=True, slots=True)
class ListStructure:
    list_type: str
    items: tuple[ListItem, ...]
    markers: tuple[str, ...]
    level: int
    consistency: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.list_type,
            "items": [item.to_dict() for item in self.items],
            "markers": list(self.markers),
            "level": self.level,
            "consistency": self.consistency,
        }


@dataclass(frozen=True, slots=True)
class ParagraphInfo:
    content: str
    length: int
    sentence_count: int
    paragraph_type: str
    sentiment: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "length": self.length,
            "sentences": self.sentence_count,
            "type": self.paragraph_type,
            "sentiment": self.sentiment,
        }


@dataclass(frozen=True, slots=True)
class IndentationPattern:
    kind: str
    size: int
    consistency: float
    lines: tuple[int, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "size": self.size,
            "consistency": self.consistency,
            "lines": list(self.lines),
        }


@dataclass(frozen=True, slots=True)
class ContentStructure:
    """Structural decomposition of a text buffer."""

    sections: tuple[DocumentSection, ...] = ()
    nodes: tuple[StructureNode, ...] = ()
    lists: tuple[ListStructure, ...] = ()
    paragraphs: tuple[ParagraphInfo, ...] = ()
    indentation: tuple[IndentationPattern, ...] = ()

    @property
    def roots(self) -> tuple[StructureNode, ...]:
        return tuple(node for node in self.nodes if node.parent is None)

    def children_of(self, node: StructureNode) -> tuple[StructureNode, ...]:
        return tuple(self.nodes[index] for index in node.children)

    def hierarchy_depth(self) -> int:
        """Number of nesting levels in the outline forest (0 when empty)."""

        depth = 0
        frontier = [(node.index, 1) for node in self.roots]
        while frontier:
            index, current = frontier.pop()
            depth = max(depth, current)
            frontier.extend((child, current + 1) for child in self.nodes[index].children)
        return depth

    @property
    def list_item_count(self) -> int:
        return sum(len(item.items) for item in self.lists)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sections": [section.to_dict() for section in self.sections],
            "hierarchy": [node.to_dict() for node in self.nodes],
            "roots": [node.index for node in self.roots],
            "lists": [item.to_dict() for item in self.lists],
            "paragraphs": [paragraph.to_dict() for paragraph in self.paragraphs],
            "indentation": [pattern.to_dict() for pattern in self.indentation],
        }


@dataclass(frozen=True, slots=True)
class TextStatistics:
    characters: int = 0
    words: int = 0
    sentences: int = 0
    paragraphs: int = 0
    lines: int = 0
    avg_word_length: float = 0.0
    avg_sentence_length: float = 0.0
    unique_words: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "characters": self.characters,
            "words": self.words,
            "sentences": self.sentences,
            "paragraphs": self.paragraphs,
            "lines": self.lines,
            "avg_word_length": self.avg_word_length,
            "avg_sentence_length": self.avg_sentence_length,
            "unique_words": self.unique_words,
        }


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ExtractedEntity:
    """Typed token located by one of the entity scans."""

    entity_type: EntityType
    value: str
    original_text: str
    position: Position
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.entity_type.value,
            "value": self.value,
            "original_text": self.original_text,
            "position": self.position.to_dict(),
            "confidence": self.confidence,
        }


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PredictionFactor:
    name: str
    weight: float
    score: float
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "weight": self.weight,
            "score": self.score,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class FormatScores:
    structure: float = 0.0
    content: float = 0.0
    patterns: float = 0.0
    keywords: float = 0.0
    overall: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "structure": self.structure,
            "content": self.content,
            "patterns": self.patterns,
            "keywords": self.keywords,
            "overall": self.overall,
        }


@dataclass(frozen=True, slots=True)
class FormatPrediction:
    """Confidence (0-100) for one candidate format with its explanation."""

    output_format: OutputFormat
    confidence: int
    factors: tuple[PredictionFactor, ...]
    scores: FormatScores

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.output_format.value,
            "confidence": self.confidence,
            "factors": [factor.to_dict() for factor in self.factors],
            "scores": self.scores.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class ContentCategory:
    name: str
    confidence: float
    description: str
    keywords: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "confidence": self.confidence,
            "description": self.description,
            "keywords": list(self.keywords),
        }


@dataclass(frozen=True, slots=True)
class LanguageGuess:
    code: str
    name: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {"language": self.code, "name": self.name, "confidence": self.confidence}


@dataclass(frozen=True, slots=True)
class WritingStyle:
    formality: str
    tone: str
    complexity: str
    perspective: str

    def to_dict(self) -> dict[str, str]:
        return {
            "formality": self.formality,
            "tone": self.tone,
            "complexity": self.complexity,
            "perspective": self.perspective,
        }


@dataclass(frozen=True, slots=True)
class ContentClassification:
    predictions: tuple[FormatPrediction, ...]
    categories: tuple[ContentCategory, ...]
    language: LanguageGuess
    style: WritingStyle

    @property
    def top_prediction(self) -> FormatPrediction | None:
        return self.predictions[0] if self.predictions else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format_predictions": [prediction.to_dict() for prediction in self.predictions],
            "categories": [category.to_dict() for category in self.categories],
            "language": self.language.to_dict(),
            "style": self.style.to_dict(),
        }


# ---------------------------------------------------------------------------
# Aggregate analysis record
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ConfidenceScores:
    overall: float
    format_detection: float
    pattern_recognition: float
    structure_analysis: float
    entity_extraction: float
    content_classification: float

    def to_dict(self) -> dict[str, float]:
        return {
            "overall": self.overall,
            "format_detection": self.format_detection,
            "pattern_recognition": self.pattern_recognition,
            "structure_analysis": self.structure_analysis,
            "entity_extraction": self.entity_extraction,
            "content_classification": self.content_classification,
        }


@dataclass(frozen=True, slots=True)
class StageTimings:
    """Wall-clock duration of each stage in seconds."""

    pattern_matching: float = 0.0
    structure_analysis: float = 0.0
    entity_extraction: float = 0.0
    classification: float = 0.0
    total: float = 0.0

    def stages(self) -> dict[str, float]:
        return {
            "pattern_matching": self.pattern_matching,
            "structure_analysis": self.structure_analysis,
            "entity_extraction": self.entity_extraction,
            "classification": self.classification,
        }

    def to_dict(self) -> dict[str, float]:
        return {**self.stages(), "total": self.total}


@dataclass(frozen=True, slots=True)
class PatternStatistics:
    patterns_tested: int
    matches: int
    success_rate: float
    average_confidence: float
    counts_by_pattern: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "counts_by_pattern", dict(self.counts_by_pattern))

    def to_dict(self) -> dict[str, Any]:
        return {
            "patterns_tested": self.patterns_tested,
            "matches": self.matches,
            "success_rate": self.success_rate,
            "average_confidence": self.average_confidence,
            "counts_by_pattern": dict(self.counts_by_pattern),
        }


@dataclass(frozen=True, slots=True)
class EntityStatistics:
    total: int
    by_type: Mapping[str, int]
    average_confidence: float
    unique_entities: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "by_type", dict(self.by_type))

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_type": dict(self.by_type),
            "average_confidence": self.average_confidence,
            "unique_entities": self.unique_entities,
        }


@dataclass(frozen=True, slots=True)
class AnalysisStatistics:
    timings: StageTimings
    content: TextStatistics
    patterns: PatternStatistics
    entities: EntityStatistics

    def to_dict(self) -> dict[str, Any]:
        return {
            "timings": self.timings.to_dict(),
            "content": self.content.to_dict(),
            "patterns": self.patterns.to_dict(),
            "entities": self.entities.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class AnalysisMetadata:
    analyzed_at: datetime
    duration_seconds: float
    version: str
    engine_name: str
    engine_version: str
    input_length: int
    input_lines: int
    input_words: int
    input_sentences: int
    input_checksum: str
    language: str = "en"
    target_format: OutputFormat | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "analyzed_at": self.analyzed_at.isoformat(),
            "duration_seconds": self.duration_seconds,
            "version": self.version,
            "engine": {"name": self.engine_name, "version": self.engine_version},
            "input": {
                "length": self.input_length,
                "lines": self.input_lines,
                "words": self.input_words,
                "sentences": self.input_sentences,
                "language": self.language,
                "checksum": self.input_checksum,
            },
            "target_format": _json_value(self.target_format),
        }


@dataclass(frozen=True, slots=True)
class TextAnalysis:
    """Complete, caller-owned result of one ``analyze_text`` call."""

    metadata: AnalysisMetadata
    structure: ContentStructure
    patterns: tuple[PatternMatch, ...]
    entities: tuple[ExtractedEntity, ...]
    classification: ContentClassification
    confidence: ConfidenceScores
    statistics: AnalysisStatistics

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": self.metadata.to_dict(),
            "structure": self.structure.to_dict(),
            "patterns": [match.to_dict() for match in self.patterns],
            "entities": [entity.to_dict() for entity in self.entities],
            "classification": self.classification.to_dict(),
            "confidence": self.confidence.to_dict(),
            "statistics": self.statistics.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class ValidationReport:
    valid: bool
    issues: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "issues": list(self.issues)}


@dataclass(frozen=True, slots=True)
class FormatDetection:
    """Lightweight answer to "which format fits this text best"."""

    suggested_format: OutputFormat
    confidence: int
    alternatives: tuple[tuple[OutputFormat, int], ...]
    scores: Mapping[OutputFormat, int]
    reasoning: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "scores", dict(self.scores))

    def to_dict(self) -> dict[str, Any]:
        return {
            "suggested_format": self.suggested_format.value,
            "confidence": self.confidence,
            "alternatives": [
                {"format": output_format.value, "confidence": confidence}
                for output_format, confidence in self.alternatives
            ],
            "scores": {output_format.value: score for output_format, score in self.scores.items()},
            "reasoning": self.reasoning,
        }