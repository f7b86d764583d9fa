"""Static pattern catalog grouped by output format."""
from __future__ import annotations

import logging
import re
import threading
from typing import Any, Iterable, Mapping, Sequence

from .models import ExtractionGroup, OutputFormat, PatternCategory, PatternDefinition, ValueType

__all__ = [
    "PatternCatalog",
    "PatternCatalogError",
    "build_definition",
    "default_catalog",
    "get_patterns",
    "get_all_patterns",
]

logger = logging.getLogger(__name__)


class PatternCatalogError(ValueError):
    """Raised when a catalog entry is malformed."""


_MEETING = (OutputFormat.MEETING_NOTES,)
_TASKS = (OutputFormat.TASK_LISTS,)
_JOURNAL = (OutputFormat.JOURNAL_NOTES,)
_SHOPPING = (OutputFormat.SHOPPING_LISTS,)
_RESEARCH = (OutputFormat.RESEARCH_NOTES,)
_STUDY = (OutputFormat.STUDY_NOTES,)

_NUMERIC_OR_LONG_DATE = r"\d{1,2}[-/]\d{1,2}[-/]\d{2,4}|\w+ \d{1,2},? \d{4}"

# Each entry: id, name, description, expression, flags, weight, category,
# formats, extraction groups as (name, type, required).
_DEFAULT_DEFINITIONS: tuple[Mapping[str, Any], ...] = (
    # Meeting notes
    {
        "id": "meeting-attendees",
        "name": "Attendees List",
        "description": "Identifies meeting attendees",
        "expression": r"(?:attendees?|participants?|present):\s*(?P<attendees>[^\n]+)",
        "flags": re.IGNORECASE,
        "weight": 0.25,
        "category": PatternCategory.METADATA,
        "formats": _MEETING,
        "groups": (("attendees", ValueType.STRING, True),),
    },
    {
        "id": "meeting-date",
        "name": "Meeting Date",
        "description": "Identifies meeting date/time",
        "expression": rf"(?:date|when|meeting on|scheduled for):\s*(?P<date>{_NUMERIC_OR_LONG_DATE})",
        "flags": re.IGNORECASE,
        "weight": 0.15,
        "category": PatternCategory.METADATA,
        "formats": _MEETING,
        "groups": (("date", ValueType.DATE, False),),
    },
    {
        "id": "action-items",
        "name": "Action Items",
        "description": "Identifies action items and tasks",
        "expression": r"(?:action item|todo|task|follow[- ]?up|@\w+):\s*(?P<action>[^\n]+)",
        "flags": re.IGNORECASE,
        "weight": 0.3,
        "category": PatternCategory.CONTENT,
        "formats": _MEETING,
        "groups": (("action", ValueType.STRING, True),),
    },
    {
        "id": "agenda-items",
        "name": "Agenda Items",
        "description": "Identifies agenda or discussion topics",
        "expression": r"(?:agenda|topics?|discuss(?:ion|ed)?|covered):\s*(?P<topic>[^\n]+)",
        "flags": re.IGNORECASE,
        "weight": 0.2,
        "category": PatternCategory.STRUCTURE,
        "formats": _MEETING,
        "groups": (("topic", ValueType.STRING, True),),
    },
    {
        "id": "decisions",
        "name": "Decisions Made",
        "description": "Identifies decisions or conclusions",
        "expression": r"(?:decision|agreed|concluded|resolved|determined):\s*(?P<decision>[^\n]+)",
        "flags": re.IGNORECASE,
        "weight": 0.1,
        "category": PatternCategory.CONTENT,
        "formats": _MEETING,
        "groups": (("decision", ValueType.STRING, True),),
    },
    # Task lists
    {
        "id": "task-checkbox",
        "name": "Checkbox Tasks",
        "description": "Identifies tasks with checkboxes",
        "expression": r"^\s*[-*]\s*\[[ xX]?\]\s*(?P<task>.+)$",
        "flags": re.MULTILINE,
        "weight": 0.35,
        "category": PatternCategory.STRUCTURE,
        "formats": _TASKS,
        "groups": (("task", ValueType.STRING, True),),
    },
    {
        "id": "task-priority",
        "name": "Priority Indicators",
        "description": "Identifies task priority levels",
        "expression": r"(?:high|urgent|important|critical|priority|!!!|P[0-3])",
        "flags": re.IGNORECASE,
        "weight": 0.15,
        "category": PatternCategory.METADATA,
        "formats": _TASKS,
    },
    {
        "id": "task-due-date",
        "name": "Due Dates",
        "description": "Identifies task due dates",
        "expression": r"(?:due|deadline|by|before):\s*(?P<due_date>\d{1,2}[-/]\d{1,2}[-/]\d{2,4}|\w+ \d{1,2})",
        "flags": re.IGNORECASE,
        "weight": 0.15,
        "category": PatternCategory.METADATA,
        "formats": _TASKS,
        "groups": (("due_date", ValueType.DATE, False),),
    },
    {
        "id": "task-category",
        "name": "Task Categories",
        "description": "Identifies task categories or tags",
        "expression": r"(?P<category>#\w+|@\w+|\[[\w\s]+\])",
        "flags": 0,
        "weight": 0.2,
        "category": PatternCategory.METADATA,
        "formats": _TASKS,
        "groups": (("category", ValueType.STRING, False),),
    },
    {
        "id": "task-bullet",
        "name": "Bullet Point Tasks",
        "description": "Identifies tasks in bullet point format",
        "expression": r"^\s*[-*•]\s*(?P<task>.+)$",
        "flags": re.MULTILINE,
        "weight": 0.15,
        "category": PatternCategory.STRUCTURE,
        "formats": _TASKS,
        "groups": (("task", ValueType.STRING, True),),
    },
    # Journal notes
    {
        "id": "journal-date",
        "name": "Journal Entry Date",
        "description": "Identifies journal entry dates",
        "expression": rf"(?:^|\n)(?:date|today|entry):?\s*(?P<date>{_NUMERIC_OR_LONG_DATE})",
        "flags": re.IGNORECASE | re.MULTILINE,
        "weight": 0.2,
        "category": PatternCategory.METADATA,
        "formats": _JOURNAL,
        "groups": (("date", ValueType.DATE, False),),
    },
    {
        "id": "journal-time",
        "name": "Timestamp",
        "description": "Identifies timestamps in journal entries",
        "expression": r"\b(?P<time>\d{1,2}:\d{2}\s*(?:am|pm)?)\b",
        "flags": re.IGNORECASE,
        "weight": 0.1,
        "category": PatternCategory.METADATA,
        "formats": _JOURNAL,
        "groups": (("time", ValueType.STRING, False),),
    },
    {
        "id": "journal-feelings",
        "name": "Emotional Content",
        "description": "Identifies emotional or feeling words",
        "expression": r"\b(?:feel(?:ing)?|felt|emotion|happy|sad|angry|excited|worried|grateful|anxious)\b",
        "flags": re.IGNORECASE,
        "weight": 0.25,
        "category": PatternCategory.CONTENT,
        "formats": _JOURNAL,
    },
    {
        "id": "journal-reflection",
        "name": "Reflective Keywords",
        "description": "Identifies reflective thought patterns",
        "expression": (
            r"\b(?:think(?:ing)?|thought|realize[d]?|understand|learn(?:ed)?"
            r"|discover(?:ed)?|insight|wonder(?:ing)?)\b"
        ),
        "flags": re.IGNORECASE,
        "weight": 0.25,
        "category": PatternCategory.CONTENT,
        "formats": _JOURNAL,
    },
    {
        "id": "journal-narrative",
        "name": "Narrative Style",
        "description": "Identifies first-person narrative",
        "expression": r"\b(?:I|me|my|myself|we|us|our)\b",
        "flags": re.IGNORECASE,
        "weight": 0.2,
        "category": PatternCategory.CONTENT,
        "formats": _JOURNAL,
    },
    # Shopping lists
    {
        "id": "shopping-item",
        "name": "Shopping Items",
        "description": "Identifies individual shopping items",
        "expression": r"^\s*[-*•]\s*(?P<item>.+)$",
        "flags": re.MULTILINE,
        "weight": 0.3,
        "category": PatternCategory.STRUCTURE,
        "formats": _SHOPPING,
        "groups": (("item", ValueType.STRING, True),),
    },
    {
        "id": "shopping-quantity",
        "name": "Quantities",
        "description": "Identifies item quantities",
        "expression": r"(?P<quantity>\d+(?:\.\d+)?)\s*(?P<unit>lbs?|kg|oz|g|mg|l|ml|pcs?|units?|dozen|pack|box)?",
        "flags": re.IGNORECASE,
        "weight": 0.15,
        "category": PatternCategory.METADATA,
        "formats": _SHOPPING,
        "groups": (
            ("quantity", ValueType.NUMBER, False),
            ("unit", ValueType.STRING, False),
        ),
    },
    {
        "id": "shopping-category-produce",
        "name": "Produce Items",
        "description": "Identifies produce/fruits/vegetables",
        "expression": r"\b(?:apple|banana|orange|lettuce|tomato|carrot|onion|potato|fruit|vegetable|produce)\b",
        "flags": re.IGNORECASE,
        "weight": 0.25,
        "category": PatternCategory.CONTENT,
        "formats": _SHOPPING,
    },
    {
        "id": "shopping-category-dairy",
        "name": "Dairy Items",
        "description": "Identifies dairy products",
        "expression": r"\b(?:milk|cheese|yogurt|butter|cream|eggs?|dairy)\b",
        "flags": re.IGNORECASE,
        "weight": 0.15,
        "category": PatternCategory.CONTENT,
        "formats": _SHOPPING,
    },
    {
        "id": "shopping-category-meat",
        "name": "Meat/Protein Items",
        "description": "Identifies meat and protein products",
        "expression": r"\b(?:chicken|beef|pork|fish|meat|turkey|bacon|sausage|protein)\b",
        "flags": re.IGNORECASE,
        "weight": 0.15,
        "category": PatternCategory.CONTENT,
        "formats": _SHOPPING,
    },
    # Research notes
    {
        "id": "research-citation",
        "name": "Citations",
        "description": "Identifies academic citations",
        "expression": r"(?:\(\w+(?:,?\s+\d{4})\)|\[\d+\]|(?:et al\.|& \w+))",
        "flags": 0,
        "weight": 0.3,
        "category": PatternCategory.METADATA,
        "formats": _RESEARCH,
    },
    {
        "id": "research-quote",
        "name": "Quotes",
        "description": "Identifies quoted text",
        "expression": r"\"(?P<quote>[^\"]+)\"|'(?P<single_quote>[^']+)'|(?:^|\n)>\s*(?P<block_quote>.+)",
        "flags": re.MULTILINE,
        "weight": 0.25,
        "category": PatternCategory.CONTENT,
        "formats": _RESEARCH,
        "groups": (
            ("quote", ValueType.STRING, False),
            ("single_quote", ValueType.STRING, False),
            ("block_quote", ValueType.STRING, False),
        ),
    },
    {
        "id": "research-source",
        "name": "Source References",
        "description": "Identifies source references",
        "expression": r"(?:source|from|according to|as stated in):\s*(?P<source>[^\n]+)",
        "flags": re.IGNORECASE,
        "weight": 0.2,
        "category": PatternCategory.METADATA,
        "formats": _RESEARCH,
        "groups": (("source", ValueType.STRING, True),),
    },
    {
        "id": "research-topic",
        "name": "Topic Headers",
        "description": "Identifies research topics and sections",
        "expression": r"(?:^|\n)(?:#{1,6}\s*.+|[A-Z][A-Z\s]{2,}:?$)",
        "flags": re.MULTILINE,
        "weight": 0.15,
        "category": PatternCategory.STRUCTURE,
        "formats": _RESEARCH,
    },
    {
        "id": "research-url",
        "name": "URLs and Links",
        "description": "Identifies URLs and web references",
        "expression": r"(?P<url>https?://[^\s]+|www\.[^\s]+)",
        "flags": re.IGNORECASE,
        "weight": 0.1,
        "category": PatternCategory.METADATA,
        "formats": _RESEARCH,
        "groups": (("url", ValueType.URL, False),),
    },
    # Study notes
    {
        "id": "study-definition",
        "name": "Definitions",
        "description": "Identifies definitions and terms",
        "expression": r"(?:^|\n)(?P<term>.+?):\s*(?P<definition>.+?)(?=\n|$)",
        "flags": re.MULTILINE,
        "weight": 0.25,
        "category": PatternCategory.CONTENT,
        "formats": _STUDY,
        "groups": (
            ("term", ValueType.STRING, True),
            ("definition", ValueType.STRING, True),
        ),
    },
    {
        "id": "study-outline",
        "name": "Outline Structure",
        "description": "Identifies outline numbering",
        "expression": r"^\s*(?:\d+\.|\w\)|[ivxIVX]+\.)\s*(?P<item>.+)$",
        "flags": re.MULTILINE,
        "weight": 0.3,
        "category": PatternCategory.STRUCTURE,
        "formats": _STUDY,
        "groups": (("item", ValueType.STRING, True),),
    },
    {
        "id": "study-heading",
        "name": "Topic Headings",
        "description": "Identifies topic headings and sections",
        "expression": r"(?:^|\n)(?:#{1,6}\s*.+|[A-Z][A-Z\s]{3,}:?$|\*\*.+?\*\*)",
        "flags": re.MULTILINE,
        "weight": 0.2,
        "category": PatternCategory.STRUCTURE,
        "formats": _STUDY,
    },
    {
        "id": "study-question",
        "name": "Study Questions",
        "description": "Identifies questions for review",
        "expression": r"(?:^|\n)(?:Q:|Question:|\?)\s*(?P<question>.+?)(?=\n|$)",
        "flags": re.IGNORECASE | re.MULTILINE,
        "weight": 0.15,
        "category": PatternCategory.CONTENT,
        "formats": _STUDY,
        "groups": (("question", ValueType.STRING, True),),
    },
    {
        "id": "study-key-terms",
        "name": "Key Terms",
        "description": "Identifies emphasized or key terms",
        "expression": r"\*\*(?P<term>.+?)\*\*|__(?P<underscored_term>.+?)__|IMPORTANT:\s*(?P<important>.+)",
        "flags": re.IGNORECASE,
        "weight": 0.1,
        "category": PatternCategory.CONTENT,
        "formats": _STUDY,
        "groups": (
            ("term", ValueType.STRING, False),
            ("underscored_term", ValueType.STRING, False),
            ("important", ValueType.STRING, False),
        ),
    },
)


def build_definition(entry: Mapping[str, Any]) -> PatternDefinition:
    """Compile one catalog entry, raising ``PatternCatalogError`` when malformed."""

    pattern_id = str(entry.get("id", "")).strip()
    if not pattern_id:
        raise PatternCatalogError("Pattern definition is missing an id.")

    expression = entry.get("expression")
    if not isinstance(expression, str) or not expression:
        raise PatternCatalogError(f"Pattern '{pattern_id}' has no expression.")
    try:
        regex = re.compile(expression, int(entry.get("flags", 0)))
    except re.error as exc:
        raise PatternCatalogError(f"Pattern '{pattern_id}' failed to compile: {exc}") from exc

    try:
        weight = float(entry.get("weight", 0.0))
    except (TypeError, ValueError) as exc:
        raise PatternCatalogError(f"Pattern '{pattern_id}' has a non-numeric weight.") from exc
    if not 0.0 <= weight <= 1.0:
        raise PatternCatalogError(f"Pattern '{pattern_id}' weight {weight} is outside [0, 1].")

    try:
        category = PatternCategory(entry.get("category"))
    except ValueError as exc:
        raise PatternCatalogError(f"Pattern '{pattern_id}' has an unknown category.") from exc

    formats: set[OutputFormat] = set()
    for value in entry.get("formats", ()):
        output_format = OutputFormat.parse(value)
        if output_format is None:
            raise PatternCatalogError(f"Pattern '{pattern_id}' targets unknown format '{value}'.")
        formats.add(output_format)
    if not formats:
        raise PatternCatalogError(f"Pattern '{pattern_id}' does not target any format.")

    groups: list[ExtractionGroup] = []
    for group_spec in entry.get("groups", ()):
        name, value_type, required = group_spec
        if name not in regex.groupindex:
            raise PatternCatalogError(f"Pattern '{pattern_id}' declares group '{name}' missing from its expression.")
        groups.append(ExtractionGroup(name=name, value_type=ValueType(value_type), required=bool(required)))

    return PatternDefinition(
        pattern_id=pattern_id,
        name=str(entry.get("name") or pattern_id),
        description=str(entry.get("description") or ""),
        regex=regex,
        weight=weight,
        category=category,
        formats=frozenset(formats),
        extraction=tuple(groups),
    )


class PatternCatalog:
    """Read-only registry of pattern definitions indexed by output format."""

    def __init__(self, definitions: Sequence[PatternDefinition]) -> None:
        seen: set[str] = set()
        by_format: dict[OutputFormat, list[PatternDefinition]] = {output_format: [] for output_format in OutputFormat}
        for definition in definitions:
            if definition.pattern_id in seen:
                raise PatternCatalogError(f"Duplicate pattern id '{definition.pattern_id}'.")
            seen.add(definition.pattern_id)
            for output_format in OutputFormat:
                if definition.applies_to(output_format):
                    by_format[output_format].append(definition)
        self._definitions: tuple[PatternDefinition, ...] = tuple(definitions)
        self._by_format: dict[OutputFormat, tuple[PatternDefinition, ...]] = {
            key: tuple(value) for key, value in by_format.items()
        }
        self._by_id: dict[str, PatternDefinition] = {item.pattern_id: item for item in self._definitions}

    @classmethod
    def from_entries(cls, entries: Iterable[Mapping[str, Any]]) -> "PatternCatalog":
        return cls([build_definition(entry) for entry in entries])

    @classmethod
    def default(cls) -> "PatternCatalog":
        return cls.from_entries(_DEFAULT_DEFINITIONS)

    def __len__(self) -> int:
        return len(self._definitions)

    def get_patterns(self, output_format: OutputFormat | str | None) -> list[PatternDefinition]:
        """Return the patterns for one format; unknown formats yield an empty list."""

        resolved = OutputFormat.parse(output_format)
        if resolved is None:
            return []
        return list(self._by_format.get(resolved, ()))

    def get_all_patterns(self) -> list[PatternDefinition]:
        return list(self._definitions)

    def get_pattern(self, pattern_id: str) -> PatternDefinition | None:
        return self._by_id.get(pattern_id)

    def pattern_ids(self, output_format: OutputFormat) -> frozenset[str]:
        return frozenset(item.pattern_id for item in self._by_format.get(output_format, ()))


_DEFAULT_CATALOG: PatternCatalog | None = None
_DEFAULT_CATALOG_LOCK = threading.Lock()


def default_catalog() -> PatternCatalog:
    """Return the process-wide built-in catalog, building it on first use."""

    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        with _DEFAULT_CATALOG_LOCK:
            if _DEFAULT_CATALOG is None:
                _DEFAULT_CATALOG = PatternCatalog.default()
                logger.debug("Built default pattern catalog with %d definitions", len(_DEFAULT_CATALOG))
    return _DEFAULT_CATALOG


def get_patterns(output_format: OutputFormat | str | None) -> list[PatternDefinition]:
    return default_catalog().get_patterns(output_format)


def get_all_patterns() -> list[PatternDefinition]:
    return default_catalog().get_all_patterns()
