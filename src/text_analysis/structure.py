"""Structural decomposition: outline, lists, paragraphs and indentation."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Sequence

from .models import (
    ContentStructure,
    IndentationPattern,
    ListItem,
    ListStructure,
    ParagraphInfo,
    StructureNode,
    TextStatistics,
)
from .normalization import (
    parse_date,
    round_half_up,
    split_lines,
    split_paragraphs,
    split_sentences,
    split_words,
    word_tokens,
)
from .segments import detect_sections

__all__ = [
    "analyze_structure",
    "build_hierarchy",
    "detect_lists",
    "is_list_item",
    "parse_list_item",
    "list_consistency",
    "analyze_paragraphs",
    "classify_paragraph",
    "sentiment_score",
    "analyze_indentation",
    "get_text_statistics",
]

logger = logging.getLogger(__name__)

_HEADING_LEVEL_PATTERN = re.compile(r"^(#{1,6})\s+")
_LEADING_WHITESPACE = re.compile(r"^(\s+)")
_BULLET_ITEM = re.compile(r"^\s*[-*•]\s+")
_NUMBERED_ITEM = re.compile(r"^\s*\d+\.\s+")
_BARE_CHECKBOX_ITEM = re.compile(r"^\s*\[[ xX]?\]\s+")
_SUBITEM_INDENT = re.compile(r"^\s{2,}")

_CHECKBOX_PATTERN = re.compile(r"^\s*(?P<marker>[-*•])?\s*\[(?P<state>[xX ]?)\]\s*(?P<content>.+)")
_ORDERED_PATTERN = re.compile(r"^\s*(?P<number>\d+)\.\s+(?P<content>.+)")
_UNORDERED_PATTERN = re.compile(r"^\s*(?P<marker>[-*•])\s+(?P<content>.+)")
_PRIORITY_PATTERN = re.compile(r"\b(high|urgent|important)\b", re.IGNORECASE)
_ITEM_DATE_PATTERN = re.compile(r"\b(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})\b")

_CONCLUSION_OPENERS = re.compile(r"^(in conclusion|to summarize|finally|in summary)", re.IGNORECASE)
_EXAMPLE_OPENERS = re.compile(r"^(for example|for instance|such as)", re.IGNORECASE)
_POSITIVE_WORDS = re.compile(r"\b(good|great|excellent|happy|joy|success|wonderful|amazing)\b", re.IGNORECASE)
_NEGATIVE_WORDS = re.compile(r"\b(bad|terrible|awful|sad|fail|poor|horrible|disappointing)\b", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _NodeDraft:
    node_id: str
    level: int
    node_type: str
    content: str
    parent: int | None = None
    children: list[int] = field(default_factory=list)


def _heading_level(line: str) -> int:
    match = _HEADING_LEVEL_PATTERN.match(line)
    return len(match.group(1)) if match else 0


def _indent_level(line: str) -> int:
    match = _LEADING_WHITESPACE.match(line)
    return len(match.group(1)) // 2 if match else 0


def _node_type(line: str) -> str:
    if _BULLET_ITEM.match(line) or _NUMBERED_ITEM.match(line):
        return "item"
    if _SUBITEM_INDENT.match(line):
        return "subitem"
    return "section"


def build_hierarchy(lines: Sequence[str]) -> tuple[StructureNode, ...]:
    """Build the outline forest as a flat arena of nodes.

    Each non-blank line becomes a node. Its level is the markdown heading
    depth when present, otherwise half the leading whitespace width. Nodes on
    the stack with a level greater than or equal to the new node are popped;
    the remaining top becomes the parent.
    """

    drafts: list[_NodeDraft] = []
    stack: list[int] = []

    for line in lines:
        trimmed = line.strip()
        if not trimmed:
            continue
        heading_level = _heading_level(line)
        draft = _NodeDraft(
            node_id=f"node-{len(drafts)}",
            level=heading_level or _indent_level(line),
            node_type="heading" if heading_level else _node_type(line),
            content=trimmed,
        )
        index = len(drafts)
        drafts.append(draft)

        while stack and drafts[stack[-1]].level >= draft.level:
            stack.pop()
        if stack:
            draft.parent = stack[-1]
            drafts[stack[-1]].children.append(index)
        stack.append(index)

    return tuple(
        StructureNode(
            index=index,
            node_id=draft.node_id,
            level=draft.level,
            node_type=draft.node_type,
            content=draft.content,
            parent=draft.parent,
            children=tuple(draft.children),
        )
        for index, draft in enumerate(drafts)
    )


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def is_list_item(line: str) -> bool:
    return bool(_BULLET_ITEM.match(line) or _NUMBERED_ITEM.match(line) or _BARE_CHECKBOX_ITEM.match(line))


def parse_list_item(line: str) -> ListItem:
    """Parse one list line into its marker, level, type and metadata."""

    level = _indent_level(line)
    marker = "-"
    content = line.strip()
    item_type = "text"
    completed: bool | None = None
    priority: str | None = None
    due_date = None

    checkbox = _CHECKBOX_PATTERN.match(line)
    ordered = _ORDERED_PATTERN.match(line)
    unordered = _UNORDERED_PATTERN.match(line)
    if checkbox:
        marker = checkbox.group("marker") or "[]"
        content = checkbox.group("content")
        if checkbox.group("state").lower() == "x":
            item_type = "completed-task"
            completed = True
        else:
            item_type = "task"
    elif ordered:
        marker = ordered.group("number") + "."
        content = ordered.group("content")
    elif unordered:
        marker = unordered.group("marker")
        content = unordered.group("content")

    if _PRIORITY_PATTERN.search(content):
        item_type = "priority-item"
        priority = "high"

    date_match = _ITEM_DATE_PATTERN.search(content)
    if date_match:
        item_type = "dated-item"
        due_date = parse_date(date_match.group(1))

    return ListItem(
        content=content,
        marker=marker,
        level=level,
        item_type=item_type,
        priority=priority,
        due_date=due_date,
        completed=completed,
    )


def list_consistency(items: Sequence[ListItem]) -> float:
    """Average of marker uniformity and nesting uniformity, within [0, 1]."""

    if not items:
        return 0.0
    distinct_markers = len({item.marker for item in items})
    marker_consistency = max(0.0, 1.0 - (distinct_markers - 1) * 0.2)
    levels = [item.level for item in items]
    level_consistency = 1.0 if max(levels) - min(levels) <= 2 else 0.7
    return max(0.0, min(1.0, (marker_consistency + level_consistency) / 2))


def _close_list(items: list[ListItem]) -> ListStructure:
    markers: list[str] = []
    for item in items:
        if item.marker not in markers:
            markers.append(item.marker)
    first = items[0]
    return ListStructure(
        list_type="ordered" if any(char.isdigit() for char in first.marker) else "unordered",
        items=tuple(items),
        markers=tuple(markers),
        level=first.level,
        consistency=list_consistency(items),
    )


def detect_lists(lines: Sequence[str]) -> tuple[ListStructure, ...]:
    """Group runs of consecutive list lines; any other line closes the run."""

    lists: list[ListStructure] = []
    current: list[ListItem] = []
    for line in lines:
        if is_list_item(line):
            current.append(parse_list_item(line))
        elif current:
            lists.append(_close_list(current))
            current = []
    if current:
        lists.append(_close_list(current))
    return tuple(lists)


# ---------------------------------------------------------------------------
# Paragraphs and indentation
# ---------------------------------------------------------------------------


def sentiment_score(text: str) -> float:
    positive = len(_POSITIVE_WORDS.findall(text))
    negative = len(_NEGATIVE_WORDS.findall(text))
    total = positive + negative
    if total == 0:
        return 0.0
    return (positive - negative) / total


def classify_paragraph(content: str, sentences: Sequence[str]) -> str:
    first_sentence = sentences[0].strip().lower() if sentences else ""
    if _CONCLUSION_OPENERS.match(first_sentence):
        return "conclusion"
    if _EXAMPLE_OPENERS.match(first_sentence):
        return "example"
    if content.startswith(">") or content.startswith('"'):
        return "quote"
    if len(sentences) == 1 and len(content) < 100:
        return "introduction"
    return "body"


def analyze_paragraphs(text: str) -> tuple[ParagraphInfo, ...]:
    paragraphs: list[ParagraphInfo] = []
    for block in split_paragraphs(text):
        content = block.strip()
        sentences = split_sentences(content)
        paragraphs.append(
            ParagraphInfo(
                content=content,
                length=len(content),
                sentence_count=len(sentences),
                paragraph_type=classify_paragraph(content, sentences),
                sentiment=sentiment_score(content),
            )
        )
    return tuple(paragraphs)


def analyze_indentation(lines: Sequence[str]) -> tuple[IndentationPattern, ...]:
    """Group indented lines by whitespace kind and width."""

    grouped: dict[tuple[str, int], list[int]] = {}
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        match = _LEADING_WHITESPACE.match(line)
        if not match:
            continue
        indent = match.group(1)
        kind = "tabs" if "\t" in indent else "spaces"
        grouped.setdefault((kind, len(indent)), []).append(number)

    total_lines = len(lines) or 1
    return tuple(
        IndentationPattern(
            kind=kind,
            size=size,
            consistency=min(1.0, len(numbers) / total_lines * 2),
            lines=tuple(numbers),
        )
        for (kind, size), numbers in grouped.items()
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def analyze_structure(text: str) -> ContentStructure:
    """Decompose ``text`` into sections, outline, lists, paragraphs and indentation."""

    if not text.strip():
        return ContentStructure()

    lines = split_lines(text)
    structure = ContentStructure(
        sections=tuple(detect_sections(text)),
        nodes=build_hierarchy(lines),
        lists=detect_lists(lines),
        paragraphs=analyze_paragraphs(text),
        indentation=analyze_indentation(lines),
    )
    logger.debug(
        "Structure: %d sections, %d nodes, %d lists, %d paragraphs",
        len(structure.sections),
        len(structure.nodes),
        len(structure.lists),
        len(structure.paragraphs),
    )
    return structure


def get_text_statistics(text: str) -> TextStatistics:
    if not text:
        return TextStatistics()

    words = split_words(text)
    sentences = split_sentences(text)
    paragraphs = split_paragraphs(text)

    avg_word_length = sum(len(word) for word in words) / len(words) if words else 0.0
    words_in_sentences = sum(len(split_words(sentence)) for sentence in sentences)
    avg_sentence_length = words_in_sentences / len(sentences) if sentences else 0.0

    return TextStatistics(
        characters=len(text),
        words=len(words),
        sentences=len(sentences),
        paragraphs=len(paragraphs),
        lines=len(split_lines(text)),
        avg_word_length=round_half_up(avg_word_length, 1),
        avg_sentence_length=round_half_up(avg_sentence_length, 1),
        unique_words=len(set(word_tokens(text))),
    )
