"""Line classification and section detection."""
from __future__ import annotations

import re
from typing import Iterator

from .models import DocumentSection, Position

__all__ = [
    "SECTION_TYPES",
    "classify_line",
    "detect_sections",
    "iter_lines",
]

SECTION_TYPES = ("header", "title", "quote", "code", "list", "content")

_HEADER_PATTERN = re.compile(r"^#{1,6}\s+.+")
_TITLE_PATTERN = re.compile(r"[A-Z][A-Z\s]{3,}:?")
_QUOTE_PATTERN = re.compile(r"^>\s*.+")
_INDENTED_CODE_PATTERN = re.compile(r"^    ")
_BULLET_PATTERN = re.compile(r"^\s*[-*•]\s+")
_NUMBERED_PATTERN = re.compile(r"^\s*\d+\.\s+")

_SECTION_START_CONFIDENCE = 0.8
_IMPLICIT_SECTION_CONFIDENCE = 0.6


def classify_line(line: str) -> str:
    """Return the section type suggested by a single line."""

    trimmed = line.strip()
    if _HEADER_PATTERN.match(trimmed):
        return "header"
    if _TITLE_PATTERN.fullmatch(trimmed):
        return "title"
    if _QUOTE_PATTERN.match(trimmed):
        return "quote"
    if trimmed.startswith("```") or _INDENTED_CODE_PATTERN.match(line):
        return "code"
    if _BULLET_PATTERN.match(line) or _NUMBERED_PATTERN.match(line):
        return "list"
    return "content"


def iter_lines(text: str) -> Iterator[tuple[int, int, str]]:
    """Yield ``(line_number, start_offset, line)`` for every line of ``text``."""

    offset = 0
    for number, line in enumerate(text.split("\n"), start=1):
        yield number, offset, line
        offset += len(line) + 1


class _SectionBuilder:
    __slots__ = ("section_id", "section_type", "title", "parts", "start", "end", "line", "confidence")

    def __init__(
        self,
        section_id: str,
        section_type: str,
        title: str | None,
        start: int,
        end: int,
        line: int,
        confidence: float,
    ) -> None:
        self.section_id = section_id
        self.section_type = section_type
        self.title = title
        self.parts: list[str] = []
        self.start = start
        self.end = end
        self.line = line
        self.confidence = confidence

    def append(self, line: str, start: int) -> None:
        self.parts.append(line + "\n")
        self.end = start + len(line)

    def build(self) -> DocumentSection:
        return DocumentSection(
            section_id=self.section_id,
            section_type=self.section_type,
            title=self.title,
            content="".join(self.parts),
            position=Position(start=self.start, end=self.end, line=self.line),
            confidence=self.confidence,
        )


def detect_sections(text: str) -> list[DocumentSection]:
    """Group lines into sections opened by headers or all-caps titles.

    Lines preceding the first header open an implicit ``content`` section;
    blank lines before any section are ignored so whitespace-only input
    produces no sections at all.
    """

    sections: list[DocumentSection] = []
    current: _SectionBuilder | None = None
    counter = 0

    for number, start, line in iter_lines(text):
        line_type = classify_line(line)
        if line_type in ("header", "title"):
            if current is not None:
                sections.append(current.build())
            current = _SectionBuilder(
                f"section-{counter}",
                line_type,
                line.strip(),
                start,
                start + len(line),
                number,
                _SECTION_START_CONFIDENCE,
            )
            counter += 1
        elif current is not None:
            current.append(line, start)
        elif line.strip():
            current = _SectionBuilder(
                f"section-{counter}",
                "content",
                None,
                start,
                start + len(line),
                number,
                _IMPLICIT_SECTION_CONFIDENCE,
            )
            current.append(line, start)
            counter += 1

    if current is not None:
        sections.append(current.build())
    return sections
