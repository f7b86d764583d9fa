"""Tests for line classification and section detection."""
from __future__ import annotations

import pytest

from src.text_analysis.segments import classify_line, detect_sections


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("# Heading", "header"),
        ("### Deep heading", "header"),
        ("MEETING NOTES:", "title"),
        ("NOTES", "title"),
        ("> quoted remark", "quote"),
        ("```python", "code"),
        ("    indented_code()", "code"),
        ("- bullet", "list"),
        ("  * nested bullet", "list"),
        ("1. numbered", "list"),
        ("Plain sentence.", "content"),
        ("ABC", "content"),
    ],
)
def test_classify_line(line: str, expected: str) -> None:
    assert classify_line(line) == expected


def test_detect_sections_groups_lines_under_headers() -> None:
    text = "intro line\n# Agenda\n- one\n- two\nNOTES\nbody"

    sections = detect_sections(text)

    assert [section.section_id for section in sections] == ["section-0", "section-1", "section-2"]

    implicit, agenda, notes = sections
    assert implicit.section_type == "content"
    assert implicit.title is None
    assert implicit.content == "intro line\n"
    assert implicit.confidence == pytest.approx(0.6)

    assert agenda.section_type == "header"
    assert agenda.title == "# Agenda"
    assert agenda.content == "- one\n- two\n"
    assert agenda.confidence == pytest.approx(0.8)
    assert agenda.position.start == len("intro line\n")
    assert agenda.position.line == 2
    assert agenda.position.end == text.index("- two") + len("- two")

    assert notes.section_type == "title"
    assert notes.content == "body\n"


def test_detect_sections_ignores_leading_blank_lines() -> None:
    sections = detect_sections("\n\n# Title\ntext")

    assert len(sections) == 1
    assert sections[0].title == "# Title"
    assert sections[0].position.line == 3


def test_detect_sections_whitespace_only_input() -> None:
    assert detect_sections("") == []
    assert detect_sections("   \n\t\n") == []
