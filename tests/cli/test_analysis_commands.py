"""Tests for the analysis CLI commands via the main entry point."""
from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from main import main as run_main
from src.cli.commands.analysis import build_parser

MEETING_TEXT = """# Team Meeting
Attendees: Alice Smith, Bob Jones
Date: 03/15/2024

## Agenda
Agenda: quarterly roadmap review
- Budget review
- Hiring plan

## Action Items
Action item: Alice to send report by Friday
Action: Alice to send report by Friday
Decision: ship the beta next sprint
"""


@pytest.fixture()
def meeting_file(tmp_path: Path) -> Path:
    path = tmp_path / "meeting.md"
    path.write_text(MEETING_TEXT, encoding="utf-8")
    return path


def test_parser_requires_a_command() -> None:
    parser = build_parser()

    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_detect_emits_json(meeting_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_main(["detect", "--input", str(meeting_file), "--output-format", "json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["suggested_format"] == "meeting-notes"
    assert len(payload["alternatives"]) == 3
    assert "Meeting Notes" in payload["reasoning"]


def test_detect_text_output(meeting_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_main(["detect", "--input", str(meeting_file)])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert out.startswith("Suggested format: meeting-notes")
    assert "Alternatives:" in out


def test_missing_input_returns_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_main(["detect", "--input", str(tmp_path / "missing.txt")])

    assert exit_code == 1
    assert "does not exist" in capsys.readouterr().err


def test_invalid_config_returns_error(
    meeting_file: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("engine:\n  low_confidence_threshold: 4\n", encoding="utf-8")

    exit_code = run_main(["analyze", "--input", str(meeting_file), "--config", str(config_path)])

    assert exit_code == 1
    assert "engine/low_confidence_threshold" in capsys.readouterr().err


def test_stats_text_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "short.txt"
    path.write_text("Hello world. This is a test.", encoding="utf-8")

    exit_code = run_main(["stats", "--input", str(path)])

    assert exit_code == 0
    lines = capsys.readouterr().out.splitlines()
    assert "words: 6" in lines
    assert "sentences: 2" in lines


def test_analyze_json_with_validation(meeting_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_main(["analyze", "--input", str(meeting_file), "--output-format", "json", "--validate"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["validation"] == {"valid": True, "issues": []}
    assert payload["classification"]["format_predictions"][0]["format"] == "meeting-notes"
    assert payload["metadata"]["input"]["length"] == len(MEETING_TEXT)


def test_analyze_with_format_hint(meeting_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_main(
        ["analyze", "--input", str(meeting_file), "--format", "task-lists", "--output-format", "json"]
    )

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["metadata"]["target_format"] == "task-lists"
    assert payload["statistics"]["patterns"]["patterns_tested"] == 5


def test_analyze_text_output_lists_predictions(meeting_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_main(["analyze", "--input", str(meeting_file), "--validate"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Format predictions:" in out
    assert "Validation: ok" in out


def test_patterns_respects_limit(meeting_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_main(
        [
            "patterns",
            "--input",
            str(meeting_file),
            "--format",
            "meeting-notes",
            "--limit",
            "2",
            "--output-format",
            "json",
        ]
    )

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload) == 2
    assert payload[0]["confidence"] >= payload[1]["confidence"]


def test_reads_stdin_when_no_input(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("- milk\n- bread\n- eggs\n"))

    exit_code = run_main(["patterns", "--format", "shopping-lists"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "shopping-item" in out
    assert "high confidence" in out
