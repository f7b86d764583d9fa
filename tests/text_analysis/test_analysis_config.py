"""Tests for analysis configuration loading."""
from __future__ import annotations

from pathlib import Path

import pytest

from src.text_analysis.config import AnalysisConfig, ConfigError, load_analysis_config
from src.text_analysis.models import OutputFormat

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_defaults_when_no_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_analysis_config()

    assert config == AnalysisConfig.default()
    assert config.matcher.context_window == 50
    assert config.classifier.fallback_format is OutputFormat.JOURNAL_NOTES
    assert config.engine.low_confidence_threshold == pytest.approx(0.3)


def test_default_path_is_used_when_present(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "text_analysis.yaml").write_text("matcher:\n  context_window: 10\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert load_analysis_config().matcher.context_window == 10


def test_explicit_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="does not exist"):
        load_analysis_config(tmp_path / "missing.yaml")


def test_partial_overrides_keep_other_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "analysis.yaml"
    config_path.write_text(
        "classifier:\n"
        "  fallback_format: study-notes\n"
        "  weights:\n"
        "    patterns: 0.5\n"
        "engine:\n"
        "  duration_budget_seconds: 2\n",
        encoding="utf-8",
    )

    config = load_analysis_config(config_path)

    assert config.classifier.fallback_format is OutputFormat.STUDY_NOTES
    assert config.classifier.pattern_weight == pytest.approx(0.5)
    assert config.classifier.structure_weight == pytest.approx(0.25)
    assert config.engine.duration_budget_seconds == pytest.approx(2.0)
    assert config.engine.format_detection_weight == pytest.approx(0.3)


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "empty.yaml"
    config_path.write_text("", encoding="utf-8")

    assert load_analysis_config(config_path) == AnalysisConfig.default()


def test_non_mapping_config_is_rejected() -> None:
    with pytest.raises(ConfigError, match="must be a mapping"):
        AnalysisConfig.from_mapping(["not", "a", "mapping"])  # type: ignore[arg-type]


def test_out_of_range_weight_reports_location(tmp_path: Path) -> None:
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("classifier:\n  weights:\n    patterns: 1.5\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="classifier/weights/patterns"):
        load_analysis_config(config_path)


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError, match="validation failed"):
        AnalysisConfig.from_mapping({"matcher": {"window": 10}})


def test_unknown_fallback_format_is_rejected() -> None:
    with pytest.raises(ConfigError, match="classifier/fallback_format"):
        AnalysisConfig.from_mapping({"classifier": {"fallback_format": "poetry"}})


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    config_path = tmp_path / "broken.yaml"
    config_path.write_text("matcher: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_analysis_config(config_path)


def test_repository_config_matches_defaults() -> None:
    config = load_analysis_config(REPO_ROOT / "config" / "text_analysis.yaml")

    assert config == AnalysisConfig.default()
