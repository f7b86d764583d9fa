"""Configuration loading for the text analysis engine."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml
from jsonschema import ValidationError, validate

from .models import OutputFormat

__all__ = [
    "AnalysisConfig",
    "ClassifierSettings",
    "ConfigError",
    "CONFIG_SCHEMA",
    "DEFAULT_CONFIG_PATH",
    "EngineSettings",
    "MatcherSettings",
    "load_analysis_config",
]

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/text_analysis.yaml")

_WEIGHT = {"type": "number", "minimum": 0, "maximum": 1}

CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "matcher": {
            "type": "object",
            "properties": {
                "context_window": {"type": "integer", "minimum": 0},
                "high_confidence_threshold": _WEIGHT,
            },
            "additionalProperties": False,
        },
        "classifier": {
            "type": "object",
            "properties": {
                "weights": {
                    "type": "object",
                    "properties": {
                        "patterns": _WEIGHT,
                        "structure": _WEIGHT,
                        "content": _WEIGHT,
                        "keywords": _WEIGHT,
                    },
                    "additionalProperties": False,
                },
                "top_keywords": {"type": "integer", "minimum": 1},
                "fallback_format": {"type": "string", "enum": [item.value for item in OutputFormat]},
            },
            "additionalProperties": False,
        },
        "engine": {
            "type": "object",
            "properties": {
                "confidence_weights": {
                    "type": "object",
                    "properties": {
                        "format_detection": _WEIGHT,
                        "pattern_recognition": _WEIGHT,
                        "structure_analysis": _WEIGHT,
                        "entity_extraction": _WEIGHT,
                        "content_classification": _WEIGHT,
                    },
                    "additionalProperties": False,
                },
                "duration_budget_seconds": {"type": "number", "exclusiveMinimum": 0},
                "low_confidence_threshold": _WEIGHT,
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


@dataclass(frozen=True, slots=True)
class MatcherSettings:
    context_window: int = 50
    high_confidence_threshold: float = 0.7


@dataclass(frozen=True, slots=True)
class ClassifierSettings:
    pattern_weight: float = 0.4
    structure_weight: float = 0.25
    content_weight: float = 0.2
    keyword_weight: float = 0.15
    top_keywords: int = 20
    fallback_format: OutputFormat = OutputFormat.JOURNAL_NOTES


@dataclass(frozen=True, slots=True)
class EngineSettings:
    format_detection_weight: float = 0.3
    pattern_recognition_weight: float = 0.25
    structure_analysis_weight: float = 0.2
    entity_extraction_weight: float = 0.15
    content_classification_weight: float = 0.1
    duration_budget_seconds: float = 5.0
    low_confidence_threshold: float = 0.3


@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    """Validated tunables for every analysis stage."""

    matcher: MatcherSettings = field(default_factory=MatcherSettings)
    classifier: ClassifierSettings = field(default_factory=ClassifierSettings)
    engine: EngineSettings = field(default_factory=EngineSettings)

    @classmethod
    def default(cls) -> "AnalysisConfig":
        return cls()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "AnalysisConfig":
        """Validate ``mapping`` against ``CONFIG_SCHEMA`` and build settings."""

        if not isinstance(mapping, Mapping):
            raise ConfigError("Analysis config must be a mapping at the top level.")
        data = dict(mapping)
        try:
            validate(instance=data, schema=CONFIG_SCHEMA)
        except ValidationError as exc:
            location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
            raise ConfigError(f"Configuration validation failed at '{location}': {exc.message}") from exc

        matcher_raw = data.get("matcher") or {}
        classifier_raw = data.get("classifier") or {}
        weights = classifier_raw.get("weights") or {}
        engine_raw = data.get("engine") or {}
        rollup = engine_raw.get("confidence_weights") or {}

        matcher_defaults = MatcherSettings()
        classifier_defaults = ClassifierSettings()
        engine_defaults = EngineSettings()

        fallback = OutputFormat.parse(classifier_raw.get("fallback_format")) or classifier_defaults.fallback_format

        return cls(
            matcher=MatcherSettings(
                context_window=int(matcher_raw.get("context_window", matcher_defaults.context_window)),
                high_confidence_threshold=float(
                    matcher_raw.get("high_confidence_threshold", matcher_defaults.high_confidence_threshold)
                ),
            ),
            classifier=ClassifierSettings(
                pattern_weight=float(weights.get("patterns", classifier_defaults.pattern_weight)),
                structure_weight=float(weights.get("structure", classifier_defaults.structure_weight)),
                content_weight=float(weights.get("content", classifier_defaults.content_weight)),
                keyword_weight=float(weights.get("keywords", classifier_defaults.keyword_weight)),
                top_keywords=int(classifier_raw.get("top_keywords", classifier_defaults.top_keywords)),
                fallback_format=fallback,
            ),
            engine=EngineSettings(
                format_detection_weight=float(
                    rollup.get("format_detection", engine_defaults.format_detection_weight)
                ),
                pattern_recognition_weight=float(
                    rollup.get("pattern_recognition", engine_defaults.pattern_recognition_weight)
                ),
                structure_analysis_weight=float(
                    rollup.get("structure_analysis", engine_defaults.structure_analysis_weight)
                ),
                entity_extraction_weight=float(
                    rollup.get("entity_extraction", engine_defaults.entity_extraction_weight)
                ),
                content_classification_weight=float(
                    rollup.get("content_classification", engine_defaults.content_classification_weight)
                ),
                duration_budget_seconds=float(
                    engine_raw.get("duration_budget_seconds", engine_defaults.duration_budget_seconds)
                ),
                low_confidence_threshold=float(
                    engine_raw.get("low_confidence_threshold", engine_defaults.low_confidence_threshold)
                ),
            ),
        )


def load_analysis_config(path: Path | str | None = None) -> AnalysisConfig:
    """Load configuration from YAML.

    An explicit ``path`` must exist. Without one, ``config/text_analysis.yaml``
    is used when present and built-in defaults otherwise.
    """

    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return AnalysisConfig.default()
        return _load_yaml(DEFAULT_CONFIG_PATH)

    resolved = Path(path).expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"Analysis config '{resolved}' does not exist")
    return _load_yaml(resolved)


def _load_yaml(path: Path) -> AnalysisConfig:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in configuration file '{path}': {exc}") from exc
    logger.debug("Loaded analysis config from %s", path)
    return AnalysisConfig.from_mapping(data)
