"""Analysis orchestrator tying matching, structure, entities and classification together."""
from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from time import perf_counter
from typing import Iterable

from .catalog import PatternCatalog, default_catalog
from .classifier import classify_content as _classify_content
from .config import AnalysisConfig
from .entities import extract_entities, summarize_entities
from .matcher import calculate_pattern_stats, match_patterns
from .models import (
    AnalysisMetadata,
    AnalysisStatistics,
    ConfidenceScores,
    ContentClassification,
    ContentStructure,
    FormatDetection,
    OutputFormat,
    PatternDefinition,
    PatternMatch,
    PatternStatistics,
    StageTimings,
    TextAnalysis,
    ValidationReport,
)
from .normalization import clamp, mean
from .structure import analyze_structure, get_text_statistics

__all__ = [
    "ENGINE_NAME",
    "ENGINE_VERSION",
    "TextAnalysisEngine",
    "analyze_text",
    "classify_text",
    "detect_format",
    "validate_analysis",
]

logger = logging.getLogger(__name__)

ENGINE_NAME = "TextAnalysisEngine"
ENGINE_VERSION = "1.0.0"

_DEFAULT_STRUCTURE_CONFIDENCE = 0.7
_DEFAULT_FORMAT_CONFIDENCE = 0.5
_DEFAULT_ENTITY_CONFIDENCE = 0.7
_DEFAULT_CATEGORY_CONFIDENCE = 0.6


def _reasoning(prediction_format: OutputFormat, confidence: int) -> str:
    name = prediction_format.display_name
    if confidence > 70:
        return f"Strong match for {name} format ({confidence}% confidence)"
    if confidence > 50:
        return f"Good match for {name} format ({confidence}% confidence)"
    if confidence > 30:
        return f"Moderate match for {name} format ({confidence}% confidence)"
    return "Low confidence - manually select format"


class TextAnalysisEngine:
    """Runs every analysis stage over one text buffer and assembles the result.

    The engine holds only its catalog and configuration, both read-only, so a
    single instance can serve concurrent callers.
    """

    def __init__(
        self,
        catalog: PatternCatalog | None = None,
        config: AnalysisConfig | None = None,
    ) -> None:
        self._catalog = catalog if catalog is not None else default_catalog()
        self._config = config if config is not None else AnalysisConfig.default()

    @property
    def catalog(self) -> PatternCatalog:
        return self._catalog

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def select_patterns(self, target_format: OutputFormat | str | None) -> list[PatternDefinition]:
        """Catalog slice for a recognised hint, the full catalog otherwise."""

        resolved = OutputFormat.parse(target_format)
        if resolved is None:
            if target_format is not None:
                logger.debug("Ignoring unknown format hint %r", target_format)
            return self._catalog.get_all_patterns()
        return self._catalog.get_patterns(resolved)

    def classify(
        self,
        text: str,
        structure: ContentStructure,
        patterns: Iterable[PatternMatch],
    ) -> ContentClassification:
        return _classify_content(
            text,
            structure,
            list(patterns),
            catalog=self._catalog,
            settings=self._config.classifier,
        )

    def analyze_text(self, text: str, target_format: OutputFormat | str | None = None) -> TextAnalysis:
        """Run the full pipeline and return a self-contained ``TextAnalysis``."""

        started = perf_counter()
        hint = OutputFormat.parse(target_format)
        definitions = self.select_patterns(target_format)

        stage_started = perf_counter()
        matches = match_patterns(text, definitions, context_window=self._config.matcher.context_window)
        pattern_seconds = perf_counter() - stage_started

        stage_started = perf_counter()
        structure = analyze_structure(text)
        structure_seconds = perf_counter() - stage_started

        stage_started = perf_counter()
        entities = extract_entities(text)
        entity_seconds = perf_counter() - stage_started

        stage_started = perf_counter()
        classification = self.classify(text, structure, matches)
        classification_seconds = perf_counter() - stage_started

        confidence = self._confidence_scores(matches, structure, classification)
        content_stats = get_text_statistics(text)
        total_seconds = perf_counter() - started

        timings = StageTimings(
            pattern_matching=pattern_seconds,
            structure_analysis=structure_seconds,
            entity_extraction=entity_seconds,
            classification=classification_seconds,
            total=total_seconds,
        )
        statistics = AnalysisStatistics(
            timings=timings,
            content=content_stats,
            patterns=self._pattern_statistics(definitions, matches),
            entities=summarize_entities(entities),
        )
        metadata = AnalysisMetadata(
            analyzed_at=datetime.now(timezone.utc),
            duration_seconds=total_seconds,
            version=ENGINE_VERSION,
            engine_name=ENGINE_NAME,
            engine_version=ENGINE_VERSION,
            input_length=len(text),
            input_lines=content_stats.lines,
            input_words=content_stats.words,
            input_sentences=content_stats.sentences,
            input_checksum=hashlib.md5(text.encode("utf-8", "surrogatepass")).hexdigest(),
            language=classification.language.code,
            target_format=hint,
        )
        logger.debug(
            "Analysis finished in %.4fs (patterns %.4fs, structure %.4fs, entities %.4fs, classification %.4fs)",
            total_seconds,
            pattern_seconds,
            structure_seconds,
            entity_seconds,
            classification_seconds,
        )
        return TextAnalysis(
            metadata=metadata,
            structure=structure,
            patterns=tuple(matches),
            entities=tuple(entities),
            classification=classification,
            confidence=confidence,
            statistics=statistics,
        )

    def detect_format(self, text: str) -> FormatDetection:
        """Suggest the best format with up to three alternatives."""

        fallback = self._config.classifier.fallback_format
        if not text.strip():
            return FormatDetection(
                suggested_format=fallback,
                confidence=0,
                alternatives=(),
                scores={output_format: 0 for output_format in OutputFormat},
                reasoning="No text provided",
            )

        predictions = self.analyze_text(text).classification.predictions
        top = predictions[0]
        return FormatDetection(
            suggested_format=top.output_format,
            confidence=top.confidence,
            alternatives=tuple((item.output_format, item.confidence) for item in predictions[1:4]),
            scores={item.output_format: item.confidence for item in predictions},
            reasoning=_reasoning(top.output_format, top.confidence),
        )

    def validate_analysis(self, analysis: TextAnalysis) -> ValidationReport:
        """Report advisory issues; the analysis itself is never rejected."""

        settings = self._config.engine
        issues: list[str] = []
        if analysis.confidence.overall < settings.low_confidence_threshold:
            issues.append("Overall confidence is very low")
        if not analysis.classification.predictions:
            issues.append("No format predictions available")
        if not analysis.patterns:
            issues.append("No patterns matched in text")
        budget = settings.duration_budget_seconds
        stage_durations = analysis.statistics.timings.stages().values()
        if analysis.metadata.duration_seconds > budget or any(value > budget for value in stage_durations):
            issues.append("Analysis took longer than expected")

        for issue in issues:
            logger.warning("Analysis validation: %s", issue)
        return ValidationReport(valid=not issues, issues=tuple(issues))

    def _confidence_scores(
        self,
        matches: list[PatternMatch],
        structure: ContentStructure,
        classification: ContentClassification,
    ) -> ConfidenceScores:
        weights = self._config.engine
        pattern_recognition = clamp(mean(match.confidence for match in matches))
        structure_analysis = clamp(self._structure_confidence(structure))
        top = classification.top_prediction
        format_detection = clamp(top.confidence / 100 if top is not None else _DEFAULT_FORMAT_CONFIDENCE)
        entity_extraction = clamp(
            mean(
                (match.confidence for match in matches if match.data is not None),
                default=_DEFAULT_ENTITY_CONFIDENCE,
            )
        )
        content_classification = clamp(
            mean((category.confidence for category in classification.categories), default=_DEFAULT_CATEGORY_CONFIDENCE)
        )
        overall = clamp(
            format_detection * weights.format_detection_weight
            + pattern_recognition * weights.pattern_recognition_weight
            + structure_analysis * weights.structure_analysis_weight
            + entity_extraction * weights.entity_extraction_weight
            + content_classification * weights.content_classification_weight
        )
        return ConfidenceScores(
            overall=overall,
            format_detection=format_detection,
            pattern_recognition=pattern_recognition,
            structure_analysis=structure_analysis,
            entity_extraction=entity_extraction,
            content_classification=content_classification,
        )

    @staticmethod
    def _structure_confidence(structure: ContentStructure) -> float:
        scores: list[float] = []
        if structure.sections:
            scores.append(mean(section.confidence for section in structure.sections))
        if structure.lists:
            scores.append(mean(item.consistency for item in structure.lists))
        if structure.indentation:
            scores.append(mean(pattern.consistency for pattern in structure.indentation))
        return mean(scores, default=_DEFAULT_STRUCTURE_CONFIDENCE)

    def _pattern_statistics(
        self,
        definitions: list[PatternDefinition],
        matches: list[PatternMatch],
    ) -> PatternStatistics:
        stats = calculate_pattern_stats(
            matches,
            high_confidence_threshold=self._config.matcher.high_confidence_threshold,
        )
        matched_ids = {match.pattern_id for match in matches}
        tested = len(definitions)
        return PatternStatistics(
            patterns_tested=tested,
            matches=stats.total,
            success_rate=len(matched_ids) / tested if tested else 0.0,
            average_confidence=stats.average_confidence,
            counts_by_pattern=stats.counts_by_pattern_name,
        )


_DEFAULT_ENGINE: TextAnalysisEngine | None = None


def _default_engine() -> TextAnalysisEngine:
    global _DEFAULT_ENGINE
    if _DEFAULT_ENGINE is None:
        _DEFAULT_ENGINE = TextAnalysisEngine()
    return _DEFAULT_ENGINE


def analyze_text(text: str, target_format: OutputFormat | str | None = None) -> TextAnalysis:
    return _default_engine().analyze_text(text, target_format)


def detect_format(text: str) -> FormatDetection:
    return _default_engine().detect_format(text)


def validate_analysis(analysis: TextAnalysis) -> ValidationReport:
    return _default_engine().validate_analysis(analysis)


def classify_text(text: str) -> ContentClassification:
    """Classify ``text`` using a fresh pattern scan and structure pass."""

    engine = _default_engine()
    matches = match_patterns(text, engine.catalog.get_all_patterns())
    return engine.classify(text, analyze_structure(text), matches)
