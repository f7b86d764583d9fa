"""Per-format confidence scoring with factor-by-factor explanations."""
from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Sequence

from .catalog import PatternCatalog, default_catalog
from .config import ClassifierSettings
from .models import (
    ContentClassification,
    ContentStructure,
    FormatPrediction,
    FormatScores,
    OutputFormat,
    PatternMatch,
    PredictionFactor,
)
from .normalization import clamp, mean, round_half_up
from .taxonomy import analyze_style, categorize_content, detect_language

__all__ = [
    "CONTENT_TERMS",
    "FORMAT_KEYWORDS",
    "classify_content",
    "predict_formats",
    "predict_format",
    "extract_keywords",
    "to_percentage",
]

logger = logging.getLogger(__name__)

CONTENT_TERMS: dict[OutputFormat, tuple[str, ...]] = {
    OutputFormat.MEETING_NOTES: ("meeting", "attendees", "agenda", "discussed", "action item", "follow up"),
    OutputFormat.TASK_LISTS: ("todo", "task", "complete", "done", "finish", "priority"),
    OutputFormat.JOURNAL_NOTES: ("today", "i feel", "i think", "my", "realized", "grateful"),
    OutputFormat.SHOPPING_LISTS: ("buy", "get", "need", "store", "grocery", "milk", "bread"),
    OutputFormat.RESEARCH_NOTES: ("study", "research", "source", "citation", "according to", "et al"),
    OutputFormat.STUDY_NOTES: ("definition", "important", "key term", "chapter", "concept", "example"),
}

_CONTENT_DESCRIPTIONS: dict[OutputFormat, str] = {
    OutputFormat.MEETING_NOTES: "Meeting-related terminology",
    OutputFormat.TASK_LISTS: "Task-related terminology",
    OutputFormat.JOURNAL_NOTES: "Personal narrative language",
    OutputFormat.SHOPPING_LISTS: "Shopping-related terms",
    OutputFormat.RESEARCH_NOTES: "Academic terminology",
    OutputFormat.STUDY_NOTES: "Educational terminology",
}

FORMAT_KEYWORDS: dict[OutputFormat, tuple[str, ...]] = {
    OutputFormat.MEETING_NOTES: ("meeting", "attendees", "agenda", "action", "decision"),
    OutputFormat.TASK_LISTS: ("task", "todo", "complete", "priority", "deadline"),
    OutputFormat.JOURNAL_NOTES: ("today", "feel", "think", "realize", "grateful"),
    OutputFormat.SHOPPING_LISTS: ("buy", "need", "store", "grocery", "item"),
    OutputFormat.RESEARCH_NOTES: ("research", "study", "source", "citation", "reference"),
    OutputFormat.STUDY_NOTES: ("chapter", "definition", "concept", "important", "example"),
}

_KEYWORD_TOKEN = re.compile(r"\b\w{4,}\b")


def to_percentage(score: float) -> int:
    """Scale a [0, 1] score to an integer percentage, rounding halves up."""

    return int(max(0, min(100, round_half_up(clamp(score) * 100))))


def extract_keywords(text: str, limit: int = 20) -> list[str]:
    """Most frequent lowercase words of four or more characters."""

    counts = Counter(_KEYWORD_TOKEN.findall(text.lower()))
    return [word for word, _ in counts.most_common(limit)]


def _pattern_score(
    output_format: OutputFormat,
    catalog: PatternCatalog,
    patterns: Sequence[PatternMatch],
) -> tuple[float, str]:
    format_ids = catalog.pattern_ids(output_format)
    if not format_ids:
        return 0.0, "No patterns defined"
    relevant = [match for match in patterns if match.pattern_id in format_ids]
    matched_ids = {match.pattern_id for match in relevant}
    ratio = len(matched_ids) / len(format_ids)
    score = ratio * 0.6 + mean(match.confidence for match in relevant) * 0.4
    return clamp(score), f"{len(matched_ids)} of {len(format_ids)} patterns matched"


def _structure_score(output_format: OutputFormat, structure: ContentStructure) -> tuple[float, str]:
    if output_format is OutputFormat.MEETING_NOTES:
        section_count = len(structure.sections)
        list_count = len(structure.lists)
        score = (0.5 if section_count > 2 else 0.0) + (0.5 if list_count > 0 else 0.0)
        return score, f"{section_count} sections, {list_count} lists"
    if output_format is OutputFormat.TASK_LISTS:
        items = structure.list_item_count
        return min(1.0, items / 10), f"{items} list items found"
    if output_format is OutputFormat.JOURNAL_NOTES:
        paragraphs = len(structure.paragraphs)
        return min(1.0, paragraphs / 3), f"{paragraphs} paragraphs"
    if output_format is OutputFormat.SHOPPING_LISTS:
        items = structure.list_item_count
        return min(1.0, items / 8), f"{items} items"
    if output_format is OutputFormat.RESEARCH_NOTES:
        depth = structure.hierarchy_depth()
        return min(1.0, depth / 3), f"Hierarchy depth: {depth}"
    depth = structure.hierarchy_depth()
    has_definitions = any(":" in section.content for section in structure.sections)
    score = min(1.0, depth / 4) * 0.7 + (0.3 if has_definitions else 0.0)
    return score, f"Outline depth: {depth}"


def _content_score(output_format: OutputFormat, lowered: str) -> tuple[float, str]:
    terms = CONTENT_TERMS[output_format]
    hits = sum(1 for term in terms if term in lowered)
    return hits / len(terms), _CONTENT_DESCRIPTIONS[output_format]


def _keyword_score(output_format: OutputFormat, keywords: Sequence[str]) -> tuple[float, str]:
    format_keywords = FORMAT_KEYWORDS[output_format]
    covered = [
        expected
        for expected in format_keywords
        if any(expected in keyword or keyword in expected for keyword in keywords)
    ]
    return len(covered) / len(format_keywords), f"{len(covered)} relevant keywords found"


def predict_format(
    output_format: OutputFormat,
    text: str,
    structure: ContentStructure,
    patterns: Sequence[PatternMatch],
    *,
    catalog: PatternCatalog | None = None,
    settings: ClassifierSettings | None = None,
    keywords: Sequence[str] | None = None,
) -> FormatPrediction:
    """Score one candidate format from its four weighted components."""

    source = catalog if catalog is not None else default_catalog()
    tuning = settings or ClassifierSettings()
    if keywords is None:
        keywords = extract_keywords(text, tuning.top_keywords)

    pattern_score, pattern_note = _pattern_score(output_format, source, patterns)
    structure_score, structure_note = _structure_score(output_format, structure)
    content_score, content_note = _content_score(output_format, text.lower())
    keyword_score, keyword_note = _keyword_score(output_format, keywords)

    overall = clamp(
        pattern_score * tuning.pattern_weight
        + structure_score * tuning.structure_weight
        + content_score * tuning.content_weight
        + keyword_score * tuning.keyword_weight
    )
    scores = FormatScores(
        structure=clamp(structure_score),
        content=clamp(content_score),
        patterns=clamp(pattern_score),
        keywords=clamp(keyword_score),
        overall=overall,
    )
    factors = (
        PredictionFactor("Pattern Matches", tuning.pattern_weight, scores.patterns, pattern_note),
        PredictionFactor("Structure Analysis", tuning.structure_weight, scores.structure, structure_note),
        PredictionFactor("Content Analysis", tuning.content_weight, scores.content, content_note),
        PredictionFactor("Keyword Matching", tuning.keyword_weight, scores.keywords, keyword_note),
    )
    return FormatPrediction(
        output_format=output_format,
        confidence=to_percentage(overall),
        factors=factors,
        scores=scores,
    )


def predict_formats(
    text: str,
    structure: ContentStructure,
    patterns: Sequence[PatternMatch],
    *,
    catalog: PatternCatalog | None = None,
    settings: ClassifierSettings | None = None,
) -> list[FormatPrediction]:
    """Score every format and order the predictions by confidence.

    When no format gathers any evidence the fallback format is moved to the
    front so callers always receive a usable suggestion.
    """

    tuning = settings or ClassifierSettings()
    keywords = extract_keywords(text, tuning.top_keywords)
    predictions = [
        predict_format(
            output_format,
            text,
            structure,
            patterns,
            catalog=catalog,
            settings=tuning,
            keywords=keywords,
        )
        for output_format in OutputFormat
    ]
    predictions.sort(key=lambda prediction: prediction.confidence, reverse=True)

    if predictions[0].confidence == 0:
        fallback = [item for item in predictions if item.output_format is tuning.fallback_format]
        others = [item for item in predictions if item.output_format is not tuning.fallback_format]
        predictions = fallback + others
    return predictions


def classify_content(
    text: str,
    structure: ContentStructure,
    patterns: Sequence[PatternMatch],
    *,
    catalog: PatternCatalog | None = None,
    settings: ClassifierSettings | None = None,
) -> ContentClassification:
    """Rank formats and attach categories, language and style descriptors."""

    predictions = predict_formats(text, structure, patterns, catalog=catalog, settings=settings)
    top = predictions[0]
    logger.debug("Top prediction %s at %d%%", top.output_format.value, top.confidence)
    return ContentClassification(
        predictions=tuple(predictions),
        categories=tuple(categorize_content(text, patterns)),
        language=detect_language(text),
        style=analyze_style(text),
    )
