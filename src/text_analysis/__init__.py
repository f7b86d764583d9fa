"""Text analysis and output-format classification engine."""
from __future__ import annotations

from .catalog import PatternCatalog, PatternCatalogError, default_catalog, get_all_patterns, get_patterns
from .classifier import classify_content
from .config import AnalysisConfig, ConfigError, load_analysis_config
from .engine import TextAnalysisEngine, analyze_text, classify_text, detect_format, validate_analysis
from .entities import extract_entities
from .matcher import calculate_pattern_stats, match_patterns
from .models import (
    ContentClassification,
    ContentStructure,
    EntityType,
    ExtractedEntity,
    FormatDetection,
    FormatPrediction,
    OutputFormat,
    PatternDefinition,
    PatternMatch,
    TextAnalysis,
    ValidationReport,
)
from .structure import analyze_structure, get_text_statistics

__all__ = [
    "AnalysisConfig",
    "ConfigError",
    "ContentClassification",
    "ContentStructure",
    "EntityType",
    "ExtractedEntity",
    "FormatDetection",
    "FormatPrediction",
    "OutputFormat",
    "PatternCatalog",
    "PatternCatalogError",
    "PatternDefinition",
    "PatternMatch",
    "TextAnalysis",
    "TextAnalysisEngine",
    "ValidationReport",
    "analyze_structure",
    "analyze_text",
    "calculate_pattern_stats",
    "classify_content",
    "classify_text",
    "default_catalog",
    "detect_format",
    "extract_entities",
    "get_all_patterns",
    "get_patterns",
    "get_text_statistics",
    "load_analysis_config",
    "match_patterns",
    "validate_analysis",
]
