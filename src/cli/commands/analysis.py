"""CLI commands for text analysis and format detection."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from src.text_analysis.config import load_analysis_config
from src.text_analysis.engine import TextAnalysisEngine
from src.text_analysis.matcher import calculate_pattern_stats, match_patterns
from src.text_analysis.models import OutputFormat, TextAnalysis
from src.text_analysis.structure import get_text_statistics

OUTPUT_TEXT = "text"
OUTPUT_JSON = "json"

_FORMAT_CHOICES = [item.value for item in OutputFormat]


def register_commands(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Add analysis-focused subcommands to the main CLI parser."""

    analyze_parser = subparsers.add_parser(
        "analyze",
        description="Run the full analysis pipeline over a text.",
        help="Run the full analysis pipeline over a text.",
    )
    _add_common_arguments(analyze_parser)
    analyze_parser.add_argument(
        "--format",
        dest="target_format",
        choices=_FORMAT_CHOICES,
        help="Restrict pattern matching to one output format.",
    )
    analyze_parser.add_argument(
        "--validate",
        action="store_true",
        help="Report advisory validation issues alongside the analysis.",
    )
    analyze_parser.set_defaults(func=analyze_cli, command="analyze")

    detect_parser = subparsers.add_parser(
        "detect",
        description="Suggest the output format that best fits a text.",
        help="Suggest the output format that best fits a text.",
    )
    _add_common_arguments(detect_parser)
    detect_parser.set_defaults(func=detect_cli, command="detect")

    stats_parser = subparsers.add_parser(
        "stats",
        description="Print basic text statistics.",
        help="Print basic text statistics.",
    )
    _add_common_arguments(stats_parser)
    stats_parser.set_defaults(func=stats_cli, command="stats")

    patterns_parser = subparsers.add_parser(
        "patterns",
        description="List pattern matches found in a text.",
        help="List pattern matches found in a text.",
    )
    _add_common_arguments(patterns_parser)
    patterns_parser.add_argument(
        "--format",
        dest="target_format",
        choices=_FORMAT_CHOICES,
        help="Only match patterns belonging to this output format.",
    )
    patterns_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of matches to print.",
    )
    patterns_parser.set_defaults(func=patterns_cli, command="patterns")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Analyze unstructured text and suggest an output format.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    register_commands(subparsers)
    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--input",
        type=Path,
        help="Text file to analyze (reads stdin when omitted).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to an analysis YAML config (default: config/text_analysis.yaml when present).",
    )
    parser.add_argument(
        "--output-format",
        choices=[OUTPUT_TEXT, OUTPUT_JSON],
        default=OUTPUT_TEXT,
        help="Output format for the command result.",
    )


def _read_input(path: Path | None) -> str:
    if path is None:
        return sys.stdin.read()
    resolved = path.expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"Input file '{resolved}' does not exist")
    return resolved.read_text(encoding="utf-8")


def _prepare(args: argparse.Namespace) -> tuple[TextAnalysisEngine, str]:
    config = load_analysis_config(getattr(args, "config", None))
    text = _read_input(getattr(args, "input", None))
    return TextAnalysisEngine(config=config), text


def _emit_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _print_analysis(analysis: TextAnalysis) -> None:
    top = analysis.classification.top_prediction
    if top is not None:
        print(f"Suggested format: {top.output_format.value} ({top.confidence}%)")
    print(f"Overall confidence: {analysis.confidence.overall:.2f}")
    print(f"Pattern matches: {len(analysis.patterns)}")
    print(f"Entities: {len(analysis.entities)}")
    print(
        "Structure: "
        f"{len(analysis.structure.sections)} sections, "
        f"{len(analysis.structure.lists)} lists, "
        f"{len(analysis.structure.paragraphs)} paragraphs"
    )
    print("\nFormat predictions:")
    for prediction in analysis.classification.predictions:
        print(f"  {prediction.output_format.value:<16} {prediction.confidence:>3}%")


def analyze_cli(args: argparse.Namespace) -> int:
    """Execute the full analysis for the provided input."""

    try:
        engine, text = _prepare(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    analysis = engine.analyze_text(text, args.target_format)
    report = engine.validate_analysis(analysis) if args.validate else None

    if args.output_format == OUTPUT_JSON:
        payload = analysis.to_dict()
        if report is not None:
            payload["validation"] = report.to_dict()
        _emit_json(payload)
        return 0

    _print_analysis(analysis)
    if report is not None:
        if report.valid:
            print("\nValidation: ok")
        else:
            print("\nValidation issues:")
            for issue in report.issues:
                print(f"  - {issue}")
    return 0


def detect_cli(args: argparse.Namespace) -> int:
    """Print the suggested output format with alternatives."""

    try:
        engine, text = _prepare(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    detection = engine.detect_format(text)
    if args.output_format == OUTPUT_JSON:
        _emit_json(detection.to_dict())
        return 0

    print(f"Suggested format: {detection.suggested_format.value} ({detection.confidence}%)")
    print(detection.reasoning)
    if detection.alternatives:
        print("Alternatives:")
        for output_format, confidence in detection.alternatives:
            print(f"  {output_format.value}: {confidence}%")
    return 0


def stats_cli(args: argparse.Namespace) -> int:
    """Print text statistics for the provided input."""

    try:
        text = _read_input(args.input)
    except FileNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    stats = get_text_statistics(text)
    if args.output_format == OUTPUT_JSON:
        _emit_json(stats.to_dict())
        return 0

    for key, value in stats.to_dict().items():
        print(f"{key}: {value}")
    return 0


def patterns_cli(args: argparse.Namespace) -> int:
    """List the pattern matches found in the provided input."""

    try:
        engine, text = _prepare(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    settings = engine.config.matcher
    matches = match_patterns(
        text,
        engine.select_patterns(args.target_format),
        context_window=settings.context_window,
    )
    if args.limit is not None:
        matches = matches[: max(0, args.limit)]

    if args.output_format == OUTPUT_JSON:
        _emit_json([match.to_dict() for match in matches])
        return 0

    if not matches:
        print("No patterns matched.")
        return 0
    for match in matches:
        print(f"{match.confidence:.2f}  {match.pattern_id:<26} line {match.position.line}: {match.match.strip()}")
    stats = calculate_pattern_stats(matches, high_confidence_threshold=settings.high_confidence_threshold)
    print(f"\n{stats.total} matches, {stats.high_confidence_count} high confidence")
    return 0
