"""Coverage parser registry and auto-detection.

This module provides:
- PARSER_BY_FORMAT: Format identifier to parser mapping
- detect_format: Auto-detect format from content + filename
- parse_coverage: Parse with explicit or auto-detected format
"""

import json

import structlog

from covcompare.coverage.errors import UnrecognizedFormatError
from covcompare.coverage.models import CoverageFormat, NormalizedCoverage

from .base import CoverageParser, looks_like_xml
from .clover import CloverParser
from .cobertura import CoberturaParser
from .istanbul import IstanbulParser, is_istanbul_document
from .jacoco import JacocoParser
from .lcov import LcovParser, has_lcov_extension, has_lcov_markers

log = structlog.get_logger()

AUTO = "auto"

PARSER_BY_FORMAT: dict[CoverageFormat, CoverageParser] = {
    CoverageFormat.LCOV: LcovParser(),
    CoverageFormat.ISTANBUL: IstanbulParser(),
    CoverageFormat.COBERTURA: CoberturaParser(),
    CoverageFormat.CLOVER: CloverParser(),
    CoverageFormat.JACOCO: JacocoParser(),
}

# <coverage>-rooted grammars overlap; most distinctive markers first
_XML_DETECTION_ORDER = (CoverageFormat.COBERTURA, CoverageFormat.CLOVER, CoverageFormat.JACOCO)

__all__ = [
    "AUTO",
    "PARSER_BY_FORMAT",
    "detect_format",
    "get_parser",
    "parse_coverage",
    "CoverageParser",
    "CloverParser",
    "CoberturaParser",
    "IstanbulParser",
    "JacocoParser",
    "LcovParser",
]


def detect_format(content: str, filename: str) -> CoverageFormat:
    """Detect the format of a coverage report.

    Rules, first match wins:
    1. .info / .lcov extension -> lcov
    2. .json whose first record has statementMap or s -> istanbul
    3. XML content: cobertura, then clover, then jacoco markers
    4. SF: plus LF:/DA: markers -> lcov (extensionless LCOV files)

    Raises:
        UnrecognizedFormatError: If no rule matches.
    """
    detected = _detect(content, filename)
    if detected is None:
        raise UnrecognizedFormatError(filename)
    log.debug("coverage.format_detected", filename=filename, format=detected.value)
    return detected


def _detect(content: str, filename: str) -> CoverageFormat | None:
    if has_lcov_extension(filename):
        return CoverageFormat.LCOV

    if filename.lower().endswith(".json"):
        try:
            data = json.loads(content)
        except ValueError:
            # Not valid JSON - fall through to content sniffing
            data = None
        if is_istanbul_document(data):
            return CoverageFormat.ISTANBUL

    if looks_like_xml(content):
        for format_id in _XML_DETECTION_ORDER:
            if PARSER_BY_FORMAT[format_id].detect(content, filename):
                return format_id

    if has_lcov_markers(content):
        return CoverageFormat.LCOV

    return None


def get_parser(format_id: CoverageFormat | str) -> CoverageParser:
    """Look up the parser for a format identifier.

    Raises:
        UnrecognizedFormatError: If the identifier is not a supported format.
    """
    try:
        resolved = CoverageFormat(format_id)
    except ValueError:
        valid = ", ".join(f.value for f in CoverageFormat)
        raise UnrecognizedFormatError(
            str(format_id),
            f"Unknown coverage format: {format_id!r}. Valid formats: {valid}",
        ) from None
    return PARSER_BY_FORMAT[resolved]


def parse_coverage(
    content: str,
    filename: str,
    format_id: CoverageFormat | str = AUTO,
) -> NormalizedCoverage:
    """Parse a coverage report into NormalizedCoverage.

    Args:
        content: Full report text.
        filename: Name of the report file, used for extension hints.
        format_id: Explicit format, or "auto" to detect.

    Raises:
        CoverageError: If the format is unknown or parsing fails.
    """
    if format_id == AUTO:
        parser = PARSER_BY_FORMAT[detect_format(content, filename)]
    else:
        parser = get_parser(format_id)

    coverage = parser.parse(content)
    log.debug(
        "coverage.parsed",
        filename=filename,
        format=coverage.format.value,
        files=len(coverage.files),
    )
    return coverage
