"""Coverage parser protocol and shared XML/attribute helpers."""

import xml.etree.ElementTree as ET
from typing import Protocol

from covcompare.coverage.errors import InvalidFormatError, MalformedInputError
from covcompare.coverage.models import CoverageFormat, Metric, NormalizedCoverage


class CoverageParser(Protocol):
    """Protocol for coverage format parsers.

    Each parser handles one coverage format and converts it to the
    normalized model. Parsers are stateless.
    """

    @property
    def format_id(self) -> CoverageFormat:
        """Format identifier."""
        ...

    def detect(self, content: str, filename: str) -> bool:
        """Check if the content looks like this parser's format.

        Uses extension and content sniffing.
        """
        ...

    def parse(self, content: str) -> NormalizedCoverage:
        """Parse raw report text into the normalized model.

        Raises:
            MalformedInputError: Underlying syntax is broken.
            InvalidFormatError: Required root structure is missing.
            EmptyCoverageDataError: No coverage records were found.
        """
        ...


def looks_like_xml(content: str) -> bool:
    """True when content is an XML document (declaration or leading tag)."""
    return content.lstrip("\ufeff \t\r\n").startswith("<")


def parse_xml(content: str, format_id: CoverageFormat) -> ET.Element:
    """Parse XML text and return the root with namespaces stripped."""
    try:
        root = ET.fromstring(content.lstrip("\ufeff"))
    except ET.ParseError as e:
        raise MalformedInputError(format_id.value, str(e)) from e

    # Strip namespace if present
    for elem in root.iter():
        if isinstance(elem.tag, str) and "}" in elem.tag:
            elem.tag = elem.tag.split("}", 1)[1]
    return root


def int_attr(elem: ET.Element, name: str, format_id: CoverageFormat) -> int:
    """Read an integer attribute; a missing attribute reads as 0."""
    raw = elem.get(name)
    if raw is None or raw.strip() == "":
        return 0
    try:
        return int(raw)
    except ValueError:
        try:
            # Some emitters write integral counts as "12.0"
            value = float(raw)
        except ValueError:
            raise MalformedInputError(
                format_id.value, f"<{elem.tag}> attribute {name}={raw!r} is not a number"
            ) from None
        if not value.is_integer():
            raise MalformedInputError(
                format_id.value, f"<{elem.tag}> attribute {name}={raw!r} is not an integer"
            )
        return int(value)


def float_attr(elem: ET.Element, name: str, format_id: CoverageFormat) -> float:
    """Read a float attribute; a missing attribute reads as 0.0."""
    raw = elem.get(name)
    if raw is None or raw.strip() == "":
        return 0.0
    try:
        return float(raw)
    except ValueError:
        raise MalformedInputError(
            format_id.value, f"<{elem.tag}> attribute {name}={raw!r} is not a number"
        ) from None


def build_metric(format_id: CoverageFormat, covered: int, total: int) -> Metric:
    """Build a Metric, reporting inconsistent counts as an invalid report."""
    try:
        return Metric.from_counts(covered, total)
    except ValueError as e:
        raise InvalidFormatError(format_id.value, str(e)) from e
