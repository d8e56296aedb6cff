"""Cobertura XML format parser.

Cobertura XML is used by many coverage tools across languages:
- Python: coverage.py
- .NET: coverlet
- Go: gocover-cobertura
- JavaScript: istanbul's cobertura reporter

Structure:
<coverage line-rate="0.85" branch-rate="0.50" lines-valid="100" lines-covered="85"
          branches-valid="20" branches-covered="10" ...>
  <packages>
    <package name="...">
      <classes>
        <class name="..." filename="..." line-rate="...">
          <methods>
            <method name="..." signature="..." line-rate="...">
              <lines>...</lines>
            </method>
          </methods>
          <lines>
            <line number="1" hits="1" branch="false"/>
            <line number="2" hits="0" branch="true" condition-coverage="50% (1/2)"/>
          </lines>
        </class>
      </classes>
    </package>
  </packages>
</coverage>

Statements and lines are both the count of class-level <line> elements.
Methods carry only a rate, so a method is covered when its line-rate > 0.
Classes sharing a filename are folded into one file entry.
"""

import re
import xml.etree.ElementTree as ET

import structlog

from covcompare.coverage.errors import InvalidFormatError
from covcompare.coverage.models import (
    CoverageFormat,
    CoverageSummary,
    FileCoverage,
    MetricName,
    NormalizedCoverage,
    sum_metrics,
)

from .base import build_metric, float_attr, int_attr, looks_like_xml, parse_xml

log = structlog.get_logger()

_FMT = CoverageFormat.COBERTURA

# "50% (1/2)" -> covered=1, total=2
_CONDITION_COVERAGE = re.compile(r"\((\d+)/(\d+)\)")


class _ClassCounts:
    """Raw counters for one filename, summed over its classes."""

    __slots__ = (
        "lines_total",
        "lines_hit",
        "branches_total",
        "branches_hit",
        "methods",
        "methods_hit",
    )

    def __init__(self) -> None:
        self.lines_total = 0
        self.lines_hit = 0
        self.branches_total = 0
        self.branches_hit = 0
        self.methods = 0
        self.methods_hit = 0


class CoberturaParser:
    """Parser for Cobertura XML format."""

    @property
    def format_id(self) -> CoverageFormat:
        return _FMT

    def detect(self, content: str, filename: str) -> bool:  # noqa: ARG002
        """<coverage> root with line-rate attribute (distinguishes from Clover)."""
        return looks_like_xml(content) and "<coverage" in content and "line-rate" in content

    def parse(self, content: str) -> NormalizedCoverage:
        """Parse Cobertura XML into NormalizedCoverage."""
        root = parse_xml(content, _FMT)
        if root.tag != "coverage":
            raise InvalidFormatError(_FMT.value, f"missing coverage element (root is <{root.tag}>)")

        counts: dict[str, _ClassCounts] = {}

        for cls in root.iter("class"):
            filename = cls.get("filename") or cls.get("name") or ""
            if filename not in counts:
                counts[filename] = _ClassCounts()
            self._count_class(cls, counts[filename])

        files = tuple(
            FileCoverage(
                path=path,
                statements=build_metric(_FMT, c.lines_hit, c.lines_total),
                branches=build_metric(_FMT, c.branches_hit, c.branches_total),
                functions=build_metric(_FMT, c.methods_hit, c.methods),
                lines=build_metric(_FMT, c.lines_hit, c.lines_total),
            )
            for path, c in counts.items()
        )

        log.debug("cobertura.parsed", files=len(files))
        return NormalizedCoverage(format=_FMT, summary=self._summary(root, files), files=files)

    def _count_class(self, cls: ET.Element, c: _ClassCounts) -> None:
        for method in cls.findall("./methods/method"):
            c.methods += 1
            if float_attr(method, "line-rate", _FMT) > 0:
                c.methods_hit += 1

        # Class-level lines only; method-level <lines> repeat them
        for line in cls.findall("./lines/line"):
            c.lines_total += 1
            if int_attr(line, "hits", _FMT) > 0:
                c.lines_hit += 1

            if line.get("branch") == "true":
                match = _CONDITION_COVERAGE.search(line.get("condition-coverage", ""))
                if match:
                    c.branches_hit += int(match.group(1))
                    c.branches_total += int(match.group(2))

    def _summary(self, root: ET.Element, files: tuple[FileCoverage, ...]) -> CoverageSummary:
        """Prefer the tool's own root aggregates over re-summing classes."""
        functions = sum_metrics(files, MetricName.FUNCTIONS)

        lines_valid = int_attr(root, "lines-valid", _FMT)
        if lines_valid <= 0:
            return CoverageSummary(
                statements=sum_metrics(files, MetricName.STATEMENTS),
                branches=sum_metrics(files, MetricName.BRANCHES),
                functions=functions,
                lines=sum_metrics(files, MetricName.LINES),
            )

        lines = build_metric(_FMT, int_attr(root, "lines-covered", _FMT), lines_valid)
        if root.get("branches-valid") is not None:
            branches = build_metric(
                _FMT,
                int_attr(root, "branches-covered", _FMT),
                int_attr(root, "branches-valid", _FMT),
            )
        else:
            branches = sum_metrics(files, MetricName.BRANCHES)

        return CoverageSummary(
            statements=lines,
            branches=branches,
            functions=functions,
            lines=lines,
        )
