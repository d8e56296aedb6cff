"""Clover XML format parser.

Clover is used by multiple tools:
- PHP: phpunit --coverage-clover
- Kotlin: kover
- JavaScript: istanbul's clover reporter
- Java: OpenClover (historical)

Structure:
<coverage generated="..." clover="...">
  <project timestamp="...">
    <metrics statements="..." coveredstatements="..." conditionals="..."
             coveredconditionals="..." methods="..." coveredmethods="..."/>
    <package name="com.example">
      <file name="Foo.php" path="/path/to/Foo.php">
        <class name="FooClass" .../>
        <line num="1" type="stmt" count="1"/>
        <line num="5" type="cond" count="0" truecount="1" falsecount="0"/>
        <line num="10" type="method" name="bar" count="2"/>
        <metrics ...file stats.../>
      </file>
    </package>
  </project>
</coverage>

A bare <project> root is accepted as well.

A file's own <metrics> element wins over counting its <line> elements.
Clover has no separate line metric, so lines mirror statements.
"""

import xml.etree.ElementTree as ET

import structlog

from covcompare.coverage.errors import InvalidFormatError
from covcompare.coverage.models import (
    CoverageFormat,
    CoverageSummary,
    FileCoverage,
    NormalizedCoverage,
    aggregate_summary,
)

from .base import build_metric, int_attr, looks_like_xml, parse_xml

log = structlog.get_logger()

_FMT = CoverageFormat.CLOVER


def _find_project(root: ET.Element) -> ET.Element | None:
    if root.tag == "project":
        return root
    if root.tag == "coverage":
        return root.find("project")
    return None


class CloverParser:
    """Parser for Clover XML format."""

    @property
    def format_id(self) -> CoverageFormat:
        return _FMT

    def detect(self, content: str, filename: str) -> bool:  # noqa: ARG002
        """<coverage> carrying a clover attribute, or a <project> element."""
        if not looks_like_xml(content):
            return False
        return ("<coverage" in content and "clover" in content) or "<project" in content

    def parse(self, content: str) -> NormalizedCoverage:
        """Parse Clover XML into NormalizedCoverage."""
        root = parse_xml(content, _FMT)
        project = _find_project(root)
        if project is None:
            raise InvalidFormatError(_FMT.value, "missing project element")

        # Files directly under project, then files grouped in packages
        file_elems = [*project.findall("file"), *project.findall("package/file")]
        files = tuple(self._parse_file(file_elem) for file_elem in file_elems)

        project_metrics = project.find("metrics")
        summary = (
            self._parse_metrics(project_metrics)
            if project_metrics is not None
            else aggregate_summary(files)
        )

        log.debug("clover.parsed", files=len(files))
        return NormalizedCoverage(format=_FMT, summary=summary, files=files)

    def _parse_file(self, file_elem: ET.Element) -> FileCoverage:
        file_path = file_elem.get("path") or file_elem.get("name", "")

        metrics = file_elem.find("metrics")
        if metrics is not None:
            summary = self._parse_metrics(metrics)
            return FileCoverage(
                path=file_path,
                statements=summary.statements,
                branches=summary.branches,
                functions=summary.functions,
                lines=summary.lines,
            )

        statements = covered_statements = 0
        branches = covered_branches = 0
        methods = covered_methods = 0

        for line in file_elem.findall("line"):
            line_type = line.get("type", "stmt")
            count = int_attr(line, "count", _FMT)

            if line_type == "stmt":
                statements += 1
                if count > 0:
                    covered_statements += 1
            elif line_type == "cond":
                # True arm and false arm are two independent outcomes
                branches += 2
                if int_attr(line, "truecount", _FMT) > 0:
                    covered_branches += 1
                if int_attr(line, "falsecount", _FMT) > 0:
                    covered_branches += 1
            elif line_type == "method":
                methods += 1
                if count > 0:
                    covered_methods += 1

        return FileCoverage(
            path=file_path,
            statements=build_metric(_FMT, covered_statements, statements),
            branches=build_metric(_FMT, covered_branches, branches),
            functions=build_metric(_FMT, covered_methods, methods),
            lines=build_metric(_FMT, covered_statements, statements),
        )

    def _parse_metrics(self, metrics: ET.Element) -> CoverageSummary:
        statements = build_metric(
            _FMT,
            int_attr(metrics, "coveredstatements", _FMT),
            int_attr(metrics, "statements", _FMT),
        )
        return CoverageSummary(
            statements=statements,
            branches=build_metric(
                _FMT,
                int_attr(metrics, "coveredconditionals", _FMT),
                int_attr(metrics, "conditionals", _FMT),
            ),
            functions=build_metric(
                _FMT,
                int_attr(metrics, "coveredmethods", _FMT),
                int_attr(metrics, "methods", _FMT),
            ),
            lines=statements,
        )
