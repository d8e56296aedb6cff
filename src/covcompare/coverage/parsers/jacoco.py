"""JaCoCo XML format parser.

JaCoCo is the standard Java coverage tool, used via Maven and Gradle.

Structure:
<report name="...">
  <package name="com/example">
    <class name="com/example/Foo" sourcefilename="Foo.java">
      <method name="bar" desc="()V" line="10">
        <counter type="METHOD" missed="0" covered="1"/>
      </method>
    </class>
    <sourcefile name="Foo.java">
      <line nr="1" mi="0" ci="1" mb="0" cb="0"/>
      <line nr="2" mi="1" ci="0" mb="1" cb="1"/>
      <counter type="INSTRUCTION" missed="3" covered="12"/>
      <counter type="BRANCH" missed="1" covered="1"/>
      <counter type="LINE" missed="1" covered="4"/>
      <counter type="METHOD" missed="0" covered="2"/>
    </sourcefile>
  </package>
  <counter type="INSTRUCTION" missed="100" covered="400"/>
</report>

Counter mapping onto the normalized model:
- statements <- INSTRUCTION (bytecode instructions, JaCoCo's primary unit)
- branches   <- BRANCH
- lines      <- LINE
- functions  <- METHOD

Instruction coverage reported as "statements" is a cross-format
approximation that downstream thresholds are calibrated against.
"""

import xml.etree.ElementTree as ET

import structlog

from covcompare.coverage.errors import InvalidFormatError
from covcompare.coverage.models import (
    CoverageFormat,
    CoverageSummary,
    FileCoverage,
    Metric,
    NormalizedCoverage,
    aggregate_summary,
)

from .base import build_metric, int_attr, looks_like_xml, parse_xml

log = structlog.get_logger()

_FMT = CoverageFormat.JACOCO

_COUNTER_FOR_METRIC = {
    "statements": "INSTRUCTION",
    "branches": "BRANCH",
    "functions": "METHOD",
    "lines": "LINE",
}


def _counters(elem: ET.Element) -> dict[str, Metric]:
    """Direct <counter> children keyed by type."""
    result: dict[str, Metric] = {}
    for counter in elem.findall("counter"):
        missed = int_attr(counter, "missed", _FMT)
        covered = int_attr(counter, "covered", _FMT)
        result[counter.get("type", "")] = build_metric(_FMT, covered, missed + covered)
    return result


def _summary_from_counters(counters: dict[str, Metric]) -> CoverageSummary:
    def pick(metric: str) -> Metric:
        return counters.get(_COUNTER_FOR_METRIC[metric]) or Metric.empty()

    return CoverageSummary(
        statements=pick("statements"),
        branches=pick("branches"),
        functions=pick("functions"),
        lines=pick("lines"),
    )


class JacocoParser:
    """Parser for JaCoCo XML format."""

    @property
    def format_id(self) -> CoverageFormat:
        return _FMT

    def detect(self, content: str, filename: str) -> bool:  # noqa: ARG002
        """JaCoCo has a <report> root with counter elements."""
        return looks_like_xml(content) and "<report" in content and "<counter" in content

    def parse(self, content: str) -> NormalizedCoverage:
        """Parse JaCoCo XML into NormalizedCoverage."""
        root = parse_xml(content, _FMT)
        if root.tag != "report":
            raise InvalidFormatError(_FMT.value, f"missing report element (root is <{root.tag}>)")

        files: list[FileCoverage] = []
        # Nested <group> elements (multi-module builds) hold packages too
        for package in root.iter("package"):
            package_path = package.get("name", "")

            for sourcefile in package.findall("sourcefile"):
                filename = sourcefile.get("name", "")
                # Build file path from package + filename
                file_path = f"{package_path}/{filename}" if package_path else filename
                files.append(self._parse_sourcefile(package, sourcefile, file_path))

        report_counters = _counters(root)
        summary = (
            _summary_from_counters(report_counters)
            if report_counters
            else aggregate_summary(files)
        )

        log.debug("jacoco.parsed", files=len(files))
        return NormalizedCoverage(format=_FMT, summary=summary, files=tuple(files))

    def _parse_sourcefile(
        self, package: ET.Element, sourcefile: ET.Element, file_path: str
    ) -> FileCoverage:
        counters = _counters(sourcefile)
        if counters:
            summary = _summary_from_counters(counters)
            return FileCoverage(
                path=file_path,
                statements=summary.statements,
                branches=summary.branches,
                functions=summary.functions,
                lines=summary.lines,
            )

        # Fallback: per-line instruction/branch counts
        lines_total = lines_hit = 0
        instructions_total = instructions_hit = 0
        branches_total = branches_hit = 0

        for line in sourcefile.findall("line"):
            mi = int_attr(line, "mi", _FMT)  # missed instructions
            ci = int_attr(line, "ci", _FMT)  # covered instructions
            mb = int_attr(line, "mb", _FMT)  # missed branches
            cb = int_attr(line, "cb", _FMT)  # covered branches

            instructions_total += mi + ci
            instructions_hit += ci
            branches_total += mb + cb
            branches_hit += cb
            lines_total += 1
            if ci > 0:
                lines_hit += 1

        return FileCoverage(
            path=file_path,
            statements=build_metric(_FMT, instructions_hit, instructions_total),
            branches=build_metric(_FMT, branches_hit, branches_total),
            functions=self._methods_for(package, sourcefile.get("name", "")),
            lines=build_metric(_FMT, lines_hit, lines_total),
        )

    def _methods_for(self, package: ET.Element, source_filename: str) -> Metric:
        """Method coverage from the classes compiled out of one source file."""
        methods = 0
        covered = 0
        for cls in package.findall("class"):
            if cls.get("sourcefilename") != source_filename:
                continue
            for method in cls.findall("method"):
                counter = method.find("counter[@type='METHOD']")
                methods += 1
                if counter is not None and int_attr(counter, "covered", _FMT) > 0:
                    covered += 1
        return build_metric(_FMT, covered, methods)
