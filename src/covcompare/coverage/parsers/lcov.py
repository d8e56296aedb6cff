"""LCOV format parser.

LCOV format is a plain text format with records like:
- SF:<source file path>
- DA:<line>,<hit count>[,<checksum>]
- BRDA:<line>,<block>,<branch>,<taken>
- FN:<line>,<name>
- FNDA:<hit count>,<name>
- LF:<lines found>
- LH:<lines hit>
- BRF:<branches found>
- BRH:<branches hit>
- FNF:<functions found>
- FNH:<functions hit>
- end_of_record

Used by: pytest-cov, c8, cargo-llvm-cov, gcov/lcov, dart test

LCOV does not distinguish statements from lines, so both metrics come from
the line totals. The LF/LH, FNF/FNH and BRF/BRH summary records win when a
record carries them; otherwise totals are counted from DA/FN/BRDA details.
"""

from dataclasses import dataclass, field

import structlog

from covcompare.coverage.errors import EmptyCoverageDataError, MalformedInputError
from covcompare.coverage.models import (
    CoverageFormat,
    FileCoverage,
    NormalizedCoverage,
    aggregate_summary,
)

from .base import build_metric

log = structlog.get_logger()

LCOV_EXTENSIONS = (".info", ".lcov")


def has_lcov_extension(filename: str) -> bool:
    return filename.lower().endswith(LCOV_EXTENSIONS)


def has_lcov_markers(content: str) -> bool:
    """Generic SF:/LF:/DA: marker check for LCOV files without a known extension."""
    return "SF:" in content and ("LF:" in content or "DA:" in content)


@dataclass(slots=True)
class _LcovRecord:
    """Counters accumulated for one SF: ... end_of_record block."""

    path: str
    lines: dict[int, int] = field(default_factory=dict)  # line_number -> hit_count
    functions: dict[str, int] = field(default_factory=dict)  # name -> hit_count
    branches: list[int] = field(default_factory=list)  # taken count per branch
    lines_found: int | None = None
    lines_hit: int | None = None
    functions_found: int | None = None
    functions_hit: int | None = None
    branches_found: int | None = None
    branches_hit: int | None = None

    def to_file_coverage(self) -> FileCoverage:
        fmt = CoverageFormat.LCOV

        lf = self.lines_found if self.lines_found is not None else len(self.lines)
        lh = (
            self.lines_hit
            if self.lines_hit is not None
            else sum(1 for hits in self.lines.values() if hits > 0)
        )
        fnf = self.functions_found if self.functions_found is not None else len(self.functions)
        fnh = (
            self.functions_hit
            if self.functions_hit is not None
            else sum(1 for hits in self.functions.values() if hits > 0)
        )
        brf = self.branches_found if self.branches_found is not None else len(self.branches)
        brh = (
            self.branches_hit
            if self.branches_hit is not None
            else sum(1 for taken in self.branches if taken > 0)
        )

        lines = build_metric(fmt, lh, lf)
        return FileCoverage(
            path=self.path,
            statements=lines,
            branches=build_metric(fmt, brh, brf),
            functions=build_metric(fmt, fnh, fnf),
            lines=lines,
        )


def _to_int(value: str, line_no: int, line: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise MalformedInputError(
            "lcov", f"line {line_no}: invalid number {value!r} in {line!r}"
        ) from None


class LcovParser:
    """Parser for LCOV format coverage files."""

    @property
    def format_id(self) -> CoverageFormat:
        return CoverageFormat.LCOV

    def detect(self, content: str, filename: str) -> bool:
        """Check extension first, then content markers."""
        return has_lcov_extension(filename) or has_lcov_markers(content)

    def parse(self, content: str) -> NormalizedCoverage:
        """Parse LCOV text into NormalizedCoverage."""
        records: list[_LcovRecord] = []
        current: _LcovRecord | None = None

        for line_no, raw in enumerate(content.splitlines(), start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("SF:"):
                # A new SF: without end_of_record closes the previous block
                if current is not None:
                    records.append(current)
                current = _LcovRecord(path=line[3:])
                continue

            if line == "end_of_record":
                if current is not None:
                    records.append(current)
                current = None
                continue

            if current is None:
                # TN: and stray records outside an SF block
                continue

            tag, _, value = line.partition(":")

            if tag == "DA":
                # DA:line,hits[,checksum]
                parts = value.split(",")
                if len(parts) < 2:
                    raise MalformedInputError("lcov", f"line {line_no}: malformed DA record")
                line_num = _to_int(parts[0], line_no, line)
                # Handle '-' as 0 (some tools use this)
                hits = 0 if parts[1] == "-" else _to_int(parts[1], line_no, line)
                current.lines[line_num] = max(current.lines.get(line_num, 0), hits)

            elif tag == "FN":
                # FN:line,name or lcov 2.x FN:start,end,name; names may contain commas
                parts = value.split(",")
                if len(parts) < 2:
                    raise MalformedInputError("lcov", f"line {line_no}: malformed FN record")
                if len(parts) > 2 and parts[0].isdigit() and parts[1].isdigit():
                    name = ",".join(parts[2:])
                else:
                    name = value.split(",", 1)[1]
                current.functions.setdefault(name, 0)

            elif tag == "FNDA":
                # FNDA:hits,name
                parts = value.split(",", 1)
                if len(parts) < 2:
                    raise MalformedInputError("lcov", f"line {line_no}: malformed FNDA record")
                hits = _to_int(parts[0], line_no, line)
                name = parts[1]
                current.functions[name] = max(current.functions.get(name, 0), hits)

            elif tag == "BRDA":
                # BRDA:line,block,branch,taken ('-' means the block never ran)
                parts = value.split(",")
                if len(parts) < 4:
                    raise MalformedInputError("lcov", f"line {line_no}: malformed BRDA record")
                taken = parts[3]
                current.branches.append(0 if taken == "-" else _to_int(taken, line_no, line))

            elif tag == "LF":
                current.lines_found = _to_int(value, line_no, line)
            elif tag == "LH":
                current.lines_hit = _to_int(value, line_no, line)
            elif tag == "FNF":
                current.functions_found = _to_int(value, line_no, line)
            elif tag == "FNH":
                current.functions_hit = _to_int(value, line_no, line)
            elif tag == "BRF":
                current.branches_found = _to_int(value, line_no, line)
            elif tag == "BRH":
                current.branches_hit = _to_int(value, line_no, line)

        # Handle file without end_of_record
        if current is not None:
            records.append(current)

        if not records:
            raise EmptyCoverageDataError("lcov")

        files = tuple(record.to_file_coverage() for record in records)
        log.debug("lcov.parsed", files=len(files))

        return NormalizedCoverage(
            format=CoverageFormat.LCOV,
            summary=aggregate_summary(files),
            files=files,
        )
