"""Istanbul/NYC JSON format parser.

Istanbul (used by Jest, Vitest, NYC, c8 --reporter=json) produces JSON coverage:
- coverage-final.json: Per-file detailed coverage
- coverage-summary.json: Aggregate summary (not supported, no per-file maps)

Structure of coverage-final.json:
{
  "/path/to/file.js": {
    "path": "/path/to/file.js",
    "statementMap": { "0": {"start": {"line": 1, "column": 0}, "end": ...}, ... },
    "s": { "0": 1, "1": 0, ... },  // statement hit counts
    "branchMap": { "0": {"type": "if", "locations": [...], "line": 5}, ... },
    "b": { "0": [1, 0], ... },  // branch hit counts per location
    "fnMap": { "0": {"name": "foo", "decl": {"start": {"line": 1}}, ...}, ... },
    "f": { "0": 1, ... }  // function hit counts
  }
}

Older istanbul-lib-coverage dumps wrap each record as {"data": {...}}.

Istanbul has no line map; line coverage is reconstructed from the physical
lines spanned by each statement.
"""

import json
from typing import Any

import structlog

from covcompare.coverage.errors import (
    EmptyCoverageDataError,
    InvalidFormatError,
    MalformedInputError,
)
from covcompare.coverage.models import (
    CoverageFormat,
    FileCoverage,
    Metric,
    NormalizedCoverage,
    aggregate_summary,
)

from .base import build_metric

log = structlog.get_logger()

_FMT = CoverageFormat.ISTANBUL


def is_istanbul_document(data: Any) -> bool:
    """True when the first value of a JSON mapping looks like a file record."""
    if not isinstance(data, dict) or not data:
        return False
    first = next(iter(data.values()))
    return isinstance(first, dict) and ("statementMap" in first or "s" in first)


def _hit(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and value > 0


def _line_of(position: Any, fallback: int) -> int:
    if isinstance(position, dict):
        line = position.get("line")
        if isinstance(line, int) and not isinstance(line, bool):
            return line
    return fallback


def _map(file_data: dict[str, Any], key: str, file_path: str) -> dict[str, Any]:
    value = file_data.get(key) or {}
    if not isinstance(value, dict):
        raise InvalidFormatError(_FMT.value, f"{key!r} of {file_path} is not an object")
    return value


class IstanbulParser:
    """Parser for Istanbul JSON format."""

    @property
    def format_id(self) -> CoverageFormat:
        return _FMT

    def detect(self, content: str, filename: str) -> bool:
        """Check for a .json file whose first record has statementMap or s."""
        if not filename.lower().endswith(".json"):
            return False
        try:
            data = json.loads(content)
        except ValueError:
            return False
        return is_istanbul_document(data)

    def parse(self, content: str) -> NormalizedCoverage:
        """Parse Istanbul JSON into NormalizedCoverage."""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedInputError(_FMT.value, str(e)) from e

        if not isinstance(data, dict):
            raise InvalidFormatError(
                _FMT.value, "top-level value must be an object keyed by file path"
            )
        if not data:
            raise EmptyCoverageDataError(_FMT.value)

        files: list[FileCoverage] = []
        for file_path, file_data in data.items():
            if (
                isinstance(file_data, dict)
                and "data" in file_data
                and "statementMap" not in file_data
            ):
                file_data = file_data["data"]
            if not isinstance(file_data, dict):
                raise InvalidFormatError(_FMT.value, f"record for {file_path} is not an object")
            files.append(self._parse_file(file_path, file_data))

        log.debug("istanbul.parsed", files=len(files))
        return NormalizedCoverage(
            format=_FMT,
            summary=aggregate_summary(files),
            files=tuple(files),
        )

    def _parse_file(self, file_path: str, file_data: dict[str, Any]) -> FileCoverage:
        statement_map = _map(file_data, "statementMap", file_path)
        statement_hits = _map(file_data, "s", file_path)
        fn_map = _map(file_data, "fnMap", file_path)
        fn_hits = _map(file_data, "f", file_path)
        branch_map = _map(file_data, "branchMap", file_path)
        branch_hits = _map(file_data, "b", file_path)

        path = file_data.get("path") or file_path

        # Maps are correlated by id, not by position
        statements = build_metric(
            _FMT,
            sum(1 for stmt_id in statement_map if _hit(statement_hits.get(stmt_id))),
            len(statement_map),
        )
        functions = build_metric(
            _FMT,
            sum(1 for fn_id in fn_map if _hit(fn_hits.get(fn_id))),
            len(fn_map),
        )

        return FileCoverage(
            path=str(path),
            statements=statements,
            branches=self._branches(branch_map, branch_hits),
            functions=functions,
            lines=self._lines(statement_map, statement_hits),
        )

    def _branches(self, branch_map: dict[str, Any], branch_hits: dict[str, Any]) -> Metric:
        """Each branch group contributes one outcome per location."""
        total = 0
        covered = 0
        for branch_id, branch_info in branch_map.items():
            locations = branch_info.get("locations") if isinstance(branch_info, dict) else None
            outcomes = len(locations) if isinstance(locations, list) else 0
            hits = branch_hits.get(branch_id) or []
            if not isinstance(hits, list):
                raise InvalidFormatError(_FMT.value, f"branch hits for id {branch_id} not a list")
            total += outcomes
            covered += sum(1 for h in hits[:outcomes] if _hit(h))
        return build_metric(_FMT, covered, total)

    def _lines(self, statement_map: dict[str, Any], statement_hits: dict[str, Any]) -> Metric:
        """A line counts once, covered if any statement spanning it ran."""
        all_lines: set[int] = set()
        covered_lines: set[int] = set()

        for stmt_id, stmt_info in statement_map.items():
            if not isinstance(stmt_info, dict):
                raise InvalidFormatError(_FMT.value, f"statement {stmt_id} is not an object")
            start_line = _line_of(stmt_info.get("start"), 0)
            if start_line < 1:
                # Lines are 1-based; a statement without a start line has no span
                continue
            end_line = _line_of(stmt_info.get("end"), start_line)
            span = range(start_line, max(start_line, end_line) + 1)

            all_lines.update(span)
            if _hit(statement_hits.get(stmt_id)):
                covered_lines.update(span)

        return build_metric(_FMT, len(covered_lines), len(all_lines))
