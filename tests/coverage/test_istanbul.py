"""Tests for the Istanbul JSON parser."""

import json

import pytest

from covcompare.coverage.errors import (
    EmptyCoverageDataError,
    InvalidFormatError,
    MalformedInputError,
)
from covcompare.coverage.models import CoverageFormat
from covcompare.coverage.parsers.istanbul import IstanbulParser, is_istanbul_document


def _loc(start: int, end: int | None = None) -> dict:
    return {
        "start": {"line": start, "column": 0},
        "end": {"line": end or start, "column": 10},
    }


def _record(path: str) -> dict:
    return {
        "path": path,
        "statementMap": {"0": _loc(1), "1": _loc(2), "2": _loc(3, 4)},
        "s": {"0": 1, "1": 2, "2": 0},
        "fnMap": {"0": {"name": "foo", "decl": _loc(1), "loc": _loc(1, 4)}},
        "f": {"0": 1},
        "branchMap": {"0": {"type": "if", "line": 2, "locations": [_loc(2), _loc(3)]}},
        "b": {"0": [1, 0]},
    }


class TestIstanbulParser:
    """Tests for IstanbulParser.parse."""

    def test_statement_counts(self) -> None:
        """Given 3 statements with 2 hit, statements are 66.67%."""
        content = json.dumps({"/repo/src/app.js": _record("/repo/src/app.js")})

        result = IstanbulParser().parse(content)

        assert result.format is CoverageFormat.ISTANBUL
        assert result.summary.statements.total == 3
        assert result.summary.statements.covered == 2
        assert result.summary.statements.percentage == pytest.approx(66.67, abs=0.01)

    def test_functions_and_branches(self) -> None:
        result = IstanbulParser().parse(json.dumps({"a.js": _record("a.js")}))
        [f] = result.files
        assert (f.functions.covered, f.functions.total) == (1, 1)
        assert (f.branches.covered, f.branches.total) == (1, 2)

    def test_lines_from_statement_spans(self) -> None:
        # Statement 2 spans lines 3-4 and never ran
        [f] = IstanbulParser().parse(json.dumps({"a.js": _record("a.js")})).files
        assert (f.lines.covered, f.lines.total) == (2, 4)

    def test_statement_without_start_line_adds_no_lines(self) -> None:
        record = _record("a.js")
        record["statementMap"]["3"] = {"start": {"column": 0}, "end": {"column": 4}}
        record["s"]["3"] = 1
        [f] = IstanbulParser().parse(json.dumps({"a.js": record})).files
        assert (f.lines.covered, f.lines.total) == (2, 4)
        assert f.statements.total == 4

    def test_multi_outcome_branch_group(self) -> None:
        """Given a 3-way binary-expr with hits [1, 0, 1], two of three outcomes are covered."""
        record = _record("a.js")
        record["branchMap"] = {
            "0": {"type": "binary-expr", "line": 2, "locations": [_loc(2), _loc(2), _loc(2)]},
        }
        record["b"] = {"0": [1, 0, 1]}
        [f] = IstanbulParser().parse(json.dumps({"a.js": record})).files
        assert (f.branches.covered, f.branches.total) == (2, 3)

    def test_branch_hits_capped_at_locations(self) -> None:
        """Given more hit entries than locations, extra entries are ignored."""
        record = _record("a.js")
        record["b"] = {"0": [1, 1, 1, 1]}
        [f] = IstanbulParser().parse(json.dumps({"a.js": record})).files
        assert (f.branches.covered, f.branches.total) == (2, 2)

    def test_path_falls_back_to_key(self) -> None:
        record = _record("ignored")
        del record["path"]
        [f] = IstanbulParser().parse(json.dumps({"src/key.js": record})).files
        assert f.path == "src/key.js"

    def test_wrapped_data_records(self) -> None:
        content = json.dumps({"a.js": {"data": _record("a.js")}})
        [f] = IstanbulParser().parse(content).files
        assert f.statements.total == 3

    def test_hits_without_map_entry_are_ignored(self) -> None:
        record = _record("a.js")
        record["s"]["99"] = 5
        [f] = IstanbulParser().parse(json.dumps({"a.js": record})).files
        assert (f.statements.covered, f.statements.total) == (2, 3)

    def test_empty_object_raises(self) -> None:
        with pytest.raises(EmptyCoverageDataError):
            IstanbulParser().parse("{}")

    def test_top_level_array_raises(self) -> None:
        with pytest.raises(InvalidFormatError):
            IstanbulParser().parse("[]")

    def test_broken_json_raises(self) -> None:
        with pytest.raises(MalformedInputError):
            IstanbulParser().parse('{"a.js": ')


class TestIstanbulDetect:
    """Tests for Istanbul document detection."""

    def test_detects_coverage_final(self) -> None:
        content = json.dumps({"a.js": _record("a.js")})
        assert IstanbulParser().detect(content, "coverage-final.json")

    def test_requires_json_extension(self) -> None:
        content = json.dumps({"a.js": _record("a.js")})
        assert not IstanbulParser().detect(content, "coverage.txt")

    def test_summary_json_is_not_istanbul(self) -> None:
        summary = {"total": {"lines": {"total": 10, "covered": 5, "pct": 50}}}
        assert not is_istanbul_document(summary)

    def test_non_mapping_is_not_istanbul(self) -> None:
        assert not is_istanbul_document([])
        assert not is_istanbul_document(None)
