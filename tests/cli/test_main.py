"""Tests for the covcompare CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from covcompare.cli.main import cli

runner = CliRunner()

BASELINE_LCOV = """\
SF:src/a.py
DA:1,1
DA:2,1
DA:3,1
DA:4,1
end_of_record
SF:src/b.py
DA:1,1
DA:2,0
end_of_record
"""

CURRENT_LCOV = """\
SF:src/a.py
DA:1,1
DA:2,1
DA:3,0
DA:4,0
end_of_record
SF:src/b.py
DA:1,1
DA:2,0
end_of_record
"""

COBERTURA = """\
<?xml version="1.0" ?>
<coverage line-rate="0.8333" lines-valid="6" lines-covered="5">
  <packages><package name="src"><classes>
    <class name="a" filename="src/a.py">
      <lines>
        <line number="1" hits="1"/><line number="2" hits="1"/>
        <line number="3" hits="1"/><line number="4" hits="1"/>
      </lines>
    </class>
    <class name="b" filename="src/b.py">
      <lines><line number="1" hits="1"/><line number="2" hits="0"/></lines>
    </class>
  </classes></package></packages>
</coverage>
"""


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A working directory holding a baseline and a regressed current report."""
    (tmp_path / "baseline").mkdir()
    (tmp_path / "baseline" / "lcov.info").write_text(BASELINE_LCOV)
    (tmp_path / "current.info").write_text(CURRENT_LCOV)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestGroup:
    """Tests for the top-level group."""

    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "covcompare" in result.output
        assert "0.1.0" in result.output

    def test_invalid_config_reported(self, workspace: Path) -> None:
        (workspace / ".covcompare.yaml").write_text("report:\n  max_files: 0\n")

        result = runner.invoke(cli, ["detect", "current.info"])

        assert result.exit_code == 1
        assert "report.max_files" in result.output

    def test_missing_explicit_config(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["--config", "nope.yaml", "detect", "current.info"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestDetectCommand:
    """Tests for covcompare detect."""

    def test_prints_format(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["detect", "current.info"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "lcov"

    def test_directory_argument(self, workspace: Path) -> None:
        (workspace / "xml").mkdir()
        (workspace / "xml" / "coverage.xml").write_text(COBERTURA)

        result = runner.invoke(cli, ["detect", "xml"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "cobertura"

    def test_unrecognized_content(self, workspace: Path) -> None:
        (workspace / "notes.txt").write_text("nothing to see")

        result = runner.invoke(cli, ["detect", "notes.txt"])

        assert result.exit_code == 1
        assert "Unable to detect coverage format" in result.output

    def test_missing_path(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["detect", "missing.info"])
        assert result.exit_code == 1
        assert "does not exist" in result.output


class TestParseCommand:
    """Tests for covcompare parse."""

    def test_json_output(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["parse", "current.info", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["format"] == "lcov"
        assert data["summary"]["lines"] == {"total": 6, "covered": 3, "percentage": 50.0}
        assert [f["path"] for f in data["files"]] == ["src/a.py", "src/b.py"]

    def test_table_output(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["parse", "current.info"])

        assert result.exit_code == 0
        assert "Lines" in result.stdout
        assert "Coverage: 50.0% (3/6 lines)" in result.stdout

    def test_explicit_format_mismatch(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["parse", "current.info", "--format", "jacoco"])
        assert result.exit_code == 1
        assert "jacoco" in result.output

    def test_unknown_format_choice(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["parse", "current.info", "--format", "gcov"])
        assert result.exit_code == 2


class TestCompareCommand:
    """Tests for covcompare compare."""

    def test_regression_fails_and_writes_report(self, workspace: Path) -> None:
        """Given a regressed current report, exit 1 and persist the report."""
        result = runner.invoke(
            cli,
            ["compare", "current.info", "baseline", "--current-sha", "abc1234def"],
        )

        assert result.exit_code == 1
        report = json.loads((workspace / "coverage-report.json").read_text())
        assert report["comparison"]["overallStatus"] == "regressed"
        assert report["baselineAlias"] == "main"
        assert report["currentCommitSha"] == "abc1234def"
        assert report["format"] == "lcov"
        assert "Result: fail" in result.stdout

    def test_no_fail_on_regression(self, workspace: Path) -> None:
        result = runner.invoke(
            cli, ["compare", "current.info", "baseline", "--no-fail-on-regression"]
        )
        assert result.exit_code == 0

    def test_threshold_absorbs_regression(self, workspace: Path) -> None:
        # Lines drop from 83.3% to 50.0%
        result = runner.invoke(cli, ["compare", "current.info", "baseline", "--threshold", "40"])
        assert result.exit_code == 0
        assert "Result: pass" in result.stdout

    def test_threshold_from_config(self, workspace: Path) -> None:
        (workspace / ".covcompare.yaml").write_text(
            "comparison:\n  threshold: 40\n  baseline_alias: develop\n"
        )

        result = runner.invoke(cli, ["compare", "current.info", "baseline"])

        assert result.exit_code == 0
        report = json.loads((workspace / "coverage-report.json").read_text())
        assert report["threshold"] == 40.0
        assert report["baselineAlias"] == "develop"

    def test_json_output(self, workspace: Path) -> None:
        result = runner.invoke(
            cli,
            ["compare", "current.info", "baseline", "--json", "--no-fail-on-regression"],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["outputs"]["result"] == "fail"
        assert data["outputs"]["lines"] == "50.0"
        assert data["outputs"]["lines-delta"] == "-33.3"
        assert data["report"]["comparison"]["files"][0]["path"] == "src/a.py"

    def test_report_and_summary_paths(self, workspace: Path) -> None:
        result = runner.invoke(
            cli,
            [
                "compare",
                "current.info",
                "baseline",
                "--report",
                "out/report.json",
                "--summary",
                "out/summary.md",
                "--baseline-sha",
                "0123456789",
            ],
        )

        assert result.exit_code == 1
        assert (workspace / "out" / "report.json").is_file()
        summary = (workspace / "out" / "summary.md").read_text()
        assert "## Coverage Report" in summary
        assert "`main` @ `0123456`" in summary
        assert "| src/a.py | -50.0% |" in summary

    def test_cross_format_baseline(self, workspace: Path) -> None:
        (workspace / "coverage.xml").write_text(COBERTURA)

        result = runner.invoke(
            cli,
            ["compare", "current.info", "coverage.xml", "--baseline-format", "cobertura"],
        )

        assert result.exit_code == 1
        report = json.loads((workspace / "coverage-report.json").read_text())
        assert report["baseline"]["lines"]["covered"] == 5

    def test_identical_reports_pass(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["compare", "current.info", "current.info"])
        assert result.exit_code == 0
        assert "Result: pass" in result.stdout

    def test_threshold_out_of_range(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["compare", "current.info", "baseline", "--threshold", "150"])
        assert result.exit_code == 2

    def test_unreadable_baseline(self, workspace: Path) -> None:
        (workspace / "empty").mkdir()
        result = runner.invoke(cli, ["compare", "current.info", "empty"])
        assert result.exit_code == 1
        assert "No coverage file found" in result.output
        assert "[1001] COVERAGE_FILE_NOT_FOUND: baseline coverage" in result.output

    def test_report_write_failure(self, workspace: Path) -> None:
        """Given a report path under a regular file, exit 1 with a report error."""
        result = runner.invoke(
            cli, ["compare", "current.info", "baseline", "--report", "current.info/out.json"]
        )
        assert result.exit_code == 1
        assert "REPORT_WRITE_FAILED" in result.output
        assert "current.info" in result.output

    def test_summary_write_failure(self, workspace: Path) -> None:
        result = runner.invoke(
            cli,
            ["compare", "current.info", "current.info", "--summary", "current.info/summary.md"],
        )
        assert result.exit_code == 1
        assert "SUMMARY_WRITE_FAILED" in result.output
