"""Tests for config/models.py module.

Covers:
- LogOutputConfig model
- LoggingConfig model
- ComparisonConfig model
- ReportConfig model
- CovCompareConfig root model
"""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from covcompare.config.models import (
    ComparisonConfig,
    CovCompareConfig,
    LoggingConfig,
    LogOutputConfig,
    ReportConfig,
)


class TestLogOutputConfig:
    """Tests for LogOutputConfig model."""

    def test_defaults(self) -> None:
        """Default values."""
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    @pytest.mark.parametrize("destination", ["stderr", "stdout", "/var/log/covcompare.log"])
    def test_valid_destinations(self, destination: str) -> None:
        assert LogOutputConfig(destination=destination).destination == destination

    def test_relative_path_fails(self) -> None:
        """Relative path is rejected."""
        with pytest.raises(ValidationError, match="absolute"):
            LogOutputConfig(destination="logs/covcompare.log")

    def test_invalid_format_fails(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(format="xml")  # type: ignore[arg-type]


class TestLoggingConfig:
    """Tests for LoggingConfig model."""

    def test_defaults(self) -> None:
        config = LoggingConfig()
        assert config.level == "INFO"
        assert len(config.outputs) == 1
        assert config.outputs[0].destination == "stderr"

    def test_invalid_level_fails(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="TRACE")  # type: ignore[arg-type]


class TestComparisonConfig:
    """Tests for ComparisonConfig model."""

    def test_defaults(self) -> None:
        config = ComparisonConfig()
        assert config.threshold == 0.0
        assert config.format == "auto"
        assert config.fail_on_regression is True
        assert config.baseline_alias == "main"

    @pytest.mark.parametrize("threshold", [0.0, 2.5, 100.0])
    def test_threshold_bounds_accepted(self, threshold: float) -> None:
        assert ComparisonConfig(threshold=threshold).threshold == threshold

    @pytest.mark.parametrize("threshold", [-1.0, 100.5, math.nan])
    def test_threshold_out_of_range_fails(self, threshold: float) -> None:
        with pytest.raises(ValidationError, match="Threshold"):
            ComparisonConfig(threshold=threshold)

    @pytest.mark.parametrize("fmt", ["auto", "lcov", "istanbul", "cobertura", "clover", "jacoco"])
    def test_format_choices(self, fmt: str) -> None:
        assert ComparisonConfig(format=fmt).format == fmt  # type: ignore[arg-type]

    def test_unknown_format_fails(self) -> None:
        with pytest.raises(ValidationError):
            ComparisonConfig(format="gcov")  # type: ignore[arg-type]


class TestReportConfig:
    """Tests for ReportConfig model."""

    def test_defaults(self) -> None:
        config = ReportConfig()
        assert config.path == "coverage-report.json"
        assert config.summary_path is None
        assert config.max_files == 10

    def test_max_files_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ReportConfig(max_files=0)


class TestCovCompareConfig:
    """Tests for the root config model."""

    def test_sections_default(self) -> None:
        config = CovCompareConfig()
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.comparison, ComparisonConfig)
        assert isinstance(config.report, ReportConfig)

    def test_nested_dict_input(self) -> None:
        config = CovCompareConfig.model_validate({"report": {"summary_path": "summary.md"}})
        assert config.report.summary_path == "summary.md"
