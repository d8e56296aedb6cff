"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (COVCOMPARE__SECTION__KEY)
3. Repo YAML (.covcompare.yaml)
4. Global YAML (~/.config/covcompare/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    COVCOMPARE__<SECTION>__<KEY>=<VALUE>

Examples:
    COVCOMPARE__LOGGING__LEVEL=DEBUG
    COVCOMPARE__COMPARISON__THRESHOLD=0.5
    COVCOMPARE__REPORT__PATH=build/coverage-report.json
"""

import math
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
FormatChoice = Literal["auto", "lcov", "istanbul", "cobertura", "clover", "jacoco"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        COVCOMPARE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs per-parser file counts.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ComparisonConfig(BaseModel):
    """Comparison defaults.

    Env vars:
        COVCOMPARE__COMPARISON__THRESHOLD: Tolerated regression in percentage points
        COVCOMPARE__COMPARISON__FORMAT: Input format, or auto to detect
        COVCOMPARE__COMPARISON__FAIL_ON_REGRESSION: Exit non-zero on regression
        COVCOMPARE__COMPARISON__BASELINE_ALIAS: Label of the baseline (e.g. main)
    """

    threshold: float = Field(
        default=0.0,
        description="Percentage points a metric may drop before it counts as regressed. "
        "TRADEOFF: Higher values hide real regressions behind noise tolerance.",
    )
    format: FormatChoice = Field(
        default="auto",
        description="Coverage format of the inputs. auto detects from name and content.",
    )
    fail_on_regression: bool = Field(
        default=True,
        description="Exit with status 1 when the overall status is regressed.",
    )
    baseline_alias: str = Field(
        default="main",
        description="Label recorded in the report for the baseline.",
    )

    @field_validator("threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if math.isnan(v) or not (0 <= v <= 100):
            raise ValueError(f"Threshold must be 0-100, got {v}")
        return v


class ReportConfig(BaseModel):
    """Report output configuration.

    Env vars:
        COVCOMPARE__REPORT__PATH: Where the JSON report is written
        COVCOMPARE__REPORT__SUMMARY_PATH: Where the markdown summary is written
        COVCOMPARE__REPORT__MAX_FILES: Files listed per summary table
    """

    path: str = Field(
        default="coverage-report.json",
        description="JSON report location, relative to the working directory.",
    )
    summary_path: str | None = Field(
        default=None,
        description="Markdown summary location. No summary is written if unset.",
    )
    max_files: int = Field(
        default=10,
        ge=1,
        description="Max files listed in each regressed/improved summary table.",
    )


class CovCompareConfig(BaseModel):
    """Root configuration for covcompare.

    All settings can be configured via:
    1. Environment variables: COVCOMPARE__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
