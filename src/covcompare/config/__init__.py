"""Config module exports."""

from covcompare.config.loader import load_config
from covcompare.config.models import (
    ComparisonConfig,
    CovCompareConfig,
    LoggingConfig,
    LogOutputConfig,
    ReportConfig,
)

__all__ = [
    "load_config",
    "CovCompareConfig",
    "ComparisonConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ReportConfig",
]
