"""Core module exports."""

from covcompare.core.errors import (
    ConfigError,
    CovCompareError,
    ErrorCode,
    InputError,
    ReportError,
)
from covcompare.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "CovCompareError",
    "ConfigError",
    "ErrorCode",
    "InputError",
    "ReportError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
