"""covcompare error types with typed error codes.

Error code ranges:
- 1xxx: Coverage input (detection, parsing, locating files)
- 2xxx: Config
- 3xxx: Report output

Parsers raise the plain exceptions in covcompare.coverage.errors. Commands
wrap those in InputError so that every failure reaching the CLI carries a
code and knows which input (current or baseline) it came from.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from covcompare.coverage.errors import (
    CoverageError,
    CoverageFileNotFoundError,
    EmptyCoverageDataError,
    InvalidFormatError,
    MalformedInputError,
    UnrecognizedFormatError,
)


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Coverage input (1xxx)
    COVERAGE_FILE_NOT_FOUND = 1001
    UNRECOGNIZED_FORMAT = 1002
    MALFORMED_INPUT = 1003
    INVALID_FORMAT = 1004
    EMPTY_COVERAGE_DATA = 1005
    COVERAGE_INPUT_ERROR = 1099

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Report output (3xxx)
    REPORT_WRITE_FAILED = 3001
    SUMMARY_WRITE_FAILED = 3002


@dataclass(frozen=True, slots=True)
class CovCompareError(Exception):
    """Base error with structured context for JSON output."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'MALFORMED_INPUT')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class InputError(CovCompareError):
    """A coverage input could not be located, detected or parsed."""

    @classmethod
    def from_coverage_error(cls, err: CoverageError, *, role: str) -> "InputError":
        """Wrap a parser exception, tagging it with the input's role.

        role names the input in messages, e.g. 'current' or 'baseline'.
        """
        details: dict[str, Any] = {"role": role}
        if isinstance(err, CoverageFileNotFoundError):
            code = ErrorCode.COVERAGE_FILE_NOT_FOUND
            details["path"] = err.path
        elif isinstance(err, UnrecognizedFormatError):
            code = ErrorCode.UNRECOGNIZED_FORMAT
            details["filename"] = err.filename
        elif isinstance(err, MalformedInputError):
            code = ErrorCode.MALFORMED_INPUT
            details["format"] = err.format_id
            details["reason"] = err.reason
        elif isinstance(err, InvalidFormatError):
            code = ErrorCode.INVALID_FORMAT
            details["format"] = err.format_id
            details["detail"] = err.detail
        elif isinstance(err, EmptyCoverageDataError):
            code = ErrorCode.EMPTY_COVERAGE_DATA
            details["format"] = err.format_id
        else:
            code = ErrorCode.COVERAGE_INPUT_ERROR
        return cls(code=code, message=f"{role} coverage: {err}", details=details)


class ReportError(CovCompareError):
    """The comparison ran but its outputs could not be written."""

    @classmethod
    def report_write_failed(cls, path: str, reason: str) -> "ReportError":
        return cls(
            code=ErrorCode.REPORT_WRITE_FAILED,
            message=f"Failed to write report to {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def summary_write_failed(cls, path: str, reason: str) -> "ReportError":
        return cls(
            code=ErrorCode.SUMMARY_WRITE_FAILED,
            message=f"Failed to write summary to {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class ConfigError(CovCompareError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )
