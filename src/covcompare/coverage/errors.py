"""Coverage parsing error types."""


class CoverageError(Exception):
    """Base error for coverage parsing and comparison."""

    pass


class UnrecognizedFormatError(CoverageError):
    """No detection rule matched the content, or the format id is unknown."""

    def __init__(self, filename: str, reason: str | None = None) -> None:
        message = reason or (
            f"Unable to detect coverage format for {filename!r}. "
            "Specify the format explicitly (lcov, istanbul, cobertura, clover, jacoco)."
        )
        super().__init__(message)
        self.filename = filename


class InvalidFormatError(CoverageError):
    """Content parsed but lacks the root structure the format requires."""

    def __init__(self, format_id: str, detail: str) -> None:
        super().__init__(f"Invalid {format_id} format: {detail}")
        self.format_id = format_id
        self.detail = detail


class EmptyCoverageDataError(CoverageError):
    """Syntax was valid but no file records were found."""

    def __init__(self, format_id: str) -> None:
        super().__init__(f"{format_id} report contains no coverage data")
        self.format_id = format_id


class MalformedInputError(CoverageError):
    """Underlying XML/JSON/text syntax is broken."""

    def __init__(self, format_id: str, reason: str) -> None:
        super().__init__(f"Failed to parse {format_id} input: {reason}")
        self.format_id = format_id
        self.reason = reason


class CoverageFileNotFoundError(CoverageError):
    """Input path does not exist or holds no known coverage file."""

    def __init__(self, path: str, reason: str | None = None) -> None:
        super().__init__(reason or f"Coverage path does not exist: {path}")
        self.path = path
