"""Locating and reading coverage report files."""

from pathlib import Path

import structlog

from covcompare.coverage.errors import CoverageFileNotFoundError, MalformedInputError

log = structlog.get_logger()

# Searched in order when a directory is given
COMMON_COVERAGE_FILES = (
    "lcov.info",
    "coverage.lcov",
    "coverage-final.json",
    "coverage.json",
    "cobertura.xml",
    "cobertura-coverage.xml",
    "coverage.xml",
    "clover.xml",
    "jacoco.xml",
    "jacocoTestReport.xml",
)


def find_coverage_file(directory: Path) -> Path | None:
    """Find the first well-known coverage file in a directory."""
    for name in COMMON_COVERAGE_FILES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def resolve_coverage_path(path: Path) -> Path:
    """Resolve a file or directory argument to the coverage file to read.

    Raises:
        CoverageFileNotFoundError: If the path is missing, or a directory
            holds none of the well-known coverage file names.
    """
    resolved = path.expanduser().resolve()

    if not resolved.exists():
        raise CoverageFileNotFoundError(str(resolved))

    if resolved.is_file():
        return resolved

    if resolved.is_dir():
        log.debug("coverage.searching_directory", path=str(resolved))
        found = find_coverage_file(resolved)
        if found is not None:
            log.info("coverage.file_found", path=str(found))
            return found
        raise CoverageFileNotFoundError(
            str(resolved),
            f"No coverage file found in directory: {resolved}. "
            f"Looked for: {', '.join(COMMON_COVERAGE_FILES)}",
        )

    raise CoverageFileNotFoundError(
        str(resolved), f"Path is not a file or directory: {resolved}"
    )


def read_coverage_file(path: Path) -> tuple[str, str]:
    """Read a coverage file (or the one found in a directory).

    Returns:
        (content, filename) pair for parse_coverage.
    """
    file_path = resolve_coverage_path(path)
    try:
        content = file_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedInputError(file_path.name, f"failed to read {file_path}: {e}") from e
    return content, file_path.name
