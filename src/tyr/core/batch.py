"""Directory-wide analysis with per-file failure isolation.

The batch scanner enumerates matching files under a directory, analyzes
each one independently and collects the outcomes. A file that cannot be
read or whose analysis fails for any reason becomes a ``FileError`` entry,
so one bad file never aborts the scan.

Ordering is deterministic: files are sorted by their path relative to the
scanned directory (POSIX form) and results keep that order regardless of
which analysis finishes first. Concurrency is bounded by an
``asyncio.Semaphore``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path, PurePath

from tyr.config import (
    DEFAULT_BATCH_CONCURRENCY,
    DEFAULT_SCAN_PATTERNS,
    MAX_BATCH_CONCURRENCY,
    SCAN_EXCLUDE_DIRS,
)
from tyr.core.analyzer import ThreatAnalyzer
from tyr.core.models import AnalysisResult, InputType
from tyr.exceptions import (
    AnalysisError,
    InvalidInputError,
    ProviderTimeout,
    ProviderUnavailable,
)

logger = logging.getLogger(__name__)

# Errors worth retrying: the backend may come back on its own.
_RETRYABLE = (ProviderUnavailable, ProviderTimeout)


def validate_pattern(pattern: str) -> str:
    """Reject globs that would reach outside the scanned directory.

    Raises:
        InvalidInputError: If ``pattern`` is absolute or climbs with ``..``.
    """
    pure = PurePath(pattern)
    if pure.anchor or ".." in pure.parts:
        raise InvalidInputError(
            f"Pattern must be relative to the scanned directory, got {pattern!r}"
        )
    return pattern


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileAnalysis:
    """A successfully analyzed file.

    Attributes:
        path: Path relative to the scanned directory, POSIX form.
        result: The scored analysis result.
    """

    path: str
    result: AnalysisResult


@dataclass(frozen=True)
class FileError:
    """A file whose analysis failed.

    Attributes:
        path: Path relative to the scanned directory, POSIX form.
        error_type: Exception class name, e.g. ``MalformedResponseError``.
        message: Human-readable error message.
    """

    path: str
    error_type: str
    message: str


@dataclass(frozen=True)
class BatchResult:
    """Aggregate outcome of one directory scan.

    Attributes:
        directory: The scanned directory as given.
        results: Successful analyses in enumeration order.
        errors: Failed files in enumeration order.
    """

    directory: str
    results: tuple[FileAnalysis, ...] = ()
    errors: tuple[FileError, ...] = ()

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def total_threats(self) -> int:
        return sum(f.result.threat_count for f in self.results)

    def summary_line(self) -> str:
        """One-line outcome, e.g. ``2 of 3 files succeeded``."""
        return f"{self.succeeded} of {self.total} files succeeded"


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


class BatchScanner:
    """Analyze every matching file under a directory.

    Args:
        analyzer: Analyzer used for each file.
        concurrency: Maximum number of analyses in flight (1-8).
        retries: Extra attempts per file after a ``ProviderUnavailable``
            or ``ProviderTimeout``. Default 0.
        retry_delay: Seconds to wait before the first retry; doubles on
            each further attempt.
        include_education: Whether to request educational notes.

    Raises:
        ValueError: If ``concurrency`` or ``retries`` is out of range.
    """

    def __init__(
        self,
        analyzer: ThreatAnalyzer,
        concurrency: int = DEFAULT_BATCH_CONCURRENCY,
        retries: int = 0,
        retry_delay: float = 1.0,
        include_education: bool = True,
    ) -> None:
        if not 1 <= concurrency <= MAX_BATCH_CONCURRENCY:
            raise ValueError(
                f"Concurrency must be between 1 and {MAX_BATCH_CONCURRENCY}, "
                f"got {concurrency}"
            )
        if retries < 0:
            raise ValueError(f"Retries must be non-negative, got {retries}")
        self._analyzer = analyzer
        self._concurrency = concurrency
        self._retries = retries
        self._retry_delay = retry_delay
        self._include_education = include_education

    @staticmethod
    def discover(directory: Path, pattern: str | None = None) -> list[Path]:
        """List files under ``directory`` matching the glob pattern(s).

        Files inside VCS, dependency and cache directories are skipped.

        Args:
            directory: Root of the scan.
            pattern: Glob such as ``*.tf``. Defaults to the Terraform,
                YAML and JSON patterns.

        Returns:
            Matching regular files, sorted by relative POSIX path.

        Raises:
            InvalidInputError: If ``pattern`` is not a relative glob.
        """
        patterns = (validate_pattern(pattern),) if pattern else DEFAULT_SCAN_PATTERNS
        found: dict[str, Path] = {}
        for glob in patterns:
            for path in directory.rglob(glob):
                rel = path.relative_to(directory)
                if any(part in SCAN_EXCLUDE_DIRS for part in rel.parts[:-1]):
                    continue
                if path.is_file():
                    found[rel.as_posix()] = path
        return [found[key] for key in sorted(found)]

    async def scan(self, directory: Path | str, pattern: str | None = None) -> BatchResult:
        """Analyze every matching file under ``directory``.

        Args:
            directory: Directory to scan recursively.
            pattern: Optional glob; see ``discover``.

        Returns:
            A ``BatchResult`` with one entry per matched file.

        Raises:
            InvalidInputError: If ``directory`` is not a directory or
                ``pattern`` is not a relative glob.
        """
        root = Path(directory)
        if not root.is_dir():
            raise InvalidInputError(f"Not a directory: {root}")

        files = self.discover(root, pattern)
        logger.info(
            "Scanning %d files under %s (concurrency %d)",
            len(files), root, self._concurrency,
        )
        semaphore = asyncio.Semaphore(self._concurrency)
        outcomes = await asyncio.gather(*(
            self._scan_file(root, path, semaphore) for path in files
        ))

        batch = BatchResult(
            directory=str(directory),
            results=tuple(o for o in outcomes if isinstance(o, FileAnalysis)),
            errors=tuple(o for o in outcomes if isinstance(o, FileError)),
        )
        logger.info("Batch scan finished: %s", batch.summary_line())
        return batch

    async def _scan_file(
        self,
        root: Path,
        path: Path,
        semaphore: asyncio.Semaphore,
    ) -> FileAnalysis | FileError:
        rel = path.relative_to(root).as_posix()
        try:
            return await self._analyze_file(rel, path, semaphore)
        except (OSError, UnicodeDecodeError, AnalysisError) as exc:
            return self._failure(rel, exc)
        except Exception as exc:
            logger.exception("Unexpected error while analyzing %s", rel)
            return FileError(path=rel, error_type=type(exc).__name__, message=str(exc))

    async def _analyze_file(
        self,
        rel: str,
        path: Path,
        semaphore: asyncio.Semaphore,
    ) -> FileAnalysis:
        content = path.read_text(encoding="utf-8")
        input_type = InputType.detect(path, content)
        async with semaphore:
            for attempt in range(self._retries + 1):
                try:
                    result = await self._analyzer.analyze(
                        content, input_type, self._include_education
                    )
                except _RETRYABLE as exc:
                    if attempt == self._retries:
                        raise
                    delay = self._retry_delay * (2 ** attempt)
                    logger.info(
                        "Retrying %s in %.1fs after %s (attempt %d of %d)",
                        rel, delay, type(exc).__name__, attempt + 1, self._retries,
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.debug("Analyzed %s as %s", rel, input_type.value)
                    return FileAnalysis(path=rel, result=result)
        raise AssertionError("unreachable")

    @staticmethod
    def _failure(rel: str, exc: Exception) -> FileError:
        logger.warning("Failed to analyze %s: %s", rel, exc)
        return FileError(path=rel, error_type=type(exc).__name__, message=str(exc))
