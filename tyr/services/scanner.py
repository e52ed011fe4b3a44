"""Directory Scanner — sequential analysis of infrastructure files.

Walks a directory for Terraform, YAML and JSON files and analyzes them
one at a time through a shared ``ThreatAnalyzer``.  A failure on one
file (unreadable, provider error, unparseable reply) is logged and
recorded, and the sweep moves on to the next file.

Usage:
    from tyr.services.analyzer import ThreatAnalyzer
    from tyr.services.scanner import DirectoryScanner

    with ThreatAnalyzer() as analyzer:
        report = DirectoryScanner(analyzer).scan("infra/", pattern="prod")
        print(len(report.results), len(report.failures))
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path

from tyr.config import SCAN_EXTENSIONS
from tyr.exceptions import TyrError
from tyr.models import AnalysisResult, InputType
from tyr.services.analyzer import ThreatAnalyzer

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────
# Data containers
# ──────────────────────────────────────────────────────────────

@dataclass
class FileAnalysis:
    """A successfully analyzed file."""

    path: Path
    result: AnalysisResult


@dataclass
class FileFailure:
    """A file whose analysis failed."""

    path: Path
    error: str


@dataclass
class ScanReport:
    """Accumulated outcome of a directory scan."""

    directory: Path
    results: list[FileAnalysis] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def files_found(self) -> int:
        return len(self.results) + len(self.failures)

    @property
    def total_threats(self) -> int:
        return sum(fa.result.summary.total_threats for fa in self.results)


# ──────────────────────────────────────────────────────────────
# DirectoryScanner
# ──────────────────────────────────────────────────────────────

class DirectoryScanner:
    """Discovers infrastructure files and analyzes them sequentially.

    Args:
        analyzer: Shared analyzer; the scanner does not close it.
        include_education: Passed to every ``analyze`` call.
    """

    def __init__(self, analyzer: ThreatAnalyzer, include_education: bool = True) -> None:
        self._analyzer = analyzer
        self._include_education = include_education

    @staticmethod
    def discover(directory: str | Path, pattern: str | None = None) -> list[Path]:
        """List scannable files under *directory*, following symlinks.

        Args:
            directory: Root to walk.
            pattern: Optional substring the file name must contain.

        Returns:
            Sorted paths with a ``tf``, ``yaml``, ``yml`` or ``json``
            extension.
        """
        root = Path(directory)
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")

        files: list[Path] = []
        for dirpath, _dirnames, filenames in os.walk(root, followlinks=True):
            for filename in filenames:
                if pattern and pattern not in filename:
                    continue
                path = Path(dirpath) / filename
                if path.suffix.lstrip(".") in SCAN_EXTENSIONS and path.is_file():
                    files.append(path)
        return sorted(files)

    def scan(self, directory: str | Path, pattern: str | None = None) -> ScanReport:
        """Analyze every discovered file, continuing past failures."""
        start = time.perf_counter()
        report = ScanReport(directory=Path(directory))
        files = self.discover(directory, pattern)
        logger.info("Found %d files to analyze in %s", len(files), directory)

        for i, path in enumerate(files, start=1):
            logger.info("  [%d/%d] Analyzing: %s", i, len(files), path)
            try:
                content = path.read_text(encoding="utf-8")
                result = self._analyzer.analyze(
                    content,
                    InputType.from_file_extension(path),
                    self._include_education,
                )
            except (OSError, UnicodeDecodeError, TyrError) as exc:
                logger.error("  Failed: %s: %s", path, exc)
                report.failures.append(FileFailure(path=path, error=str(exc)))
                continue
            report.results.append(FileAnalysis(path=path, result=result))

        report.elapsed_seconds = round(time.perf_counter() - start, 2)
        logger.info(
            "Scan complete: %d analyzed, %d failed, %d threats in %.1fs",
            len(report.results),
            len(report.failures),
            report.total_threats,
            report.elapsed_seconds,
        )
        return report
