"""JSON reporter — the persisted form of analysis results."""

from __future__ import annotations

import json

from tyr.models import AnalysisResult
from tyr.services.scanner import ScanReport


class JsonReporter:
    """Serializes results with the field names of ``AnalysisResult``."""

    def __init__(self, indent: int = 2) -> None:
        self._indent = indent

    def generate(self, result: AnalysisResult) -> str:
        return result.model_dump_json(indent=self._indent)

    @staticmethod
    def load(text: str) -> AnalysisResult:
        """Read back a result written by ``generate``; the timestamp is kept."""
        return AnalysisResult.model_validate_json(text)

    def generate_scan(self, report: ScanReport) -> str:
        payload = {
            "directory": str(report.directory),
            "elapsed_seconds": report.elapsed_seconds,
            "files": [
                {"path": str(fa.path), "result": fa.result.model_dump(mode="json")}
                for fa in report.results
            ],
            "failures": [
                {"path": str(f.path), "error": f.error} for f in report.failures
            ],
        }
        return json.dumps(payload, indent=self._indent, ensure_ascii=False)
