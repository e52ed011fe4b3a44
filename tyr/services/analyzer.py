"""Threat Analyzer — request → provider → validated ``AnalysisResult``.

Orchestrates one analysis:

    1. Ask the active provider for a STRIDE analysis of the document.
    2. Cut the JSON object out of the reply (first ``{`` to last ``}``),
       tolerating prose the model puts around it.
    3. Validate it against ``ThreatModelResponse`` and build the result,
       which computes the summary.

Interactive queries are passed straight through; the reply is free text.

Usage:
    from tyr.services.analyzer import ThreatAnalyzer
    from tyr.models import InputType

    with ThreatAnalyzer() as analyzer:
        result = analyzer.analyze(doc, InputType.TERRAFORM)
        print(result.summary.overall_risk_score)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from tyr.config import Settings, get_settings
from tyr.exceptions import ResponseParseError, TyrError
from tyr.llm import ThreatModelProvider, create_provider
from tyr.models import AnalysisResult, InputType, ThreatModelResponse

logger = logging.getLogger(__name__)


class ThreatAnalyzer:
    """Single-call threat analysis engine.

    Args:
        provider: Optional configured provider.  When omitted one is
            created from *settings* and closed with the analyzer.
        settings: Settings used to create the provider.  Defaults to
            ``get_settings()``.

    Raises:
        ConfigurationError: If no provider is given and the settings
            name an unknown backend or lack a credential.
    """

    def __init__(
        self,
        provider: ThreatModelProvider | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._owns_provider = provider is None
        self._provider = provider or create_provider(settings or get_settings())
        logger.info(
            "ThreatAnalyzer initialized: provider=%s, model=%s",
            self._provider.name,
            self._provider.model_name,
        )

    def close(self) -> None:
        """Close the provider if this analyzer created it."""
        if self._owns_provider:
            self._provider.close()

    @property
    def provider_name(self) -> str:
        return self._provider.name

    @property
    def model_name(self) -> str:
        return self._provider.model_name

    def __enter__(self) -> ThreatAnalyzer:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ──────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────

    def analyze(
        self,
        content: str,
        input_type: InputType,
        include_education: bool = True,
    ) -> AnalysisResult:
        """Analyze *content* and return a validated result.

        Args:
            content: Document text.
            input_type: Kind of document; its label phrases the request.
            include_education: Ask for an educational note per threat.

        Raises:
            ProviderError: The backend call failed.
            ResponseParseError: The reply held no usable threat JSON.
        """
        logger.info(
            "Analyzing %s (%d chars, education=%s) with %s",
            input_type.label,
            len(content),
            include_education,
            self._provider.name,
        )
        try:
            raw = self._provider.analyze_threats(
                content, input_type.label, include_education
            )
        except TyrError as exc:
            logger.error("Threat analysis request failed: %s", exc)
            raise

        parsed = self.parse_response(raw)

        result = AnalysisResult.build(input_type, parsed.threats)
        if parsed.recommendations is not None:
            result.add_recommendations(parsed.recommendations)

        logger.info(
            "Analysis complete: %d threats, %d recommendations, risk score %.1f",
            result.summary.total_threats,
            len(result.recommendations),
            result.summary.overall_risk_score,
        )
        return result

    def interactive_query(self, query: str, history: Sequence[str]) -> str:
        """Forward a conversational turn to the provider unchanged."""
        logger.debug("Interactive query (%d prior turns)", len(history))
        return self._provider.interactive_query(query, history)

    # ──────────────────────────────────────────────────────────
    # Response parsing
    # ──────────────────────────────────────────────────────────

    @staticmethod
    def parse_response(raw: str) -> ThreatModelResponse:
        """Extract and validate the threat JSON embedded in *raw*.

        Raises:
            ResponseParseError: Carrying the parser diagnostic and the
                substring that was attempted.
        """
        payload = extract_json_object(raw)
        try:
            return ThreatModelResponse.model_validate_json(payload)
        except ValidationError as exc:
            logger.warning(
                "Provider reply rejected (%d errors, %d chars)",
                exc.error_count(),
                len(payload),
            )
            raise ResponseParseError(
                f"Failed to parse API response as JSON: {exc}", payload
            ) from exc


# ──────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────

def extract_json_object(raw: str) -> str:
    """Return the span from the first ``{`` to the last ``}`` inclusive.

    The whole reply is returned when it has no ``{`` or no ``}`` after
    the first ``{``; the parser then reports the failure.
    """
    start = raw.find("{")
    if start == -1:
        return raw
    end = raw.rfind("}")
    if end < start:
        return raw
    return raw[start:end + 1]
