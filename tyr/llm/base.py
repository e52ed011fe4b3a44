"""Provider abstract interface — backend-agnostic contract.

Defines the base class that every threat-analysis backend (Claude,
Ollama) must implement.  A provider exposes exactly two calls —
``analyze_threats()`` and ``interactive_query()`` — and both return the
backend's raw text; turning that text into threats is the analyzer's job.

Usage:
    # Concrete providers are obtained via the factory in ``tyr.llm``:
    from tyr.llm import create_provider
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import httpx

from tyr.config import (
    ANALYST_PREAMBLE,
    LENIENT_CLOSING,
    LENIENT_FORMAT_INTRO,
    SCHEMA_EDUCATION_FIELD,
    SCHEMA_HEAD,
    SCHEMA_TAIL,
    STRICT_CLOSING,
    STRICT_FORMAT_INTRO,
    STRIDE_GUIDE,
    THREAT_FIELDS_GUIDE,
)
from tyr.exceptions import ProviderError

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────
# Abstract base class
# ──────────────────────────────────────────────────────────────

class ThreatModelProvider(ABC):
    """Backend-agnostic threat-analysis contract.

    Concrete providers hold only immutable configuration (credential,
    endpoint, model) and one ``httpx.Client``.  Each call issues a single
    HTTP request; nothing is retried.
    """

    _client: httpx.Client

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a static display name (e.g. 'Ollama (Local AI)')."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier string (e.g. 'llama3.1:8b')."""

    # ── Core methods ──────────────────────────────────────────

    @abstractmethod
    def analyze_threats(
        self,
        content: str,
        input_type: str,
        include_education: bool,
    ) -> str:
        """Ask the backend for a STRIDE analysis of *content*.

        Args:
            content: Raw document text (Terraform, manifest, prose...).
            input_type: Human-readable label, e.g. 'Terraform configuration'.
            include_education: Ask for an ``educational_note`` per threat.

        Returns:
            The backend's reply text.  Expected to contain JSON but not
            guaranteed to be well-formed.

        Raises:
            ProviderError: Transport failure or non-2xx status.
        """

    @abstractmethod
    def interactive_query(self, query: str, history: Sequence[str]) -> str:
        """Send a free-form question with prior conversation turns.

        ``history[i]`` is a user turn for even ``i`` and an assistant
        turn for odd ``i``.  The caller keeps the alternation intact.
        """

    # ── Resource management ───────────────────────────────────

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ThreatModelProvider:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ── HTTP helper ───────────────────────────────────────────

    def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        connect_hint: str | None = None,
    ) -> dict[str, Any]:
        """POST *payload* as JSON and return the decoded JSON reply.

        Every failure mode is raised as ``ProviderError``: transport
        errors (prefixed with *connect_hint* when given), non-2xx
        responses (status and body text), and non-JSON bodies.
        """
        logger.debug("POST %s (model=%s)", url, self.model_name)
        try:
            response = self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            prefix = connect_hint or f"{self.name} request to {url} failed"
            raise ProviderError(f"{prefix}. Error: {exc}") from exc

        if not response.is_success:
            body = response.text
            logger.error(
                "%s returned HTTP %d: %s", self.name, response.status_code, body[:500]
            )
            raise ProviderError(
                f"{self.name} request failed with status {response.status_code}: {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(
                f"{self.name} returned a body that is not JSON: {response.text[:200]}",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise ProviderError(
                f"{self.name} returned unexpected JSON: {type(data).__name__}",
                status_code=response.status_code,
                body=response.text,
            )
        return data


# ──────────────────────────────────────────────────────────────
# System prompt builder
# ──────────────────────────────────────────────────────────────

def build_system_prompt(include_education: bool, *, strict: bool = False) -> str:
    """Build the STRIDE analysis system prompt.

    The prompt always lists the six STRIDE categories, the eight fields
    expected per threat and a JSON example with ``threats`` and
    ``recommendations``.  ``educational_note`` appears in the example
    only when *include_education* is set.

    Args:
        include_education: Add ``educational_note`` to the schema example.
        strict: Use the stricter wording for local models that tend to
            wrap JSON in markdown fences or commentary.
    """
    schema = SCHEMA_HEAD
    if include_education:
        schema += SCHEMA_EDUCATION_FIELD
    schema += SCHEMA_TAIL

    intro, closing = (
        (STRICT_FORMAT_INTRO, STRICT_CLOSING)
        if strict
        else (LENIENT_FORMAT_INTRO, LENIENT_CLOSING)
    )
    return "\n\n".join([
        ANALYST_PREAMBLE,
        STRIDE_GUIDE,
        THREAT_FIELDS_GUIDE,
        f"{intro}\n{schema}",
        closing,
    ])
