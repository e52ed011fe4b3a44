"""Ollama provider — local inference via the ``/api/generate`` endpoint.

System prompt and user content are sent as one prompt string with
streaming disabled.  Analysis calls run cooler (temperature 0.3) than
interactive ones (0.7).  Local models often wrap JSON in a markdown
fence despite being told not to, so analysis replies go through
``strip_code_fence`` before being returned.

Usage:
    from tyr.llm.ollama_client import OllamaProvider

    provider = OllamaProvider(base_url="http://localhost:11434", model="llama3.1:8b")
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from tyr.config import (
    ADVISOR_PROMPT,
    ANALYSIS_REQUEST_TEMPLATE,
    ANALYSIS_TEMPERATURE,
    INTERACTIVE_TEMPERATURE,
    MAX_TOKENS,
    OLLAMA_GENERATE_PATH,
    TOP_P,
)
from tyr.exceptions import ProviderError
from tyr.llm.base import ThreatModelProvider, build_system_prompt

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3.1:8b"


class OllamaProvider(ThreatModelProvider):
    """Local Ollama backend.

    Args:
        base_url: Ollama server root, without the ``/api/generate`` path.
        model: Name of a locally pulled model.
        timeout: Transport timeout in seconds, ``None`` for no limit.
        transport: Optional ``httpx`` transport (tests inject a mock).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._client = httpx.Client(timeout=timeout, transport=transport)
        logger.info(
            "OllamaProvider initialized: model=%s, base_url=%s",
            model,
            self._base_url,
        )

    @property
    def name(self) -> str:
        return "Ollama (Local AI)"

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def generate_url(self) -> str:
        return f"{self._base_url}{OLLAMA_GENERATE_PATH}"

    # ──────────────────────────────────────────────────────────
    # Provider contract
    # ──────────────────────────────────────────────────────────

    def analyze_threats(
        self,
        content: str,
        input_type: str,
        include_education: bool,
    ) -> str:
        system_prompt = build_system_prompt(include_education, strict=True)
        user_prompt = ANALYSIS_REQUEST_TEMPLATE.format(
            input_type=input_type, content=content
        )
        logger.info("Analyzing %s with local model %s", input_type, self._model)
        response = self._generate(f"{system_prompt}\n\n{user_prompt}", ANALYSIS_TEMPERATURE)
        return strip_code_fence(response)

    def interactive_query(self, query: str, history: Sequence[str]) -> str:
        conversation = "".join(
            f"{'User' if i % 2 == 0 else 'Assistant'}: {turn}\n\n"
            for i, turn in enumerate(history)
        )
        conversation += f"User: {query}\n\nAssistant:"
        return self._generate(f"{ADVISOR_PROMPT}\n\n{conversation}", INTERACTIVE_TEMPERATURE)

    # ──────────────────────────────────────────────────────────
    # Transport
    # ──────────────────────────────────────────────────────────

    def _generate(self, prompt: str, temperature: float) -> str:
        payload = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "top_p": TOP_P,
                "num_predict": MAX_TOKENS,
            },
        }
        data = self._post_json(
            self.generate_url,
            payload,
            connect_hint=f"Failed to connect to Ollama at {self._base_url}. Is it running?",
        )
        text = data.get("response")
        if not isinstance(text, str):
            raise ProviderError(f"{self.name} response has no 'response' string: {data}")
        return text


# ──────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────

def strip_code_fence(text: str) -> str:
    """Return the body of a markdown code fence, or the trimmed text.

    A ```` ```json ```` fence wins over a bare ```` ``` ```` one.  Text
    with no fence markers is only stripped of surrounding whitespace.
    """
    if "```json" in text:
        return text.split("```json", 1)[1].split("```", 1)[0].strip()
    if "```" in text:
        return text.split("```")[1].strip()
    return text.strip()
