"""Claude provider — hosted analysis via the Anthropic Messages API.

Talks to the REST endpoint directly with ``httpx``: one POST per call,
no streaming, no retries.  The reply text is the concatenation of every
text-bearing content block.

Usage:
    from tyr.llm.claude_client import ClaudeProvider

    provider = ClaudeProvider(api_key="sk-ant-...")
    raw = provider.analyze_threats(doc, "Terraform configuration", True)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from tyr.config import (
    ANALYSIS_REQUEST_TEMPLATE,
    ANTHROPIC_API_VERSION,
    MAX_TOKENS,
)
from tyr.exceptions import ConfigurationError, ProviderError
from tyr.llm.base import ThreatModelProvider, build_system_prompt

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"


class ClaudeProvider(ThreatModelProvider):
    """Anthropic Messages API backend.

    Args:
        api_key: Anthropic API key.  Required; an empty key is a
            configuration error raised here rather than on first use.
        model: Model identifier sent in every request.
        api_url: Messages endpoint.
        timeout: Transport timeout in seconds, ``None`` for no limit.
        transport: Optional ``httpx`` transport (tests inject a mock).
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                "ANTHROPIC_API_KEY is not set. Check your .env file or pass api_key= explicitly."
            )
        self._api_key = api_key
        self._model = model
        self._api_url = api_url
        self._client = httpx.Client(timeout=timeout, transport=transport)
        logger.info("ClaudeProvider initialized: model=%s, url=%s", model, api_url)

    @property
    def name(self) -> str:
        return "Claude (Anthropic API)"

    @property
    def model_name(self) -> str:
        return self._model

    # ──────────────────────────────────────────────────────────
    # Provider contract
    # ──────────────────────────────────────────────────────────

    def analyze_threats(
        self,
        content: str,
        input_type: str,
        include_education: bool,
    ) -> str:
        messages = [{
            "role": "user",
            "content": ANALYSIS_REQUEST_TEMPLATE.format(
                input_type=input_type, content=content
            ),
        }]
        return self._send_message(messages, build_system_prompt(include_education))

    def interactive_query(self, query: str, history: Sequence[str]) -> str:
        messages = history_to_messages(history)
        messages.append({"role": "user", "content": query})
        return self._send_message(messages, build_system_prompt(True))

    # ──────────────────────────────────────────────────────────
    # Transport
    # ──────────────────────────────────────────────────────────

    def _send_message(
        self,
        messages: list[dict[str, str]],
        system_prompt: str,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self._model,
            "max_tokens": MAX_TOKENS,
            "messages": messages,
            "system": system_prompt,
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
            "content-type": "application/json",
        }
        data = self._post_json(self._api_url, payload, headers=headers)

        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ProviderError(f"{self.name} response has no 'content' array: {data}")

        text = "\n".join(
            block["text"]
            for block in blocks
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        )
        logger.info("Claude reply: %d content blocks, %d chars", len(blocks), len(text))
        return text


# ──────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────

def history_to_messages(history: Sequence[str]) -> list[dict[str, str]]:
    """Map a flat turn list to Messages API roles by position parity."""
    return [
        {"role": "user" if i % 2 == 0 else "assistant", "content": turn}
        for i, turn in enumerate(history)
    ]
