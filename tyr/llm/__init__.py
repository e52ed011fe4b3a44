"""Provider integrations — factory pattern for backend switching.

Usage:
    from tyr.llm import create_provider
    from tyr.config import get_settings

    provider = create_provider(get_settings())
    raw = provider.analyze_threats(doc, "system description", True)
"""

from __future__ import annotations

import httpx

from tyr.config import Settings
from tyr.exceptions import ConfigurationError
from tyr.llm.base import ThreatModelProvider, build_system_prompt
from tyr.llm.claude_client import ClaudeProvider
from tyr.llm.ollama_client import OllamaProvider, strip_code_fence

PROVIDER_NAMES: tuple[str, ...] = ("claude", "ollama")


def available_providers() -> list[str]:
    """Names accepted by ``create_provider``."""
    return list(PROVIDER_NAMES)


def create_provider(
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
) -> ThreatModelProvider:
    """Create the provider named by ``settings.ai_provider``.

    Args:
        settings: Application settings with provider config.
        transport: Optional ``httpx`` transport handed to the provider.

    Returns:
        Configured ThreatModelProvider instance.

    Raises:
        ConfigurationError: If the provider name is not recognized, or
            the selected provider is missing its credential.
    """
    match settings.ai_provider.strip().lower():
        case "claude":
            return ClaudeProvider(
                api_key=settings.anthropic_api_key,
                model=settings.anthropic_model,
                api_url=settings.anthropic_api_url,
                timeout=settings.http_timeout,
                transport=transport,
            )
        case "ollama":
            return OllamaProvider(
                base_url=settings.ollama_host,
                model=settings.ollama_model,
                timeout=settings.http_timeout,
                transport=transport,
            )
        case _:
            raise ConfigurationError(
                f"Unknown AI provider: {settings.ai_provider}. "
                f"Available: {', '.join(PROVIDER_NAMES)}"
            )


__all__ = [
    "PROVIDER_NAMES",
    "available_providers",
    "create_provider",
    "build_system_prompt",
    "strip_code_fence",
    "ThreatModelProvider",
    "ClaudeProvider",
    "OllamaProvider",
]
