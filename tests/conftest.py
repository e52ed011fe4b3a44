"""Shared fixtures: canned provider replies and an in-memory provider."""

from __future__ import annotations

import json
from collections.abc import Sequence

import pytest

from tyr.config import get_settings
from tyr.llm.base import ThreatModelProvider
from tyr.services.analyzer import ThreatAnalyzer


def make_threat(
    threat_id: str = "T001",
    risk_level: str = "High",
    category: str = "Spoofing",
    title: str = "Session token replay",
    educational_note: str | None = None,
) -> dict:
    threat = {
        "id": threat_id,
        "title": title,
        "category": category,
        "risk_level": risk_level,
        "description": "Tokens are accepted without binding to the client.",
        "attack_path": ["Capture token on shared Wi-Fi", "Replay against /api"],
        "impact": "Account takeover",
        "affected_components": ["API gateway", "Auth service"],
        "mitigations": [
            {
                "title": "Bind tokens to client",
                "description": "Use DPoP or mTLS-bound tokens.",
                "effort": "Medium",
                "effectiveness": "High",
            }
        ],
    }
    if educational_note is not None:
        threat["educational_note"] = educational_note
    return threat


def make_reply(threats: list[dict], recommendations: list[str] | None = None) -> str:
    body: dict = {"threats": threats}
    if recommendations is not None:
        body["recommendations"] = recommendations
    return json.dumps(body)


class FakeProvider(ThreatModelProvider):
    """Provider that returns queued replies and records every call."""

    def __init__(self, replies: Sequence[str | Exception] = ()) -> None:
        self.replies = list(replies)
        self.analyze_calls: list[tuple[str, str, bool]] = []
        self.query_calls: list[tuple[str, list[str]]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "Fake Provider"

    @property
    def model_name(self) -> str:
        return "fake-1"

    def _next(self) -> str:
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def analyze_threats(self, content: str, input_type: str, include_education: bool) -> str:
        self.analyze_calls.append((content, input_type, include_education))
        return self._next()

    def interactive_query(self, query: str, history: Sequence[str]) -> str:
        self.query_calls.append((query, list(history)))
        return self._next()

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def analyzer(fake_provider: FakeProvider) -> ThreatAnalyzer:
    return ThreatAnalyzer(provider=fake_provider)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests independent of the developer's environment and .env file."""
    for var in ("AI_PROVIDER", "ANTHROPIC_API_KEY", "OLLAMA_HOST", "OLLAMA_MODEL", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
