"""Tests for ThreatAnalyzer: JSON extraction, validation and result building."""

import pytest

from conftest import make_reply, make_threat
from tyr.config import Settings
from tyr.exceptions import ConfigurationError, ProviderError, ResponseParseError
from tyr.models import InputType, RiskLevel
from tyr.services.analyzer import ThreatAnalyzer, extract_json_object


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('{"a": 1}', '{"a": 1}'),
        ('Sure! {"a": {"b": 2}} Hope this helps.', '{"a": {"b": 2}}'),
        ("no json here", "no json here"),
        ("} before {", "} before {"),
        ("{ unterminated", "{ unterminated"),
    ],
)
def test_extract_json_object(raw, expected):
    assert extract_json_object(raw) == expected


def test_analyze_builds_result(fake_provider, analyzer):
    fake_provider.replies = [
        make_reply(
            [
                make_threat("T001", "Critical", "Tampering", educational_note="Why it matters"),
                make_threat("T002", "low", "Repudiation"),
            ],
            ["Enable audit logging", "Sign artifacts"],
        )
    ]

    result = analyzer.analyze("terraform {}", InputType.TERRAFORM, include_education=True)

    assert fake_provider.analyze_calls == [("terraform {}", "Terraform configuration", True)]
    assert result.input_type is InputType.TERRAFORM
    assert [t.id for t in result.threats] == ["T001", "T002"]
    assert result.threats[1].risk_level is RiskLevel.LOW
    assert result.threats[0].educational_note == "Why it matters"
    assert result.recommendations == ["Enable audit logging", "Sign artifacts"]
    assert result.summary.total_threats == 2
    assert result.summary.overall_risk_score == pytest.approx(55.0)


def test_analyze_tolerates_prose_around_json(fake_provider, analyzer):
    fake_provider.replies = ['Here is the analysis:\n{"threats": [], "recommendations": ["x"]}\nThanks']

    result = analyzer.analyze("doc", InputType.ARCHITECTURE)

    assert result.threats == ()
    assert result.recommendations == ["x"]
    assert result.summary.overall_risk_score == 0.0


def test_analyze_without_recommendations(fake_provider, analyzer):
    fake_provider.replies = [make_reply([make_threat()])]
    result = analyzer.analyze("doc", InputType.SYSTEM_DESCRIPTION, include_education=False)
    assert result.recommendations == []
    assert fake_provider.analyze_calls[0][2] is False


def test_analyze_reply_without_json_raises(fake_provider, analyzer):
    fake_provider.replies = ["I cannot help with that."]

    with pytest.raises(ResponseParseError) as excinfo:
        analyzer.analyze("doc", InputType.ARCHITECTURE)

    assert excinfo.value.payload == "I cannot help with that."
    assert "Failed to parse API response as JSON" in str(excinfo.value)
    assert "Response was: I cannot help with that." in str(excinfo.value)


def test_analyze_invalid_threat_raises(fake_provider, analyzer):
    bad = make_threat()
    bad["category"] = "Phishing"
    fake_provider.replies = [make_reply([bad])]

    with pytest.raises(ResponseParseError, match="Phishing"):
        analyzer.analyze("doc", InputType.ARCHITECTURE)


def test_analyze_missing_threats_key_raises(fake_provider, analyzer):
    fake_provider.replies = ['{"recommendations": []}']
    with pytest.raises(ResponseParseError):
        analyzer.analyze("doc", InputType.ARCHITECTURE)


def test_provider_error_propagates(fake_provider, analyzer):
    fake_provider.replies = [ProviderError("boom", status_code=500)]
    with pytest.raises(ProviderError, match="boom"):
        analyzer.analyze("doc", InputType.ARCHITECTURE)


def test_interactive_query_passes_through(fake_provider, analyzer):
    fake_provider.replies = ["Consider rate limiting."]
    assert analyzer.interactive_query("DoS?", ["q", "a"]) == "Consider rate limiting."
    assert fake_provider.query_calls == [("DoS?", ["q", "a"])]


def test_provider_metadata(analyzer):
    assert analyzer.provider_name == "Fake Provider"
    assert analyzer.model_name == "fake-1"


def test_injected_provider_is_not_closed(fake_provider):
    with ThreatAnalyzer(provider=fake_provider):
        pass
    assert fake_provider.closed is False


def test_analyzer_from_settings():
    with ThreatAnalyzer(settings=Settings(ollama_model="phi3")) as analyzer:
        assert analyzer.model_name == "phi3"
        assert analyzer.provider_name == "Ollama (Local AI)"


def test_analyzer_from_settings_without_key():
    with pytest.raises(ConfigurationError):
        ThreatAnalyzer(settings=Settings(ai_provider="claude"))


def test_parse_response_is_static():
    response = ThreatAnalyzer.parse_response('```json\n{"threats": []}\n```')
    assert response.threats == []
