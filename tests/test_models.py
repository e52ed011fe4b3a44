"""Tests for the enum and threat models: parsing, ordering, summary scoring."""

import json

import pytest
from pydantic import ValidationError

from conftest import make_threat
from tyr.models import (
    AnalysisResult,
    AnalysisSummary,
    InputType,
    RiskLevel,
    StrideCategory,
    Threat,
    ThreatModelResponse,
)


def _threats(*levels: str) -> list[Threat]:
    return [
        Threat.model_validate(make_threat(threat_id=f"T{i:03d}", risk_level=level))
        for i, level in enumerate(levels, start=1)
    ]


# ── RiskLevel ─────────────────────────────────────────────────

def test_risk_level_total_order():
    assert RiskLevel.LOW < RiskLevel.MEDIUM < RiskLevel.HIGH < RiskLevel.CRITICAL
    assert RiskLevel.CRITICAL >= RiskLevel.CRITICAL
    assert sorted([RiskLevel.HIGH, RiskLevel.LOW, RiskLevel.CRITICAL, RiskLevel.MEDIUM]) == [
        RiskLevel.LOW,
        RiskLevel.MEDIUM,
        RiskLevel.HIGH,
        RiskLevel.CRITICAL,
    ]


def test_risk_level_order_is_not_alphabetical():
    # "High" < "Low" as strings, but not as risk levels
    assert RiskLevel.HIGH > RiskLevel.LOW
    assert RiskLevel.CRITICAL > RiskLevel.MEDIUM


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("critical", RiskLevel.CRITICAL),
        ("HIGH", RiskLevel.HIGH),
        (" Medium ", RiskLevel.MEDIUM),
        ("low", RiskLevel.LOW),
        ("severe", RiskLevel.LOW),
        ("", RiskLevel.LOW),
    ],
)
def test_risk_level_from_string_falls_back_to_low(raw, expected):
    assert RiskLevel.from_string(raw) is expected


def test_risk_level_labels():
    assert RiskLevel.CRITICAL.label == "CRITICAL"
    assert RiskLevel.MEDIUM.field_name == "medium"


# ── InputType ─────────────────────────────────────────────────

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("architecture", InputType.ARCHITECTURE),
        ("arch", InputType.ARCHITECTURE),
        ("TF", InputType.TERRAFORM),
        ("k8s", InputType.KUBERNETES),
        ("kube", InputType.KUBERNETES),
        ("openapi", InputType.API_SPEC),
        ("api-spec", InputType.API_SPEC),
        ("system", InputType.SYSTEM_DESCRIPTION),
        ("description", InputType.SYSTEM_DESCRIPTION),
    ],
)
def test_input_type_aliases(raw, expected):
    assert InputType.from_string(raw) is expected


def test_input_type_unknown_raises():
    with pytest.raises(ValueError, match="Unknown input type: docker"):
        InputType.from_string("docker")


@pytest.mark.parametrize(
    "path, expected",
    [
        ("main.tf", InputType.TERRAFORM),
        ("k8s/web-deployment.yaml", InputType.KUBERNETES),
        ("svc-service.yml", InputType.KUBERNETES),
        ("values.yaml", InputType.SYSTEM_DESCRIPTION),
        ("openapi.json", InputType.API_SPEC),
        ("README.md", InputType.SYSTEM_DESCRIPTION),
        ("Makefile", InputType.SYSTEM_DESCRIPTION),
    ],
)
def test_input_type_from_file_extension(path, expected):
    assert InputType.from_file_extension(path) is expected


def test_input_type_labels_phrase_requests():
    assert InputType.TERRAFORM.label == "Terraform configuration"
    assert InputType.API_SPEC.label == "API specification"


# ── StrideCategory ────────────────────────────────────────────

def test_stride_category_presentation():
    assert StrideCategory.DENIAL_OF_SERVICE.display_name == "Denial of Service"
    assert StrideCategory.INFORMATION_DISCLOSURE.field_name == "information_disclosure"
    assert all(category.icon for category in StrideCategory)
    assert len(StrideCategory) == 6


# ── Threat parsing ────────────────────────────────────────────

def test_threat_accepts_lenient_tags():
    threat = Threat.model_validate(
        make_threat(category="Information Disclosure", risk_level="CRITICAL")
    )
    assert threat.category is StrideCategory.INFORMATION_DISCLOSURE
    assert threat.risk_level is RiskLevel.CRITICAL
    assert threat.educational_note is None


def test_threat_rejects_unknown_category():
    with pytest.raises(ValidationError):
        Threat.model_validate(make_threat(category="Phishing"))


def test_threat_requires_all_fields():
    data = make_threat()
    del data["impact"]
    with pytest.raises(ValidationError):
        Threat.model_validate(data)


def test_threat_is_frozen():
    threat = _threats("Low")[0]
    with pytest.raises(ValidationError):
        threat.title = "changed"


def test_response_without_recommendations():
    response = ThreatModelResponse.model_validate_json('{"threats": []}')
    assert response.threats == []
    assert response.recommendations is None


# ── AnalysisSummary ───────────────────────────────────────────

def test_summary_counts_and_score():
    summary = AnalysisSummary.from_threats(_threats("Critical", "High", "Low"))
    assert summary.total_threats == 3
    assert summary.by_risk_level.critical == 1
    assert summary.by_risk_level.high == 1
    assert summary.by_risk_level.medium == 0
    assert summary.by_risk_level.low == 1
    assert summary.by_risk_level.total == 3
    assert summary.by_stride_category.spoofing == 3
    assert summary.by_stride_category.total == 3
    assert summary.overall_risk_score == pytest.approx(60.0)


@pytest.mark.parametrize(
    "levels, score",
    [
        (("Critical", "Critical"), 100.0),
        (("Low",), 10.0),
        (("Critical",) * 5, 100.0),
        (("Low",) * 3, 10.0),
        (("Medium", "High"), 55.0),
        ((), 0.0),
    ],
)
def test_summary_score_bounds(levels, score):
    assert AnalysisSummary.from_threats(_threats(*levels)).overall_risk_score == pytest.approx(score)


def test_summary_counts_every_category():
    threats = [
        Threat.model_validate(make_threat(threat_id=f"T{i}", category=category.value))
        for i, category in enumerate(StrideCategory)
    ]
    summary = AnalysisSummary.from_threats(threats)
    for category in StrideCategory:
        assert summary.by_stride_category.count(category) == 1


# ── AnalysisResult ────────────────────────────────────────────

def test_result_build_sets_summary_and_timestamp():
    result = AnalysisResult.build(InputType.TERRAFORM, _threats("High", "Medium"))
    assert result.summary.total_threats == 2
    assert result.recommendations == []
    assert "T" in result.timestamp
    assert result.timestamp.endswith("+00:00")


def test_result_add_recommendations_replaces():
    result = AnalysisResult.build(InputType.ARCHITECTURE, [])
    result.add_recommendations(["Enable MFA"])
    result.add_recommendations(["Rotate keys", "Encrypt backups"])
    assert result.recommendations == ["Rotate keys", "Encrypt backups"]


def test_result_json_keeps_timestamp_and_values():
    result = AnalysisResult.build(InputType.API_SPEC, _threats("Critical"))
    result.add_recommendations(["Use OAuth2"])

    data = json.loads(result.model_dump_json())
    assert data["input_type"] == "ApiSpec"
    assert data["threats"][0]["risk_level"] == "Critical"
    assert data["threats"][0]["category"] == "Spoofing"
    assert data["summary"]["by_risk_level"]["critical"] == 1

    restored = AnalysisResult.model_validate_json(result.model_dump_json())
    assert restored == result
    assert restored.timestamp == result.timestamp


def test_result_rejects_inconsistent_summary():
    result = AnalysisResult.build(InputType.ARCHITECTURE, _threats("Low"))
    data = result.model_dump(mode="json")
    data["threats"] = []
    with pytest.raises(ValidationError):
        AnalysisResult.model_validate(data)


def test_result_threats_cannot_drift_from_summary():
    result = AnalysisResult.build(InputType.ARCHITECTURE, _threats("High"))

    assert isinstance(result.threats, tuple)
    with pytest.raises(AttributeError):
        result.threats.append(result.threats[0])
    with pytest.raises(ValidationError):
        result.threats = result.threats * 2
    with pytest.raises(ValidationError):
        result.summary = AnalysisSummary.from_threats([])
    assert result.summary.total_threats == len(result.threats) == 1
