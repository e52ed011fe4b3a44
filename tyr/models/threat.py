"""Threat data models — single source of truth.

These Pydantic models are used for:
1. Validating the JSON a provider returns (``ThreatModelResponse``)
2. The persisted JSON rendering of an analysis (``AnalysisResult``)
3. Input to the console / HTML reporters

Threats are only ever created by parsing a provider reply and are frozen
afterwards.  ``AnalysisSummary`` is derived, never hand-built.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from tyr.config import MAX_AVERAGE_WEIGHT, RISK_WEIGHTS, SCORE_SCALE

from .enums import InputType, RiskLevel, StrideCategory


class Mitigation(BaseModel):
    """A countermeasure for one threat. Owned by its parent ``Threat``."""

    title: str = Field(description="Short name of the countermeasure.")
    description: str = Field(description="What to do and how it blocks the attack.")
    effort: str = Field(description="Implementation effort: Low, Medium or High.")
    effectiveness: str = Field(
        description="How much of the threat it removes: Partial, High or Complete."
    )

    model_config = {"frozen": True}


class Threat(BaseModel):
    """A single STRIDE threat identified by the model.

    ``id`` is whatever the provider assigned (e.g. 'T001'); it is not
    unique across analyses and nothing here enforces uniqueness.
    """

    id: str = Field(description="Provider-assigned identifier, e.g. 'T001'.")
    title: str
    category: StrideCategory
    risk_level: RiskLevel
    description: str
    attack_path: List[str] = Field(
        description="Ordered attacker steps from entry to impact."
    )
    impact: str
    affected_components: List[str] = Field(
        description="Vulnerable components, in the order the model listed them."
    )
    mitigations: List[Mitigation]
    educational_note: Optional[str] = Field(
        default=None,
        description="Why the threat matters in practice. Only present when requested.",
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": "T001",
                    "title": "Unauthenticated admin endpoint",
                    "category": "ElevationOfPrivilege",
                    "risk_level": "Critical",
                    "description": "The /admin route is reachable without a session.",
                    "attack_path": [
                        "Enumerate routes",
                        "Call /admin/users directly",
                    ],
                    "impact": "Full account takeover.",
                    "affected_components": ["api-gateway", "admin-service"],
                    "mitigations": [
                        {
                            "title": "Enforce authentication middleware",
                            "description": "Require a valid session on /admin/*.",
                            "effort": "Low",
                            "effectiveness": "Complete",
                        }
                    ],
                    "educational_note": None,
                }
            ]
        },
    }

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: Any) -> StrideCategory:
        return StrideCategory.from_tag(value)

    @field_validator("risk_level", mode="before")
    @classmethod
    def _parse_risk_level(cls, value: Any) -> RiskLevel:
        return RiskLevel.from_tag(value)


class RiskBreakdown(BaseModel):
    """Threat counts per risk level."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    model_config = {"frozen": True}

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low

    def count(self, level: RiskLevel) -> int:
        return getattr(self, level.field_name)


class CategoryBreakdown(BaseModel):
    """Threat counts per STRIDE category."""

    spoofing: int = 0
    tampering: int = 0
    repudiation: int = 0
    information_disclosure: int = 0
    denial_of_service: int = 0
    elevation_of_privilege: int = 0

    model_config = {"frozen": True}

    @property
    def total(self) -> int:
        return sum(self.count(category) for category in StrideCategory)

    def count(self, category: StrideCategory) -> int:
        return getattr(self, category.field_name)


class AnalysisSummary(BaseModel):
    """Aggregate statistics derived from a threat list.

    Always build through ``from_threats`` so the invariant
    ``total_threats == by_risk_level.total == by_stride_category.total``
    holds.
    """

    total_threats: int
    by_risk_level: RiskBreakdown
    by_stride_category: CategoryBreakdown
    overall_risk_score: float = Field(ge=0.0, le=100.0)

    model_config = {"frozen": True}

    @classmethod
    def from_threats(cls, threats: Sequence[Threat]) -> AnalysisSummary:
        """Count threats per level and category and compute the 0-100 score.

        The score is the weighted average risk (Critical=10, High=7,
        Medium=4, Low=1), capped at 10 and scaled by 10.  An empty list
        scores 0.
        """
        by_level: Counter[RiskLevel] = Counter()
        by_category: Counter[StrideCategory] = Counter()
        for threat in threats:
            by_level[threat.risk_level] += 1
            by_category[threat.category] += 1

        total = len(threats)
        if total:
            weighted_sum = sum(
                count * RISK_WEIGHTS[level.value] for level, count in by_level.items()
            )
            score = min(weighted_sum / total, MAX_AVERAGE_WEIGHT) * SCORE_SCALE
        else:
            score = 0.0

        return cls(
            total_threats=total,
            by_risk_level=RiskBreakdown(
                **{level.field_name: by_level[level] for level in RiskLevel}
            ),
            by_stride_category=CategoryBreakdown(
                **{cat.field_name: by_category[cat] for cat in StrideCategory}
            ),
            overall_risk_score=score,
        )


class AnalysisResult(BaseModel):
    """Outcome of one analysis call.

    ``threats`` and ``summary`` are fixed at construction;
    ``add_recommendations`` is the only mutation.  Deserialising a stored
    result keeps its original timestamp.
    """

    input_type: InputType
    threats: Tuple[Threat, ...] = Field(default_factory=tuple, frozen=True)
    summary: AnalysisSummary = Field(frozen=True)
    recommendations: List[str] = Field(default_factory=list)
    timestamp: str = Field(description="ISO 8601 UTC creation time.")

    @classmethod
    def build(cls, input_type: InputType, threats: Iterable[Threat]) -> AnalysisResult:
        """Create a fresh result, computing its summary and timestamp."""
        threat_list = tuple(threats)
        return cls(
            input_type=input_type,
            threats=threat_list,
            summary=AnalysisSummary.from_threats(threat_list),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    def add_recommendations(self, recommendations: Iterable[str]) -> None:
        self.recommendations = list(recommendations)

    @model_validator(mode="after")
    def _check_summary(self) -> AnalysisResult:
        if self.summary.total_threats != len(self.threats):
            raise ValueError(
                f"summary.total_threats={self.summary.total_threats} does not "
                f"match {len(self.threats)} threats"
            )
        return self


class ThreatModelResponse(BaseModel):
    """Shape of the JSON object a provider is asked to return."""

    threats: List[Threat]
    recommendations: Optional[List[str]] = None
