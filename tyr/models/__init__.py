"""Pydantic models — single source of truth for all data structures."""

from .enums import InputType, RiskLevel, StrideCategory
from .threat import (
    AnalysisResult,
    AnalysisSummary,
    CategoryBreakdown,
    Mitigation,
    RiskBreakdown,
    Threat,
    ThreatModelResponse,
)

__all__ = [
    "InputType",
    "RiskLevel",
    "StrideCategory",
    "AnalysisResult",
    "AnalysisSummary",
    "CategoryBreakdown",
    "Mitigation",
    "RiskBreakdown",
    "Threat",
    "ThreatModelResponse",
]
