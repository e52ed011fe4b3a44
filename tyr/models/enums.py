"""Enum definitions — single source of truth for all categorical values.

These enums are used in:
- Pydantic model validation of model replies
- The JSON rendering of analysis results (values are the tag names)
- Console/HTML presentation (labels, icons)
- Risk threshold filtering (``RiskLevel`` is totally ordered)
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Any


def _normalise_tag(value: str) -> str:
    """Fold case and drop separators: 'Information Disclosure' → 'informationdisclosure'."""
    return re.sub(r"[\s_\-]+", "", value).lower()


class _TaggedEnum(str, Enum):
    """String enum whose members can be looked up leniently by tag name."""

    @classmethod
    def from_tag(cls, value: Any) -> Any:
        """Resolve *value* to a member, tolerating case and separators.

        Members pass through unchanged.  Raises ``ValueError`` for
        anything that does not name a member.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = _normalise_tag(value)
            for member in cls:
                if _normalise_tag(member.value) == wanted:
                    return member
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown {cls.__name__} '{value}' (expected one of: {allowed})")


class InputType(_TaggedEnum):
    """Kind of document submitted for analysis.

    The label is only used to phrase the analysis request.
    """

    ARCHITECTURE = "Architecture"
    TERRAFORM = "Terraform"
    KUBERNETES = "Kubernetes"
    API_SPEC = "ApiSpec"
    SYSTEM_DESCRIPTION = "SystemDescription"

    @classmethod
    def from_string(cls, value: str) -> InputType:
        """Parse a user-supplied type name (CLI flag, API field)."""
        match value.strip().lower():
            case "architecture" | "arch":
                return cls.ARCHITECTURE
            case "terraform" | "tf":
                return cls.TERRAFORM
            case "kubernetes" | "k8s" | "kube":
                return cls.KUBERNETES
            case "api" | "api-spec" | "apispec" | "openapi":
                return cls.API_SPEC
            case "system" | "description" | "systemdescription":
                return cls.SYSTEM_DESCRIPTION
            case _:
                raise ValueError(f"Unknown input type: {value}")

    @classmethod
    def from_file_extension(cls, path: str | Path) -> InputType:
        """Guess the input type from a file name.

        YAML files are only treated as Kubernetes manifests when the name
        mentions a deployment or service.
        """
        path = Path(path)
        ext = path.suffix.lstrip(".").lower()
        if ext == "tf":
            return cls.TERRAFORM
        if ext in ("yaml", "yml"):
            name = path.name.lower()
            if "deployment" in name or "service" in name:
                return cls.KUBERNETES
            return cls.SYSTEM_DESCRIPTION
        if ext == "json":
            return cls.API_SPEC
        return cls.SYSTEM_DESCRIPTION

    @property
    def label(self) -> str:
        return _INPUT_LABELS[self]


class StrideCategory(_TaggedEnum):
    """The six STRIDE threat categories. Closed set."""

    SPOOFING = "Spoofing"
    TAMPERING = "Tampering"
    REPUDIATION = "Repudiation"
    INFORMATION_DISCLOSURE = "InformationDisclosure"
    DENIAL_OF_SERVICE = "DenialOfService"
    ELEVATION_OF_PRIVILEGE = "ElevationOfPrivilege"

    @property
    def description(self) -> str:
        return _STRIDE_DESCRIPTIONS[self]

    @property
    def icon(self) -> str:
        return _STRIDE_ICONS[self]

    @property
    def display_name(self) -> str:
        """Spaced form, e.g. 'Denial of Service'."""
        return _STRIDE_DISPLAY[self]

    @property
    def field_name(self) -> str:
        """Key used in ``summary.by_stride_category``."""
        return self.name.lower()


class RiskLevel(_TaggedEnum):
    """Per-threat risk rating, ordered LOW < MEDIUM < HIGH < CRITICAL.

    Comparison operators use declaration order rather than string order,
    so ``threat.risk_level >= threshold`` behaves as expected.
    """

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @classmethod
    def from_string(cls, value: str) -> RiskLevel:
        """Parse a user threshold. Unrecognised values fall back to LOW."""
        try:
            return cls.from_tag(value)
        except ValueError:
            return cls.LOW

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    @property
    def label(self) -> str:
        """Upper-case display text, e.g. 'CRITICAL'."""
        return self.value.upper()

    @property
    def field_name(self) -> str:
        """Key used in ``summary.by_risk_level``."""
        return self.name.lower()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank >= other.rank


_INPUT_LABELS: dict[InputType, str] = {
    InputType.ARCHITECTURE: "architecture diagram",
    InputType.TERRAFORM: "Terraform configuration",
    InputType.KUBERNETES: "Kubernetes manifest",
    InputType.API_SPEC: "API specification",
    InputType.SYSTEM_DESCRIPTION: "system description",
}

_STRIDE_DESCRIPTIONS: dict[StrideCategory, str] = {
    StrideCategory.SPOOFING: "Pretending to be something or someone other than yourself",
    StrideCategory.TAMPERING: "Modifying data or code",
    StrideCategory.REPUDIATION: "Claiming you didn't do something or denying actions",
    StrideCategory.INFORMATION_DISCLOSURE: "Exposing information to unauthorized individuals",
    StrideCategory.DENIAL_OF_SERVICE: "Denying or degrading service to users",
    StrideCategory.ELEVATION_OF_PRIVILEGE: "Gaining capabilities without proper authorization",
}

_STRIDE_ICONS: dict[StrideCategory, str] = {
    StrideCategory.SPOOFING: "👤",
    StrideCategory.TAMPERING: "⚠️",
    StrideCategory.REPUDIATION: "📝",
    StrideCategory.INFORMATION_DISCLOSURE: "🔓",
    StrideCategory.DENIAL_OF_SERVICE: "🚫",
    StrideCategory.ELEVATION_OF_PRIVILEGE: "🔐",
}

_STRIDE_DISPLAY: dict[StrideCategory, str] = {
    StrideCategory.SPOOFING: "Spoofing",
    StrideCategory.TAMPERING: "Tampering",
    StrideCategory.REPUDIATION: "Repudiation",
    StrideCategory.INFORMATION_DISCLOSURE: "Information Disclosure",
    StrideCategory.DENIAL_OF_SERVICE: "Denial of Service",
    StrideCategory.ELEVATION_OF_PRIVILEGE: "Elevation of Privilege",
}
