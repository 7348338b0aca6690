"""Pydantic models for audit requests and reports."""

import copy
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Vulnerability severity, ordered Critical > High > Medium > Low."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Map a model-reported severity onto the enum, defaulting to Medium."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.MEDIUM


_SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class RiskLevel(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    SAFE = "Safe"


class SourceType(str, Enum):
    CODE_SNIPPET = "Code Snippet"
    GITHUB_REPOSITORY = "GitHub Repository"
    DEPENDENCIES = "Dependencies"


def risk_level_for_score(risk_score: int) -> RiskLevel:
    """Derive a risk level from a 0-100 risk score (100 = safe)."""
    vulnerability_score = 100 - risk_score
    if vulnerability_score >= 80:
        return RiskLevel.CRITICAL
    if vulnerability_score >= 60:
        return RiskLevel.HIGH
    if vulnerability_score >= 40:
        return RiskLevel.MEDIUM
    if vulnerability_score >= 20:
        return RiskLevel.LOW
    return RiskLevel.SAFE


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_text_list(value: Any) -> list[str]:
    """Coerce a model-reported list field, accepting a bare string as one item."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        return []
    return [
        _as_text(item)
        for item in value
        if item is not None and not isinstance(item, (dict, list))
    ]


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CodeAuditRequest(CamelModel):
    """Request body for auditing a code snippet."""

    code: Optional[str] = Field(default="", description="Source code to audit")


class RepoAuditRequest(CamelModel):
    """Request body for auditing a GitHub repository."""

    repo_url: Optional[str] = Field(default="", description="Public GitHub repository URL")


class DependencyAuditRequest(CamelModel):
    """Request body for auditing a package.json manifest."""

    package_json: Optional[str] = Field(default="", description="Raw package.json content")


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class Vulnerability(CamelModel):
    """A single vulnerability reported by the model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str = ""
    description: str = ""
    severity: Severity = Severity.MEDIUM
    remediation: str = ""
    line_number: Optional[int] = None
    cwe_id: Optional[str] = None
    owasp_category: Optional[str] = None

    @field_validator("title", "description", "remediation", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("cwe_id", "owasp_category", mode="before")
    @classmethod
    def _coerce_reference(cls, value: Any) -> Optional[str]:
        return _as_optional_text(value)

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value: Any) -> Severity:
        return Severity.parse(value)

    @field_validator("line_number", mode="before")
    @classmethod
    def _coerce_line_number(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return None


class AuditResult(CamelModel):
    """Security audit report for a snippet or repository."""

    overall_risk_score: int = Field(description="0-100 where 100 is safe")
    risk_level: RiskLevel = RiskLevel.MEDIUM
    estimated_financial_impact_inr: int = Field(
        default=0,
        ge=0,
        alias="estimatedFinancialImpactINR",
    )
    soc2_controls: list[str] = Field(default_factory=list)
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)
    executive_summary: str = ""
    source_type: Optional[SourceType] = None
    repository: Optional[str] = None
    analyzed_at: Optional[str] = None
    cached: Optional[bool] = None

    @field_validator("overall_risk_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("overallRiskScore must be a number")
        try:
            score = int(round(float(value)))
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError("overallRiskScore must be a number") from e
        return max(0, min(100, score))

    @field_validator("soc2_controls", mode="before")
    @classmethod
    def _coerce_controls(cls, value: Any) -> list[str]:
        return _as_text_list(value)

    @field_validator("vulnerabilities", mode="before")
    @classmethod
    def _coerce_vulnerabilities(cls, value: Any) -> list:
        # A lone finding object or stray non-object entries are tolerated
        if isinstance(value, dict):
            return [value]
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, (dict, Vulnerability))]

    @field_validator("executive_summary", mode="before")
    @classmethod
    def _coerce_summary(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("soc2_controls")
    @classmethod
    def _dedupe_controls(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(str(item) for item in value if item))

    @model_validator(mode="before")
    @classmethod
    def _default_risk_level(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        level = data.get("riskLevel", data.get("risk_level"))
        by_name = {member.value.lower(): member.value for member in RiskLevel}
        data = dict(data)
        data.pop("risk_level", None)
        if isinstance(level, str) and level.strip().lower() in by_name:
            data["riskLevel"] = by_name[level.strip().lower()]
        else:
            score = data.get("overallRiskScore", data.get("overall_risk_score"))
            try:
                clamped = max(0, min(100, int(round(float(score)))))
            except (TypeError, ValueError, OverflowError):
                return data
            data["riskLevel"] = risk_level_for_score(clamped).value
        return data


class DependencyAuditResult(CamelModel):
    """Supply-chain report for a package.json manifest."""

    vulnerable_packages: list[str] = Field(default_factory=list)
    outdated_packages: list[str] = Field(default_factory=list)
    suspicious_packages: list[str] = Field(default_factory=list)
    supply_chain_risks: str = ""
    recommendations: list[str] = Field(default_factory=list)
    analyzed_at: Optional[str] = None

    @field_validator(
        "vulnerable_packages",
        "outdated_packages",
        "suspicious_packages",
        "recommendations",
        mode="before",
    )
    @classmethod
    def _coerce_lists(cls, value: Any) -> list[str]:
        return _as_text_list(value)

    @field_validator("supply_chain_risks", mode="before")
    @classmethod
    def _coerce_risks(cls, value: Any) -> str:
        return _as_text(value)


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


@dataclass
class CacheEntry:
    """A cached value with its creation time and time-to-live in seconds."""

    key: str
    value: Any
    created_at: float
    ttl: float

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl

    def is_expired(self, now: Optional[float] = None) -> bool:
        current = time.monotonic() if now is None else now
        return current >= self.expires_at

    def copy_value(self) -> Any:
        return copy.deepcopy(self.value)
