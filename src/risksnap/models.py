"""Data models for risk snapshot analysis."""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from risksnap.constants import CATEGORY_ORDER


# Signal sets are plain mappings keyed by camelCase signal names; they are
# serialized as-is into AnalysisResult.raw_signals.
SignalSet = dict[str, Any]


@dataclass
class RiskCategory:
    """Risk assessment for a single category."""

    level: str
    explanation: str
    signals: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "explanation": self.explanation,
            "signals": list(self.signals),
        }


@dataclass
class Issue:
    """A prioritized problem found while evaluating a category."""

    priority: str  # high/medium/low
    issue: str
    category: str  # Display name, e.g. "SEO & Structure"

    def to_dict(self) -> dict:
        return {"priority": self.priority, "issue": self.issue, "category": self.category}


@dataclass
class Recommendation:
    """An effort-tagged suggested fix."""

    effort: str  # quick/medium/larger
    recommendation: str

    def to_dict(self) -> dict:
        return {"effort": self.effort, "recommendation": self.recommendation}


@dataclass
class AnalysisResult:
    """Complete risk snapshot for one page.

    ``risk_breakdown`` maps each category key (see ``CATEGORY_ORDER``) to its
    RiskCategory. ``overall_risk`` is derived from the six category levels
    by the classifier and is never set independently.
    """

    url: str
    overall_risk: str
    strengths: list[str] = field(default_factory=list)
    risk_breakdown: dict[str, RiskCategory] = field(default_factory=dict)
    issues: list[Issue] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
    raw_signals: SignalSet = field(default_factory=dict)

    def category_levels(self) -> dict[str, str]:
        """Return the final level of every category, in evaluation order."""
        return {
            key: self.risk_breakdown[key].level
            for key in CATEGORY_ORDER
            if key in self.risk_breakdown
        }

    def to_dict(self) -> dict:
        """Serialize using the field names consumed by report renderers."""
        return {
            "url": self.url,
            "overall_risk": self.overall_risk,
            "strengths": list(self.strengths),
            "risk_breakdown": {
                key: category.to_dict()
                for key, category in self.risk_breakdown.items()
            },
            "issues": [issue.to_dict() for issue in self.issues],
            "recommendations": [rec.to_dict() for rec in self.recommendations],
            "raw_signals": copy.deepcopy(self.raw_signals),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisResult":
        """Rebuild a result from its serialized form (e.g. a stored row)."""
        return cls(
            url=data["url"],
            overall_risk=data["overall_risk"],
            strengths=list(data.get("strengths", [])),
            risk_breakdown={
                key: RiskCategory(
                    level=value["level"],
                    explanation=value.get("explanation", ""),
                    signals=list(value.get("signals", [])),
                )
                for key, value in data.get("risk_breakdown", {}).items()
            },
            issues=[Issue(**item) for item in data.get("issues", [])],
            recommendations=[
                Recommendation(**item) for item in data.get("recommendations", [])
            ],
            raw_signals=copy.deepcopy(data.get("raw_signals", {})),
        )


@dataclass
class FetchResult:
    """Result of fetching a page's HTML."""

    url: str
    final_url: str
    status_code: int
    html: str
    elapsed: float = 0.0  # seconds


@dataclass
class SnapshotRecord:
    """An analysis result together with its storage identity.

    ``requested_url`` is the normalized URL the user asked for; it differs
    from ``result.url`` when the fetch followed redirects.
    """

    result: AnalysisResult
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)
    requested_url: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "requested_url": self.requested_url or self.result.url,
        }
        data.update(self.result.to_dict())
        return data
