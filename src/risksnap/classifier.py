"""Deterministic risk classification of extracted page signals."""

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from risksnap.config import RiskThresholds, default_thresholds
from risksnap.constants import (
    CATEGORY_EXPLANATIONS,
    CATEGORY_INITIAL_LEVELS,
    CATEGORY_INITIAL_SIGNALS,
    CATEGORY_LABELS,
    PRIORITY_ORDER,
    RISK_HIGH,
    RISK_LEVEL_RANK,
    RISK_LOW,
    RISK_MODERATE,
)
from risksnap.models import (
    AnalysisResult,
    Issue,
    Recommendation,
    RiskCategory,
    SignalSet,
)
from risksnap.rules import SIGNAL_DEFAULTS, Ladder, Rule, build_ladders

logger = logging.getLogger(__name__)


def escalate(current: str, candidate: str) -> str:
    """Return the more severe of two risk levels."""
    if RISK_LEVEL_RANK[candidate] > RISK_LEVEL_RANK[current]:
        return candidate
    return current


def aggregate_overall_risk(levels: Iterable[str]) -> str:
    """Combine category levels into the overall verdict.

    Two or more high categories make the page high risk; one high category
    or at least three moderate ones make it moderate; anything else is low.

    Args:
        levels: Final level of each category

    Returns:
        Overall risk level
    """
    levels = list(levels)
    high_count = levels.count(RISK_HIGH)
    moderate_count = levels.count(RISK_MODERATE)

    if high_count >= 2:
        return RISK_HIGH
    if high_count >= 1 or moderate_count >= 3:
        return RISK_MODERATE
    return RISK_LOW


@dataclass
class _Accumulator:
    """Findings collected across all ladders during one evaluation."""

    strengths: List[str] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)


class Scorer(ABC):
    """Interface for anything that turns a signal set into an AnalysisResult."""

    @abstractmethod
    def score(self, signals: SignalSet, url: str) -> AnalysisResult:
        """Score a page.

        Args:
            signals: Signal set produced by the extractor
            url: Page URL the signals came from

        Returns:
            AnalysisResult for the page
        """


class RiskClassifier(Scorer):
    """Rule-ladder classifier producing low/moderate/high category risk.

    Pure and deterministic: the same signals and URL always give an equal
    result, and the input mapping is never modified.
    """

    def __init__(self, thresholds: Optional[RiskThresholds] = None):
        """Initialize the classifier.

        Args:
            thresholds: Rule thresholds and list caps (defaults when None)
        """
        self.thresholds = thresholds or default_thresholds
        self.ladders = build_ladders(self.thresholds)

    def score(self, signals: SignalSet, url: str) -> AnalysisResult:
        view = {**SIGNAL_DEFAULTS, **signals}
        found = _Accumulator()

        breakdown: Dict[str, RiskCategory] = {}
        for ladder in self.ladders:
            breakdown[ladder.category] = self._evaluate_ladder(ladder, view, found)

        overall_risk = aggregate_overall_risk(c.level for c in breakdown.values())

        # sorted() is stable, so equal priorities keep evaluation order
        issues = sorted(found.issues, key=lambda issue: PRIORITY_ORDER[issue.priority])

        logger.debug(
            f"Classified {url}: overall={overall_risk} "
            + ", ".join(f"{key}={c.level}" for key, c in breakdown.items())
        )

        return AnalysisResult(
            url=url,
            overall_risk=overall_risk,
            strengths=found.strengths[:self.thresholds.max_strengths],
            risk_breakdown=breakdown,
            issues=issues[:self.thresholds.max_issues],
            recommendations=found.recommendations[:self.thresholds.max_recommendations],
            raw_signals=copy.deepcopy(dict(signals)),
        )

    def _evaluate_ladder(
        self, ladder: Ladder, signals: SignalSet, found: _Accumulator
    ) -> RiskCategory:
        """Run every chain of a ladder and build the category record."""
        category = ladder.category
        level = CATEGORY_INITIAL_LEVELS[category]
        category_signals = list(CATEGORY_INITIAL_SIGNALS.get(category, []))

        for chain in ladder.chains:
            rule = next((r for r in chain if r.when(signals)), None)
            if rule is None:
                continue
            if rule.level:
                level = escalate(level, rule.level)
            self._apply_effects(rule, category, signals, category_signals, found)

        return RiskCategory(
            level=level,
            explanation=CATEGORY_EXPLANATIONS[category][level],
            signals=category_signals,
        )

    def _apply_effects(
        self,
        rule: Rule,
        category: str,
        signals: SignalSet,
        category_signals: List[str],
        found: _Accumulator,
    ) -> None:
        if rule.signal:
            category_signals.append(rule.signal.format_map(signals))
        if rule.issue:
            priority, template = rule.issue
            found.issues.append(Issue(
                priority=priority,
                issue=template.format_map(signals),
                category=CATEGORY_LABELS[category],
            ))
        if rule.recommendation:
            effort, text = rule.recommendation
            found.recommendations.append(Recommendation(effort=effort, recommendation=text))
        if rule.strength:
            found.strengths.append(rule.strength)


_default_classifier = RiskClassifier()


def classify_risk(
    signals: SignalSet,
    source_url: str,
    thresholds: Optional[RiskThresholds] = None,
) -> AnalysisResult:
    """Classify a signal set into a risk snapshot.

    Args:
        signals: Signal set from ``extract_signals``
        source_url: Page URL, copied into the result
        thresholds: Optional custom thresholds

    Returns:
        AnalysisResult with category breakdown, issues and recommendations
    """
    classifier = RiskClassifier(thresholds) if thresholds else _default_classifier
    return classifier.score(signals, source_url)
