"""Rule ladders that map signals to category risk.

Each category is a ``Ladder``: an ordered tuple of rule chains. Within a
chain the first rule whose predicate holds fires and the rest are skipped,
which gives every chain if/elif/else semantics. A rule with ``when=always``
acts as the ``else`` branch. Text fields are ``str.format`` templates
filled from the signal set.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from risksnap.config import RiskThresholds
from risksnap.constants import (
    EFFORT_LARGER,
    EFFORT_MEDIUM,
    EFFORT_QUICK,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    RISK_HIGH,
    RISK_MODERATE,
)
from risksnap.models import SignalSet

Predicate = Callable[[SignalSet], bool]

# Values used when a signal is absent from the mapping handed to the classifier
SIGNAL_DEFAULTS: SignalSet = {
    "hasTitle": False,
    "title": None,
    "titleLength": 0,
    "hasMetaDescription": False,
    "hasViewport": False,
    "hasCanonical": False,
    "h1Count": 0,
    "hasH1": False,
    "multipleH1": False,
    "hasProperHeadingHierarchy": False,
    "imageCount": 0,
    "imagesMissingAlt": 0,
    "altTextCoverage": "100",
    "totalScripts": 0,
    "externalScriptDomainCount": 0,
    "stylesheetCount": 0,
    "formCount": 0,
    "hasForms": False,
    "buttonCount": 0,
    "ctaCount": 0,
    "hasCta": False,
    "hasLazyLoading": False,
    "hasOpenGraph": False,
    "hasStructuredData": False,
    "hasAriaAttributes": False,
    "htmlSizeKb": "0.0",
}


@dataclass(frozen=True)
class Rule:
    """A single predicate and the effects it has when it fires."""

    name: str
    when: Predicate
    level: Optional[str] = None
    signal: Optional[str] = None
    issue: Optional[Tuple[str, str]] = None  # (priority, template)
    recommendation: Optional[Tuple[str, str]] = None  # (effort, text)
    strength: Optional[str] = None


RuleChain = Tuple[Rule, ...]


@dataclass(frozen=True)
class Ladder:
    """All rule chains for one risk category, in evaluation order."""

    category: str
    chains: Tuple[RuleChain, ...]


def always(signals: SignalSet) -> bool:
    return True


def _n(signals: SignalSet, key: str) -> float:
    """Read a numeric signal; stored snapshots carry some numbers as strings."""
    value = signals.get(key)
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _flag(signals: SignalSet, key: str) -> bool:
    return bool(signals.get(key))


def performance_ladder(t: RiskThresholds) -> Ladder:
    return Ladder("performance", (
        (
            Rule(
                "many_scripts",
                lambda s: _n(s, "totalScripts") > t.scripts_high,
                level=RISK_HIGH,
                signal="{totalScripts} scripts detected",
                issue=(PRIORITY_HIGH, "Page loads {totalScripts} scripts, which can significantly slow render time"),
                recommendation=(EFFORT_LARGER, "Audit and reduce script dependencies. Consider bundling and code-splitting."),
            ),
            Rule(
                "elevated_scripts",
                lambda s: _n(s, "totalScripts") > t.scripts_moderate,
                level=RISK_MODERATE,
                signal="{totalScripts} scripts loaded",
                issue=(PRIORITY_MEDIUM, "{totalScripts} scripts may affect load performance"),
            ),
            Rule(
                "reasonable_scripts",
                always,
                signal="Reasonable script count",
                strength="Script count is within acceptable range",
            ),
        ),
        (
            Rule(
                "many_script_domains",
                lambda s: _n(s, "externalScriptDomainCount") > t.script_domains_high,
                level=RISK_HIGH,
                signal="{externalScriptDomainCount} external domains",
                issue=(PRIORITY_HIGH, "Scripts loaded from {externalScriptDomainCount} external domains adds DNS lookup overhead"),
                recommendation=(EFFORT_MEDIUM, "Reduce third-party dependencies or self-host critical scripts"),
            ),
            Rule(
                "elevated_script_domains",
                lambda s: _n(s, "externalScriptDomainCount") > t.script_domains_moderate,
                level=RISK_MODERATE,
                signal="{externalScriptDomainCount} external script domains",
            ),
        ),
        (
            Rule(
                "many_stylesheets",
                lambda s: _n(s, "stylesheetCount") > t.stylesheets_moderate,
                level=RISK_MODERATE,
                signal="{stylesheetCount} stylesheets",
                issue=(PRIORITY_MEDIUM, "{stylesheetCount} stylesheet files may cause render-blocking"),
                recommendation=(EFFORT_MEDIUM, "Consider consolidating stylesheets or using critical CSS inlining"),
            ),
        ),
        (
            Rule(
                "large_html",
                lambda s: _n(s, "htmlSizeKb") > t.html_size_kb_moderate,
                level=RISK_MODERATE,
                signal="Large HTML document ({htmlSizeKb}KB)",
                issue=(PRIORITY_MEDIUM, "HTML document is {htmlSizeKb}KB - larger pages take longer to parse"),
            ),
        ),
    ))


def core_web_vitals_ladder(t: RiskThresholds) -> Ladder:
    return Ladder("core_web_vitals", (
        (
            Rule(
                "lazy_loading",
                lambda s: _flag(s, "hasLazyLoading"),
                signal="Lazy loading detected",
                strength="Images use lazy loading for better LCP",
            ),
            Rule(
                "no_lazy_loading",
                lambda s: _n(s, "imageCount") > t.cwv_lazy_image_count,
                signal="No lazy loading detected",
                issue=(PRIORITY_MEDIUM, "No lazy loading detected for images"),
                recommendation=(EFFORT_QUICK, "Add loading='lazy' to below-the-fold images"),
            ),
        ),
        (
            Rule(
                "heavy_scripting",
                lambda s: (
                    _n(s, "totalScripts") > t.cwv_scripts_high
                    or _n(s, "externalScriptDomainCount") > t.cwv_script_domains_high
                ),
                level=RISK_HIGH,
                signal="Heavy script load may affect INP",
            ),
        ),
    ))


def seo_structure_ladder(t: RiskThresholds) -> Ladder:
    return Ladder("seo_structure", (
        (
            Rule(
                "missing_h1",
                lambda s: not _flag(s, "hasH1"),
                level=RISK_HIGH,
                signal="No H1 heading found",
                issue=(PRIORITY_HIGH, "No H1 heading detected - critical for SEO and accessibility"),
                recommendation=(EFFORT_QUICK, "Add a single, descriptive H1 heading to the page"),
            ),
            Rule(
                "multiple_h1",
                lambda s: _flag(s, "multipleH1"),
                level=RISK_MODERATE,
                signal="Multiple H1 headings ({h1Count})",
                issue=(PRIORITY_MEDIUM, "{h1Count} H1 headings detected - should have exactly one"),
                recommendation=(EFFORT_QUICK, "Reduce to a single H1 and use H2-H6 for subheadings"),
            ),
            Rule(
                "single_h1",
                always,
                signal="Single H1 heading present",
                strength="Page has a proper single H1 heading",
            ),
        ),
        (
            Rule(
                "missing_title",
                lambda s: not _flag(s, "hasTitle"),
                level=RISK_HIGH,
                signal="No title tag",
                issue=(PRIORITY_HIGH, "Missing title tag"),
                recommendation=(EFFORT_QUICK, "Add a descriptive title tag (50-60 characters)"),
            ),
            Rule(
                "title_length",
                lambda s: not t.title_min <= _n(s, "titleLength") <= t.title_max,
                level=RISK_MODERATE,
                signal="Title length: {titleLength} chars",
                issue=(PRIORITY_LOW, "Title is {titleLength} characters (optimal: 50-60)"),
            ),
            Rule(
                "good_title",
                always,
                signal="Title tag present and well-sized",
                strength="Title tag is present with good length",
            ),
        ),
        (
            Rule(
                "missing_meta_description",
                lambda s: not _flag(s, "hasMetaDescription"),
                level=RISK_MODERATE,
                signal="No meta description",
                issue=(PRIORITY_MEDIUM, "Missing meta description"),
                recommendation=(EFFORT_QUICK, "Add a compelling meta description (120-160 characters)"),
            ),
            Rule("meta_description", always, strength="Meta description is present"),
        ),
        (
            Rule(
                "missing_canonical",
                lambda s: not _flag(s, "hasCanonical"),
                signal="No canonical link",
                issue=(PRIORITY_LOW, "No canonical link tag detected"),
                recommendation=(EFFORT_QUICK, "Add a canonical link to prevent duplicate content issues"),
            ),
            Rule("canonical", always, strength="Canonical link is properly set"),
        ),
        (
            Rule(
                "structured_data",
                lambda s: _flag(s, "hasStructuredData"),
                strength="Structured data (JSON-LD) is present",
            ),
        ),
        (
            Rule(
                "open_graph",
                lambda s: _flag(s, "hasOpenGraph"),
                strength="Open Graph tags present for social sharing",
            ),
        ),
    ))


def accessibility_ladder(t: RiskThresholds) -> Ladder:
    return Ladder("accessibility", (
        (
            Rule(
                "many_missing_alt",
                lambda s: _n(s, "imagesMissingAlt") > t.missing_alt_high,
                level=RISK_HIGH,
                signal="{imagesMissingAlt} images missing alt text",
                issue=(PRIORITY_HIGH, "{imagesMissingAlt} of {imageCount} images lack alt text"),
                recommendation=(EFFORT_MEDIUM, "Add descriptive alt text to all meaningful images"),
            ),
            Rule(
                "some_missing_alt",
                lambda s: _n(s, "imagesMissingAlt") > t.missing_alt_moderate,
                level=RISK_MODERATE,
                signal="{imagesMissingAlt} images missing alt text",
                issue=(PRIORITY_MEDIUM, "{imagesMissingAlt} images missing alt text"),
                recommendation=(EFFORT_QUICK, "Review and add alt text to remaining images"),
            ),
            Rule(
                "full_alt_coverage",
                lambda s: _n(s, "imageCount") > 0 and _n(s, "imagesMissingAlt") == 0,
                signal="{altTextCoverage}% alt text coverage",
                strength="All images have alt text",
            ),
            Rule(
                "partial_alt_coverage",
                lambda s: _n(s, "imageCount") > 0,
                signal="{altTextCoverage}% alt text coverage",
            ),
        ),
        (
            Rule(
                "missing_aria",
                lambda s: not _flag(s, "hasAriaAttributes") and _n(s, "buttonCount") > t.aria_button_count,
                level=RISK_MODERATE,
                signal="No ARIA attributes detected",
                issue=(PRIORITY_LOW, "No ARIA attributes found for enhanced accessibility"),
            ),
            Rule(
                "aria_in_use",
                lambda s: _flag(s, "hasAriaAttributes"),
                signal="ARIA attributes in use",
                strength="Page uses ARIA attributes for accessibility",
            ),
        ),
        (
            Rule(
                "incomplete_heading_hierarchy",
                lambda s: not _flag(s, "hasProperHeadingHierarchy"),
                level=RISK_MODERATE,
                signal="Heading hierarchy may be incomplete",
            ),
        ),
    ))


def conversion_ux_ladder(t: RiskThresholds) -> Ladder:
    return Ladder("conversion_ux", (
        (
            Rule(
                "missing_cta",
                lambda s: not _flag(s, "hasCta"),
                level=RISK_HIGH,
                signal="No clear CTA detected",
                issue=(PRIORITY_HIGH, "No clear call-to-action detected"),
                recommendation=(EFFORT_MEDIUM, "Add prominent, action-oriented buttons with clear value proposition"),
            ),
            Rule(
                "cta_present",
                always,
                signal="{ctaCount} CTAs detected",
                strength="Clear call-to-action elements present",
            ),
        ),
        (
            Rule(
                "no_conversion_path",
                lambda s: not _flag(s, "hasForms") and not _flag(s, "hasCta"),
                level=RISK_HIGH,
                signal="No conversion mechanisms",
                issue=(PRIORITY_HIGH, "No forms or conversion elements detected"),
            ),
            Rule(
                "form_present",
                lambda s: _flag(s, "hasForms"),
                signal="{formCount} form(s) present",
                strength="Lead capture form is present",
            ),
        ),
    ))


def mobile_readiness_ladder(t: RiskThresholds) -> Ladder:
    return Ladder("mobile_readiness", (
        (
            Rule(
                "missing_viewport",
                lambda s: not _flag(s, "hasViewport"),
                level=RISK_HIGH,
                signal="No viewport meta tag",
                issue=(PRIORITY_HIGH, "Missing viewport meta tag - page won't render correctly on mobile"),
                recommendation=(EFFORT_QUICK, "Add <meta name='viewport' content='width=device-width, initial-scale=1'>"),
            ),
            Rule(
                "viewport",
                always,
                signal="Viewport meta configured",
                strength="Viewport meta tag is properly configured",
            ),
        ),
        (
            Rule(
                "mobile_no_lazy_loading",
                lambda s: not _flag(s, "hasLazyLoading") and _n(s, "imageCount") > t.mobile_lazy_image_count,
                level=RISK_MODERATE,
                signal="No lazy loading for images",
            ),
        ),
    ))


def build_ladders(thresholds: RiskThresholds) -> Tuple[Ladder, ...]:
    """Build all category ladders in evaluation order.

    Args:
        thresholds: Numeric thresholds the predicates compare against

    Returns:
        Tuple of ladders: performance, core_web_vitals, seo_structure,
        accessibility, conversion_ux, mobile_readiness
    """
    return (
        performance_ladder(thresholds),
        core_web_vitals_ladder(thresholds),
        seo_structure_ladder(thresholds),
        accessibility_ladder(thresholds),
        conversion_ux_ladder(thresholds),
        mobile_readiness_ladder(thresholds),
    )
