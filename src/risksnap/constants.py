# src/risksnap/constants.py
"""Centralized constants for the risk snapshot engine.

This module contains fixed vocabularies and magic values used across
multiple modules. For user-configurable thresholds, see config.py and
RiskThresholds.
"""

# =============================================================================
# Risk Levels
# =============================================================================

RISK_LOW = "low"
RISK_MODERATE = "moderate"
RISK_HIGH = "high"

# Ordinal rank used for escalation (a level never moves to a lower rank)
RISK_LEVEL_RANK = {
    RISK_LOW: 0,
    RISK_MODERATE: 1,
    RISK_HIGH: 2,
}


# =============================================================================
# Issues and Recommendations
# =============================================================================

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"

# Sort key for issue ordering (high first)
PRIORITY_ORDER = {
    PRIORITY_HIGH: 0,
    PRIORITY_MEDIUM: 1,
    PRIORITY_LOW: 2,
}

EFFORT_QUICK = "quick"
EFFORT_MEDIUM = "medium"
EFFORT_LARGER = "larger"


# =============================================================================
# Risk Categories
# =============================================================================

# Evaluation order of the rule ladders; also the key order of risk_breakdown
CATEGORY_ORDER = [
    "performance",
    "core_web_vitals",
    "seo_structure",
    "accessibility",
    "conversion_ux",
    "mobile_readiness",
]

# Display names used in Issue.category
CATEGORY_LABELS = {
    "performance": "Performance",
    "core_web_vitals": "Core Web Vitals",
    "seo_structure": "SEO & Structure",
    "accessibility": "Accessibility",
    "conversion_ux": "Conversion & UX",
    "mobile_readiness": "Mobile Readiness",
}

# Core Web Vitals cannot be measured from markup, so it never starts at low
CATEGORY_INITIAL_LEVELS = {
    "performance": RISK_LOW,
    "core_web_vitals": RISK_MODERATE,
    "seo_structure": RISK_LOW,
    "accessibility": RISK_LOW,
    "conversion_ux": RISK_LOW,
    "mobile_readiness": RISK_LOW,
}

# Signals every category starts with before any rule fires
CATEGORY_INITIAL_SIGNALS = {
    "core_web_vitals": ["Field data requires PageSpeed Insights API"],
}

# Canned explanations, selected purely by the category's final level
CATEGORY_EXPLANATIONS = {
    "performance": {
        RISK_HIGH: "Multiple performance concerns detected that likely cause noticeable loading delays for visitors.",
        RISK_MODERATE: "Some performance factors may slow page loading, particularly on slower connections.",
        RISK_LOW: "Page appears reasonably optimized for loading performance based on observable signals.",
    },
    "core_web_vitals": {
        RISK_HIGH: "Signals suggest Core Web Vitals may need attention. Heavy scripting often correlates with poor interactivity scores.",
        RISK_MODERATE: "Some factors may affect Core Web Vitals. Real field data from PageSpeed Insights would provide definitive metrics.",
        RISK_LOW: "No major concerns detected for Core Web Vitals based on available signals.",
    },
    "seo_structure": {
        RISK_HIGH: "Critical SEO elements are missing that affect how search engines understand and rank this page.",
        RISK_MODERATE: "Basic SEO is present but some improvements would help search visibility.",
        RISK_LOW: "Core SEO fundamentals are in place.",
    },
    "accessibility": {
        RISK_HIGH: "Significant accessibility gaps detected that may prevent some users from accessing content.",
        RISK_MODERATE: "Some accessibility improvements needed to ensure the page works well for all users.",
        RISK_LOW: "Basic accessibility markers are present.",
    },
    "conversion_ux": {
        RISK_HIGH: "No clear conversion path detected. Visitors may not know what action to take.",
        RISK_MODERATE: "Conversion elements exist but could be strengthened.",
        RISK_LOW: "Clear calls-to-action are present on the page.",
    },
    "mobile_readiness": {
        RISK_HIGH: "Critical mobile configuration is missing. The page may not display correctly on mobile devices.",
        RISK_MODERATE: "Basic mobile support is present but some optimizations are missing.",
        RISK_LOW: "Page appears configured for mobile devices.",
    },
}


# =============================================================================
# Signal Extraction Constants
# =============================================================================

# Call-to-action keywords, matched case-insensitively as whole words
CTA_KEYWORDS = [
    "buy",
    "sign up",
    "subscribe",
    "get started",
    "learn more",
    "contact",
    "try",
    "demo",
    "download",
    "register",
    "join",
    "start",
    "book",
    "schedule",
    "request",
    "order",
    "shop",
    "add to cart",
    "checkout",
]

# Class substring marking a link as a button-styled CTA candidate
CTA_LINK_CLASS_MARKER = "btn"

# Bytes per kilobyte for htmlSizeKb
BYTES_PER_KB = 1024


# =============================================================================
# Fetcher Constants
# =============================================================================

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; RiskSnapshotBot/1.0)"

DEFAULT_ACCEPT_HEADER = "text/html,application/xhtml+xml"

# Body encoding when the response declares no charset
DEFAULT_PAGE_ENCODING = "utf-8"

# Default request timeout in seconds
DEFAULT_FETCH_TIMEOUT_SECONDS = 10

# Scheme prepended to user input that carries none
DEFAULT_URL_SCHEME = "https://"

# Base for exponential backoff calculation between fetch attempts
EXPONENTIAL_BACKOFF_BASE = 2

# Maximum backoff delay in seconds (cap for exponential growth)
MAX_BACKOFF_DELAY_SECONDS = 30.0
