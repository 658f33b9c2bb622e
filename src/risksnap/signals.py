"""Markup signal extraction for landing-page risk snapshots.

Signals are pulled from the raw HTML text with regular expressions rather
than a DOM tree. Counting rules are part of the output contract (stored
snapshots and report renderers depend on them), so changes here must keep
the exact semantics: an empty ``alt`` counts as missing, CTA keywords match
whole words case-insensitively, scripts split on the presence of ``src=``.
"""

import logging
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from risksnap.constants import BYTES_PER_KB, CTA_KEYWORDS, CTA_LINK_CLASS_MARKER
from risksnap.models import SignalSet

logger = logging.getLogger(__name__)


def _keyword_pattern(keywords: List[str]) -> re.Pattern:
    """Build a whole-word pattern where spaces inside a keyword are optional."""
    alternatives = "|".join(
        r"\s*".join(re.escape(part) for part in keyword.split())
        for keyword in keywords
    )
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


def _round_half_up(value: Decimal, places: str) -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


class SignalExtractor:
    """Extracts structural signals from a page's HTML text.

    The extractor is stateless; one instance can serve any number of pages
    and threads.
    """

    TITLE_RE = re.compile(r"<title[^>]*>([^<]*)</title>", re.IGNORECASE)
    META_DESCRIPTION_RES = (
        re.compile(
            r"""<meta[^>]*name=["']description["'][^>]*content=["']([^"']*)["']""",
            re.IGNORECASE,
        ),
        re.compile(
            r"""<meta[^>]*content=["']([^"']*)["'][^>]*name=["']description["']""",
            re.IGNORECASE,
        ),
    )
    VIEWPORT_RE = re.compile(r"""<meta[^>]*name=["']viewport["']""", re.IGNORECASE)
    CANONICAL_RE = re.compile(r"""<link[^>]*rel=["']canonical["']""", re.IGNORECASE)
    OPEN_GRAPH_RE = re.compile(r"""<meta[^>]*property=["']og:""", re.IGNORECASE)
    STRUCTURED_DATA_RE = re.compile(
        r"""<script[^>]*type=["']application/ld\+json["']""", re.IGNORECASE
    )

    HEADING_RES = {
        level: re.compile(rf"<h{level}\b[^>]*>", re.IGNORECASE)
        for level in (1, 2, 3, 4)
    }

    IMG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
    ALT_PRESENT_RE = re.compile(r"""alt=["'][^"']+["']""", re.IGNORECASE)
    ALT_BLANK_RE = re.compile(r"""alt=["']\s*["']""", re.IGNORECASE)

    SCRIPT_TAG_RE = re.compile(r"<script\b[^>]*>", re.IGNORECASE)
    SRC_ATTR_RE = re.compile(r"src=", re.IGNORECASE)
    SRC_VALUE_RE = re.compile(r"""src=["']([^"']+)["']""", re.IGNORECASE)

    STYLESHEET_RE = re.compile(
        r"""<link[^>]*rel=["']stylesheet["'][^>]*>""", re.IGNORECASE
    )
    STYLE_BLOCK_RE = re.compile(r"<style\b[^>]*>[\s\S]*?</style>", re.IGNORECASE)
    FORM_RE = re.compile(r"<form\b[^>]*>", re.IGNORECASE)

    BUTTON_RE = re.compile(r"<button\b[^>]*>([\s\S]*?)</button>", re.IGNORECASE)
    LINK_RE = re.compile(r"<a\b([^>]*)>([\s\S]*?)</a>", re.IGNORECASE)
    CLASS_ATTR_RE = re.compile(
        r"""\bclass\s*=\s*(?:["']([^"']*)["']|([^\s"'>]+))""", re.IGNORECASE
    )
    CTA_KEYWORD_RE = _keyword_pattern(CTA_KEYWORDS)

    LAZY_LOADING_RE = re.compile(r"""loading=["']lazy["']""", re.IGNORECASE)
    ARIA_ATTR_RE = re.compile(r"aria-[a-z]+=", re.IGNORECASE)

    def extract(self, html: str, source_url: str) -> SignalSet:
        """Extract all signals from an HTML document.

        Never raises on malformed markup; absent elements yield zero counts,
        False flags and None strings.

        Args:
            html: Raw HTML text of the page
            source_url: Final URL the HTML was fetched from (used to resolve
                script sources and tell first-party from third-party hosts)

        Returns:
            Flat mapping of camelCase signal names to values
        """
        html = html or ""
        signals: SignalSet = {}

        self._extract_title(html, signals)
        self._extract_meta_description(html, signals)

        signals["hasViewport"] = bool(self.VIEWPORT_RE.search(html))
        signals["hasCanonical"] = bool(self.CANONICAL_RE.search(html))

        self._extract_headings(html, signals)
        self._extract_images(html, signals)
        self._extract_scripts(html, source_url, signals)

        signals["stylesheetCount"] = len(self.STYLESHEET_RE.findall(html))
        signals["inlineStyleBlocks"] = len(self.STYLE_BLOCK_RE.findall(html))

        form_count = len(self.FORM_RE.findall(html))
        signals["formCount"] = form_count
        signals["hasForms"] = form_count > 0

        self._extract_ctas(html, signals)

        signals["hasLazyLoading"] = bool(self.LAZY_LOADING_RE.search(html))
        signals["hasOpenGraph"] = bool(self.OPEN_GRAPH_RE.search(html))
        signals["hasStructuredData"] = bool(self.STRUCTURED_DATA_RE.search(html))

        aria_count = len(self.ARIA_ATTR_RE.findall(html))
        signals["ariaAttributeCount"] = aria_count
        signals["hasAriaAttributes"] = aria_count > 0

        signals["htmlSize"] = len(html)
        signals["htmlSizeKb"] = str(
            _round_half_up(Decimal(len(html)) / Decimal(BYTES_PER_KB), "0.1")
        )

        logger.debug(
            f"Extracted signals for {source_url}: {signals['totalScripts']} scripts, "
            f"{signals['imageCount']} images, {signals['ctaCount']} CTAs, "
            f"{signals['htmlSizeKb']}KB"
        )
        return signals

    def _extract_title(self, html: str, signals: SignalSet) -> None:
        match = self.TITLE_RE.search(html)
        title = match.group(1).strip() if match else ""

        # An empty or whitespace-only title is treated the same as a missing one
        signals["hasTitle"] = bool(title)
        signals["title"] = title or None
        signals["titleLength"] = len(title)

    def _extract_meta_description(self, html: str, signals: SignalSet) -> None:
        match = None
        for pattern in self.META_DESCRIPTION_RES:
            match = pattern.search(html)
            if match:
                break

        description = match.group(1).strip() if match else ""
        signals["hasMetaDescription"] = match is not None
        signals["metaDescription"] = description or None
        signals["metaDescriptionLength"] = len(description)

    def _extract_headings(self, html: str, signals: SignalSet) -> None:
        counts = {
            f"h{level}": len(pattern.findall(html))
            for level, pattern in self.HEADING_RES.items()
        }
        h1_count = counts["h1"]

        signals["h1Count"] = h1_count
        signals["hasH1"] = h1_count > 0
        signals["multipleH1"] = h1_count > 1
        signals["headingStructure"] = counts
        signals["hasProperHeadingHierarchy"] = h1_count == 1 and counts["h2"] > 0

    def _extract_images(self, html: str, signals: SignalSet) -> None:
        images = self.IMG_RE.findall(html)
        image_count = len(images)
        missing_alt = sum(
            1 for img in images
            if not self.ALT_PRESENT_RE.search(img) or self.ALT_BLANK_RE.search(img)
        )

        signals["imageCount"] = image_count
        signals["imagesMissingAlt"] = missing_alt

        if image_count:
            coverage = Decimal(image_count - missing_alt) * 100 / Decimal(image_count)
            signals["altTextCoverage"] = str(int(_round_half_up(coverage, "1")))
        else:
            # No images: vacuously fully covered
            signals["altTextCoverage"] = "100"

    def _extract_scripts(self, html: str, source_url: str, signals: SignalSet) -> None:
        scripts = self.SCRIPT_TAG_RE.findall(html)
        external = [tag for tag in scripts if self.SRC_ATTR_RE.search(tag)]

        signals["totalScripts"] = len(scripts)
        signals["inlineScripts"] = len(scripts) - len(external)
        signals["externalScripts"] = len(external)

        domains = self.external_script_domains(external, source_url)
        signals["externalScriptDomains"] = sorted(domains)
        signals["externalScriptDomainCount"] = len(domains)

    def external_script_domains(self, script_tags: List[str], source_url: str) -> set:
        """Collect third-party hostnames referenced by script tags.

        Args:
            script_tags: Opening ``<script>`` tags carrying a ``src`` attribute
            source_url: Page URL that relative sources resolve against

        Returns:
            Set of hostnames other than the page's own hostname
        """
        try:
            page_host = _hostname(source_url)
        except ValueError:
            page_host = None
        domains = set()

        for tag in script_tags:
            match = self.SRC_VALUE_RE.search(tag)
            if not match:
                continue

            try:
                script_host = _hostname(urljoin(source_url, match.group(1).strip()))
            except ValueError:
                logger.debug(f"Skipping malformed script src: {match.group(1)!r}")
                continue

            if script_host and script_host != page_host:
                domains.add(script_host)

        return domains

    def _extract_ctas(self, html: str, signals: SignalSet) -> None:
        buttons = self.BUTTON_RE.findall(html)
        link_buttons = [
            inner for attrs, inner in self.LINK_RE.findall(html)
            if self._has_button_class(attrs)
        ]

        cta_count = sum(
            1 for inner in buttons + link_buttons
            if self.is_cta_text(_visible_text(inner))
        )

        signals["buttonCount"] = len(buttons)
        signals["ctaCount"] = cta_count
        signals["hasCta"] = cta_count > 0

    def _has_button_class(self, attrs: str) -> bool:
        match = self.CLASS_ATTR_RE.search(attrs)
        if not match:
            return False
        # Quoted value in group 1, unquoted value in group 2
        value = match.group(1) if match.group(1) is not None else match.group(2)
        return CTA_LINK_CLASS_MARKER in value

    def is_cta_text(self, text: str) -> bool:
        """Check whether element text contains an action keyword."""
        return bool(self.CTA_KEYWORD_RE.search(text))


def _hostname(url: str) -> Optional[str]:
    # urlparse raises ValueError for malformed netlocs (e.g. bad IPv6 brackets)
    return urlparse(url).hostname


def _visible_text(fragment: str) -> str:
    """Strip nested markup from an element's inner HTML."""
    if "<" not in fragment:
        return fragment
    return BeautifulSoup(fragment, "html.parser").get_text(" ")


_default_extractor = SignalExtractor()


def extract_signals(html: str, source_url: str) -> SignalSet:
    """Extract signals from HTML using the shared extractor.

    Args:
        html: Raw HTML text
        source_url: URL the HTML was fetched from

    Returns:
        Flat signal mapping
    """
    return _default_extractor.extract(html, source_url)
