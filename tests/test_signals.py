"""Tests for markup signal extraction."""

import pytest
from risksnap.signals import SignalExtractor, extract_signals


PAGE_URL = "https://example.com/"


class TestSignalExtractor:
    """Test cases for SignalExtractor."""

    @pytest.fixture
    def extractor(self):
        """Create a SignalExtractor instance."""
        return SignalExtractor()

    def test_minimal_page(self, extractor):
        """Test the signal set for a bare page with a title and one H1."""
        html = "<html><head><title>T</title></head><body><h1>H</h1></body></html>"
        signals = extractor.extract(html, PAGE_URL)

        assert signals["hasTitle"] is True
        assert signals["title"] == "T"
        assert signals["titleLength"] == 1
        assert signals["hasMetaDescription"] is False
        assert signals["hasViewport"] is False
        assert signals["h1Count"] == 1
        assert signals["hasProperHeadingHierarchy"] is False
        assert signals["imageCount"] == 0
        assert signals["altTextCoverage"] == "100"
        assert signals["totalScripts"] == 0
        assert signals["hasCta"] is False
        assert signals["htmlSize"] == len(html)

    def test_empty_html_yields_defaults(self, extractor):
        """Test that an empty document never raises and gives safe defaults."""
        signals = extractor.extract("", PAGE_URL)

        assert signals["hasTitle"] is False
        assert signals["title"] is None
        assert signals["titleLength"] == 0
        assert signals["metaDescription"] is None
        assert signals["headingStructure"] == {"h1": 0, "h2": 0, "h3": 0, "h4": 0}
        assert signals["externalScriptDomains"] == []
        assert signals["externalScriptDomainCount"] == 0
        assert signals["hasForms"] is False
        assert signals["ariaAttributeCount"] == 0
        assert signals["htmlSize"] == 0
        assert signals["htmlSizeKb"] == "0.0"

    def test_malformed_html_does_not_raise(self, extractor):
        """Test that broken markup is scanned best-effort."""
        html = "<html><head><title>Broken<body><h1 class='x'>Hi<img src=a.jpg<script"
        signals = extractor.extract(html, PAGE_URL)

        assert signals["hasTitle"] is False
        assert signals["h1Count"] == 1


class TestTitleAndMeta:
    """Test title and meta description extraction."""

    def test_title_is_trimmed(self):
        signals = extract_signals("<title>  Best Running Shoes  </title>", PAGE_URL)
        assert signals["title"] == "Best Running Shoes"
        assert signals["titleLength"] == len("Best Running Shoes")

    def test_blank_title_counts_as_missing(self):
        """Test that an empty or whitespace title is treated as absent."""
        for html in ("<title></title>", "<title>   </title>"):
            signals = extract_signals(html, PAGE_URL)
            assert signals["hasTitle"] is False
            assert signals["title"] is None
            assert signals["titleLength"] == 0

    def test_first_title_wins(self):
        signals = extract_signals("<title>First</title><title>Second</title>", PAGE_URL)
        assert signals["title"] == "First"

    def test_meta_description_name_first(self):
        html = '<meta name="description" content=" Shoes for trail running ">'
        signals = extract_signals(html, PAGE_URL)

        assert signals["hasMetaDescription"] is True
        assert signals["metaDescription"] == "Shoes for trail running"
        assert signals["metaDescriptionLength"] == 23

    def test_meta_description_content_first(self):
        html = "<meta content='Reversed attribute order' name='description'>"
        signals = extract_signals(html, PAGE_URL)

        assert signals["hasMetaDescription"] is True
        assert signals["metaDescription"] == "Reversed attribute order"

    def test_presence_flags(self):
        html = """
        <meta name="viewport" content="width=device-width, initial-scale=1">
        <link rel="canonical" href="https://example.com/">
        <meta property="og:title" content="Example">
        <script type="application/ld+json">{"@type": "Organization"}</script>
        """
        signals = extract_signals(html, PAGE_URL)

        assert signals["hasViewport"] is True
        assert signals["hasCanonical"] is True
        assert signals["hasOpenGraph"] is True
        assert signals["hasStructuredData"] is True
        # JSON-LD blocks are still inline scripts
        assert signals["totalScripts"] == 1
        assert signals["inlineScripts"] == 1


class TestHeadings:
    """Test heading counts and hierarchy."""

    def test_heading_structure(self):
        html = "<h1>A</h1><h2>B</h2><h2 class='x'>C</h2><h3>D</h3><h4>E</h4><header></header><hr>"
        signals = extract_signals(html, PAGE_URL)

        assert signals["headingStructure"] == {"h1": 1, "h2": 2, "h3": 1, "h4": 1}
        assert signals["hasH1"] is True
        assert signals["multipleH1"] is False
        assert signals["hasProperHeadingHierarchy"] is True

    def test_multiple_h1_breaks_hierarchy(self):
        signals = extract_signals("<h1>A</h1><H1>B</H1><h2>C</h2>", PAGE_URL)

        assert signals["h1Count"] == 2
        assert signals["multipleH1"] is True
        assert signals["hasProperHeadingHierarchy"] is False

    def test_h1_without_h2_is_not_proper(self):
        signals = extract_signals("<h1>A</h1><h3>C</h3>", PAGE_URL)
        assert signals["hasProperHeadingHierarchy"] is False


class TestImages:
    """Test image alt text signals."""

    def test_missing_and_empty_alt(self):
        html = """
        <img src="a.jpg" alt="Product photo">
        <img src="b.jpg">
        <img src="c.jpg" alt="">
        <img src="d.jpg" alt="   ">
        """
        signals = extract_signals(html, PAGE_URL)

        assert signals["imageCount"] == 4
        assert signals["imagesMissingAlt"] == 3
        assert signals["altTextCoverage"] == "25"

    def test_coverage_rounds_half_up(self):
        """Test that 87.5% and 62.5% round up like the stored reports expect."""
        good = '<img src="x.jpg" alt="x">'
        bad = '<img src="y.jpg">'

        signals = extract_signals(good * 7 + bad, PAGE_URL)
        assert signals["altTextCoverage"] == "88"

        signals = extract_signals(good * 5 + bad * 3, PAGE_URL)
        assert signals["altTextCoverage"] == "63"

    def test_no_images_is_fully_covered(self):
        signals = extract_signals("<p>No pictures here</p>", PAGE_URL)

        assert signals["imageCount"] == 0
        assert signals["imagesMissingAlt"] == 0
        assert signals["altTextCoverage"] == "100"

    def test_lazy_loading(self):
        signals = extract_signals('<img src="a.jpg" alt="a" loading="lazy">', PAGE_URL)
        assert signals["hasLazyLoading"] is True

        signals = extract_signals('<img src="a.jpg" alt="a" loading="eager">', PAGE_URL)
        assert signals["hasLazyLoading"] is False


class TestScripts:
    """Test script counting and third-party domain detection."""

    def test_same_host_script_is_not_external_domain(self):
        html = '<script src="https://example.com/a.js"></script>'
        signals = extract_signals(html, "https://example.com/")

        assert signals["externalScripts"] == 1
        assert signals["externalScriptDomainCount"] == 0

    def test_other_host_script_is_external_domain(self):
        html = '<script src="https://cdn.other.com/a.js"></script>'
        signals = extract_signals(html, "https://example.com/")

        assert signals["externalScriptDomainCount"] == 1
        assert signals["externalScriptDomains"] == ["cdn.other.com"]

    def test_inline_and_external_partition(self):
        html = """
        <script>window.dataLayer = [];</script>
        <script src="/static/app.js"></script>
        <script src="//cdn.jsdelivr.net/npm/lib.js" defer></script>
        <script async src='https://www.googletagmanager.com/gtag.js'></script>
        <script src="https://www.googletagmanager.com/other.js"></script>
        """
        signals = extract_signals(html, "https://example.com/landing")

        assert signals["totalScripts"] == 5
        assert signals["inlineScripts"] == 1
        assert signals["externalScripts"] == 4
        assert signals["externalScriptDomains"] == ["cdn.jsdelivr.net", "www.googletagmanager.com"]
        assert signals["externalScriptDomainCount"] == 2

    def test_subdomain_of_page_counts_as_external(self):
        html = '<script src="https://static.example.com/a.js"></script>'
        signals = extract_signals(html, "https://example.com/")
        assert signals["externalScriptDomainCount"] == 1

    def test_malformed_src_is_skipped(self):
        html = '<script src="http://[::1/broken.js"></script><script src="https://cdn.other.com/a.js"></script>'
        signals = extract_signals(html, "https://example.com/")

        assert signals["totalScripts"] == 2
        assert signals["externalScriptDomains"] == ["cdn.other.com"]

    def test_stylesheets_styles_and_forms(self):
        html = """
        <link rel="stylesheet" href="a.css"><link rel='stylesheet' href='b.css'>
        <link rel="preload" href="font.woff2">
        <style>body { color: red; }</style>
        <form action="/signup"><input name="email"></form>
        """
        signals = extract_signals(html, PAGE_URL)

        assert signals["stylesheetCount"] == 2
        assert signals["inlineStyleBlocks"] == 1
        assert signals["formCount"] == 1
        assert signals["hasForms"] is True


class TestCallsToAction:
    """Test CTA detection."""

    def test_button_keywords(self):
        html = "<button>Buy now</button><button>Menu</button>"
        signals = extract_signals(html, PAGE_URL)

        assert signals["buttonCount"] == 2
        assert signals["ctaCount"] == 1
        assert signals["hasCta"] is True

    def test_link_needs_btn_class(self):
        html = """
        <a class="btn btn-primary" href="/start">Get Started</a>
        <a href="/signup">Sign up</a>
        <a class="nav-link" href="/btn">Contact</a>
        """
        signals = extract_signals(html, PAGE_URL)

        assert signals["buttonCount"] == 0
        assert signals["ctaCount"] == 1

    def test_link_with_unquoted_btn_class(self):
        html = """
        <a class=btn href="/buy">Buy now</a>
        <a href="/x" CLASS=btn-primary>Get Started</a>
        <a class=nav href="/btn">Contact</a>
        """
        signals = extract_signals(html, PAGE_URL)
        assert signals["ctaCount"] == 2

    def test_keywords_match_whole_words_only(self):
        html = "<button>Startup stories</button><button>Restart</button><button>Entry</button>"
        signals = extract_signals(html, PAGE_URL)

        assert signals["buttonCount"] == 3
        assert signals["ctaCount"] == 0
        assert signals["hasCta"] is False

    def test_keywords_case_insensitive_with_nested_markup(self):
        html = """
        <button type="submit"><span class="icon"></span> SUBSCRIBE</button>
        <button><b>Sign</b> <i>Up</i></button>
        <button>signup</button>
        """
        signals = extract_signals(html, PAGE_URL)
        assert signals["ctaCount"] == 3

    def test_attribute_text_is_not_cta_text(self):
        """Test that only element text is matched, not attribute values."""
        html = '<button data-action="buy" aria-label="close">X</button>'
        signals = extract_signals(html, PAGE_URL)

        assert signals["buttonCount"] == 1
        assert signals["ctaCount"] == 0


class TestAriaAndSize:
    """Test ARIA counting and document size signals."""

    def test_aria_attributes(self):
        html = '<nav aria-label="Main"><button aria-expanded="false" aria-controls="m">Menu</button></nav>'
        signals = extract_signals(html, PAGE_URL)

        assert signals["ariaAttributeCount"] == 3
        assert signals["hasAriaAttributes"] is True

    def test_html_size_kb_rounds_half_up(self):
        signals = extract_signals("x" * 256, PAGE_URL)
        assert signals["htmlSize"] == 256
        assert signals["htmlSizeKb"] == "0.3"

        signals = extract_signals("x" * 2048, PAGE_URL)
        assert signals["htmlSizeKb"] == "2.0"


def test_extraction_is_deterministic():
    """Test that identical input yields identical signal sets."""
    html = """
    <html><head><title>Landing</title>
    <script src="https://b.cdn.com/x.js"></script><script src="https://a.cdn.com/y.js"></script>
    </head><body><h1>Hi</h1><button>Book a demo</button></body></html>
    """
    first = extract_signals(html, PAGE_URL)
    second = extract_signals(html, PAGE_URL)

    assert first == second
    assert first["externalScriptDomains"] == ["a.cdn.com", "b.cdn.com"]
