"""Risk snapshot service combining fetching, extraction, scoring and storage."""

import logging
from typing import Optional

from risksnap.classifier import RiskClassifier, Scorer
from risksnap.config import RiskThresholds
from risksnap.database import AbstractSnapshotStore
from risksnap.fetcher import PageFetcher, normalize_url
from risksnap.models import AnalysisResult, SnapshotRecord
from risksnap.signals import SignalExtractor

logger = logging.getLogger(__name__)


class RiskSnapshotService:
    """Produces risk snapshots for landing pages.

    Errors from URL normalization, fetching and storage propagate as
    ``RiskSnapshotError`` subclasses; the extractor and scorer never raise.
    """

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        store: Optional[AbstractSnapshotStore] = None,
        thresholds: Optional[RiskThresholds] = None,
        scorer: Optional[Scorer] = None,
    ):
        """Initialize the service.

        Args:
            fetcher: Page fetcher (default PageFetcher when None)
            store: Snapshot store; required only when saving
            thresholds: Thresholds for the default RiskClassifier
            scorer: Alternative scorer; overrides ``thresholds`` when given
        """
        self.fetcher = fetcher or PageFetcher()
        self.store = store
        self.extractor = SignalExtractor()
        self.scorer = scorer or RiskClassifier(thresholds)

    def analyze_html(self, html: str, url: str) -> AnalysisResult:
        """Run the core (extract then score) on already-fetched HTML.

        Args:
            html: Page HTML
            url: URL the HTML came from

        Returns:
            AnalysisResult
        """
        signals = self.extractor.extract(html, url)
        return self.scorer.score(signals, url)

    def analyze_url(self, url: str, save: bool = False) -> SnapshotRecord:
        """Fetch and analyze a URL.

        Args:
            url: URL as supplied by the user (scheme optional)
            save: Persist the result in the configured store

        Returns:
            SnapshotRecord; ``id`` is None unless the result was saved

        Raises:
            InvalidURLError: If the URL cannot be normalized
            FetchError: If the page cannot be fetched
            StorageError: If saving fails
            ValueError: If ``save`` is requested without a store
        """
        if save and self.store is None:
            raise ValueError("A snapshot store is required to save results")

        target = normalize_url(url)
        logger.info(f"Analyzing URL: {target}")

        page = self.fetcher.fetch(target)
        result = self.analyze_html(page.html, page.final_url)
        logger.info(f"Overall risk for {page.final_url}: {result.overall_risk}")

        # Stored under both URLs so history finds it by what the user typed
        if save:
            return self.store.save_snapshot(result, requested_url=target)
        return SnapshotRecord(result=result, requested_url=target)
