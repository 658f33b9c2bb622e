"""Landing-page risk snapshots from HTML markup signals."""

__version__ = "0.1.0"

from risksnap.signals import SignalExtractor, extract_signals
from risksnap.classifier import (
    RiskClassifier,
    Scorer,
    aggregate_overall_risk,
    classify_risk,
)
from risksnap.fetcher import PageFetcher, normalize_url
from risksnap.snapshot import RiskSnapshotService
from risksnap.database import SqliteSnapshotStore, get_store
from risksnap.models import (
    AnalysisResult,
    FetchResult,
    Issue,
    Recommendation,
    RiskCategory,
    SnapshotRecord,
)
from risksnap.errors import (
    RiskSnapshotError,
    InvalidURLError,
    FetchError,
    StorageError,
)
from risksnap.config import RiskThresholds, default_thresholds, settings

__all__ = [
    # Core
    "SignalExtractor",
    "extract_signals",
    "RiskClassifier",
    "Scorer",
    "aggregate_overall_risk",
    "classify_risk",
    # Collaborators
    "PageFetcher",
    "normalize_url",
    "RiskSnapshotService",
    "SqliteSnapshotStore",
    "get_store",
    # Models
    "AnalysisResult",
    "FetchResult",
    "Issue",
    "Recommendation",
    "RiskCategory",
    "SnapshotRecord",
    # Errors
    "RiskSnapshotError",
    "InvalidURLError",
    "FetchError",
    "StorageError",
    # Config
    "RiskThresholds",
    "default_thresholds",
    "settings",
]
