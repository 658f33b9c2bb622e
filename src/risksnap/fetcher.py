"""Page fetching for risk snapshots."""

import logging
import re
import time
from typing import Optional
from urllib.parse import urlparse

import requests

from risksnap.constants import (
    DEFAULT_ACCEPT_HEADER,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_PAGE_ENCODING,
    DEFAULT_URL_SCHEME,
    DEFAULT_USER_AGENT,
    EXPONENTIAL_BACKOFF_BASE,
    MAX_BACKOFF_DELAY_SECONDS,
)
from risksnap.errors import FetchError, InvalidURLError
from risksnap.models import FetchResult

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_url(raw_url: str) -> str:
    """Turn user input into an absolute URL.

    Input without an ``http``/``https`` prefix gets ``https://`` prepended.

    Args:
        raw_url: URL as typed by the user

    Returns:
        Absolute URL string

    Raises:
        InvalidURLError: If the input is empty or has no hostname
    """
    candidate = (raw_url or "").strip()
    if not candidate:
        raise InvalidURLError("URL is required", url=raw_url)

    if not _SCHEME_RE.match(candidate):
        candidate = f"{DEFAULT_URL_SCHEME}{candidate}"

    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidURLError(f"Invalid URL format: {raw_url}", url=raw_url) from e

    if parsed.scheme not in ("http", "https") or not hostname:
        raise InvalidURLError(f"Invalid URL format: {raw_url}", url=raw_url)

    # An empty path is normalized to "/" so stored URLs compare equal
    if not parsed.path:
        candidate = parsed._replace(path="/").geturl()

    return candidate


class PageFetcher:
    """Fetches page HTML with a custom user agent and a request timeout."""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: int = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_retries: int = 1,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the fetcher.

        Args:
            user_agent: User agent header (RiskSnapshotBot UA if None)
            timeout: Request timeout in seconds
            max_retries: Number of attempts before giving up
            session: Optional preconfigured requests session
        """
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.timeout = timeout
        self.max_retries = max(1, max_retries)

        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": DEFAULT_ACCEPT_HEADER,
        })

    def fetch(self, url: str) -> FetchResult:
        """Fetch a URL, following redirects.

        Args:
            url: Absolute URL to fetch

        Returns:
            FetchResult with the response body and final URL

        Raises:
            FetchError: On network error, timeout or non-2xx status after
                all attempts
        """
        last_error: Optional[FetchError] = None

        for attempt in range(self.max_retries):
            if attempt > 0:
                delay = min(EXPONENTIAL_BACKOFF_BASE ** attempt, MAX_BACKOFF_DELAY_SECONDS)
                logger.debug(f"Retrying {url} in {delay}s (attempt {attempt + 1})")
                time.sleep(delay)

            try:
                start_time = time.time()
                response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
                elapsed = time.time() - start_time

                response.raise_for_status()
                if not 200 <= response.status_code < 300:
                    raise FetchError(
                        f"HTTP {response.status_code} for {url}",
                        url=url,
                        status_code=response.status_code,
                    )

                # requests assumes ISO-8859-1 for text/* without a charset;
                # page sizes are measured on the UTF-8 decoding
                content_type = response.headers.get("Content-Type", "")
                if "charset" not in content_type.lower():
                    response.encoding = DEFAULT_PAGE_ENCODING

                logger.info(f"Fetched {url} ({response.status_code}, {elapsed:.2f}s)")
                return FetchResult(
                    url=url,
                    final_url=response.url or url,
                    status_code=response.status_code,
                    html=response.text,
                    elapsed=elapsed,
                )

            except requests.exceptions.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                last_error = FetchError(f"HTTP {status} for {url}", url=url, status_code=status)

            except requests.exceptions.Timeout:
                last_error = FetchError(f"Request timeout after {self.timeout}s", url=url)

            except requests.exceptions.RequestException as e:
                last_error = FetchError(f"Connection error: {e}", url=url)

            logger.warning(f"Fetch attempt {attempt + 1} failed for {url}: {last_error}")

        raise last_error
