"""
Fetcher Module - Retrieve chapter pages over HTTP.
==================================================

One GET per chapter page, with:
- A fixed descriptive user agent
- A blocking post-fetch delay to throttle the request rate
- Network retries through tenacity (a single attempt unless configured)
- FetchError on any non-2xx status or request failure
"""

import time
from typing import Callable, Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from openstax_ingest.shared.config import ScrapingConfig
from openstax_ingest.shared.errors import FetchError
from openstax_ingest.shared.logging import get_logger

logger = get_logger(__name__)


def chapter_url(base_url: str, chapter_number: int) -> str:
    """
    Build the URL of a chapter's introduction page.

    Example:
        >>> chapter_url("https://openstax.org/books/university-physics-volume-2/pages/", 3)
        'https://openstax.org/books/university-physics-volume-2/pages/3-introduction'
    """
    return f"{base_url}{chapter_number}-introduction"


class Fetcher:
    """
    HTTP fetcher for OpenStax chapter pages.

    Example:
        >>> with Fetcher(ScrapingConfig()) as fetcher:
        ...     html = fetcher.fetch(chapter_url(base_url, 1))
    """

    def __init__(
        self,
        config: ScrapingConfig,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the fetcher.

        Args:
            config: Scraping settings (user agent, delay, timeout, retries)
            session: Optional pre-built session (tests pass a fake)
            sleep: Sleep function used for the post-fetch delay
        """
        self.user_agent = config.user_agent
        self.rate_limit = config.rate_limit
        self.timeout = config.timeout
        self.max_retries = max(1, config.max_retries)
        self._sleep = sleep
        self._session = session

        logger.debug(
            f"Fetcher initialized: rate_limit={self.rate_limit}s, "
            f"timeout={self.timeout}, attempts={self.max_retries}"
        )

    @property
    def session(self) -> requests.Session:
        """Get or create the requests session."""
        if self._session is None:
            self._session = requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})
        return self._session

    def _get(self, url: str) -> requests.Response:
        @retry(
            retry=retry_if_exception_type(requests.RequestException),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(min=1, max=10),
            before_sleep=lambda retry_state: logger.warning(
                f"Retry {retry_state.attempt_number}/{self.max_retries} for {url}"
            ),
            reraise=True,
        )
        def _request_with_retry() -> requests.Response:
            return self.session.get(url, timeout=self.timeout)

        return _request_with_retry()

    def fetch(self, url: str) -> str:
        """
        Fetch a page and return its HTML.

        Args:
            url: Fully-formed chapter URL

        Returns:
            Response body as text

        Raises:
            FetchError: On a non-2xx status, a network failure or an unusable URL
        """
        logger.info(f"Fetching: {url}")

        try:
            response = self._get(url)
        except Exception as e:
            # Malformed URLs surface as ValueError from urllib3, not RequestException
            raise FetchError(url, message=f"Failed to fetch {url}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise FetchError(url, status_code=response.status_code)

        html = response.text

        if self.rate_limit > 0:
            logger.debug(f"Rate limiting: sleeping {self.rate_limit:.2f}s")
            self._sleep(self.rate_limit)

        return html

    def close(self) -> None:
        """Close the fetcher session."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        self.close()
