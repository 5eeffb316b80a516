"""Goodreads HTTP client.

Fetches the shelf RSS feed and individual book pages. Book pages are
scraped for a cover image URL, since the CSV export carries no covers.
"""

import logging
import re
import time
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
)

# Cover image patterns, tried in order
COVER_PATTERNS = (
    re.compile(r'<img[^>]+class="[^"]*ResponsiveImage[^"]*"[^>]+src="([^"]+)"'),
    re.compile(
        r'<img[^>]+src="(https://i\.gr-assets\.com/images/S/'
        r'compressed\.photo\.goodreads\.com/books/[^"]+)"'
    ),
)


class GoodreadsError(Exception):
    """Base exception for Goodreads request errors."""

    pass


class GoodreadsRateLimitError(GoodreadsError):
    """Raised when rate limited by Goodreads."""

    pass


def extract_cover_url(page_html: str) -> Optional[str]:
    """Find the first cover image URL in a book page.

    Args:
        page_html: Book page markup

    Returns:
        Image URL, or None if no pattern matched
    """
    if not page_html:
        return None

    for pattern in COVER_PATTERNS:
        match = pattern.search(page_html)
        if match and match.group(1):
            return match.group(1)

    return None


class GoodreadsClient:
    """Client for Goodreads feeds and book pages."""

    BASE_URL = "https://www.goodreads.com"

    def __init__(
        self,
        timeout: float = 30,
        min_request_interval: float = 1.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """Initialize client.

        Args:
            timeout: Request timeout in seconds
            min_request_interval: Minimum seconds between requests
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": user_agent})
        self._last_request_time = 0.0
        self._min_request_interval = min_request_interval

    def _rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_request_interval:
            time.sleep(self._min_request_interval - elapsed)
        self._last_request_time = time.time()

    def _get(self, url: str) -> str:
        """Make GET request with error handling, returning the body text."""
        self._rate_limit()
        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.text
        except requests.exceptions.Timeout:
            raise GoodreadsError(f"Request timed out: {url}")
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 429:
                raise GoodreadsRateLimitError("Rate limited by Goodreads")
            status = e.response.status_code if e.response is not None else "unknown"
            raise GoodreadsError(f"HTTP error: {status}")
        except requests.exceptions.RequestException as e:
            raise GoodreadsError(f"Request failed: {e}")

    def fetch_feed(self, feed_url: str) -> str:
        """Fetch the full RSS feed body.

        Raises:
            GoodreadsError: On any transport or HTTP failure
        """
        logger.debug("Fetching feed %s", feed_url)
        return self._get(feed_url)

    def book_url(self, book_id: str) -> str:
        """Return the book page URL for a Goodreads book id."""
        return f"{self.BASE_URL}/book/show/{book_id}"

    def fetch_book_page(self, book_id: str) -> str:
        """Fetch a book page's markup."""
        return self._get(self.book_url(book_id))

    def find_cover_url(self, book_id: str) -> Optional[str]:
        """Scrape the cover image URL for a book.

        Returns:
            Image URL, or None if the page has no recognizable cover

        Raises:
            GoodreadsError: If the page cannot be fetched
        """
        return extract_cover_url(self.fetch_book_page(book_id))
