"""RSS feed fetching module for the feed relay."""

from urllib.parse import urlparse

import feedparser
import requests
from bs4 import BeautifulSoup

from .errors import FetchError, ParseError
from .logging_config import create_execution_logger
from .models import UNKNOWN_AUTHOR, FeedItem
from .transport import read_body


class FeedFetcher:
    """Fetches a feed document and normalizes its entries."""

    def __init__(self, timeout: float = 30, execution_id: str | None = None):
        """Initialize FeedFetcher with configuration.

        Args:
            timeout: HTTP request timeout in seconds
            execution_id: Execution ID for logging context
        """
        self.timeout = timeout
        self.logger = create_execution_logger("feed_fetcher", execution_id)
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "Feed-Relay/1.0 (RSS to Discord)"})

        self.logger.info("FeedFetcher initialized", timeout=timeout)

    def fetch(
        self,
        feed_url: str,
        timeout: float | None = None,
        deadline: float | None = None,
    ) -> list[FeedItem]:
        """Fetch and parse a single RSS/Atom feed.

        Items keep the feed's own order, so index 0 is the newest entry.

        Args:
            feed_url: URL of the RSS/Atom feed
            timeout: Overrides the configured request timeout for this call
            deadline: time.monotonic() value after which the download is
                abandoned, however slowly the body is still arriving

        Returns:
            List of FeedItem objects from the feed

        Raises:
            FetchError: If the URL is unusable or the download fails
            ParseError: If the document is not a readable feed
            TickTimeoutError: If the deadline passes mid-download
        """
        parsed_url = urlparse(feed_url)
        if parsed_url.scheme not in ("http", "https") or not parsed_url.netloc:
            raise FetchError(f"Feed URL must be an http(s) URL: {feed_url}")

        try:
            response = self.session.get(
                feed_url, timeout=timeout or self.timeout, stream=True
            )
            if not response.ok:
                response.close()
            response.raise_for_status()
            content = read_body(response, deadline)
        except requests.RequestException as e:
            self.logger.error(
                f"Failed to download feed {feed_url}: {e}",
                feed_url=feed_url,
                error=str(e),
            )
            raise FetchError(f"Failed to download feed {feed_url}: {e}") from e

        self.logger.debug(
            "Feed downloaded successfully",
            feed_url=feed_url,
            status_code=response.status_code,
            content_length=len(content),
        )

        feed = feedparser.parse(content)

        if feed.bozo:
            if not feed.entries:
                raise ParseError(
                    f"Malformed feed {feed_url}: {feed.get('bozo_exception')}"
                )
            self.logger.warning(
                f"Feed parsing warning for {feed_url}: {feed.get('bozo_exception')}",
                feed_url=feed_url,
                bozo_exception=str(feed.get("bozo_exception")),
            )

        items = []
        for entry in feed.entries:
            item = self.normalize_item(entry)
            if item is None:
                self.logger.warning(
                    "Skipping feed entry without a link",
                    feed_url=feed_url,
                    entry_title=entry.get("title", ""),
                )
                continue
            items.append(item)

        self.logger.debug(
            "Successfully parsed feed",
            feed_url=feed_url,
            items_count=len(items),
            total_entries=len(feed.entries),
        )
        return items

    def latest(self, feed_url: str, timeout: float | None = None) -> FeedItem | None:
        """Return the newest item of the feed, or None if it has no items."""
        items = self.fetch(feed_url, timeout=timeout)
        return items[0] if items else None

    def normalize_item(self, entry) -> FeedItem | None:
        """Normalize a feedparser entry into a FeedItem.

        Returns None when the entry has no link to announce.
        """
        link = (entry.get("link") or "").strip()
        if not link:
            return None

        title = (entry.get("title") or "").strip() or "No Title"

        description = ""
        if entry.get("summary"):
            description = entry.get("summary")
        elif entry.get("description"):
            description = entry.get("description")
        elif entry.get("content"):
            # Atom content is a list of dicts
            content = entry.get("content")
            if isinstance(content, list):
                description = content[0].get("value", "")
            else:
                description = str(content)

        author = (entry.get("author") or "").strip() or UNKNOWN_AUTHOR

        return FeedItem(
            title=title,
            description=self.clean_html_content(description),
            link=link,
            author=author,
        )

    def clean_html_content(self, content: str) -> str:
        """Remove HTML tags from content and normalize whitespace.

        Args:
            content: Raw content that may contain HTML

        Returns:
            Clean text content without HTML tags
        """
        if not content:
            return ""

        if "<" in content and ">" in content:
            soup = BeautifulSoup(content, "html.parser")
            for script in soup(["script", "style"]):
                script.decompose()
            content = soup.get_text(separator=" ")

        return " ".join(content.split())
