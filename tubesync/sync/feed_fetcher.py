"""
YouTube channel feed fetcher.

Downloads the public Atom feed for a channel and parses it into
FeedEntry objects. No API key needed; the feed lists the channel's most
recent uploads newest-first.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

import feedparser
import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from tubesync.sync.errors import NetworkError, ParseError
from tubesync.sync.models import DEFAULT_FEED_URL_TEMPLATE, ChannelFeed, FeedEntry

logger = logging.getLogger(__name__)

# Transport errors worth another attempt; HTTP status errors are final
_RETRYABLE = (requests.ConnectionError, requests.Timeout)


class FeedFetcher:
    """
    Fetches and parses channel feeds.

    Usage:
        fetcher = FeedFetcher()
        feed = fetcher.fetch("UCxxxxxxxxxxxxxxxxxxxxxx")
        for entry in select_entries(feed.entries, 3):
            ...
    """

    def __init__(
        self,
        url_template: str = DEFAULT_FEED_URL_TEMPLATE,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            url_template: Feed URL with a {channel_id} placeholder
            timeout: HTTP timeout in seconds
            retry_attempts: Total attempts for transport failures
            session: requests session (creates one if not provided)
        """
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()
        self._retrying = Retrying(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_exponential(min=1, max=10),
            retry=retry_if_exception_type(_RETRYABLE),
            reraise=True,
        )

    def feed_url(self, channel_id: str) -> str:
        return self.url_template.format(channel_id=channel_id)

    def _get(self, url: str) -> requests.Response:
        return self.session.get(url, timeout=self.timeout)

    def fetch(self, channel_id: str) -> ChannelFeed:
        """
        Fetch one channel's feed.

        Args:
            channel_id: YouTube channel ID

        Returns:
            ChannelFeed with the channel title and entries in document order

        Raises:
            NetworkError: transport failure or non-success status
            ParseError: malformed document or missing channel title
        """
        if not channel_id or not channel_id.strip():
            raise ValueError("channel_id must be a non-empty string")

        url = self.feed_url(channel_id)
        logger.info(f"Fetching feed for channel {channel_id}: {url}")

        try:
            response = self._retrying(self._get, url)
        except requests.RequestException as e:
            raise NetworkError(channel_id, f"request failed: {e}") from e

        if not response.ok:
            raise NetworkError(
                channel_id,
                f"HTTP {response.status_code} from feed endpoint",
                status_code=response.status_code,
            )

        return parse_feed(channel_id, response.content)


def parse_feed(channel_id: str, document: Union[bytes, str]) -> ChannelFeed:
    """
    Parse a channel feed document.

    Raises:
        ParseError: if the document is not well-formed or has no title
    """
    parsed = feedparser.parse(document)

    if parsed.bozo and not isinstance(parsed.bozo_exception, feedparser.CharacterEncodingOverride):
        raise ParseError(channel_id, f"malformed feed document: {parsed.bozo_exception}")

    display_name = (parsed.feed.get("title") or "").strip()
    if not display_name:
        raise ParseError(channel_id, "feed has no title")

    entries = [_to_entry(item) for item in parsed.entries]
    logger.info(f"Channel '{display_name}' lists {len(entries)} entries")

    return ChannelFeed(channel_id=channel_id, display_name=display_name, entries=entries)


def _to_entry(item) -> FeedEntry:
    """Extract a FeedEntry from a feedparser entry."""
    url = item.get("link") or ""
    if not url:
        for link in item.get("links", []):
            if link.get("href"):
                url = link["href"]
                break

    published = None
    if item.get("published_parsed"):
        published = datetime(*item.published_parsed[:6], tzinfo=timezone.utc)

    return FeedEntry(
        title=item.get("title") or "",
        url=url,
        video_id=item.get("yt_videoid"),
        published=published,
    )


def select_entries(entries: Iterable[FeedEntry], cap: int) -> list[FeedEntry]:
    """Drop short-form entries, then keep the first `cap` in feed order."""
    if cap <= 0:
        return []

    selected = []
    for entry in entries:
        if entry.is_short:
            continue
        selected.append(entry)
        if len(selected) >= cap:
            break
    return selected
